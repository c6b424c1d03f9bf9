"""
Unit tests for Vietnam local time bucketing.
"""

from datetime import date, datetime, timedelta, timezone

from spa_payroll.local_time import (
    in_period,
    month_bounds_utc,
    to_vietnam_local,
    to_vietnam_local_date,
)


class TestToVietnamLocal:
    """Tests for to_vietnam_local."""

    def test_naive_assumed_utc(self):
        local = to_vietnam_local(datetime(2025, 1, 31, 17, 30))
        assert local.utcoffset() == timedelta(hours=7)
        assert (local.year, local.month, local.day, local.hour) == (2025, 2, 1, 0)

    def test_aware_converted(self):
        aware = datetime(2025, 1, 31, 17, 30, tzinfo=timezone.utc)
        assert to_vietnam_local_date(aware) == date(2025, 2, 1)

    def test_none(self):
        assert to_vietnam_local(None) is None
        assert to_vietnam_local_date(None) is None


class TestInPeriod:
    """Tests for month membership in local time."""

    def test_late_utc_evening_is_next_local_month(self):
        """2025-01-31T17:30Z is 2025-02-01 00:30 in Vietnam."""
        created = datetime(2025, 1, 31, 17, 30)
        assert in_period(created, 2025, 2)
        assert not in_period(created, 2025, 1)

    def test_just_before_local_midnight(self):
        """2025-01-31T16:59Z is still January 31st locally."""
        assert in_period(datetime(2025, 1, 31, 16, 59), 2025, 1)

    def test_year_boundary(self):
        assert in_period(datetime(2024, 12, 31, 17, 0), 2025, 1)

    def test_none_is_never_in_period(self):
        assert not in_period(None, 2025, 1)


class TestMonthBoundsUtc:
    """Tests for month_bounds_utc."""

    def test_february(self):
        start, end = month_bounds_utc(2025, 2)
        assert start == datetime(2025, 1, 31, 17, 0)
        assert end == datetime(2025, 2, 28, 17, 0)
        assert start.tzinfo is None

    def test_december(self):
        start, end = month_bounds_utc(2024, 12)
        assert start == datetime(2024, 11, 30, 17, 0)
        assert end == datetime(2024, 12, 31, 17, 0)

    def test_bounds_agree_with_in_period(self):
        start, end = month_bounds_utc(2025, 3)
        assert in_period(start, 2025, 3)
        assert not in_period(end, 2025, 3)
        assert in_period(end - timedelta(seconds=1), 2025, 3)

"""Vietnam local time helpers.

Invoices are stored with naive UTC timestamps, while payroll months are
calendar months in Vietnam local time (UTC+7). Every "is this invoice in
month M" decision goes through ``to_vietnam_local``.
"""
import os
from datetime import date, datetime, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

# Payroll timezone - defaults to Vietnam (UTC+7, no DST)
PAYROLL_TIMEZONE = os.getenv("PAYROLL_TIMEZONE", "Asia/Ho_Chi_Minh")


def get_payroll_tz() -> ZoneInfo:
    """Get the payroll timezone."""
    return ZoneInfo(PAYROLL_TIMEZONE)


def to_vietnam_local(dt: datetime) -> Optional[datetime]:
    """Convert a stored timestamp to Vietnam local time.

    Handles both naive and aware datetimes:
    - Naive datetimes are assumed to be UTC
    - Aware datetimes are converted from their own offset
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(get_payroll_tz())


def to_vietnam_local_date(dt: datetime) -> Optional[date]:
    local_dt = to_vietnam_local(dt)
    return local_dt.date() if local_dt else None


def in_period(dt: datetime, year: int, month: int) -> bool:
    """True when ``dt`` falls inside ``year``/``month`` in Vietnam local time."""
    local_date = to_vietnam_local_date(dt)
    if local_date is None:
        return False
    return local_date.year == year and local_date.month == month


def month_bounds_utc(year: int, month: int) -> Tuple[datetime, datetime]:
    """Naive UTC ``[start, end)`` bounds of a Vietnam-local calendar month.

    Used to push the month filter down into SQL against naive UTC columns.
    """
    tz = get_payroll_tz()
    start_local = datetime(year, month, 1, tzinfo=tz)
    if month == 12:
        end_local = datetime(year + 1, 1, 1, tzinfo=tz)
    else:
        end_local = datetime(year, month + 1, 1, tzinfo=tz)

    start = start_local.astimezone(timezone.utc).replace(tzinfo=None)
    end = end_local.astimezone(timezone.utc).replace(tzinfo=None)
    return start, end

"""
Unit tests for legacy dichvu service code parsing.

Tests:
- Quantity + code segments ("2TI,1BÔNG")
- Empty / None input
- Malformed segments are skipped and reported
"""

import pytest
from spa_payroll.services.diagnostics import Diagnostics, UNPARSABLE_SERVICE_SEGMENT
from spa_payroll.services.service_codes import ServiceCode, parse_service_codes


class TestParseServiceCodes:
    """Tests for parse_service_codes."""

    def test_basic_codes(self):
        """Quantity prefix and upper-cased code per segment, in order."""
        result = parse_service_codes("2TI,1BÔNG")
        assert result == [
            ServiceCode(quantity=2, service_code="TI"),
            ServiceCode(quantity=1, service_code="BÔNG"),
        ]

    def test_named_fields(self):
        """Parsed entries expose quantity and service_code."""
        code = parse_service_codes("3TI")[0]
        assert code.quantity == 3
        assert code.service_code == "TI"

    def test_empty_string(self):
        """Empty string yields no services."""
        assert parse_service_codes("") == []

    def test_none(self):
        """None yields no services."""
        assert parse_service_codes(None) == []

    def test_lowercase_is_upper_cased(self):
        """Codes are upper-cased for catalog lookup."""
        assert parse_service_codes("1ti,2bông") == [(1, "TI"), (2, "BÔNG")]

    def test_whitespace_around_segments(self):
        """Whitespace around segments is trimmed."""
        assert parse_service_codes(" 2TI , 1BÔNG ") == [(2, "TI"), (1, "BÔNG")]

    def test_multi_digit_quantity(self):
        """Leading digit run is the whole quantity."""
        assert parse_service_codes("12GỘI ĐẦU") == [(12, "GỘI ĐẦU")]

    def test_segment_without_quantity_skipped(self):
        """A segment with no leading quantity is skipped, the rest survive."""
        diagnostics = Diagnostics()
        result = parse_service_codes("TI,1BÔNG", diagnostics, invoice_id=7)

        assert result == [(1, "BÔNG")]
        assert diagnostics.count(UNPARSABLE_SERVICE_SEGMENT) == 1
        event = diagnostics.to_list()[0]
        assert event["invoiceId"] == 7
        assert event["detail"]["segment"] == "TI"

    @pytest.mark.parametrize("raw", ["12", ",", "1TI,,", "   "])
    def test_degenerate_segments_never_raise(self, raw):
        """Digits-only and empty segments are dropped without error."""
        result = parse_service_codes(raw)
        assert all(code.service_code for code in result)

    def test_digits_only_segment_skipped(self):
        """A bare number has no service code."""
        assert parse_service_codes("12,1TI") == [(1, "TI")]

    def test_skips_without_collector(self):
        """Skipping works when no diagnostics collector is passed."""
        assert parse_service_codes("abc") == []

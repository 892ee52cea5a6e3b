"""Tests for currency display helpers."""

from decimal import Decimal

from tourpricing.formatting import format_currency, format_currency_detailed


class TestFormatCurrency:
    """Tests for localized currency formatting."""

    def test_whole_units_with_indian_grouping(self):
        assert format_currency(125000) == "₹1,25,000"

    def test_whole_units_round_half_up(self):
        assert format_currency(1124.5) == "₹1,125"
        assert format_currency(Decimal("1124.49")) == "₹1,124"

    def test_detailed_has_two_decimals(self):
        assert format_currency_detailed(125000.5) == "₹1,25,000.50"
        assert format_currency_detailed(0) == "₹0.00"

    def test_locale_and_currency_override(self):
        assert format_currency(1234.5, currency="USD", locale="en_US") == "$1,235"
        assert format_currency_detailed(1234.5, currency="USD", locale="en_US") == "$1,234.50"

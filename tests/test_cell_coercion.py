"""Unit tests for spreadsheet cell coercion."""

from datetime import date, datetime

import pytest
from openpyxl.utils.datetime import CALENDAR_MAC_1904

from tourpricing.transformers.cell_coercion import (
    coerce_boolean,
    coerce_date,
    coerce_number,
    coerce_string,
    decode_date_serial,
    is_empty_row,
    normalize_header,
)


class TestNormalizeHeader:
    """Tests for header canonicalisation."""

    @pytest.mark.parametrize(
        "label, expected",
        [
            ("Room Type Name", "room_type_name"),
            ("  Price/Night ", "price_night"),
            ("HotelCode", "hotelcode"),
            ("start-date", "start_date"),
            (None, ""),
        ],
    )
    def test_normalize_header(self, label, expected):
        assert normalize_header(label) == expected


class TestCoerceString:
    """Tests for string coercion."""

    def test_trims_and_blanks_to_none(self):
        assert coerce_string("  Deluxe ") == "Deluxe"
        assert coerce_string("   ") is None
        assert coerce_string(None) is None

    def test_integer_floats_have_no_decimal_suffix(self):
        assert coerce_string(101.0) == "101"
        assert coerce_string(12.5) == "12.5"

    def test_booleans_are_not_strings(self):
        assert coerce_string(True) is None

    def test_dates_render_as_iso(self):
        assert coerce_string(datetime(2025, 3, 1, 10, 30)) == "2025-03-01"


class TestCoerceNumber:
    """Tests for numeric coercion."""

    def test_numbers_pass_through(self):
        assert coerce_number(4200) == 4200.0
        assert coerce_number(99.5) == 99.5

    def test_strings_with_grouping(self):
        assert coerce_number("1,25,000") == 125000.0
        assert coerce_number(" 4 500 ") == 4500.0

    def test_invalid_values(self):
        assert coerce_number("abc") is None
        assert coerce_number("") is None
        assert coerce_number(True) is None
        assert coerce_number(float("nan")) is None


class TestCoerceBoolean:
    """Tests for active flag coercion."""

    @pytest.mark.parametrize("value", [True, 1, "yes", "Y", "TRUE", "active", " Enabled "])
    def test_truthy(self, value):
        assert coerce_boolean(value) is True

    @pytest.mark.parametrize("value", [False, 0, "no", "N", "false", "Inactive", "disabled"])
    def test_falsy(self, value):
        assert coerce_boolean(value) is False

    def test_unrecognised_is_none(self):
        assert coerce_boolean("maybe") is None
        assert coerce_boolean(None) is None


class TestCoerceDate:
    """Tests for date coercion."""

    def test_native_dates(self):
        assert coerce_date(date(2025, 1, 15)) == "2025-01-15"
        assert coerce_date(datetime(2025, 1, 15, 23, 59)) == "2025-01-15"

    def test_serial_numbers(self):
        assert coerce_date(45658) == "2025-01-01"
        assert coerce_date("45658") == "2025-01-01"

    def test_serial_with_1904_epoch(self):
        assert coerce_date(44196, CALENDAR_MAC_1904) == "2025-01-01"

    def test_iso_strings(self):
        assert coerce_date("2025-02-28") == "2025-02-28"
        assert coerce_date("2025-02-28T18:30:00Z") == "2025-02-28"

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("15/01/2025", "2025-01-15"),
            ("01/31/2025", "2025-01-31"),
            ("15-01-2025", "2025-01-15"),
            ("15.01.2025", "2025-01-15"),
        ],
    )
    def test_flexible_formats(self, text, expected):
        assert coerce_date(text) == expected

    def test_day_first_wins_when_ambiguous(self):
        assert coerce_date("02/03/2025") == "2025-03-02"

    def test_unparseable(self):
        assert coerce_date("next tuesday") is None
        assert coerce_date(None) is None
        assert coerce_date(0) is None

    def test_decode_rejects_non_positive_serials(self):
        assert decode_date_serial(0) is None
        assert decode_date_serial(-5) is None


def test_is_empty_row():
    assert is_empty_row([None, "", "   "])
    assert not is_empty_row([None, "x"])

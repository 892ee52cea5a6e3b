"""Tests for the hotel rate workbook parser."""

from datetime import datetime

import pytest
from openpyxl.utils.datetime import CALENDAR_MAC_1904

from tourpricing.transformers import (
    HotelPricingImportTransformer,
    WorkbookParseError,
    parse_hotel_pricing_workbook,
)
from tourpricing.transformers.hotel_pricing_import import resolve_header_indexes


class TestHeaderResolution:
    """Tests for header alias matching."""

    def test_compact_match_ignores_underscores(self):
        indexes = resolve_header_indexes(["hotelcode", "roomtype", "pax", "from", "to", "rate"])

        assert indexes["hotel_id"] == 0
        assert indexes["room_type_name"] == 1
        assert indexes["occupancy_type_name"] == 2
        assert indexes["start_date"] == 3
        assert indexes["end_date"] == 4
        assert indexes["price_per_night"] == 5

    def test_header_alias_invariance(self, workbook_builder, valid_row):
        """Alias spellings of the same columns yield identical rows."""
        canonical = workbook_builder([valid_row])
        aliased = workbook_builder(
            [valid_row],
            headers=[
                "HotelCode",
                "Room",
                "Pax",
                "Plan",
                "From",
                "To",
                "Rate",
                "currency",
                "Status",
                "Remarks",
            ],
        )

        first = parse_hotel_pricing_workbook(canonical)
        second = parse_hotel_pricing_workbook(aliased)

        assert first.rows == second.rows
        assert first.errors == second.errors == []


class TestParseWorkbook:
    """Tests for HotelPricingImportTransformer.parse_workbook."""

    def test_parse_valid_row(self, workbook_builder, valid_row):
        result = HotelPricingImportTransformer.parse_workbook(
            workbook_builder([valid_row]), "rates.xlsx"
        )

        assert not result.has_errors
        assert len(result.rows) == 1
        row = result.rows[0]
        assert row.row_number == 2
        assert row.hotel_id == "hotel-snowview"
        assert row.room_type_name == "Deluxe"
        assert row.meal_plan_code == "CP"
        assert row.start_date == "2025-07-01"
        assert row.end_date == "2025-09-30"
        assert row.price == 4200.0
        assert row.is_active is True
        assert result.stats.sheet_name == "UploadTemplate"
        assert result.stats.file_name == "rates.xlsx"
        assert result.stats.valid_rows == 1

    def test_row_level_isolation(self, workbook_builder, valid_row):
        """A bad price fails only its own row, with the row number and field."""
        bad_row = list(valid_row)
        bad_row[6] = "abc"
        result = parse_hotel_pricing_workbook(workbook_builder([valid_row, bad_row, valid_row]))

        assert [row.row_number for row in result.rows] == [2, 4]
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.row_number == 3
        assert error.field == "price_per_night"
        assert error.value == "abc"

    def test_negative_price_is_rejected(self, workbook_builder, valid_row):
        bad_row = list(valid_row)
        bad_row[6] = -10
        result = parse_hotel_pricing_workbook(workbook_builder([bad_row]))

        assert result.rows == []
        assert result.errors[0].field == "price_per_night"
        assert result.errors[0].message == "Price cannot be negative"

    def test_date_representations_agree(self, workbook_builder, valid_row):
        """Native date, serial, ISO and dd/MM/yyyy for the same day all parse alike."""
        variants = [datetime(2025, 1, 1), 45658, "2025-01-01", "01/01/2025", "2025-01-01T00:00:00Z"]
        rows = []
        for value in variants:
            row = list(valid_row)
            row[4] = value
            row[5] = "2025-01-31"
            rows.append(row)

        result = parse_hotel_pricing_workbook(workbook_builder(rows))

        assert result.errors == []
        assert {row.start_date for row in result.rows} == {"2025-01-01"}

    def test_start_after_end(self, workbook_builder, valid_row):
        row = list(valid_row)
        row[4], row[5] = "2025-09-30", "2025-07-01"
        result = parse_hotel_pricing_workbook(workbook_builder([row]))

        assert result.rows == []
        assert result.errors[0].field == "start_date"
        assert "on or before" in result.errors[0].message

    def test_invalid_date_reports_value(self, workbook_builder, valid_row):
        row = list(valid_row)
        row[5] = "someday"
        result = parse_hotel_pricing_workbook(workbook_builder([row]))

        assert result.errors[0].field == "end_date"
        assert result.errors[0].value == "someday"

    def test_blank_rows_are_skipped(self, workbook_builder, valid_row):
        empty = [None] * len(valid_row)
        whitespace = ["  "] * len(valid_row)
        result = parse_hotel_pricing_workbook(
            workbook_builder([valid_row, empty, whitespace, valid_row, empty])
        )

        assert result.errors == []
        assert [row.row_number for row in result.rows] == [2, 5]
        assert result.stats.skipped_empty_rows == 2
        assert result.stats.data_rows == 2

    def test_missing_required_fields(self, workbook_builder, valid_row):
        row = list(valid_row)
        row[0] = None
        row[1] = ""
        row[2] = None
        result = parse_hotel_pricing_workbook(workbook_builder([row]))

        fields = {error.field for error in result.errors}
        assert {"hotel_id", "room_type_name", "occupancy_type_name"} <= fields

    def test_hotel_name_satisfies_hotel_column(self, workbook_builder):
        headers = ["Hotel Name", "Location", "Room Type", "Occupancy", "Start Date", "End Date", "Price"]
        rows = [["Snow View Resort", "Manali", "Deluxe", "Double", "2025-01-01", "2025-01-31", 3000]]
        result = parse_hotel_pricing_workbook(workbook_builder(rows, headers=headers))

        assert result.errors == []
        assert result.rows[0].hotel_id is None
        assert result.rows[0].hotel_name == "Snow View Resort"
        assert result.rows[0].location_name == "Manali"

    def test_missing_columns_reported_on_header_row(self, workbook_builder):
        headers = ["Hotel ID", "Room Type Name", "Start Date", "End Date"]
        rows = [["hotel-snowview", "Deluxe", "2025-01-01", "2025-01-31"]]
        result = parse_hotel_pricing_workbook(workbook_builder(rows, headers=headers))

        assert result.rows == []
        assert {error.field for error in result.errors} == {"occupancy_type_name", "price_per_night"}
        assert all(error.row_number == 1 for error in result.errors)

    def test_inactive_flag_and_unrecognised_flag(self, workbook_builder, valid_row):
        inactive = list(valid_row)
        inactive[8] = "No"
        unknown = list(valid_row)
        unknown[8] = "perhaps"
        unknown[4] = "2025-10-01"
        unknown[5] = "2025-10-31"
        result = parse_hotel_pricing_workbook(workbook_builder([inactive, unknown]))

        assert result.errors == []
        assert result.rows[0].is_active is False
        assert result.rows[1].is_active is True
        assert any('Unrecognised active flag "perhaps"' in warning for warning in result.warnings)


class TestCurrencyHandling:
    """Tests for rows priced in a non-base currency."""

    def test_foreign_currency_warns_by_default(self, workbook_builder, valid_row):
        row = list(valid_row)
        row[7] = "USD"
        result = parse_hotel_pricing_workbook(workbook_builder([row]))

        assert len(result.rows) == 1
        assert result.warnings == ['Row 2: Currency "USD" detected and ignored (pricing stored in INR)']

    def test_foreign_currency_can_be_rejected(self, workbook_builder, valid_row):
        row = list(valid_row)
        row[7] = "USD"
        result = parse_hotel_pricing_workbook(
            workbook_builder([row]), reject_foreign_currency=True
        )

        assert result.rows == []
        assert result.errors[0].field == "currency"
        assert result.errors[0].value == "USD"

    def test_base_currency_is_case_insensitive(self, workbook_builder, valid_row):
        row = list(valid_row)
        row[7] = "inr"
        result = parse_hotel_pricing_workbook(workbook_builder([row]))

        assert result.warnings == []


class TestWorkbookStructure:
    """Tests for workbook-level failures and sheet selection."""

    def test_unreadable_bytes(self):
        with pytest.raises(WorkbookParseError):
            parse_hotel_pricing_workbook(b"not a spreadsheet")

    def test_empty_sheet(self, workbook_builder):
        with pytest.raises(WorkbookParseError):
            parse_hotel_pricing_workbook(workbook_builder([]))

    def test_header_only_sheet(self, workbook_builder, template_headers):
        with pytest.raises(WorkbookParseError, match="no data rows"):
            parse_hotel_pricing_workbook(workbook_builder([], headers=template_headers))

    def test_preferred_sheet_is_selected(self, workbook_builder, valid_row):
        data = workbook_builder([valid_row], leading_sheets=["Instructions"])

        result = parse_hotel_pricing_workbook(data)

        assert result.stats.sheet_name == "UploadTemplate"
        assert len(result.rows) == 1

    def test_first_sheet_used_when_no_preferred_sheet(self, workbook_builder, valid_row):
        result = parse_hotel_pricing_workbook(workbook_builder([valid_row], sheet_name="Rates"))

        assert result.stats.sheet_name == "Rates"
        assert len(result.rows) == 1

    def test_1904_epoch_serials(self, workbook_builder, valid_row):
        row = list(valid_row)
        row[4] = 44196
        row[5] = 44226
        result = parse_hotel_pricing_workbook(workbook_builder([row], epoch=CALENDAR_MAC_1904))

        assert result.errors == []
        assert result.rows[0].start_date == "2025-01-01"
        assert result.rows[0].end_date == "2025-01-31"

"""Tests for resolving import rows against reference data."""

from datetime import date

import pytest

from tourpricing.models import HotelRate, ImportRow, ReferenceLookups
from tourpricing.transformers import ReferenceResolver


def make_row(row_number, **overrides):
    values = {
        "row_number": row_number,
        "hotel_id": "hotel-snowview",
        "room_type_name": "Deluxe",
        "occupancy_type_name": "Double",
        "meal_plan_code": "CP",
        "start_date": "2025-07-01",
        "end_date": "2025-09-30",
        "price": 4200,
    }
    values.update(overrides)
    return ImportRow(**values)


@pytest.fixture
def resolver(catalog):
    return ReferenceResolver(
        ReferenceLookups(
            hotels=catalog.hotels,
            room_types=catalog.room_types,
            occupancy_types=catalog.occupancy_types,
            meal_plans=catalog.meal_plans,
        )
    )


class TestReferenceResolver:
    """Tests for ReferenceResolver.prepare."""

    def test_resolves_ids(self, resolver):
        result = resolver.prepare([make_row(2)])

        assert result.errors == []
        prepared = result.prepared[0]
        assert prepared.hotel_id == "hotel-snowview"
        assert prepared.room_type_id == "rt-deluxe"
        assert prepared.occupancy_type_id == "occ-double"
        assert prepared.meal_plan_id == "mp-cp"
        assert prepared.start_date == date(2025, 7, 1)

    def test_names_match_case_insensitively(self, resolver):
        row = make_row(2, room_type_name="  deluxe ", occupancy_type_name="DOUBLE", meal_plan_code="cp")
        result = resolver.prepare([row])

        assert result.errors == []
        assert result.prepared[0].meal_plan_id == "mp-cp"

    def test_hotel_matched_by_name_and_location(self, resolver):
        row = make_row(2, hotel_id=None, hotel_name="lakeside inn", location_name="SRINAGAR", meal_plan_code=None)
        result = resolver.prepare([row])

        assert result.errors == []
        assert result.prepared[0].hotel_id == "hotel-lakeside"
        assert result.prepared[0].meal_plan_id is None

    def test_unknown_references(self, resolver):
        row = make_row(5, hotel_id="hotel-missing", room_type_name="Igloo", meal_plan_code="AP")
        result = resolver.prepare([row])

        assert result.prepared == []
        fields = {error.field for error in result.errors}
        assert fields == {"hotel_id", "room_type_name", "meal_plan_code"}
        assert all(error.row_number == 5 for error in result.errors)

    def test_duplicate_window_is_an_error(self, resolver):
        result = resolver.prepare([make_row(2), make_row(3)])

        assert [row.row_number for row in result.prepared] == [2]
        assert result.errors[0].row_number == 3
        assert result.errors[0].message == "Duplicate pricing combination (matches row 2)"

    def test_overlap_within_upload_is_a_warning(self, resolver):
        rows = [make_row(2), make_row(3, start_date="2025-09-01", end_date="2025-10-31")]
        result = resolver.prepare(rows)

        assert len(result.prepared) == 2
        assert result.warnings == [
            "Row 3 overlaps with row 2 for the same hotel/room/occupancy combination in this upload."
        ]

    def test_overlap_with_stored_rates(self, resolver):
        stored = [
            HotelRate(
                id="hp-9",
                hotel_id="hotel-snowview",
                room_type_id="rt-deluxe",
                occupancy_type_id="occ-double",
                meal_plan_id="mp-cp",
                start_date=date(2025, 6, 1),
                end_date=date(2025, 7, 15),
                price=4000,
            ),
            HotelRate(
                id="hp-10",
                hotel_id="hotel-snowview",
                room_type_id="rt-deluxe",
                occupancy_type_id="occ-double",
                meal_plan_id="mp-cp",
                start_date=date(2025, 7, 1),
                end_date=date(2025, 9, 30),
                price=4100,
            ),
        ]
        result = resolver.prepare([make_row(2)], existing_rates=stored)

        assert result.errors == []
        assert result.warnings == ["Row 2 overlaps existing pricing (2025-06-01 → 2025-07-15)."]

"""Resolve parsed import rows to reference ids and detect conflicting rate windows."""

from datetime import date
from typing import Iterable, Optional

from structlog import get_logger

from tourpricing.models.imports import ImportRow, ParseError, PreparedRow, ResolutionResult
from tourpricing.models.rates import HotelRate, HotelReference, ReferenceLookups
from tourpricing.utils.dates import date_ranges_overlap

logger = get_logger(__name__)

CombinationKey = tuple[str, str, str, Optional[str]]


def _normalize(value: Optional[str]) -> str:
    return value.strip().lower() if value else ""


def _normalize_code(value: Optional[str]) -> str:
    return value.strip().upper() if value else ""


class ReferenceResolver:
    """Maps import rows onto hotel, room type, occupancy type and meal plan ids.

    Hotels are matched by id first, then by (hotel name, location label).
    Room and occupancy types match by case-insensitive name, meal plans by code.
    """

    def __init__(self, lookups: ReferenceLookups):
        self.hotels_by_id: dict[str, HotelReference] = {}
        self.hotels_by_composite: dict[str, HotelReference] = {}
        for hotel in lookups.hotels:
            self.hotels_by_id[hotel.id] = hotel
            composite = f"{_normalize(hotel.name)}|{_normalize(hotel.location_label)}"
            self.hotels_by_composite[composite] = hotel

        self.room_type_by_name = {_normalize(item.name): item.id for item in lookups.room_types}
        self.occupancy_type_by_name = {
            _normalize(item.name): item.id for item in lookups.occupancy_types
        }
        self.meal_plan_by_code = {_normalize_code(plan.code): plan.id for plan in lookups.meal_plans}

    def _find_hotel(self, row: ImportRow) -> Optional[HotelReference]:
        hotel = self.hotels_by_id.get(row.hotel_id.strip()) if row.hotel_id else None
        if hotel is None and (row.hotel_name or row.location_name):
            composite = f"{_normalize(row.hotel_name)}|{_normalize(row.location_name)}"
            hotel = self.hotels_by_composite.get(composite)
        return hotel

    def _resolve_row(self, row: ImportRow) -> tuple[Optional[PreparedRow], list[ParseError]]:
        errors: list[ParseError] = []

        hotel = self._find_hotel(row)
        if hotel is None:
            errors.append(
                ParseError(
                    row_number=row.row_number,
                    field="hotel_id",
                    message="Hotel could not be matched to database record",
                    value=row.hotel_id or row.hotel_name,
                )
            )

        room_type_id = self.room_type_by_name.get(_normalize(row.room_type_name))
        if room_type_id is None:
            errors.append(
                ParseError(
                    row_number=row.row_number,
                    field="room_type_name",
                    message=f'Room type "{row.room_type_name}" not found',
                )
            )

        occupancy_type_id = self.occupancy_type_by_name.get(_normalize(row.occupancy_type_name))
        if occupancy_type_id is None:
            errors.append(
                ParseError(
                    row_number=row.row_number,
                    field="occupancy_type_name",
                    message=f'Occupancy type "{row.occupancy_type_name}" not found',
                )
            )

        meal_plan_id = None
        if row.meal_plan_code:
            meal_plan_id = self.meal_plan_by_code.get(_normalize_code(row.meal_plan_code))
            if meal_plan_id is None:
                errors.append(
                    ParseError(
                        row_number=row.row_number,
                        field="meal_plan_code",
                        message=f'Meal plan code "{row.meal_plan_code}" not found',
                    )
                )

        if errors:
            return None, errors

        prepared = PreparedRow(
            row_number=row.row_number,
            hotel_id=hotel.id,
            room_type_id=room_type_id,
            occupancy_type_id=occupancy_type_id,
            meal_plan_id=meal_plan_id,
            start_date=date.fromisoformat(row.start_date),
            end_date=date.fromisoformat(row.end_date),
            price=row.price,
            is_active=row.is_active,
        )
        return prepared, []

    def prepare(
        self,
        rows: Iterable[ImportRow],
        existing_rates: Iterable[HotelRate] = (),
    ) -> ResolutionResult:
        """Resolve rows and flag duplicates and overlapping rate windows.

        Args:
            rows: Validated rows from the workbook parser
            existing_rates: Rates already stored for the same combinations

        Returns:
            ResolutionResult with prepared rows, errors and de-duplicated warnings
        """
        rows = list(rows)
        prepared: list[PreparedRow] = []
        errors: list[ParseError] = []
        warnings: list[str] = []
        seen: dict[tuple[CombinationKey, date, date], int] = {}
        rows_by_combination: dict[CombinationKey, list[PreparedRow]] = {}

        logger.info("Resolving import rows", row_count=len(rows))

        for row in rows:
            resolved, row_errors = self._resolve_row(row)
            if row_errors:
                errors.extend(row_errors)
                continue

            combination = resolved.combination_key
            window_key = (combination, resolved.start_date, resolved.end_date)
            if window_key in seen:
                errors.append(
                    ParseError(
                        row_number=resolved.row_number,
                        field="start_date",
                        message=f"Duplicate pricing combination (matches row {seen[window_key]})",
                    )
                )
                continue
            seen[window_key] = resolved.row_number

            earlier_rows = rows_by_combination.setdefault(combination, [])
            overlapping = next(
                (
                    earlier
                    for earlier in earlier_rows
                    if date_ranges_overlap(
                        earlier.start_date, earlier.end_date, resolved.start_date, resolved.end_date
                    )
                ),
                None,
            )
            if overlapping is not None:
                warnings.append(
                    f"Row {resolved.row_number} overlaps with row {overlapping.row_number} "
                    "for the same hotel/room/occupancy combination in this upload."
                )

            earlier_rows.append(resolved)
            prepared.append(resolved)

        warnings.extend(self.existing_overlap_warnings(prepared, existing_rates))

        logger.info(
            "Resolved import rows",
            prepared=len(prepared),
            error_count=len(errors),
            warning_count=len(warnings),
        )

        return ResolutionResult(
            prepared=prepared,
            errors=errors,
            warnings=list(dict.fromkeys(warnings)),
        )

    @staticmethod
    def existing_overlap_warnings(
        prepared: list[PreparedRow],
        existing_rates: Iterable[HotelRate],
    ) -> list[str]:
        """Warn when a row overlaps a stored window of the same combination.

        A stored window with identical dates is the row's own update target
        and is not reported.
        """
        existing_by_combination: dict[CombinationKey, list[HotelRate]] = {}
        for rate in existing_rates:
            existing_by_combination.setdefault(rate.combination_key, []).append(rate)

        warnings: list[str] = []
        for row in prepared:
            for existing in existing_by_combination.get(row.combination_key, []):
                if existing.start_date == row.start_date and existing.end_date == row.end_date:
                    continue
                if date_ranges_overlap(row.start_date, row.end_date, existing.start_date, existing.end_date):
                    warnings.append(
                        f"Row {row.row_number} overlaps existing pricing "
                        f"({existing.start_date.isoformat()} → {existing.end_date.isoformat()})."
                    )
        return warnings

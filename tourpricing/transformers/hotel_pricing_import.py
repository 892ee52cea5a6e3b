"""Transformer for converting uploaded hotel rate workbooks into validated import rows."""

from datetime import datetime
from io import BytesIO
from typing import Any, Optional
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.datetime import WINDOWS_EPOCH
from openpyxl.utils.exceptions import InvalidFileException
from structlog import get_logger

from tourpricing.config import settings
from tourpricing.models.imports import ImportRow, ParseError, ParseResult, ParseStats
from tourpricing.transformers.cell_coercion import (
    coerce_boolean,
    coerce_date,
    coerce_number,
    coerce_string,
    is_blank,
    is_empty_row,
    normalize_header,
)

logger = get_logger(__name__)

# Logical column -> accepted header spellings (compared in canonical form)
COLUMN_ALIASES: dict[str, list[str]] = {
    "hotel_id": ["hotel_id", "hotelid", "hotel_code", "hotel"],
    "hotel_name": ["hotel_name", "hotelname", "name"],
    "location_name": ["location_name", "location", "destination"],
    "room_type_name": ["room_type_name", "roomtype", "room_type", "room"],
    "occupancy_type_name": ["occupancy_type_name", "occupancy", "occupancy_type", "pax"],
    "meal_plan_code": ["meal_plan_code", "mealplan", "meal_plan", "plan"],
    "start_date": ["start_date", "from", "from_date", "start"],
    "end_date": ["end_date", "to", "to_date", "end"],
    "price_per_night": ["price_per_night", "price", "rate", "amount"],
    "currency": ["currency"],
    "is_active": ["is_active", "active", "status"],
    "notes": ["notes", "note", "remarks", "comment"],
}

# hotel_id is satisfied by either a hotel id or a hotel name column
REQUIRED_COLUMNS = [
    "hotel_id",
    "room_type_name",
    "occupancy_type_name",
    "start_date",
    "end_date",
    "price_per_night",
]


class WorkbookParseError(ValueError):
    """Raised when a workbook is structurally unusable (no row-level report possible)."""

    pass


def _compact(header: str) -> str:
    return header.replace("_", "")


def resolve_header_indexes(headers: list[str]) -> dict[str, int]:
    """Map each logical column to the index of the first header matching one of its aliases.

    Aliases are tried in order against the canonical headers; when none matches
    exactly, underscores are ignored so "HotelCode" (hotelcode) still finds
    hotel_code.

    Args:
        headers: Canonicalised header cells of row 1

    Returns:
        Dictionary of logical column name -> column index (missing columns absent)
    """
    compact_headers = [_compact(header) for header in headers]
    index_map: dict[str, int] = {}

    for column, aliases in COLUMN_ALIASES.items():
        canonical_aliases = [normalize_header(alias) for alias in aliases]
        match = next((alias for alias in canonical_aliases if alias in headers), None)
        if match is not None:
            index_map[column] = headers.index(match)
            continue
        compact_match = next(
            (_compact(alias) for alias in canonical_aliases if _compact(alias) in compact_headers),
            None,
        )
        if compact_match is not None:
            index_map[column] = compact_headers.index(compact_match)

    return index_map


def _pick_cell(row: tuple[Any, ...], index: Optional[int]) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


class HotelPricingImportTransformer:
    """Transforms an uploaded rate workbook into validated ImportRows and a row-numbered report."""

    @staticmethod
    def _read_table(
        data: bytes,
        preferred_sheet_name: str,
    ) -> tuple[str, list[tuple[Any, ...]], datetime]:
        """Load the workbook and return (sheet name, rows, date epoch).

        Trailing blank rows are dropped; blank rows between data rows are kept
        so row numbers match the sheet.

        Raises:
            WorkbookParseError: If the bytes are not a readable workbook or it has no sheets
        """
        try:
            workbook = load_workbook(BytesIO(data), read_only=True, data_only=True)
        except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as e:
            raise WorkbookParseError(f"Unable to read workbook: {str(e)}") from e

        try:
            if not workbook.sheetnames:
                raise WorkbookParseError("No worksheets found in uploaded file")

            sheet_name = next(
                (name for name in workbook.sheetnames if name.lower() == preferred_sheet_name.lower()),
                workbook.sheetnames[0],
            )
            sheet = workbook[sheet_name]
            epoch = getattr(workbook, "epoch", WINDOWS_EPOCH)
            table = [tuple(row) for row in sheet.iter_rows(min_row=1, values_only=True)]
        finally:
            workbook.close()

        while table and is_empty_row(table[-1]):
            table.pop()

        return sheet_name, table, epoch

    @staticmethod
    def parse_workbook(
        data: bytes,
        file_name: Optional[str] = None,
        *,
        base_currency: Optional[str] = None,
        preferred_sheet_name: Optional[str] = None,
        reject_foreign_currency: Optional[bool] = None,
    ) -> ParseResult:
        """Parse a hotel rate workbook.

        Only structural problems raise; every row-level problem is reported as a
        ParseError tied to its row number and field, and the row is left out.

        Args:
            data: Raw workbook bytes (.xlsx)
            file_name: Original upload name, for diagnostics only
            base_currency: Currency rates are stored in (defaults to settings)
            preferred_sheet_name: Sheet to prefer over the first one (defaults to settings)
            reject_foreign_currency: Turn currency mismatch warnings into row errors

        Returns:
            ParseResult with valid rows, errors, warnings and stats

        Raises:
            WorkbookParseError: If the workbook is unreadable, has no sheets, or has no data rows
        """
        base_currency = (base_currency or settings.pricing.base_currency).upper()
        preferred_sheet_name = preferred_sheet_name or settings.imports.preferred_sheet_name
        if reject_foreign_currency is None:
            reject_foreign_currency = settings.imports.reject_foreign_currency

        sheet_name, table, epoch = HotelPricingImportTransformer._read_table(
            data, preferred_sheet_name
        )

        logger.info(
            "Parsing hotel pricing workbook",
            file_name=file_name,
            sheet_name=sheet_name,
            row_count=len(table),
        )

        if not table:
            raise WorkbookParseError(f"Worksheet '{sheet_name}' is empty")

        headers = [normalize_header(cell) for cell in table[0]]
        header_indexes = resolve_header_indexes(headers)

        missing_columns = [
            column
            for column in REQUIRED_COLUMNS
            if column not in header_indexes
            and not (column == "hotel_id" and "hotel_name" in header_indexes)
        ]
        if missing_columns:
            logger.warning(
                "Workbook is missing required columns",
                file_name=file_name,
                sheet_name=sheet_name,
                missing_columns=missing_columns,
            )
            return ParseResult(
                rows=[],
                errors=[
                    ParseError(
                        row_number=1,
                        field=column,
                        message=f'Missing required column "{column}" in template',
                    )
                    for column in missing_columns
                ],
                warnings=[],
                stats=ParseStats(sheet_name=sheet_name, file_name=file_name),
            )

        if len(table) < 2:
            raise WorkbookParseError(f"Worksheet '{sheet_name}' has no data rows")

        rows: list[ImportRow] = []
        errors: list[ParseError] = []
        warnings: list[str] = []
        data_rows = 0
        skipped_empty_rows = 0

        for index, raw_row in enumerate(table[1:], start=2):
            if is_empty_row(raw_row):
                skipped_empty_rows += 1
                continue

            data_rows += 1
            row, row_errors, row_warnings = HotelPricingImportTransformer._parse_row(
                raw_row,
                index,
                header_indexes,
                epoch=epoch,
                base_currency=base_currency,
                reject_foreign_currency=reject_foreign_currency,
            )
            warnings.extend(row_warnings)
            if row_errors:
                errors.extend(row_errors)
                logger.debug(
                    "Rejected workbook row",
                    row_number=index,
                    fields=[error.field for error in row_errors],
                )
                continue
            rows.append(row)

        stats = ParseStats(
            sheet_name=sheet_name,
            total_rows=len(table) - 1,
            data_rows=data_rows,
            valid_rows=len(rows),
            skipped_empty_rows=skipped_empty_rows,
            file_name=file_name,
        )

        logger.info(
            "Parsed hotel pricing workbook",
            file_name=file_name,
            sheet_name=sheet_name,
            data_rows=data_rows,
            valid_rows=len(rows),
            error_count=len(errors),
            warning_count=len(warnings),
            skipped_empty_rows=skipped_empty_rows,
        )

        return ParseResult(rows=rows, errors=errors, warnings=warnings, stats=stats)

    @staticmethod
    def _parse_row(
        raw_row: tuple[Any, ...],
        row_number: int,
        header_indexes: dict[str, int],
        *,
        epoch: datetime,
        base_currency: str,
        reject_foreign_currency: bool,
    ) -> tuple[Optional[ImportRow], list[ParseError], list[str]]:
        """Coerce and validate a single non-blank row (all-or-nothing)."""

        def cell(column: str) -> Any:
            return _pick_cell(raw_row, header_indexes.get(column))

        hotel_id = coerce_string(cell("hotel_id"))
        hotel_name = coerce_string(cell("hotel_name"))
        location_name = coerce_string(cell("location_name"))
        room_type_name = coerce_string(cell("room_type_name"))
        occupancy_type_name = coerce_string(cell("occupancy_type_name"))
        meal_plan_code = coerce_string(cell("meal_plan_code"))
        start_date = coerce_date(cell("start_date"), epoch)
        end_date = coerce_date(cell("end_date"), epoch)
        raw_price = cell("price_per_night")
        price = coerce_number(raw_price)
        currency = coerce_string(cell("currency"))
        raw_active = cell("is_active")
        is_active = coerce_boolean(raw_active)
        notes = coerce_string(cell("notes"))

        errors: list[ParseError] = []
        warnings: list[str] = []

        if not hotel_id and not hotel_name:
            errors.append(
                ParseError(row_number=row_number, field="hotel_id", message="Hotel ID is required")
            )
        if not room_type_name:
            errors.append(
                ParseError(row_number=row_number, field="room_type_name", message="Room type is required")
            )
        if not occupancy_type_name:
            errors.append(
                ParseError(
                    row_number=row_number,
                    field="occupancy_type_name",
                    message="Occupancy type is required",
                )
            )
        if not start_date:
            errors.append(
                ParseError(
                    row_number=row_number,
                    field="start_date",
                    message="Start date is invalid or missing",
                    value=None if is_blank(cell("start_date")) else str(cell("start_date")),
                )
            )
        if not end_date:
            errors.append(
                ParseError(
                    row_number=row_number,
                    field="end_date",
                    message="End date is invalid or missing",
                    value=None if is_blank(cell("end_date")) else str(cell("end_date")),
                )
            )
        if start_date and end_date and start_date > end_date:
            errors.append(
                ParseError(
                    row_number=row_number,
                    field="start_date",
                    message="Start date must be on or before end date",
                    value=f"{start_date} > {end_date}",
                )
            )
        if price is None:
            errors.append(
                ParseError(
                    row_number=row_number,
                    field="price_per_night",
                    message="Price must be a valid number",
                    value=None if is_blank(raw_price) else str(raw_price),
                )
            )
        elif price < 0:
            errors.append(
                ParseError(
                    row_number=row_number,
                    field="price_per_night",
                    message="Price cannot be negative",
                    value=price,
                )
            )

        if currency and currency.upper() != base_currency:
            if reject_foreign_currency:
                errors.append(
                    ParseError(
                        row_number=row_number,
                        field="currency",
                        message=f'Currency must be {base_currency}',
                        value=currency,
                    )
                )
            else:
                warnings.append(
                    f'Row {row_number}: Currency "{currency}" detected and ignored '
                    f"(pricing stored in {base_currency})"
                )

        if is_active is None and not is_blank(raw_active):
            warnings.append(
                f'Row {row_number}: Unrecognised active flag "{raw_active}", defaulting to active'
            )

        if errors:
            return None, errors, warnings

        row = ImportRow(
            row_number=row_number,
            hotel_id=hotel_id,
            hotel_name=hotel_name,
            location_name=location_name,
            room_type_name=room_type_name,
            occupancy_type_name=occupancy_type_name,
            meal_plan_code=meal_plan_code,
            start_date=start_date,
            end_date=end_date,
            price=price,
            is_active=True if is_active is None else is_active,
            currency=currency,
            notes=notes,
        )
        return row, [], warnings


def parse_hotel_pricing_workbook(
    data: bytes,
    file_name: Optional[str] = None,
    **options: Any,
) -> ParseResult:
    """Parse an uploaded hotel rate workbook; see HotelPricingImportTransformer.parse_workbook."""
    return HotelPricingImportTransformer.parse_workbook(data, file_name, **options)

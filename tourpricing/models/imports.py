"""Pydantic models for hotel rate workbook imports."""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ImportRow(BaseModel):
    """One validated hotel rate row taken from an uploaded workbook.

    Names (hotel, room type, occupancy type, meal plan) are resolved to ids
    later by the ReferenceResolver.
    """

    row_number: int = Field(
        alias="rowNumber",
        description="1-based position in the source sheet (header is row 1)",
    )
    hotel_id: Optional[str] = Field(None, alias="hotelId")
    hotel_name: Optional[str] = Field(None, alias="hotelName")
    location_name: Optional[str] = Field(None, alias="locationName")
    room_type_name: str = Field(alias="roomTypeName")
    occupancy_type_name: str = Field(alias="occupancyTypeName")
    meal_plan_code: Optional[str] = Field(None, alias="mealPlanCode")
    start_date: str = Field(alias="startDate", description="ISO date (yyyy-MM-dd)")
    end_date: str = Field(alias="endDate", description="ISO date (yyyy-MM-dd)")
    price: float = Field(ge=0, description="Per-night rate in base currency")
    is_active: bool = Field(default=True, alias="isActive")
    currency: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ParseError(BaseModel):
    """Diagnostic attached to a specific row (and usually a field)."""

    row_number: int = Field(alias="rowNumber")
    field: Optional[str] = None
    message: str
    value: Any = None

    model_config = ConfigDict(populate_by_name=True)


class ParseStats(BaseModel):
    """Counters describing the sheet that was read."""

    sheet_name: str = Field(alias="sheetName")
    total_rows: int = Field(default=0, alias="totalRows")
    data_rows: int = Field(default=0, alias="dataRows")
    valid_rows: int = Field(default=0, alias="validRows")
    skipped_empty_rows: int = Field(default=0, alias="skippedEmptyRows")
    file_name: Optional[str] = Field(None, alias="fileName")

    model_config = ConfigDict(populate_by_name=True)


class ParseResult(BaseModel):
    """Full outcome of reading one workbook."""

    rows: list[ImportRow] = Field(default_factory=list)
    errors: list[ParseError] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    stats: ParseStats

    model_config = ConfigDict(populate_by_name=True)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0


class PreparedRow(BaseModel):
    """Import row with every reference resolved to an id, ready for upsert."""

    row_number: int = Field(alias="rowNumber")
    hotel_id: str = Field(alias="hotelId")
    room_type_id: str = Field(alias="roomTypeId")
    occupancy_type_id: str = Field(alias="occupancyTypeId")
    meal_plan_id: Optional[str] = Field(None, alias="mealPlanId")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    price: float
    is_active: bool = Field(alias="isActive")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def combination_key(self) -> tuple[str, str, str, Optional[str]]:
        """Hotel/room/occupancy/meal plan tuple a rate window belongs to."""
        return (self.hotel_id, self.room_type_id, self.occupancy_type_id, self.meal_plan_id)


class ResolutionResult(BaseModel):
    """Outcome of resolving import rows against reference data."""

    prepared: list[PreparedRow] = Field(default_factory=list)
    errors: list[ParseError] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

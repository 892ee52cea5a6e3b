"""Pydantic models for stored rates and reference data."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TransportPricingType(str, Enum):
    """How a transport rate is billed.

    - PER_DAY: charged on every itinerary day the vehicle appears
    - PER_TRIP: charged once for the whole trip
    """

    PER_DAY = "PerDay"
    PER_TRIP = "PerTrip"


class HotelRate(BaseModel):
    """Per-night price for a hotel/room/occupancy/meal plan over a rate window."""

    id: str
    hotel_id: str = Field(alias="hotelId")
    room_type_id: str = Field(alias="roomTypeId")
    occupancy_type_id: str = Field(alias="occupancyTypeId")
    meal_plan_id: Optional[str] = Field(None, alias="mealPlanId")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    price: float = Field(ge=0)
    is_active: bool = Field(default=True, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def combination_key(self) -> tuple[str, str, str, Optional[str]]:
        return (self.hotel_id, self.room_type_id, self.occupancy_type_id, self.meal_plan_id)


class TransportRate(BaseModel):
    """Vehicle price for a location over a rate window."""

    id: str
    location_id: str = Field(alias="locationId")
    vehicle_type_id: str = Field(alias="vehicleTypeId")
    vehicle_type_name: str = Field(alias="vehicleTypeName")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    price: float = Field(ge=0)
    pricing_type: TransportPricingType = Field(
        default=TransportPricingType.PER_DAY, alias="transportType"
    )
    is_active: bool = Field(default=True, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)


class CatalogEntry(BaseModel):
    """Id/name pair for room types, occupancy types and vehicle types."""

    id: str
    name: str
    is_active: bool = Field(default=True, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)


class MealPlanReference(BaseModel):
    """Meal plan with the short code used in rate sheets (e.g. CP, MAP)."""

    id: str
    code: str
    name: str = ""
    is_active: bool = Field(default=True, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)


class HotelReference(BaseModel):
    """Hotel with the label of the location it belongs to."""

    id: str
    name: str
    location_label: Optional[str] = Field(None, alias="locationLabel")

    model_config = ConfigDict(populate_by_name=True)


class ReferenceLookups(BaseModel):
    """Reference data needed to resolve import rows to ids."""

    hotels: list[HotelReference] = Field(default_factory=list)
    room_types: list[CatalogEntry] = Field(default_factory=list, alias="roomTypes")
    occupancy_types: list[CatalogEntry] = Field(default_factory=list, alias="occupancyTypes")
    meal_plans: list[MealPlanReference] = Field(default_factory=list, alias="mealPlans")

    model_config = ConfigDict(populate_by_name=True)

"""Pydantic models for quote pricing input and breakdown output."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RoomAllocation(BaseModel):
    """Rooms of one type/occupancy/meal plan booked for a day."""

    room_type_id: str = Field(alias="roomTypeId")
    occupancy_type_id: str = Field(alias="occupancyTypeId")
    meal_plan_id: Optional[str] = Field(None, alias="mealPlanId")
    quantity: int = 0
    guest_names: Optional[str] = Field(None, alias="guestNames")
    voucher_number: Optional[str] = Field(None, alias="voucherNumber")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TransportDetail(BaseModel):
    """Vehicles of one type required for a day."""

    vehicle_type_id: Optional[str] = Field(None, alias="vehicleTypeId")
    quantity: int = 1
    description: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PricingItinerary(BaseModel):
    """One day of a trip as seen by the pricing calculator."""

    location_id: str = Field(alias="locationId")
    day_number: int = Field(alias="dayNumber")
    hotel_id: Optional[str] = Field(None, alias="hotelId")
    room_allocations: list[RoomAllocation] = Field(
        default_factory=list, alias="roomAllocations"
    )
    transport_details: list[TransportDetail] = Field(
        default_factory=list, alias="transportDetails"
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ItinerarySkeleton(BaseModel):
    """Shared day structure that package variants attach their own rooms and vehicles to."""

    id: Optional[str] = None
    location_id: str = Field(alias="locationId")
    day_number: int = Field(alias="dayNumber")
    hotel_id: Optional[str] = Field(None, alias="hotelId")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def variant_key(self) -> str:
        """Key used in variant allocation maps: the itinerary id, else day-<n>."""
        return self.id or f"day-{self.day_number}"


class RoomCostDetail(BaseModel):
    """Priced room line; priced=False means no rate covered the trip window."""

    room_type_id: str = Field(alias="roomTypeId")
    occupancy_type_id: str = Field(alias="occupancyTypeId")
    meal_plan_id: Optional[str] = Field(None, alias="mealPlanId")
    quantity: int
    price_per_night: float = Field(default=0.0, alias="pricePerNight")
    total_cost: float = Field(default=0.0, alias="totalCost")
    priced: bool = True
    room_type_name: Optional[str] = Field(None, alias="roomTypeName")
    occupancy_type_name: Optional[str] = Field(None, alias="occupancyTypeName")
    meal_plan_name: Optional[str] = Field(None, alias="mealPlanName")

    model_config = ConfigDict(populate_by_name=True)


class TransportCostDetail(BaseModel):
    """Priced vehicle line, flattened across days for display and audit."""

    day: int
    vehicle_type_id: str = Field(alias="vehicleTypeId")
    vehicle_type: str = Field(alias="vehicleType")
    quantity: int
    price_per_unit: float = Field(default=0.0, alias="pricePerUnit")
    pricing_type: Optional[str] = Field(None, alias="pricingType")
    total_cost: float = Field(default=0.0, alias="totalCost")
    priced: bool = True
    description: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class DayPricingResult(BaseModel):
    """Costs for one itinerary day."""

    day: int
    accommodation_cost: float = Field(default=0.0, alias="accommodationCost")
    transport_cost: float = Field(default=0.0, alias="transportCost")
    total_cost: float = Field(default=0.0, alias="totalCost")
    room_breakdown: list[RoomCostDetail] = Field(default_factory=list, alias="roomBreakdown")
    hotel_name: Optional[str] = Field(None, alias="hotelName")

    model_config = ConfigDict(populate_by_name=True)


class AppliedMarkup(BaseModel):
    percentage: float = 0.0
    amount: float = 0.0


class CostBreakdown(BaseModel):
    accommodation: float = 0.0
    transport: float = 0.0


class PricingCalculationResult(BaseModel):
    """Complete, traceable quote breakdown.

    total_cost = round(base_price + applied_markup.amount), base_price is the
    sum of accommodation and transport, and itinerary_breakdown follows the
    order of the itineraries that were priced.
    """

    total_cost: float = Field(default=0.0, alias="totalCost")
    base_price: float = Field(default=0.0, alias="basePrice")
    applied_markup: AppliedMarkup = Field(default_factory=AppliedMarkup, alias="appliedMarkup")
    breakdown: CostBreakdown = Field(default_factory=CostBreakdown)
    itinerary_breakdown: list[DayPricingResult] = Field(
        default_factory=list, alias="itineraryBreakdown"
    )
    transport_details: list[TransportCostDetail] = Field(
        default_factory=list, alias="transportDetails"
    )
    calculated_at: datetime = Field(default_factory=datetime.utcnow, alias="calculatedAt")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def unpriced_lines(self) -> int:
        """Number of room and transport lines that found no applicable rate."""
        rooms = sum(
            1
            for day in self.itinerary_breakdown
            for room in day.room_breakdown
            if not room.priced
        )
        vehicles = sum(1 for line in self.transport_details if not line.priced)
        return rooms + vehicles

    def to_response_dict(self) -> dict[str, Any]:
        """Convert to the camelCase JSON shape consumed by quote screens and vouchers."""
        return self.model_dump(by_alias=True, mode="json")

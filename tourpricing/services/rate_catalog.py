"""Rate lookup and reference data collaborators used by pricing and imports."""

import json
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Optional

from structlog import get_logger

from tourpricing.models.rates import (
    CatalogEntry,
    HotelRate,
    HotelReference,
    MealPlanReference,
    ReferenceLookups,
    TransportRate,
)
from tourpricing.utils.dates import date_ranges_overlap

logger = get_logger(__name__)

CombinationKey = tuple[str, str, str, Optional[str]]


class RateCatalog(ABC):
    """Source of active rates and display names.

    Rate lookups use overlap semantics: a rate applies when its window shares
    at least one day with the trip window. When several rates apply, the one
    with the latest start date wins.
    """

    @abstractmethod
    async def find_hotel_rate(
        self,
        hotel_id: str,
        room_type_id: str,
        occupancy_type_id: str,
        meal_plan_id: Optional[str],
        start: date,
        end: date,
    ) -> Optional[HotelRate]:
        """Return the applicable room rate, or None when nothing is configured."""
        pass

    @abstractmethod
    async def find_transport_rate(
        self,
        location_id: str,
        vehicle_type_id: str,
        start: date,
        end: date,
    ) -> Optional[TransportRate]:
        """Return the applicable vehicle rate, or None when nothing is configured."""
        pass

    @abstractmethod
    async def list_room_types(self) -> list[CatalogEntry]:
        pass

    @abstractmethod
    async def list_occupancy_types(self) -> list[CatalogEntry]:
        pass

    @abstractmethod
    async def list_meal_plans(self) -> list[MealPlanReference]:
        pass

    @abstractmethod
    async def hotel_name(self, hotel_id: str) -> Optional[str]:
        pass

    @abstractmethod
    async def reference_lookups(self) -> ReferenceLookups:
        """Hotels, room types, occupancy types and meal plans for import resolution."""
        pass

    @abstractmethod
    async def hotel_rates_for(self, combinations: Iterable[CombinationKey]) -> list[HotelRate]:
        """Stored rates (active or not) for the given hotel/room/occupancy/meal plan tuples."""
        pass


def _latest_start(rates: Iterable[Any]) -> Optional[Any]:
    candidates = list(rates)
    if not candidates:
        return None
    return max(candidates, key=lambda rate: rate.start_date)


class InMemoryRateCatalog(RateCatalog):
    """RateCatalog held in memory, typically loaded from a JSON export."""

    def __init__(
        self,
        hotel_rates: Iterable[HotelRate] = (),
        transport_rates: Iterable[TransportRate] = (),
        hotels: Iterable[HotelReference] = (),
        room_types: Iterable[CatalogEntry] = (),
        occupancy_types: Iterable[CatalogEntry] = (),
        meal_plans: Iterable[MealPlanReference] = (),
    ):
        self.hotel_rates = list(hotel_rates)
        self.transport_rates = list(transport_rates)
        self.hotels = list(hotels)
        self.room_types = list(room_types)
        self.occupancy_types = list(occupancy_types)
        self.meal_plans = list(meal_plans)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "InMemoryRateCatalog":
        """Build a catalog from a camelCase payload.

        Expected keys: hotels, roomTypes, occupancyTypes, mealPlans,
        hotelPricing, transportPricing (all optional lists).
        """
        return cls(
            hotel_rates=[HotelRate(**item) for item in payload.get("hotelPricing", [])],
            transport_rates=[TransportRate(**item) for item in payload.get("transportPricing", [])],
            hotels=[HotelReference(**item) for item in payload.get("hotels", [])],
            room_types=[CatalogEntry(**item) for item in payload.get("roomTypes", [])],
            occupancy_types=[CatalogEntry(**item) for item in payload.get("occupancyTypes", [])],
            meal_plans=[MealPlanReference(**item) for item in payload.get("mealPlans", [])],
        )

    @classmethod
    def from_json(cls, path: str | Path) -> "InMemoryRateCatalog":
        """Load a catalog from a JSON file.

        Raises:
            ValueError: If the file content is not a valid catalog
        """
        path = Path(path)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            catalog = cls.from_dict(payload)
        except (json.JSONDecodeError, TypeError) as e:
            raise ValueError(f"Invalid rate catalog file {path}: {str(e)}") from e

        logger.info(
            "Loaded rate catalog",
            path=str(path),
            hotel_rates=len(catalog.hotel_rates),
            transport_rates=len(catalog.transport_rates),
            hotels=len(catalog.hotels),
        )
        return catalog

    async def find_hotel_rate(
        self,
        hotel_id: str,
        room_type_id: str,
        occupancy_type_id: str,
        meal_plan_id: Optional[str],
        start: date,
        end: date,
    ) -> Optional[HotelRate]:
        return _latest_start(
            rate
            for rate in self.hotel_rates
            if rate.is_active
            and rate.hotel_id == hotel_id
            and rate.room_type_id == room_type_id
            and rate.occupancy_type_id == occupancy_type_id
            and rate.meal_plan_id == meal_plan_id
            and date_ranges_overlap(rate.start_date, rate.end_date, start, end)
        )

    async def find_transport_rate(
        self,
        location_id: str,
        vehicle_type_id: str,
        start: date,
        end: date,
    ) -> Optional[TransportRate]:
        return _latest_start(
            rate
            for rate in self.transport_rates
            if rate.is_active
            and rate.location_id == location_id
            and rate.vehicle_type_id == vehicle_type_id
            and date_ranges_overlap(rate.start_date, rate.end_date, start, end)
        )

    async def list_room_types(self) -> list[CatalogEntry]:
        return [entry for entry in self.room_types if entry.is_active]

    async def list_occupancy_types(self) -> list[CatalogEntry]:
        return [entry for entry in self.occupancy_types if entry.is_active]

    async def list_meal_plans(self) -> list[MealPlanReference]:
        return [plan for plan in self.meal_plans if plan.is_active]

    async def hotel_name(self, hotel_id: str) -> Optional[str]:
        return next((hotel.name for hotel in self.hotels if hotel.id == hotel_id), None)

    async def reference_lookups(self) -> ReferenceLookups:
        return ReferenceLookups(
            hotels=self.hotels,
            room_types=self.room_types,
            occupancy_types=self.occupancy_types,
            meal_plans=self.meal_plans,
        )

    async def hotel_rates_for(self, combinations: Iterable[CombinationKey]) -> list[HotelRate]:
        wanted = set(combinations)
        return [rate for rate in self.hotel_rates if rate.combination_key in wanted]

"""Quote pricing: rooms and vehicles per itinerary day, rolled up with a markup."""

import asyncio
import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional, Union

from structlog import get_logger

from tourpricing.config import settings
from tourpricing.models.pricing import (
    AppliedMarkup,
    CostBreakdown,
    DayPricingResult,
    ItinerarySkeleton,
    PricingCalculationResult,
    PricingItinerary,
    RoomAllocation,
    RoomCostDetail,
    TransportCostDetail,
    TransportDetail,
)
from tourpricing.models.rates import HotelRate, TransportPricingType, TransportRate
from tourpricing.services.rate_catalog import RateCatalog
from tourpricing.utils.dates import DateInput, to_calendar_date

logger = get_logger(__name__)

ItineraryInput = Union[PricingItinerary, dict[str, Any]]
VariantAllocationMap = Optional[dict[str, dict[str, list[Any]]]]


class PricingInputError(ValueError):
    """Raised when trip dates or markup cannot be interpreted."""

    pass


def round_currency(amount: float) -> float:
    """Round half up to whole currency units (1124.5 -> 1125)."""
    return float(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _resolve_trip_date(value: DateInput, label: str) -> date:
    try:
        resolved = to_calendar_date(value)
    except ValueError as e:
        raise PricingInputError(f"Invalid {label}: {value!r}") from e
    if resolved is None:
        resolved = datetime.utcnow().date()
        logger.warning("Trip date missing, using today", field=label, fallback=resolved.isoformat())
    return resolved


def _resolve_markup(markup: Union[float, int, str, None]) -> float:
    if markup is None or markup == "":
        return float(settings.pricing.default_markup)
    try:
        value = float(markup)
    except (TypeError, ValueError) as e:
        raise PricingInputError(f"Invalid markup percentage: {markup!r}") from e
    if not math.isfinite(value):
        raise PricingInputError(f"Markup percentage must be finite: {markup!r}")
    return value


class _NameLookup:
    """Display names attached to lines when a caller asks for them."""

    def __init__(
        self,
        room_types: dict[str, str],
        occupancy_types: dict[str, str],
        meal_plans: dict[str, str],
        hotels: dict[str, Optional[str]],
    ):
        self.room_types = room_types
        self.occupancy_types = occupancy_types
        self.meal_plans = meal_plans
        self.hotels = hotels


class PricingCalculator:
    """Computes quote breakdowns against a RateCatalog.

    Every call is a pure function of its inputs and the catalog's rates: no
    state is kept between calls. Rate lookups run concurrently; results are
    reassembled in itinerary and allocation order.
    """

    def __init__(self, catalog: RateCatalog):
        self.catalog = catalog

    async def _load_names(self, itineraries: list[PricingItinerary]) -> _NameLookup:
        room_types, occupancy_types, meal_plans = await asyncio.gather(
            self.catalog.list_room_types(),
            self.catalog.list_occupancy_types(),
            self.catalog.list_meal_plans(),
        )
        hotel_ids = list(dict.fromkeys(it.hotel_id for it in itineraries if it.hotel_id))
        hotel_names = await asyncio.gather(*(self.catalog.hotel_name(hotel_id) for hotel_id in hotel_ids))
        return _NameLookup(
            room_types={entry.id: entry.name for entry in room_types},
            occupancy_types={entry.id: entry.name for entry in occupancy_types},
            meal_plans={plan.id: plan.name or plan.code for plan in meal_plans},
            hotels=dict(zip(hotel_ids, hotel_names)),
        )

    async def _lookup_rooms(
        self,
        itinerary: PricingItinerary,
        start: date,
        end: date,
    ) -> list[tuple[RoomAllocation, Optional[HotelRate]]]:
        if not itinerary.hotel_id or not itinerary.room_allocations:
            return []
        allocations = [room for room in itinerary.room_allocations if room.quantity > 0]
        rates = await asyncio.gather(
            *(
                self.catalog.find_hotel_rate(
                    itinerary.hotel_id,
                    room.room_type_id,
                    room.occupancy_type_id,
                    room.meal_plan_id,
                    start,
                    end,
                )
                for room in allocations
            )
        )
        return list(zip(allocations, rates))

    async def _lookup_transport(
        self,
        itinerary: PricingItinerary,
        start: date,
        end: date,
    ) -> list[tuple[TransportDetail, Optional[TransportRate]]]:
        details = [
            detail
            for detail in itinerary.transport_details
            if detail.vehicle_type_id and detail.quantity > 0
        ]
        rates = await asyncio.gather(
            *(
                self.catalog.find_transport_rate(
                    itinerary.location_id, detail.vehicle_type_id, start, end
                )
                for detail in details
            )
        )
        return list(zip(details, rates))

    async def _lookup_day(
        self,
        itinerary: PricingItinerary,
        start: date,
        end: date,
    ) -> tuple[
        list[tuple[RoomAllocation, Optional[HotelRate]]],
        list[tuple[TransportDetail, Optional[TransportRate]]],
    ]:
        return await asyncio.gather(
            self._lookup_rooms(itinerary, start, end),
            self._lookup_transport(itinerary, start, end),
        )

    @staticmethod
    def _room_line(
        allocation: RoomAllocation,
        rate: Optional[HotelRate],
        names: Optional[_NameLookup],
    ) -> RoomCostDetail:
        price = rate.price if rate else 0.0
        line = RoomCostDetail(
            room_type_id=allocation.room_type_id,
            occupancy_type_id=allocation.occupancy_type_id,
            meal_plan_id=allocation.meal_plan_id,
            quantity=allocation.quantity,
            price_per_night=price,
            total_cost=price * allocation.quantity,
            priced=rate is not None,
        )
        if names is not None:
            line.room_type_name = names.room_types.get(allocation.room_type_id)
            line.occupancy_type_name = names.occupancy_types.get(allocation.occupancy_type_id)
            if allocation.meal_plan_id:
                line.meal_plan_name = names.meal_plans.get(allocation.meal_plan_id)
        return line

    @staticmethod
    def _transport_line(
        day: int,
        detail: TransportDetail,
        rate: Optional[TransportRate],
        trip_charges: dict[str, int],
    ) -> TransportCostDetail:
        """Price one vehicle line.

        PerDay rates are charged every day they appear. PerTrip rates are
        charged once, on the first day (in itinerary order) that uses them.
        """
        if rate is None:
            return TransportCostDetail(
                day=day,
                vehicle_type_id=detail.vehicle_type_id,
                vehicle_type=detail.vehicle_type_id,
                quantity=detail.quantity,
                priced=False,
                description=f"{detail.vehicle_type_id} - No pricing available",
            )

        vehicle = rate.vehicle_type_name
        if rate.pricing_type == TransportPricingType.PER_TRIP:
            charged_on = trip_charges.get(rate.id)
            if charged_on is None:
                trip_charges[rate.id] = day
                cost = rate.price * detail.quantity
                description = f"{detail.quantity} x {vehicle} - One time"
            else:
                cost = 0.0
                description = f"{detail.quantity} x {vehicle} - One time (charged on day {charged_on})"
        else:
            cost = rate.price * detail.quantity
            description = f"{detail.quantity} x {vehicle} - Per day"

        return TransportCostDetail(
            day=day,
            vehicle_type_id=detail.vehicle_type_id,
            vehicle_type=vehicle,
            quantity=detail.quantity,
            price_per_unit=rate.price,
            pricing_type=rate.pricing_type.value,
            total_cost=cost,
            priced=True,
            description=description,
        )

    async def calculate_pricing(
        self,
        tour_starts_from: DateInput,
        tour_ends_on: DateInput,
        itineraries: Iterable[ItineraryInput],
        markup: Union[float, int, str, None] = None,
        include_names: Optional[bool] = None,
    ) -> PricingCalculationResult:
        """Calculate a quote breakdown for a trip.

        A room or vehicle line with no applicable rate contributes zero and is
        kept with priced=False so callers can flag it; it is not an error.

        Args:
            tour_starts_from: Trip start (date, datetime or ISO string; None = today)
            tour_ends_on: Trip end (date, datetime or ISO string; None = today)
            itineraries: Days to price, as PricingItinerary or camelCase dicts
            markup: Percentage added on top of the base price (default from settings)
            include_names: Attach room type/occupancy/meal plan/hotel names

        Returns:
            PricingCalculationResult

        Raises:
            PricingInputError: If the trip dates or markup cannot be interpreted
        """
        start = _resolve_trip_date(tour_starts_from, "tour_starts_from")
        end = _resolve_trip_date(tour_ends_on, "tour_ends_on")
        markup_percentage = _resolve_markup(markup)
        if include_names is None:
            include_names = settings.pricing.include_names

        days = [
            item if isinstance(item, PricingItinerary) else PricingItinerary.model_validate(item)
            for item in itineraries
        ]

        logger.info(
            "Calculating pricing",
            tour_starts_from=start.isoformat(),
            tour_ends_on=end.isoformat(),
            itinerary_count=len(days),
            markup=markup_percentage,
        )

        day_lookups = [self._lookup_day(day, start, end) for day in days]
        if include_names:
            names, *lookups = await asyncio.gather(self._load_names(days), *day_lookups)
        else:
            names = None
            lookups = await asyncio.gather(*day_lookups)

        result = PricingCalculationResult()
        trip_charges: dict[str, int] = {}

        for itinerary, (room_lookups, transport_lookups) in zip(days, lookups):
            day_result = DayPricingResult(day=itinerary.day_number)
            if names is not None and itinerary.hotel_id:
                day_result.hotel_name = names.hotels.get(itinerary.hotel_id)

            for allocation, rate in room_lookups:
                line = self._room_line(allocation, rate, names)
                day_result.room_breakdown.append(line)
                day_result.accommodation_cost += line.total_cost

            for detail, rate in transport_lookups:
                line = self._transport_line(itinerary.day_number, detail, rate, trip_charges)
                day_result.transport_cost += line.total_cost
                result.transport_details.append(line)

            day_result.total_cost = day_result.accommodation_cost + day_result.transport_cost
            result.breakdown.accommodation += day_result.accommodation_cost
            result.breakdown.transport += day_result.transport_cost
            result.itinerary_breakdown.append(day_result)

        base_price = result.breakdown.accommodation + result.breakdown.transport
        markup_amount = base_price * (markup_percentage / 100)

        result.base_price = base_price
        result.applied_markup = AppliedMarkup(percentage=markup_percentage, amount=markup_amount)
        result.total_cost = round_currency(base_price + markup_amount)

        logger.info(
            "Pricing calculated",
            itinerary_count=len(days),
            accommodation=result.breakdown.accommodation,
            transport=result.breakdown.transport,
            base_price=base_price,
            total_cost=result.total_cost,
            unpriced_lines=result.unpriced_lines,
        )

        return result

    async def calculate_variant_pricing(
        self,
        variant_id: str,
        variant_room_allocations: VariantAllocationMap,
        variant_transport_details: VariantAllocationMap,
        itineraries: Iterable[Union[ItinerarySkeleton, dict[str, Any]]],
        tour_starts_from: DateInput,
        tour_ends_on: DateInput,
        markup: Union[float, int, str, None] = None,
        include_names: bool = True,
    ) -> PricingCalculationResult:
        """Price one package variant built on a shared itinerary skeleton.

        Allocation maps are shaped {variant_id: {itinerary_key: [...]}}, where
        itinerary_key is the itinerary id or "day-<dayNumber>".

        Args:
            variant_id: Variant to price
            variant_room_allocations: Room allocations per variant and itinerary
            variant_transport_details: Transport details per variant and itinerary
            itineraries: Shared day skeleton (id, locationId, dayNumber, hotelId)
            tour_starts_from: Trip start
            tour_ends_on: Trip end
            markup: Percentage markup
            include_names: Attach display names (on by default for variant comparisons)

        Returns:
            PricingCalculationResult for the variant
        """
        variant_rooms = (variant_room_allocations or {}).get(variant_id) or {}
        variant_transport = (variant_transport_details or {}).get(variant_id) or {}

        pricing_itineraries = []
        for item in itineraries:
            skeleton = item if isinstance(item, ItinerarySkeleton) else ItinerarySkeleton.model_validate(item)
            key = skeleton.variant_key
            pricing_itineraries.append(
                PricingItinerary(
                    location_id=skeleton.location_id,
                    day_number=skeleton.day_number,
                    hotel_id=skeleton.hotel_id,
                    room_allocations=[
                        RoomAllocation.model_validate(room) for room in variant_rooms.get(key) or []
                    ],
                    transport_details=[
                        TransportDetail.model_validate(detail)
                        for detail in variant_transport.get(key) or []
                    ],
                )
            )

        logger.info(
            "Calculating variant pricing",
            variant_id=variant_id,
            itinerary_count=len(pricing_itineraries),
        )

        return await self.calculate_pricing(
            tour_starts_from=tour_starts_from,
            tour_ends_on=tour_ends_on,
            itineraries=pricing_itineraries,
            markup=markup,
            include_names=include_names,
        )


async def calculate_pricing(
    catalog: RateCatalog,
    tour_starts_from: DateInput,
    tour_ends_on: DateInput,
    itineraries: Iterable[ItineraryInput],
    markup: Union[float, int, str, None] = None,
    include_names: Optional[bool] = None,
) -> PricingCalculationResult:
    """Calculate a quote breakdown; see PricingCalculator.calculate_pricing."""
    return await PricingCalculator(catalog).calculate_pricing(
        tour_starts_from, tour_ends_on, itineraries, markup=markup, include_names=include_names
    )


async def calculate_variant_pricing(
    catalog: RateCatalog,
    variant_id: str,
    variant_room_allocations: VariantAllocationMap,
    variant_transport_details: VariantAllocationMap,
    itineraries: Iterable[Union[ItinerarySkeleton, dict[str, Any]]],
    tour_starts_from: DateInput,
    tour_ends_on: DateInput,
    markup: Union[float, int, str, None] = None,
    include_names: bool = True,
) -> PricingCalculationResult:
    """Price one package variant; see PricingCalculator.calculate_variant_pricing."""
    return await PricingCalculator(catalog).calculate_variant_pricing(
        variant_id,
        variant_room_allocations,
        variant_transport_details,
        itineraries,
        tour_starts_from,
        tour_ends_on,
        markup=markup,
        include_names=include_names,
    )

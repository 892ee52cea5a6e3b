"""Data models for rate imports and quote pricing."""

from tourpricing.models.imports import (
    ImportRow,
    ParseError,
    ParseResult,
    ParseStats,
    PreparedRow,
    ResolutionResult,
)
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
from tourpricing.models.rates import (
    CatalogEntry,
    HotelRate,
    HotelReference,
    MealPlanReference,
    ReferenceLookups,
    TransportPricingType,
    TransportRate,
)

__all__ = [
    "ImportRow",
    "ParseError",
    "ParseResult",
    "ParseStats",
    "PreparedRow",
    "ResolutionResult",
    "AppliedMarkup",
    "CostBreakdown",
    "DayPricingResult",
    "ItinerarySkeleton",
    "PricingCalculationResult",
    "PricingItinerary",
    "RoomAllocation",
    "RoomCostDetail",
    "TransportCostDetail",
    "TransportDetail",
    "CatalogEntry",
    "HotelRate",
    "HotelReference",
    "MealPlanReference",
    "ReferenceLookups",
    "TransportPricingType",
    "TransportRate",
]

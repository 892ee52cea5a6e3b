"""Service layer: pricing, rate catalog, policy defaults and imports."""

from tourpricing.services.import_orchestrator import (
    HotelPricingImportOrchestrator,
    OrchestrationError,
)
from tourpricing.services.policy_defaults import PolicyResolver, parse_policy_field
from tourpricing.services.pricing_calculator import (
    PricingCalculator,
    PricingInputError,
    calculate_pricing,
    calculate_variant_pricing,
)
from tourpricing.services.rate_catalog import InMemoryRateCatalog, RateCatalog

__all__ = [
    "HotelPricingImportOrchestrator",
    "OrchestrationError",
    "PolicyResolver",
    "parse_policy_field",
    "PricingCalculator",
    "PricingInputError",
    "calculate_pricing",
    "calculate_variant_pricing",
    "InMemoryRateCatalog",
    "RateCatalog",
]

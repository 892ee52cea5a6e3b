"""Data transformation package."""

from tourpricing.transformers.hotel_pricing_import import (
    HotelPricingImportTransformer,
    WorkbookParseError,
    parse_hotel_pricing_workbook,
)
from tourpricing.transformers.reference_resolver import ReferenceResolver

__all__ = [
    "HotelPricingImportTransformer",
    "ReferenceResolver",
    "WorkbookParseError",
    "parse_hotel_pricing_workbook",
]

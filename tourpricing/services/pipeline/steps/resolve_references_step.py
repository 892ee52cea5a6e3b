"""Step to resolve workbook names to catalog ids."""

from tourpricing.services.pipeline import ImportContext, PipelineStep
from tourpricing.services.rate_catalog import RateCatalog
from tourpricing.transformers import ReferenceResolver


class ResolveReferencesStep(PipelineStep):
    """Resolve hotels, room types, occupancy types and meal plans against the catalog."""

    def __init__(self, catalog: RateCatalog):
        super().__init__("ResolveReferences")
        self.catalog = catalog

    async def execute(self, context: ImportContext) -> bool:
        resolver = ReferenceResolver(await self.catalog.reference_lookups())
        resolution = resolver.prepare(context.parse_result.rows)

        combinations = {row.combination_key for row in resolution.prepared}
        if combinations:
            existing = await self.catalog.hotel_rates_for(combinations)
            stored_overlaps = resolver.existing_overlap_warnings(resolution.prepared, existing)
            resolution.warnings = list(dict.fromkeys([*resolution.warnings, *stored_overlaps]))

        context.resolution = resolution
        context.stats["resolution"] = {
            "prepared": len(resolution.prepared),
            "errors": len(resolution.errors),
            "warnings": len(resolution.warnings),
        }

        if resolution.errors:
            context.add_error(
                self.name,
                f"{len(resolution.errors)} row(s) reference unknown or duplicate data",
            )
            return False

        return True

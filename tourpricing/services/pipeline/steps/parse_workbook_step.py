"""Step to parse the workbook into validated rows."""

from tourpricing.services.pipeline import ImportContext, PipelineStep
from tourpricing.transformers import WorkbookParseError, parse_hotel_pricing_workbook


class ParseWorkbookStep(PipelineStep):
    """Parse the fetched workbook; any row error fails the import."""

    def __init__(self):
        super().__init__("ParseWorkbook")

    async def execute(self, context: ImportContext) -> bool:
        try:
            context.parse_result = parse_hotel_pricing_workbook(
                context.workbook, context.file_name
            )
        except WorkbookParseError as e:
            context.add_error(self.name, str(e))
            return False

        result = context.parse_result
        context.stats["parse"] = result.stats.model_dump(mode="json")

        if result.has_errors:
            context.add_error(
                self.name,
                f"Workbook has {len(result.errors)} invalid row(s); nothing was imported",
            )
            return False

        if not result.rows:
            context.add_error(self.name, "No valid rows found in uploaded file")
            return False

        return True

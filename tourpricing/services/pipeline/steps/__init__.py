"""Rate import pipeline steps."""

from .fetch_workbook_step import FetchWorkbookStep
from .parse_workbook_step import ParseWorkbookStep
from .resolve_references_step import ResolveReferencesStep
from .upload_report_step import UploadReportStep

__all__ = [
    "FetchWorkbookStep",
    "ParseWorkbookStep",
    "ResolveReferencesStep",
    "UploadReportStep",
]

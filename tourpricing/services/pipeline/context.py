"""Import context for sharing data between steps."""

from datetime import datetime
from typing import Any, Optional

from tourpricing.models.imports import ParseError, ParseResult, ResolutionResult


class ImportContext:
    """Context object passed to each import step.

    Accumulates the fetched workbook, parse report and resolution result as
    the pipeline progresses.
    """

    def __init__(self, job_id: str, source: str):
        """Initialize import context.

        Args:
            job_id: Identifier of this import run
            source: Local path or s3://bucket/key of the workbook
        """
        self.job_id = job_id
        self.source = source
        self.start_time = datetime.utcnow()

        # Fetched workbook
        self.file_name: Optional[str] = None
        self.workbook: Optional[bytes] = None

        # Parse and resolution output
        self.parse_result: Optional[ParseResult] = None
        self.resolution: Optional[ResolutionResult] = None

        # S3 upload results
        self.s3_uploads: dict[str, dict[str, str]] = {}

        # Processing statistics
        self.stats: dict[str, Any] = {}

        # Step failures
        self.errors: list[dict[str, str]] = []

        # Success flag
        self.success: bool = False

    def add_error(self, step_name: str, error_message: str) -> None:
        """Add a step failure to the context.

        Args:
            step_name: Name of the step where error occurred
            error_message: Error message
        """
        self.errors.append({
            "step": step_name,
            "message": error_message,
            "timestamp": datetime.utcnow().isoformat(),
        })

    def add_s3_upload(self, data_type: str, upload_result: dict[str, str]) -> None:
        self.s3_uploads[data_type] = upload_result

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def row_errors(self) -> list[ParseError]:
        """Row-level errors from parsing and reference resolution."""
        errors: list[ParseError] = []
        if self.parse_result is not None:
            errors.extend(self.parse_result.errors)
        if self.resolution is not None:
            errors.extend(self.resolution.errors)
        return errors

    @property
    def warnings(self) -> list[str]:
        warnings: list[str] = []
        if self.parse_result is not None:
            warnings.extend(self.parse_result.warnings)
        if self.resolution is not None:
            warnings.extend(self.resolution.warnings)
        return warnings

    def get_results(self) -> dict[str, Any]:
        """Get final results dictionary.

        Returns:
            Dictionary with job summary, row errors, warnings and statistics
        """
        end_time = datetime.utcnow()
        duration = (end_time - self.start_time).total_seconds()

        summary: dict[str, Any] = {
            "sheet_name": None,
            "processed": 0,
            "skipped_empty_rows": 0,
            "file_name": self.file_name,
        }
        if self.parse_result is not None:
            summary["sheet_name"] = self.parse_result.stats.sheet_name
            summary["skipped_empty_rows"] = self.parse_result.stats.skipped_empty_rows
            summary["processed"] = len(self.parse_result.rows)
        if self.resolution is not None:
            summary["processed"] = len(self.resolution.prepared)

        return {
            "job_id": self.job_id,
            "source": self.source,
            "success": self.success,
            "summary": summary,
            "errors": [error.model_dump(mode="json") for error in self.row_errors],
            "step_errors": self.errors,
            "warnings": self.warnings,
            "stats": self.stats,
            "s3_uploads": self.s3_uploads,
            "start_time": self.start_time.isoformat(),
            "end_time": end_time.isoformat(),
            "duration_seconds": duration,
        }

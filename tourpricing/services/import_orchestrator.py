"""Orchestrator for hotel rate workbook imports."""

import uuid
from typing import Any, Optional

from structlog import get_logger

from tourpricing.aws import S3Manager
from tourpricing.config.logging import bind_job
from tourpricing.services.pipeline import ImportContext, Pipeline
from tourpricing.services.pipeline.steps import (
    FetchWorkbookStep,
    ParseWorkbookStep,
    ResolveReferencesStep,
    UploadReportStep,
)
from tourpricing.services.rate_catalog import RateCatalog

logger = get_logger(__name__)


class OrchestrationError(Exception):
    """Raised when an import cannot be set up."""

    pass


class HotelPricingImportOrchestrator:
    """Runs the fetch, parse, resolve and report steps for one workbook."""

    def __init__(self, s3_manager: Optional[S3Manager] = None):
        """Initialize the orchestrator.

        Args:
            s3_manager: S3 manager for s3:// sources and report uploads. Created
                lazily from settings when an S3 source is imported.
        """
        self.s3_manager = s3_manager

    def _s3_for(self, source: str) -> Optional[S3Manager]:
        if self.s3_manager is None and source.startswith("s3://"):
            self.s3_manager = S3Manager()
        return self.s3_manager

    def build_pipeline(self, source: str, catalog: RateCatalog) -> Pipeline:
        s3_manager = self._s3_for(source)
        return Pipeline(
            name="hotel-pricing-import",
            steps=[
                FetchWorkbookStep(s3_manager),
                ParseWorkbookStep(),
                ResolveReferencesStep(catalog),
                UploadReportStep(s3_manager),
            ],
        )

    async def run_import(
        self,
        source: str,
        catalog: RateCatalog,
        job_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """Import one workbook and return the job report.

        Args:
            source: Local path or s3://bucket/key
            catalog: Reference data and stored rates to resolve against
            job_id: Optional identifier (generated when omitted)

        Returns:
            Report with job_id, source, success, summary, errors, warnings,
            stats and duration_seconds

        Raises:
            OrchestrationError: If source is empty
        """
        if not source or not source.strip():
            raise OrchestrationError("Import source is required")

        job_id = job_id or uuid.uuid4().hex[:12]
        logger.info("Starting rate import", job_id=job_id, source=source)

        context = ImportContext(job_id=job_id, source=source.strip())
        pipeline = self.build_pipeline(context.source, catalog)
        with bind_job(job_id):
            await pipeline.execute(context)

        results = context.get_results()
        logger.info(
            "Rate import finished",
            job_id=job_id,
            success=results["success"],
            processed=results["summary"]["processed"],
            error_count=len(results["errors"]),
            warning_count=len(results["warnings"]),
        )
        return results

"""Step to store the import report in S3."""

import asyncio
from typing import Optional

from tourpricing.aws import S3Manager
from tourpricing.config import settings
from tourpricing.services.pipeline import ImportContext, PipelineStep


class UploadReportStep(PipelineStep):
    """Upload the import report for audit.

    Optional: the import outcome stands even if the upload fails.
    """

    required = False

    def __init__(self, s3_manager: Optional[S3Manager] = None):
        super().__init__("UploadReport")
        self.s3_manager = s3_manager

    def skip_reason(self, context: ImportContext) -> Optional[str]:
        if settings.dry_run:
            return "dry run"
        if self.s3_manager is None:
            return "no S3 manager for a local source"
        if not settings.aws.report_bucket:
            return "no report bucket configured"
        return None

    async def execute(self, context: ImportContext) -> bool:
        report = context.get_results()
        upload = await asyncio.to_thread(self.s3_manager.upload_report, context.job_id, report)
        context.add_s3_upload("report", upload)
        return True

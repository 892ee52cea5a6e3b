"""Step to fetch the uploaded workbook."""

import asyncio
from pathlib import Path
from typing import Optional

from tourpricing.aws import S3Manager, parse_s3_uri
from tourpricing.config import settings
from tourpricing.services.pipeline import ImportContext, PipelineStep


class FetchWorkbookStep(PipelineStep):
    """Read workbook bytes from a local path or an s3://bucket/key URI."""

    def __init__(self, s3_manager: Optional[S3Manager] = None):
        """Initialize the step.

        Args:
            s3_manager: S3 manager, required only for s3:// sources
        """
        super().__init__("FetchWorkbook")
        self.s3_manager = s3_manager

    async def execute(self, context: ImportContext) -> bool:
        if context.source.startswith("s3://"):
            if self.s3_manager is None:
                context.add_error(self.name, "S3 source given but no S3 manager configured")
                return False
            bucket, key = parse_s3_uri(context.source)
            data = await asyncio.to_thread(self.s3_manager.get_object_bytes, bucket, key)
            context.file_name = key.rsplit("/", 1)[-1]
        else:
            path = Path(context.source)
            if not path.is_file():
                context.add_error(self.name, f"Workbook not found: {context.source}")
                return False
            data = await asyncio.to_thread(path.read_bytes)
            context.file_name = path.name

        max_size = settings.imports.max_file_size_bytes
        if not data:
            context.add_error(self.name, "Uploaded file is empty")
            return False
        if len(data) > max_size:
            context.add_error(
                self.name,
                f"Uploaded file is {len(data)} bytes, limit is {max_size} bytes",
            )
            return False

        context.workbook = data
        context.stats["workbook"] = {"file_name": context.file_name, "size_bytes": len(data)}

        self.logger.info(
            "Fetched workbook",
            job_id=context.job_id,
            file_name=context.file_name,
            size_bytes=len(data),
        )
        return True

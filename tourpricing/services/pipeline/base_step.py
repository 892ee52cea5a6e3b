"""Base class for import pipeline steps."""

import time
from abc import ABC, abstractmethod
from typing import Optional

from structlog import get_logger

logger = get_logger(__name__)


class PipelineStep(ABC):
    """One stage of a workbook import.

    Subclasses implement ``execute``; ``run`` wraps it with skip handling,
    timing and exception capture so a raising step is recorded on the
    context as a step error instead of aborting the job.
    """

    required = True

    def __init__(self, name: str | None = None):
        self.name = name or self.__class__.__name__
        self.logger = logger.bind(step=self.name)

    @abstractmethod
    async def execute(self, context: "ImportContext") -> bool:
        """Do the step's work against the shared context.

        Returns:
            True if the step succeeded
        """

    def skip_reason(self, context: "ImportContext") -> Optional[str]:
        """Return why this step should not run for the job, or None to run it."""
        return None

    async def run(self, context: "ImportContext") -> bool:
        """Run the step and record its outcome under stats["steps"].

        Returns:
            True if the step succeeded or was skipped
        """
        reason = self.skip_reason(context)
        if reason:
            self.logger.info("Step skipped", job_id=context.job_id, reason=reason)
            self._record(context, "skipped", 0.0, reason=reason)
            return True

        started = time.perf_counter()
        try:
            success = await self.execute(context)
        except Exception as e:
            self.logger.error(
                "Step raised",
                job_id=context.job_id,
                error=str(e),
                exc_info=True,
            )
            context.add_error(self.name, str(e))
            success = False

        elapsed = time.perf_counter() - started
        status = "succeeded" if success else "failed"
        log = self.logger.info if success else self.logger.warning
        log("Step finished", job_id=context.job_id, status=status, duration_seconds=round(elapsed, 3))
        self._record(context, status, elapsed)
        return success

    def _record(self, context: "ImportContext", status: str, elapsed: float, **extra) -> None:
        context.stats.setdefault("steps", {})[self.name] = {
            "status": status,
            "duration_seconds": round(elapsed, 3),
            **extra,
        }

    def is_required(self) -> bool:
        """A failed required step stops the pipeline and fails the import."""
        return self.required

    def get_name(self) -> str:
        return self.name

"""Sequential executor for import steps."""

from structlog import get_logger

from .base_step import PipelineStep
from .context import ImportContext

logger = get_logger(__name__)


class Pipeline:
    """Runs steps in order over one ImportContext.

    A failed required step stops the run and fails the import. A failed
    optional step is recorded and the run continues.
    """

    def __init__(self, name: str, steps: list[PipelineStep]):
        self.name = name
        self.steps = steps
        self.logger = logger.bind(pipeline=name)

    async def execute(self, context: ImportContext) -> ImportContext:
        """Run every step until a required one fails.

        Args:
            context: Import context shared by the steps

        Returns:
            The same context, with success and stats["pipeline"] set
        """
        self.logger.info("Pipeline starting", job_id=context.job_id, steps=self.get_step_names())

        executed: list[str] = []
        failed: list[str] = []
        stopped_at = None

        for step in self.steps:
            step_name = step.get_name()
            executed.append(step_name)
            if await step.run(context):
                continue

            failed.append(step_name)
            if step.is_required():
                stopped_at = step_name
                self.logger.error("Required step failed, stopping", job_id=context.job_id, step=step_name)
                break
            self.logger.warning("Optional step failed", job_id=context.job_id, step=step_name)

        required = {step.get_name() for step in self.steps if step.is_required()}
        context.success = not any(error["step"] in required for error in context.errors) and stopped_at is None

        skipped = [
            name
            for name, outcome in context.stats.get("steps", {}).items()
            if outcome.get("status") == "skipped"
        ]
        context.stats["pipeline"] = {
            "name": self.name,
            "total_steps": len(self.steps),
            "executed_steps": len(executed),
            "successful_steps": len(executed) - len(failed) - len(skipped),
            "skipped_steps": len(skipped),
            "failed_steps": len(failed),
            "stopped_at": stopped_at,
        }

        self.logger.info(
            "Pipeline completed",
            job_id=context.job_id,
            success=context.success,
            failed_steps=len(failed),
            stopped_at=stopped_at,
        )
        return context

    def get_step_names(self) -> list[str]:
        return [step.get_name() for step in self.steps]

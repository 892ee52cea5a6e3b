"""Pipeline infrastructure for rate import orchestration."""

from .base_step import PipelineStep
from .context import ImportContext
from .pipeline import Pipeline

__all__ = [
    "PipelineStep",
    "ImportContext",
    "Pipeline",
]

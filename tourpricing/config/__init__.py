"""Configuration package."""

from tourpricing.config.logging import bind_job, configure_logging, get_logger
from tourpricing.config.settings import Settings, settings

__all__ = ["settings", "Settings", "bind_job", "configure_logging", "get_logger"]

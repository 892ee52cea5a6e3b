"""Structured logging configuration using structlog."""
import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog
from pythonjsonlogger import jsonlogger

from tourpricing.config.settings import settings


def add_job_prefix(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Prefix the event with [job_id] or [job_id row N].

    Runs before the renderer so the prefix shows in JSON and console output
    alike. Row numbers without a job id are left as plain keys.
    """
    job_id = event_dict.get("job_id")
    if not job_id:
        return event_dict

    row_number = event_dict.get("row_number")
    prefix = f"[{job_id} row {row_number}]" if row_number is not None else f"[{job_id}]"
    event_dict["event"] = f"{prefix} {event_dict.get('event', '')}"
    return event_dict


@contextmanager
def bind_job(job_id: str) -> Iterator[None]:
    """Attach job_id to every log event emitted inside the block."""
    with structlog.contextvars.bound_contextvars(job_id=job_id):
        yield


def _build_handler(level: int) -> logging.Handler:
    stream = sys.stdout if settings.logging.stream == "stdout" else sys.stderr
    handler = logging.StreamHandler(stream)
    if settings.logging.format == "json":
        handler.setFormatter(jsonlogger.JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s %(message)s"))
    handler.setLevel(level)
    return handler


def configure_logging() -> None:
    """Configure stdlib handlers and the structlog processor chain."""
    log_level = getattr(logging, settings.logging.level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(_build_handler(log_level))

    # openpyxl warns about unsupported extensions on every template upload
    for noisy in ("botocore", "boto3", "urllib3", "openpyxl"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.logging.format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_job_prefix,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound to the given module name."""
    return structlog.get_logger(name)

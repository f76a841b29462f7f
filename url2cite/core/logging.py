"""Structured logging for url2cite.

Console output while developing, JSON lines in production/staging. Every
entry carries the service name and environment.

Log output never goes to stdout: as a pandoc filter, stdout carries the
document. Library callers that never call configure_logging() get the same
stderr setup the first time a Url2Cite is created (see ensure_logging()).
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import Processor

from url2cite.core.config import get_settings


# Third-party loggers that are only interesting when something breaks
QUIET_LOGGERS = ("httpx", "httpcore")


def add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add service name and environment to every log entry."""
    settings = get_settings()
    event_dict["service"] = settings.service_name
    event_dict["environment"] = settings.environment
    return event_dict


def _build_processors(use_json: bool, stream: TextIO) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_service_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if use_json:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))
    return processors


def configure_logging(stream: TextIO | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        stream: Where log lines are written. Defaults to sys.stderr.
    """
    settings = get_settings()
    stream = stream or sys.stderr
    level = logging.getLevelName(settings.log_level.upper())

    structlog.configure(
        processors=_build_processors(
            settings.environment in ("production", "staging"), stream
        ),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=stream, level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def ensure_logging() -> None:
    """Configure logging unless the host application already did."""
    if not structlog.is_configured():
        configure_logging()


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Example:
        ```python
        from url2cite.core.logging import get_logger

        logger = get_logger(__name__)
        logger.info("fetching citation from url", url="https://example.com")
        ```
    """
    return structlog.get_logger(name)

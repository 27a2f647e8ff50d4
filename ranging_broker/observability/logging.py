"""
Logging configuration for the ranging broker.

Uses structlog for structured JSON logging in production.
"""

import logging
import sys
from typing import Any

import structlog

from ..config import settings


def configure_logging(log_level: str | None = None) -> None:
    """
    Configure structured logging for the application.

    Uses structlog with JSON output for production, pretty output for development.

    Args:
        log_level: Override for the configured log level
    """
    level = log_level or settings.log_level
    is_dev = level == "DEBUG"

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ExtraAdder(),
    ]

    if is_dev:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
    )

    # Per-request logs from the HTTP stack
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger = structlog.get_logger()
    logger.info(
        "Logging configured",
        level=level,
        format="json" if not is_dev else "console",
    )

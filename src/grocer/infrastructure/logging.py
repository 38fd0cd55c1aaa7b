"""Logging configuration.

structlog on top of the standard library: key-value events from every
module, JSON lines in production, a readable console format otherwise.
Log output goes to stderr so it never mixes with CLI output.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from grocer.infrastructure.config import Settings

LEVEL_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


def get_log_level(settings: Settings) -> str:
    """Explicit LOG_LEVEL wins, otherwise derive it from the environment."""
    return (settings.log_level or LEVEL_BY_ENV.get(settings.env, "INFO")).upper()


def setup_stdlib_logging(settings: Settings) -> None:
    log_level = get_log_level(settings)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    root_logger.addHandler(handler)

    # SQL echo is controlled by GROCER_DB_ECHO, not by the app level.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def setup_structlog(settings: Settings) -> None:
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.contextvars.merge_contextvars,
    ]

    if settings.env in ("production", "staging"):
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(settings: Settings) -> None:
    """Configure all logging for the process."""
    setup_stdlib_logging(settings)
    setup_structlog(settings)


def bind_request_context(**kwargs: Any) -> None:
    """Attach key-values (request id, user id) to every following event."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()

"""Structured logging for the rewards service.

Modules log through ``get_logger(__name__)`` with a snake_case event name and
keyword context, e.g. ``logger.info("spin_recorded", account_id=1, amount=50)``.
"""

import logging
import sys

import structlog

from spinrewards.settings import settings


def configure_logging() -> None:
    """Set up structlog and align stdlib logging with it.

    ``LOG_FORMAT=json`` emits one JSON object per line for log shippers; any
    other value renders readable console output.
    """
    level = logging.getLevelName(settings.log_level.upper())

    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
    ]
    if settings.log_format == "json":
        processors = shared + [
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared + [
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    # uvicorn, SQLAlchemy and slowapi log through the stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # Statement logging is noise below WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)

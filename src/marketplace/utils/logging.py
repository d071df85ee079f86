"""Logging configuration for the marketplace domain.

Every module logs through ``structlog.get_logger(__name__)`` with key-value
events. ``configure_logging`` wires the processors once per process;
``LOG_LEVEL`` picks the level and ``LOG_FORMAT=json`` switches to JSON lines.
"""

import logging
import os

import structlog

logger = structlog.get_logger(__name__)

# Suppress noisy library loggers
logging.getLogger("protean").setLevel(logging.WARNING)


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    renderer = (
        structlog.processors.JSONRenderer()
        if (fmt or os.environ.get("LOG_FORMAT", "console")).lower() == "json"
        else structlog.dev.ConsoleRenderer()
    )

    logging.basicConfig(level=numeric_level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=True,
    )
    logging.getLogger("protean").setLevel(logging.WARNING)

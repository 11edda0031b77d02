"""Structured logging setup.

Library code only calls ``structlog.get_logger()``; entrypoints call
``configure_logging()`` once to pick the level and renderer. Log lines go to
stderr so that command output on stdout stays machine readable.
"""

import logging
import os
import sys

import structlog

from component_txn.core.constants import LOG_LEVEL_ENV


def get_log_level() -> str:
    """Return the configured level name, defaulting to INFO."""
    level = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    if level not in logging.getLevelNamesMapping():
        return "INFO"
    return level


def configure_logging(level: str | None = None, json_format: bool = False) -> None:
    """Configure structlog.

    Args:
        level: Level name (None reads ``COMPONENT_TXN_LOG_LEVEL``)
        json_format: Render JSON lines instead of the console format
    """
    if level is None:
        level = get_log_level()

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[level.upper()]
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )

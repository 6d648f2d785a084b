"""
conveyor.core.logging_config - Structured Logging Setup
=======================================================

Every module logs through ``structlog.get_logger()`` and binds a
``component`` name. This module wires structlog's processor chain once, at
startup, so those events come out either as readable console lines (dev) or
as one JSON object per line (shipping to a log pipeline).

Usage:
    >>> from conveyor.core.logging_config import configure_logging
    >>> configure_logging(level="DEBUG", fmt="json")
"""

from __future__ import annotations

import logging

import structlog


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Minimum level name (DEBUG, INFO, ...).
        fmt: "console" or "json".
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(format="%(message)s", level=numeric_level)
    logging.getLogger().setLevel(numeric_level)

    renderer: structlog.typing.Processor
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )

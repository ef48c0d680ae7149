"""
Structured logging setup (structlog on top of stdlib logging).

Usage:
    from docsift.core.logging import get_logger, setup_logging

    setup_logging("DEBUG")        # once, at program start
    logger = get_logger(__name__)
    logger.info("Document started", document="cv.xlsx")
"""

from __future__ import annotations

import logging
import sys

import structlog

from docsift.core.config import settings


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Log level name.  Defaults to ``settings.LOG_LEVEL``.
        json_logs: Render JSON lines instead of the console format.
                   Defaults to ``settings.LOG_JSON``.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    if json_logs is None:
        json_logs = settings.LOG_JSON

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level_name, logging.INFO),
        force=True,
    )

    # ConsoleRenderer formats exceptions itself; JSON needs them pre-rendered.
    if json_logs:
        exc_processors = [structlog.processors.format_exc_info]
        renderer = structlog.processors.JSONRenderer()
    else:
        exc_processors = []
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *exc_processors,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)

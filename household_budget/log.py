"""Structured logging setup.

All modules log through structlog bound loggers obtained from
:func:`get_logger`.  Configuration happens lazily on first use so that
importing the package never touches global logging state twice.
"""

from __future__ import annotations

import logging
from typing import Optional

import structlog

from . import config

_configured = False


def configure_logging(level: Optional[str] = None, json: Optional[bool] = None) -> None:
    """Configure structlog and the stdlib root handler.

    Args:
        level: Log level name; defaults to ``config.LOG_LEVEL``
        json: Render JSON lines instead of console output; defaults to ``config.LOG_JSON``
    """
    global _configured

    level_name = (level or config.LOG_LEVEL).upper()
    render_json = config.LOG_JSON if json is None else json

    logging.basicConfig(format="%(message)s", level=getattr(logging, level_name, logging.INFO))
    logging.getLogger().setLevel(getattr(logging, level_name, logging.INFO))

    renderer = (
        structlog.processors.JSONRenderer()
        if render_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str):
    """Return a bound logger, configuring logging on first call."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)

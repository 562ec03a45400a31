"""Structured logging setup.

expectant logs through structlog and never configures it on import. Call
``configure_logging()`` from an application entry point to get the same
processor chain the library is developed with.
"""

import logging
from typing import Optional

import structlog

from expectant.config import get_settings
from expectant.errors import InvalidConfiguration


def configure_logging(debug: Optional[bool] = None, level: Optional[str] = None) -> None:
    """Install the structlog processor chain.

    Args:
        debug: Console renderer when True, JSON lines otherwise (default: settings.DEBUG)
        level: Minimum level name, e.g. "debug" (default: settings.LOG_LEVEL)

    Raises:
        InvalidConfiguration: If the level name is not a standard logging level.
    """
    settings = get_settings()
    debug = settings.DEBUG if debug is None else debug
    level_name = (level or settings.LOG_LEVEL).upper()
    min_level = logging.getLevelName(level_name)
    if not isinstance(min_level, int):
        raise InvalidConfiguration(f"Unknown log level: {level_name!r}")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
    )

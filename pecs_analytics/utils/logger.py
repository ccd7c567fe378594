"""
Logging helpers.

Modules obtain loggers through get_logger(__name__); applications call
configure_logging() once at startup to apply config.logging settings.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import config

PACKAGE_LOGGER = "pecs_analytics"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the package namespace."""
    return logging.getLogger(name)


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Args:
        level: Log level name (default: config.logging.log_level)
        fmt: Log format (default: config.logging.log_format)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel((level or config.logging.log_level).upper())

    # Idempotent: reuse our handler on repeated calls
    handler = next(
        (h for h in logger.handlers if getattr(h, "_pecs_handler", False)), None
    )
    if handler is None:
        handler = logging.StreamHandler()
        handler._pecs_handler = True
        logger.addHandler(handler)

    handler.setFormatter(logging.Formatter(fmt or config.logging.log_format))
    return logger

"""Logging helpers for TidBum."""
import logging
from typing import Optional

from .config import LOG_LEVEL

_LOGGER: Optional[logging.Logger] = None


def get_logger() -> logging.Logger:
    """Return the package logger, configuring it on first use.

    Modules log through ``logging.getLogger(__name__)``; records propagate
    up to the ``tidbum`` logger configured here.
    """
    global _LOGGER
    if _LOGGER is None:
        _LOGGER = logging.getLogger("tidbum")
        if not _LOGGER.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            handler.setFormatter(formatter)
            _LOGGER.addHandler(handler)
        _LOGGER.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    return _LOGGER

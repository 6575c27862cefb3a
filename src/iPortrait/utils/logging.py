"""Logging helpers for iPortrait.

Modules log through ``logging.getLogger(__name__)``; this module only sets up
the shared ``iPortrait`` logger they propagate to.  The level defaults to
``INFO`` and can be raised to ``DEBUG`` with ``IPORTRAIT_LOG_LEVEL=DEBUG`` to
see per-stage render timings.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

LOGGER_NAME = "iPortrait"
LEVEL_ENV_VAR = "IPORTRAIT_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LOGGER: Optional[logging.Logger] = None


def _resolve_level(default: int = logging.INFO) -> int:
    name = os.environ.get(LEVEL_ENV_VAR, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the package logger, or its child *name*, configuring it once."""

    global _LOGGER
    if _LOGGER is None:
        _LOGGER = logging.getLogger(LOGGER_NAME)
        if not _LOGGER.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            _LOGGER.addHandler(handler)
        _LOGGER.setLevel(_resolve_level())
    if name:
        return _LOGGER.getChild(name)
    return _LOGGER


logger = get_logger()

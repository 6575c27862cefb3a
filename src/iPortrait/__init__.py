"""Core of the iPortrait profile photo editor."""

from __future__ import annotations

from .utils.logging import logger

__version__ = "0.1.0"

__all__ = ["__version__", "logger"]

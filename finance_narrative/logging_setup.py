"""Centralized logging configuration for the ``finance_narrative`` package.

Entry points (the Streamlit app, scripts) call :func:`configure_logging`
once at startup.  Library modules only call ``get_logger(__name__)`` and
never attach handlers of their own.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "finance_narrative"
_LEVEL_ENV = "FINNARR_LOG_LEVEL"
_CONFIGURED = False


def _level_from_name(value: int | str | None) -> int | None:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip().upper()
        if text.isdigit():
            return int(text)
        numeric = getattr(logging, text, None)
        if isinstance(numeric, int):
            return numeric
    return None


def _parse_level(level: int | str | None) -> int:
    """Explicit level first, then ``FINNARR_LOG_LEVEL``, then ``INFO``."""
    resolved = _level_from_name(level)
    if resolved is None:
        resolved = _level_from_name(os.getenv(_LEVEL_ENV))
    return logging.INFO if resolved is None else resolved


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Attach a single ``StreamHandler`` to the package logger, once.

    ``level`` defaults to the ``FINNARR_LOG_LEVEL`` environment variable,
    then ``INFO``.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s"))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger, keeping the package quiet until it is configured."""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)

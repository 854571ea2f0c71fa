"""Diagnostic logging for pie.

User-facing progress goes through rich consoles. Everything here is for
diagnosing pie itself: a ``pie`` namespace logger with one stderr handler,
quiet (WARNING) unless PIE_DEBUG=1|true|yes or ``pie --debug`` is given.

Usage:
    from pie.logging import get_logger
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
import os
import sys

NAMESPACE = "pie"
DEBUG_ENV = "PIE_DEBUG"

_initialized = False

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_FORMAT_DEBUG = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _get_log_level() -> int:
    """Determine log level from environment."""
    if os.environ.get(DEBUG_ENV, "").lower() in ("1", "true", "yes"):
        return logging.DEBUG
    return logging.WARNING


def _apply_level(logger: logging.Logger, level: int) -> None:
    """Set level and matching format on the namespace logger and its handlers."""
    fmt = LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))


def _init_logging() -> None:
    """Attach the stderr handler to the ``pie`` logger (once)."""
    global _initialized
    if _initialized:
        return

    namespace = logging.getLogger(NAMESPACE)
    if not namespace.handlers:
        namespace.addHandler(logging.StreamHandler(sys.stderr))
    _apply_level(namespace, _get_log_level())

    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``pie`` namespace.

    Args:
        name: Module name (typically __name__).
    """
    _init_logging()

    if name != NAMESPACE and not name.startswith(f"{NAMESPACE}."):
        name = f"{NAMESPACE}.{name}"
    return logging.getLogger(name)


def set_debug(enabled: bool = True) -> None:
    """Switch the ``pie`` logger between DEBUG and WARNING (``--debug``)."""
    _apply_level(logging.getLogger(NAMESPACE), logging.DEBUG if enabled else logging.WARNING)

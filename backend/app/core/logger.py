"""
Custom logging configuration.

Responsibilities:
- Setup application logging
- Configure log levels and formats
- Output logs to console
"""

import logging
import sys

from app.core.config import settings

LOGGER_NAME = "weblarek"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logger(level: str = None) -> logging.Logger:
    """Configures the application logger. Safe to call more than once."""
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel((level or settings.LOG_LEVEL).upper())

    if not any(getattr(h, "_weblarek", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._weblarek = True
        root.addHandler(handler)

    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the application logger."""
    if name.startswith("app."):
        name = name[len("app."):]
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


logger = logging.getLogger(LOGGER_NAME)

# ladybug/core/logger.py
"""Package logger.

Exposes:
  LOGGER         — the ``ladybug`` logger every module logs through
  get_logger     — child loggers (``ladybug.loader``, ``ladybug.http`` …)
  configure      — set the level once at startup (``LOG_LEVEL`` env default)
"""

import logging
import os
import sys

LOGGER = logging.getLogger("ladybug")
LOGGER.setLevel(logging.INFO)

_handler = logging.StreamHandler(sys.stderr)
_handler.setFormatter(logging.Formatter("%(asctime)s %(name)s [%(process)d] %(levelname)-5s %(message)s"))
LOGGER.addHandler(_handler)
LOGGER.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger, e.g. ``get_logger("loader")``."""
    return LOGGER.getChild(name)


def configure(level: str | None = None) -> None:
    """Apply *level* (or ``LOG_LEVEL``) to the package logger."""
    level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    LOGGER.setLevel(getattr(logging, level, logging.INFO))


class QuietAccessFilter(logging.Filter):
    """Demote uvicorn access lines for polling endpoints to DEBUG."""

    def __init__(self, noisy_paths: tuple[str, ...]) -> None:
        super().__init__()
        self.noisy_paths = noisy_paths

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        if any(p in msg for p in self.noisy_paths):
            record.levelno = logging.DEBUG
            record.levelname = "DEBUG"
        return True

"""Logging configuration shared by every module of the service."""

import logging
import sys
from typing import Optional

from config.settings import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _resolve_level(level: Optional[str]) -> int:
    """Map a level name to a logging constant, falling back to INFO."""
    name = (level or settings.log_level).upper()
    return getattr(logging, name, logging.INFO)


def setup_logger(name: str = __name__, level: Optional[str] = None) -> logging.Logger:
    """Return a logger writing to stdout at the configured level.

    Calling it twice for the same name does not attach a second handler.
    """
    logger = logging.getLogger(name)
    resolved = _resolve_level(level)
    logger.setLevel(resolved)
    
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(resolved)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
    
    return logger

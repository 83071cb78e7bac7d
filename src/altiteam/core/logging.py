"""Logging configuration."""
import logging
import sys
from typing import Optional

from .config import get_config


_initialized = False


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure the ``altiteam`` logger once and return it.

    Every module logs through ``logging.getLogger(__name__)``, so handlers are
    attached only to the package root logger.
    """
    global _initialized

    logger = logging.getLogger("altiteam")

    if not _initialized:
        config = get_config()
        level_str = (level or config.logging.level or config.system.log_level).upper()
        logger.setLevel(getattr(logging, level_str, logging.INFO))
        logger.propagate = False

        logger.handlers.clear()

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            fmt=config.logging.format,
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(handler)

        _initialized = True

    return logger

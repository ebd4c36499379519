"""Centralized logging configuration for the syllabus pipeline."""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PACKAGE_LOGGER = "syllabus_ai"


def _resolve_level(level: Optional[str]) -> int:
    """Translate a level name into a logging constant.

    Falls back to the ``LOG_LEVEL`` environment variable and then INFO.
    Unknown names resolve to INFO rather than raising.
    """
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)
        level: Optional log level override (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    log_level = _resolve_level(level)
    logger.setLevel(log_level)

    # Avoid duplicate handlers when modules are re-imported in tests
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(
            logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
        )
        logger.addHandler(console_handler)

    return logger


def set_log_level(level: str) -> None:
    """Apply a log level to every logger already created under the package.

    Args:
        level: Level name, e.g. "DEBUG"
    """
    log_level = _resolve_level(level)
    for name, logger in logging.Logger.manager.loggerDict.items():
        if not isinstance(logger, logging.Logger):
            continue
        if name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}."):
            logger.setLevel(log_level)
            for handler in logger.handlers:
                handler.setLevel(log_level)

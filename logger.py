"""Logging configuration."""

import logging
import sys

_LOGGER_NAMES: set[str] = set()


def setup_logger(name: str = __name__, level: str = "INFO") -> logging.Logger:
    """Set up logger with a stdout handler."""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(getattr(logging, level.upper()))

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    _LOGGER_NAMES.add(name)
    return logger


def apply_level(level: str) -> None:
    """Change the level of every logger created through ``setup_logger``."""
    value = getattr(logging, level.upper())
    for name in _LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(value)
        for handler in logger.handlers:
            handler.setLevel(value)

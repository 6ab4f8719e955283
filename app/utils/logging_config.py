"""Logging setup shared by the API process and scripts."""

import logging
from os import environ

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str = "app", level: str | int | None = None) -> logging.Logger:
    """Configure the named logger with a single console handler.

    Args:
        name: Logger to configure, defaults to the application root logger
        level: Level name or number; falls back to the LOG_LEVEL env variable

    Returns:
        The configured logger
    """
    if level is None:
        level = environ.get("LOG_LEVEL", "INFO").upper()

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    return logger

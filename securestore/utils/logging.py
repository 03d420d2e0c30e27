"""Centralized logging configuration."""

import logging
import os
import sys
from typing import Optional

LOG_LEVEL_ENV = "SECURESTORE_LOG_LEVEL"

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
JSON_FORMAT = (
    '{"time": "%(asctime)s", "level": "%(levelname)s", '
    '"module": "%(name)s", "message": "%(message)s"}'
)


def setup_logging(
    level: Optional[str] = None,
    format_style: str = "standard",
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for the secure store.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Falls back to
            $SECURESTORE_LOG_LEVEL, then INFO.
        format_style: 'standard' for dev, 'json' for production
        log_file: Optional file path to write logs

    Returns:
        Root logger
    """
    level = level or os.environ.get(LOG_LEVEL_ENV, "INFO")
    fmt = JSON_FORMAT if format_style == "json" else STANDARD_FORMAT

    # Logs go to stderr so CLI output on stdout stays clean
    handlers = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=fmt,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )

    return logging.getLogger()


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Usage:
        from securestore.utils.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Stored secret '%s'", name)
    """
    return logging.getLogger(name)

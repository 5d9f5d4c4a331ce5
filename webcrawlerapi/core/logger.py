"""Logging setup for the WebCrawlerAPI client and CLI.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached by applications (the CLI does it through :func:`get_logger`).

Examples:
    >>> from webcrawlerapi.core.logger import get_logger
    >>> logger = get_logger("webcrawlerapi", log_level="DEBUG")
    >>> logger.debug("Polling job abc")
    2026-01-14 23:45:00,123 | DEBUG | webcrawlerapi | Polling job abc
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Human-readable log format with timestamp, level, module name, and message
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Rotating file handler limits (100MB max file size, 5 backup files)
MAX_LOG_SIZE_BYTES = 100 * 1024 * 1024
BACKUP_COUNT = 5


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Path | None = None,
) -> logging.Logger:
    """Create and configure a logger with a console and optional file handler.

    Args:
        name: Logger name, usually the package name so child module loggers
            inherit the handlers
        log_level: Logging level as string (DEBUG, INFO, WARNING, ERROR,
            CRITICAL)
        log_file: Optional path to a rotating log file. Parent directories
            are created automatically. No file handler when None.

    Returns:
        Configured logging.Logger. Calling again replaces the handlers.

    Raises:
        AttributeError: If log_level is not a valid logging level name.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Clear existing handlers to allow reconfiguration
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler writes to stderr so stdout stays clean for command output
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=MAX_LOG_SIZE_BYTES,
            backupCount=BACKUP_COUNT,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger

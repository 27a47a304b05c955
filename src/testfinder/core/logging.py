"""Logging configuration for testfinder.

This module provides logging setup using the Rich library for
console output with timestamps and source context.
"""

import logging
from typing import Optional

from rich.logging import RichHandler

# Module-level logger instance for testfinder
_logger: Optional[logging.Logger] = None

LOG_FORMAT = "%(message)s"
DATE_FORMAT = "[%X]"

LOGGER_NAME = "testfinder"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure the testfinder logger with a Rich handler.

    Args:
        verbose: If True, set log level to DEBUG for detailed output.
                 If False, set log level to WARNING to show only
                 warnings and errors.

    Returns:
        The configured ``testfinder`` logger. Module loggers created with
        ``logging.getLogger(__name__)`` inside the package propagate to it.

    Example:
        >>> logger = setup_logging(verbose=True)
        >>> logger.debug("Listing directory...")
    """
    global _logger

    level = logging.DEBUG if verbose else logging.WARNING

    rich_handler = RichHandler(
        level=level,
        show_time=True,
        show_level=True,
        show_path=True,
        rich_tracebacks=True,
        markup=False,
    )
    rich_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    logger.handlers.clear()
    logger.addHandler(rich_handler)

    # Prevent propagation to root logger to avoid duplicate messages
    logger.propagate = False

    _logger = logger
    return logger


def setup_logging_from_level(level_name: str) -> logging.Logger:
    """Configure logging from a level name such as ``"info"``.

    Used when the level comes from configuration rather than a verbose flag.

    Args:
        level_name: One of debug, info, warning, error or critical.

    Returns:
        The configured testfinder logger.
    """
    logger = setup_logging(verbose=level_name.lower() == "debug")
    level = logging.getLevelName(level_name.upper())
    if isinstance(level, int):
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
    return logger


def get_logger() -> logging.Logger:
    """Get the testfinder logger instance.

    Returns the previously configured logger, or sets up a default
    logger if setup_logging() has not been called.
    """
    global _logger

    if _logger is None:
        _logger = setup_logging(verbose=False)

    return _logger

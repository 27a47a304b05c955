"""Tests for the testfinder logging setup."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from testfinder.core.logging import LOGGER_NAME, get_logger, setup_logging, setup_logging_from_level


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_default_level_is_warning(self) -> None:
        """Test that non-verbose logging only shows warnings and errors."""
        logger = setup_logging()
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.WARNING

    def test_verbose_level_is_debug(self) -> None:
        """Test that verbose logging shows debug output."""
        logger = setup_logging(verbose=True)
        assert logger.level == logging.DEBUG

    def test_uses_single_rich_handler(self) -> None:
        """Test that repeated setup does not stack handlers."""
        setup_logging()
        logger = setup_logging(verbose=True)
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)

    def test_does_not_propagate(self) -> None:
        """Test that messages are not duplicated on the root logger."""
        logger = setup_logging()
        assert logger.propagate is False

    def test_module_loggers_are_children(self) -> None:
        """Test that package module loggers report through the package logger."""
        logger = setup_logging(verbose=True)
        child = logging.getLogger("testfinder.core.discovery")
        assert child.parent is logger
        assert child.getEffectiveLevel() == logging.DEBUG


class TestSetupLoggingFromLevel:
    """Tests for setup_logging_from_level()."""

    def test_info_level(self) -> None:
        """Test that a level name sets logger and handler levels."""
        logger = setup_logging_from_level("info")
        assert logger.level == logging.INFO
        assert logger.handlers[0].level == logging.INFO

    def test_upper_case_name(self) -> None:
        """Test that level names are case insensitive."""
        logger = setup_logging_from_level("ERROR")
        assert logger.level == logging.ERROR


class TestGetLogger:
    """Tests for get_logger()."""

    def test_creates_default_logger(self) -> None:
        """Test that a default logger is set up on first use."""
        logger = get_logger()
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.WARNING

    def test_returns_configured_logger(self) -> None:
        """Test that get_logger returns the logger from setup_logging."""
        configured = setup_logging(verbose=True)
        assert get_logger() is configured

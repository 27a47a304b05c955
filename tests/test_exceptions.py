"""Tests for the testfinder exception hierarchy."""

from __future__ import annotations

import pytest

from testfinder.core.exceptions import (
    ConfigError,
    DiscoveryCancelledError,
    DiscoveryError,
    InvalidPatternError,
    TestfinderError,
)


class TestTestfinderError:
    """Tests for the base TestfinderError class."""

    def test_message_only(self) -> None:
        """Test that a message without context renders as is."""
        error = TestfinderError("Something failed")
        assert error.message == "Something failed"
        assert error.context == {}
        assert str(error) == "Something failed"

    def test_message_with_context(self) -> None:
        """Test that context entries are appended to the message."""
        error = TestfinderError("Something failed", context={"path": "/project"})
        assert str(error) == "Something failed (path='/project')"

    def test_can_be_caught_as_exception(self) -> None:
        """Test that TestfinderError is a regular Exception."""
        with pytest.raises(Exception):
            raise TestfinderError("boom")


class TestConfigError:
    """Tests for ConfigError."""

    def test_config_key_in_context(self) -> None:
        """Test that the offending configuration key is recorded."""
        error = ConfigError("Empty list", config_key="files")
        assert error.config_key == "files"
        assert error.context["config_key"] == "files"
        assert "config_key='files'" in str(error)

    def test_without_config_key(self) -> None:
        """Test that config_key is optional."""
        error = ConfigError("Bad config")
        assert error.config_key is None
        assert str(error) == "Bad config"

    def test_is_testfinder_error(self) -> None:
        """Test that ConfigError inherits from TestfinderError."""
        assert issubclass(ConfigError, TestfinderError)


class TestInvalidPatternError:
    """Tests for InvalidPatternError."""

    def test_pattern_and_origin(self) -> None:
        """Test that pattern and origin are stored and shown."""
        error = InvalidPatternError("Empty glob pattern", pattern="!", origin="test")
        assert error.pattern == "!"
        assert error.origin == "test"
        assert "pattern='!'" in str(error)
        assert "origin='test'" in str(error)

    def test_is_config_error(self) -> None:
        """Test that a pattern error can be caught as a ConfigError."""
        with pytest.raises(ConfigError):
            raise InvalidPatternError("Empty glob pattern", pattern="", origin="helper")


class TestDiscoveryError:
    """Tests for DiscoveryError and DiscoveryCancelledError."""

    def test_path_and_cause(self) -> None:
        """Test that path and cause are stored and shown."""
        cause = PermissionError(13, "Permission denied")
        error = DiscoveryError("Cannot read directory", path="/project/locked", cause=cause)
        assert error.path == "/project/locked"
        assert error.cause is cause
        assert error.errors == []
        assert "path='/project/locked'" in str(error)
        assert "Permission denied" in str(error)

    def test_aggregated_errors(self) -> None:
        """Test that aggregated failures are kept and counted."""
        errors = [DiscoveryError("a", path="/a"), DiscoveryError("b", path="/b")]
        error = DiscoveryError("Discovery failed", path="/", errors=errors)
        assert error.errors == errors
        assert error.context["failures"] == 2

    def test_cancelled_is_discovery_error(self) -> None:
        """Test that a cancellation can be caught as a DiscoveryError."""
        with pytest.raises(DiscoveryError):
            raise DiscoveryCancelledError("Discovery cancelled", path="/project")

"""Tests for the configuration schema models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from testfinder.config.schema import DiscoverySettings, LogLevel, PatternSettings, TestfinderConfig
from testfinder.core.exceptions import ConfigError
from testfinder.core.models import DEFAULT_DEPENDENCY_DIRECTORIES, CompositionPolicy


class TestPatternSettings:
    """Tests for PatternSettings."""

    def test_defaults(self) -> None:
        """Test that pattern lists default to None and extensions to js."""
        settings = PatternSettings()
        assert settings.files is None
        assert settings.helpers is None
        assert settings.ignored_by_watcher is None
        assert settings.extensions == ["js"]

    def test_comma_separated_patterns(self) -> None:
        """Test that patterns can be given as a comma-separated string."""
        settings = PatternSettings(files="test/**/*.js, !test/fixtures/")
        assert settings.files == ["test/**/*.js", "!test/fixtures/"]

    def test_pattern_list_kept(self) -> None:
        """Test that pattern lists are kept in order."""
        settings = PatternSettings(helpers=["**/helpers/*", "**/_*.js"])
        assert settings.helpers == ["**/helpers/*", "**/_*.js"]

    def test_extension_dots_stripped(self) -> None:
        """Test that leading dots are removed from extensions."""
        settings = PatternSettings(extensions=[".js", "jsx"])
        assert settings.extensions == ["js", "jsx"]

    def test_extensions_from_string(self) -> None:
        """Test that extensions can be given as a comma-separated string."""
        settings = PatternSettings(extensions="js, ts")
        assert settings.extensions == ["js", "ts"]

    def test_empty_extensions_rejected(self) -> None:
        """Test that an empty extension list is invalid."""
        with pytest.raises(ValidationError):
            PatternSettings(extensions=[])


class TestDiscoverySettings:
    """Tests for DiscoverySettings."""

    def test_defaults(self) -> None:
        """Test default discovery settings."""
        settings = DiscoverySettings()
        assert settings.concurrency == 50
        assert settings.timeout == 0.0
        assert settings.dependency_directories == list(DEFAULT_DEPENDENCY_DIRECTORIES)
        assert settings.composition is CompositionPolicy.INVERT

    @pytest.mark.parametrize("concurrency", [0, -1, 1001])
    def test_concurrency_bounds(self, concurrency: int) -> None:
        """Test that concurrency must be between 1 and 1000."""
        with pytest.raises(ValidationError):
            DiscoverySettings(concurrency=concurrency)

    def test_negative_timeout_rejected(self) -> None:
        """Test that a negative timeout is invalid."""
        with pytest.raises(ValidationError):
            DiscoverySettings(timeout=-1)

    def test_composition_case_insensitive(self) -> None:
        """Test that the composition policy accepts any case."""
        assert DiscoverySettings(composition="REINCLUDE").composition is CompositionPolicy.REINCLUDE

    def test_invalid_composition(self) -> None:
        """Test that unknown composition policies are rejected."""
        with pytest.raises(ValidationError, match="composition must be one of"):
            DiscoverySettings(composition="merge")

    def test_dependency_directories_from_string(self) -> None:
        """Test that dependency directories can be comma-separated."""
        settings = DiscoverySettings(dependency_directories="node_modules, vendor")
        assert settings.dependency_directories == ["node_modules", "vendor"]


class TestTestfinderConfig:
    """Tests for the top-level configuration."""

    def test_defaults(self) -> None:
        """Test that an empty configuration is valid."""
        config = TestfinderConfig.model_validate({})
        assert config.patterns.extensions == ["js"]
        assert config.discovery.concurrency == 50
        assert config.log_level is LogLevel.INFO

    def test_nested_sections(self) -> None:
        """Test that nested sections are parsed."""
        config = TestfinderConfig.model_validate(
            {
                "patterns": {"files": ["test/**/*.js"], "extensions": ["js", "jsx"]},
                "discovery": {"concurrency": 4},
                "log_level": "DEBUG",
            }
        )
        assert config.patterns.files == ["test/**/*.js"]
        assert config.patterns.extensions == ["js", "jsx"]
        assert config.discovery.concurrency == 4
        assert config.log_level is LogLevel.DEBUG

    def test_invalid_log_level(self) -> None:
        """Test that unknown log levels are rejected."""
        with pytest.raises(ValidationError, match="log_level must be one of"):
            TestfinderConfig.model_validate({"log_level": "loud"})

    def test_unknown_keys_ignored(self) -> None:
        """Test that unknown top-level keys do not fail validation."""
        config = TestfinderConfig.model_validate({"watch": True})
        assert config.patterns.files is None

    def test_to_rules(self) -> None:
        """Test that the configuration normalizes into rules."""
        config = TestfinderConfig.model_validate(
            {
                "patterns": {"files": ["./test/**/*.js"], "extensions": [".js", "jsx"]},
                "discovery": {"dependency_directories": ["vendor"], "composition": "reinclude"},
            }
        )
        rules = config.to_rules(cwd="/project")
        assert rules.test_patterns == ("test/**/*.js",)
        assert rules.extensions == frozenset({"js", "jsx"})
        assert rules.dependency_directories == ("vendor",)
        assert rules.composition is CompositionPolicy.REINCLUDE
        assert str(rules.cwd) == "/project"

    def test_to_rules_rejects_empty_pattern_list(self) -> None:
        """Test that an explicitly empty test list fails normalization."""
        config = TestfinderConfig.model_validate({"patterns": {"files": []}})
        with pytest.raises(ConfigError):
            config.to_rules(cwd="/project")

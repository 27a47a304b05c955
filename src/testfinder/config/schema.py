"""Configuration schema definitions using Pydantic Settings.

This module defines all configuration models for testfinder with proper
validation, defaults, and documentation.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from testfinder.core.models import DEFAULT_DEPENDENCY_DIRECTORIES, CompositionPolicy, NormalizedRules


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _parse_pattern_list(v: Any) -> list[str] | None:
    """Parse an optional pattern list from a comma-separated string or list."""
    if v is None:
        return None
    if isinstance(v, str):
        return [p.strip() for p in v.split(",") if p.strip()]
    return list(v)


class PatternSettings(BaseModel):
    """Glob pattern lists and recognized extensions.

    A list left as None falls back to the built-in defaults when the
    rules are normalized.
    """

    files: list[str] | None = Field(
        default=None,
        description="Test file patterns (None for the defaults)",
    )
    helpers: list[str] | None = Field(
        default=None,
        description="Helper file patterns; underscore-prefixed files are always helpers",
    )
    ignored_by_watcher: list[str] | None = Field(
        default=None,
        description="Patterns removed from the watched source set; '!' entries compose with the defaults",
    )
    extensions: list[str] = Field(
        default_factory=lambda: ["js"],
        description="Recognized file extensions",
    )

    @field_validator("files", "helpers", "ignored_by_watcher", mode="before")
    @classmethod
    def parse_patterns(cls, v: Any) -> list[str] | None:
        """Parse patterns from string or list."""
        return _parse_pattern_list(v)

    @field_validator("extensions", mode="before")
    @classmethod
    def parse_extensions(cls, v: Any) -> list[str]:
        """Parse extensions from string or list, stripping leading dots."""
        if v is None:
            return ["js"]
        if isinstance(v, str):
            v = v.split(",")
        extensions = [str(e).strip().lstrip(".") for e in v if str(e).strip()]
        if not extensions:
            raise ValueError("extensions must contain at least one entry")
        return extensions


class DiscoverySettings(BaseModel):
    """Settings for directory discovery and rule composition."""

    concurrency: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Maximum number of directories listed concurrently",
    )
    timeout: float = Field(
        default=0.0,
        ge=0,
        description="Deadline in seconds for a whole discovery (0 for unlimited)",
    )
    dependency_directories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DEPENDENCY_DIRECTORIES),
        description="Directory names holding externally installed packages",
    )
    composition: CompositionPolicy = Field(
        default=CompositionPolicy.INVERT,
        description="How '!' watcher-ignore entries combine with the default source patterns",
    )

    @field_validator("dependency_directories", mode="before")
    @classmethod
    def parse_directories(cls, v: Any) -> list[str]:
        """Parse directory names from string or list."""
        if v is None:
            return list(DEFAULT_DEPENDENCY_DIRECTORIES)
        if isinstance(v, str):
            return [d.strip() for d in v.split(",") if d.strip()]
        return list(v)

    @field_validator("composition", mode="before")
    @classmethod
    def validate_composition(cls, v: Any) -> CompositionPolicy:
        """Validate and normalize the composition policy."""
        if v is None:
            return CompositionPolicy.INVERT
        if isinstance(v, CompositionPolicy):
            return v
        v = str(v).lower()
        try:
            return CompositionPolicy(v)
        except ValueError:
            valid = ", ".join(policy.value for policy in CompositionPolicy)
            raise ValueError(f"composition must be one of: {valid}")


class TestfinderConfig(BaseSettings):
    """Main configuration for testfinder.

    Combines all settings sections into a single configuration object.
    This can be loaded from environment variables, config files, or
    constructed programmatically.
    """

    # Keep pytest from collecting this class when imported into test modules
    __test__ = False

    model_config = SettingsConfigDict(
        env_prefix="TESTFINDER_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    patterns: PatternSettings = Field(
        default_factory=PatternSettings,
        description="Pattern settings",
    )
    discovery: DiscoverySettings = Field(
        default_factory=DiscoverySettings,
        description="Discovery settings",
    )
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> LogLevel:
        """Validate and normalize log level."""
        if v is None:
            return LogLevel.INFO
        if isinstance(v, LogLevel):
            return v
        v = str(v).lower()
        try:
            return LogLevel(v)
        except ValueError:
            valid = ", ".join(level.value for level in LogLevel)
            raise ValueError(f"log_level must be one of: {valid}")

    def to_rules(self, cwd: Path | str | None = None) -> NormalizedRules:
        """Normalize the configured patterns into a rule set.

        Args:
            cwd: Directory relative paths are matched against. Defaults to
                the process working directory.

        Returns:
            A NormalizedRules instance.

        Raises:
            ConfigError: If a pattern list is empty or an extension is invalid.
            InvalidPatternError: If a pattern is malformed.
        """
        from testfinder.core.normalize import normalize

        return normalize(
            self.patterns.files,
            self.patterns.helpers,
            self.patterns.ignored_by_watcher,
            self.patterns.extensions,
            cwd=cwd,
            dependency_directories=self.discovery.dependency_directories,
            composition=self.discovery.composition,
        )

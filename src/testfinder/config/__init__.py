"""Layered configuration for testfinder.

Settings come from four layers, each overriding the one before it:
built-in defaults, a project config file, TESTFINDER_ environment
variables and explicit overrides passed by the caller.

Example usage::

    from testfinder.config import get_config

    config = get_config()
    rules = config.to_rules(cwd="/path/to/project")

    # Override specific settings
    config = get_config(overrides={"extensions": ["js", "jsx"]})
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from testfinder.config.env import (
    ENV_COMPOSITION,
    ENV_CONCURRENCY,
    ENV_CONFIG_PATH,
    ENV_DEPENDENCY_DIRECTORIES,
    ENV_EXTENSIONS,
    ENV_FILES,
    ENV_HELPERS,
    ENV_IGNORED_BY_WATCHER,
    ENV_LOG_LEVEL,
    ENV_TIMEOUT,
    get_config_path_from_env,
    get_env_overrides,
)
from testfinder.config.loader import ConfigLoader
from testfinder.config.schema import (
    DiscoverySettings,
    LogLevel,
    PatternSettings,
    TestfinderConfig,
)
from testfinder.core.exceptions import ConfigError

__all__ = [
    "PatternSettings",
    "DiscoverySettings",
    "LogLevel",
    "TestfinderConfig",
    "ConfigLoader",
    "ENV_CONFIG_PATH",
    "ENV_FILES",
    "ENV_HELPERS",
    "ENV_IGNORED_BY_WATCHER",
    "ENV_EXTENSIONS",
    "ENV_CONCURRENCY",
    "ENV_TIMEOUT",
    "ENV_DEPENDENCY_DIRECTORIES",
    "ENV_COMPOSITION",
    "ENV_LOG_LEVEL",
    "get_env_overrides",
    "ConfigPriority",
    "get_config",
    "get_config_source",
    "load_config",
    "reset_config",
]


class ConfigPriority(str, Enum):
    """Layer a configuration value came from, lowest first."""

    DEFAULT = "default"
    CONFIG_FILE = "config_file"
    ENVIRONMENT = "environment"
    OVERRIDE = "override"


# Last loaded configuration and the layer each dotted key came from
_config_cache: TestfinderConfig | None = None
_config_sources: dict[str, ConfigPriority] = {}

# Flat override names mapped to their config section
_OVERRIDE_MAPPINGS: dict[str, tuple[str, str]] = {
    "files": ("patterns", "files"),
    "test_patterns": ("patterns", "files"),
    "helpers": ("patterns", "helpers"),
    "helper_patterns": ("patterns", "helpers"),
    "ignored_by_watcher": ("patterns", "ignored_by_watcher"),
    "ignore_patterns": ("patterns", "ignored_by_watcher"),
    "extensions": ("patterns", "extensions"),
    "concurrency": ("discovery", "concurrency"),
    "timeout": ("discovery", "timeout"),
    "dependency_directories": ("discovery", "dependency_directories"),
    "composition": ("discovery", "composition"),
}


def _merge_configs(
    base: dict[str, Any],
    override: dict[str, Any],
    source: ConfigPriority,
) -> tuple[dict[str, Any], dict[str, ConfigPriority]]:
    """Overlay one layer onto the merged settings so far.

    Sections are merged key by key; None values leave the lower layer in
    place. Returns the merged dict and the dotted keys the layer set.
    """
    result = base.copy()
    sources: dict[str, ConfigPriority] = {}

    for key, value in override.items():
        if value is None:
            continue

        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            merged, nested_sources = _merge_configs(result[key], value, source)
            result[key] = merged
            for nested_key, nested_source in nested_sources.items():
                sources[f"{key}.{nested_key}"] = nested_source
        else:
            result[key] = value
            sources[key] = source

    return result, sources


def _normalize_overrides(overrides: dict[str, Any]) -> dict[str, Any]:
    """Convert flat override names into the nested config structure.

    Unknown names go to the top level, where validation ignores them.
    """
    result: dict[str, Any] = {"patterns": {}, "discovery": {}}

    for name, value in overrides.items():
        if value is None:
            continue
        if name in _OVERRIDE_MAPPINGS:
            section, key = _OVERRIDE_MAPPINGS[name]
            result[section][key] = value
        else:
            result[name] = value

    return {k: v for k, v in result.items() if v}


def load_config(
    config_path: Path | str | None = None,
    overrides: dict[str, Any] | None = None,
    start_path: Path | str | None = None,
    use_env: bool = True,
    use_file: bool = True,
) -> TestfinderConfig:
    """Build the configuration from every layer and cache it.

    The config file is the explicit config_path, else the file named by
    TESTFINDER_CONFIG_PATH, else the first one found walking up from
    start_path. Environment variables and overrides are applied on top.

    Args:
        config_path: Optional explicit path to a config file.
        overrides: Optional flat dictionary of overrides, e.g. ``{"extensions": ["ts"]}``.
        start_path: Directory where config file discovery starts. Defaults to cwd.
        use_env: Whether to apply environment variable overrides.
        use_file: Whether to look for and load config files.

    Returns:
        A fully merged TestfinderConfig instance.

    Raises:
        ConfigError: If a config file cannot be read or the merged
            configuration is invalid.
    """
    global _config_cache, _config_sources

    sources: dict[str, ConfigPriority] = {}

    # Layer 1: Defaults
    config_dict: dict[str, Any] = TestfinderConfig.model_validate({}).model_dump()

    # Layer 2: Configuration file
    if use_file:
        loader = ConfigLoader()
        file_path = config_path or (get_config_path_from_env() if use_env else None)
        if file_path is None:
            file_path = loader.find_config_file(start_path)
        if file_path:
            file_dict = loader.load_dict(Path(file_path))
            config_dict, file_sources = _merge_configs(config_dict, file_dict, ConfigPriority.CONFIG_FILE)
            sources.update(file_sources)

    # Layer 3: Environment variables
    if use_env:
        env_overrides = get_env_overrides()
        if env_overrides:
            config_dict, env_sources = _merge_configs(config_dict, env_overrides, ConfigPriority.ENVIRONMENT)
            sources.update(env_sources)

    # Layer 4: Explicit overrides (highest priority)
    if overrides:
        override_dict = _normalize_overrides(overrides)
        config_dict, override_sources = _merge_configs(config_dict, override_dict, ConfigPriority.OVERRIDE)
        sources.update(override_sources)

    try:
        config = TestfinderConfig.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    _config_cache = config
    _config_sources = sources

    return config


def get_config(
    overrides: dict[str, Any] | None = None,
    reload: bool = False,
) -> TestfinderConfig:
    """Get the current configuration, loading if necessary.

    Args:
        overrides: Optional overrides; forces a reload when given.
        reload: If True, force reload from all sources.

    Returns:
        The current TestfinderConfig instance.
    """
    if _config_cache is None or reload or overrides:
        return load_config(overrides=overrides)

    return _config_cache


def get_config_source(key: str) -> ConfigPriority | None:
    """Get the priority source for a configuration key.

    Args:
        key: The configuration key (e.g., "discovery.concurrency").

    Returns:
        The ConfigPriority that provided this value, or None if using default.
    """
    return _config_sources.get(key)


def reset_config() -> None:
    """Reset the configuration cache.

    Forces the next call to get_config() to reload from all sources.
    """
    global _config_cache, _config_sources
    _config_cache = None
    _config_sources = {}

"""Environment variable mapping for testfinder configuration.

This module defines the environment variables that can be used to
configure testfinder and provides utilities for reading them.
"""

from __future__ import annotations

import os
from typing import Any

# Environment variable names
ENV_CONFIG_PATH = "TESTFINDER_CONFIG_PATH"
ENV_FILES = "TESTFINDER_FILES"
ENV_HELPERS = "TESTFINDER_HELPERS"
ENV_IGNORED_BY_WATCHER = "TESTFINDER_IGNORED_BY_WATCHER"
ENV_EXTENSIONS = "TESTFINDER_EXTENSIONS"
ENV_CONCURRENCY = "TESTFINDER_CONCURRENCY"
ENV_TIMEOUT = "TESTFINDER_TIMEOUT"
ENV_DEPENDENCY_DIRECTORIES = "TESTFINDER_DEPENDENCY_DIRECTORIES"
ENV_COMPOSITION = "TESTFINDER_COMPOSITION"
ENV_LOG_LEVEL = "TESTFINDER_LOG_LEVEL"


def _parse_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def _parse_float(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


def _parse_list(value: str) -> list[str]:
    """Parse a list from a comma-separated string."""
    return [item.strip() for item in value.split(",") if item.strip()]


def get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables.

    Reads all supported environment variables and returns a dictionary
    of configuration values that can be merged with other config sources.
    Values that cannot be parsed are ignored.

    Returns:
        Dictionary of configuration values from environment variables.
    """
    overrides: dict[str, Any] = {
        "patterns": {},
        "discovery": {},
    }

    # TESTFINDER_CONFIG_PATH is handled separately (specifies config file location)

    # Pattern settings
    if ENV_FILES in os.environ:
        overrides["patterns"]["files"] = _parse_list(os.environ[ENV_FILES])

    if ENV_HELPERS in os.environ:
        overrides["patterns"]["helpers"] = _parse_list(os.environ[ENV_HELPERS])

    if ENV_IGNORED_BY_WATCHER in os.environ:
        overrides["patterns"]["ignored_by_watcher"] = _parse_list(os.environ[ENV_IGNORED_BY_WATCHER])

    if ENV_EXTENSIONS in os.environ:
        extensions = _parse_list(os.environ[ENV_EXTENSIONS])
        if extensions:
            overrides["patterns"]["extensions"] = extensions

    # Discovery settings
    if ENV_CONCURRENCY in os.environ:
        value = _parse_int(os.environ[ENV_CONCURRENCY])
        if value is not None:
            overrides["discovery"]["concurrency"] = value

    if ENV_TIMEOUT in os.environ:
        timeout = _parse_float(os.environ[ENV_TIMEOUT])
        if timeout is not None:
            overrides["discovery"]["timeout"] = timeout

    if ENV_DEPENDENCY_DIRECTORIES in os.environ:
        overrides["discovery"]["dependency_directories"] = _parse_list(
            os.environ[ENV_DEPENDENCY_DIRECTORIES]
        )

    if ENV_COMPOSITION in os.environ:
        overrides["discovery"]["composition"] = os.environ[ENV_COMPOSITION].strip().lower()

    if ENV_LOG_LEVEL in os.environ:
        overrides["log_level"] = os.environ[ENV_LOG_LEVEL].strip().lower()

    # Clean up empty sections
    return {k: v for k, v in overrides.items() if v}


def get_config_path_from_env() -> str | None:
    """Get the config file path named by TESTFINDER_CONFIG_PATH, if set."""
    value = os.environ.get(ENV_CONFIG_PATH, "").strip()
    return value or None

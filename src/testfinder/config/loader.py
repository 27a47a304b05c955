"""Configuration file loading and discovery.

This module handles finding and loading configuration files from various
locations and formats (YAML, TOML, JSON, and the ``[tool.testfinder]``
table of pyproject.toml).
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from testfinder.core.exceptions import ConfigError

if TYPE_CHECKING:
    from testfinder.config.schema import TestfinderConfig

# Config file names to search for (in order of preference)
CONFIG_FILE_NAMES = [
    ".testfinder.yml",
    ".testfinder.yaml",
    ".testfinder.toml",
    "testfinder.config.json",
    "pyproject.toml",
]

PYPROJECT_FILE_NAME = "pyproject.toml"
PYPROJECT_TABLE = ("tool", "testfinder")


class ConfigLoader:
    """Loads and parses configuration files.

    Handles automatic discovery of config files in the project directory
    and its parents. Supports YAML, TOML and JSON formats, plus a
    ``[tool.testfinder]`` table in pyproject.toml.
    """

    def __init__(self, search_paths: list[Path] | None = None) -> None:
        """Initialize the config loader.

        Args:
            search_paths: Additional directories to search for config files.
        """
        self.search_paths = search_paths or []

    def find_config_file(self, start_path: Path | str | None = None) -> Path | None:
        """Find a configuration file by searching standard locations.

        Searches the start directory (or cwd), then each parent up to the
        filesystem root, then any additional search_paths. A pyproject.toml
        only counts when it has a ``[tool.testfinder]`` table.

        Args:
            start_path: Directory to start searching from.

        Returns:
            Path to the config file if found, None otherwise.
        """
        start = Path(start_path).resolve() if start_path else Path.cwd()

        search_dirs: list[Path] = []
        current = start
        while current != current.parent:
            search_dirs.append(current)
            current = current.parent
        search_dirs.append(current)
        search_dirs.extend(self.search_paths)

        for search_dir in search_dirs:
            if not search_dir.is_dir():
                continue

            for config_name in CONFIG_FILE_NAMES:
                config_path = search_dir / config_name
                if not config_path.is_file():
                    continue
                if config_name == PYPROJECT_FILE_NAME and not self._has_pyproject_table(config_path):
                    continue
                return config_path

        return None

    def _has_pyproject_table(self, path: Path) -> bool:
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError):
            return False
        return isinstance(data.get("tool", {}).get("testfinder"), dict)

    def load(self, path: Path | str) -> TestfinderConfig:
        """Load configuration from a file.

        Args:
            path: Path to the configuration file.

        Returns:
            A TestfinderConfig instance.

        Raises:
            ConfigError: If the file cannot be loaded or parsed.
        """
        path = Path(path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.is_file():
            raise ConfigError(f"Configuration path is not a file: {path}")

        return self._parse_config(self.load_dict(path), path)

    def load_dict(self, path: Path) -> dict[str, Any]:
        """Read and parse a configuration file into a plain dictionary.

        Raises:
            ConfigError: If the file cannot be read or parsed.
        """
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to read config file {path}: {e}") from e

        suffix = path.suffix.lower()
        if path.name == PYPROJECT_FILE_NAME:
            return self._load_pyproject(content, path)
        elif suffix in (".yml", ".yaml"):
            return self._load_yaml(content, path)
        elif suffix == ".toml":
            return self._load_toml(content, path)
        else:
            return self._load_json(content, path)

    def _load_yaml(self, content: str, path: Path) -> dict[str, Any]:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping, got: {type(data).__name__}")
        return data

    def _load_toml(self, content: str, path: Path) -> dict[str, Any]:
        try:
            return tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    def _load_pyproject(self, content: str, path: Path) -> dict[str, Any]:
        data = self._load_toml(content, path)
        for key in PYPROJECT_TABLE:
            data = data.get(key, {})
            if not isinstance(data, dict):
                raise ConfigError(f"[tool.testfinder] in {path} must be a table")
        return data

    def _load_json(self, content: str, path: Path) -> dict[str, Any]:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain an object, got: {type(data).__name__}")
        return data

    def _parse_config(self, data: dict[str, Any], path: Path) -> TestfinderConfig:
        """Parse configuration dictionary into TestfinderConfig.

        Raises:
            ConfigError: If validation fails.
        """
        from pydantic import ValidationError

        from testfinder.config.schema import TestfinderConfig

        try:
            return TestfinderConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    def validate_config_file(self, path: Path | str) -> list[str]:
        """Validate a configuration file and return any errors.

        Args:
            path: Path to the config file.

        Returns:
            List of validation error messages (empty if valid).
        """
        from pydantic import ValidationError

        from testfinder.config.schema import TestfinderConfig

        path = Path(path)

        if not path.exists():
            return [f"File not found: {path}"]

        if not path.is_file():
            return [f"Not a file: {path}"]

        try:
            data = self.load_dict(path)
        except ConfigError as e:
            return [str(e)]

        errors: list[str] = []
        try:
            TestfinderConfig.model_validate(data)
        except ValidationError as e:
            for error in e.errors():
                loc = ".".join(str(x) for x in error["loc"])
                errors.append(f"{loc}: {error['msg']}")

        return errors

"""Pattern normalization for testfinder.

normalize() turns raw, possibly absent, possibly relative pattern lists
into one canonical NormalizedRules value. It is the only place where
defaults are synthesized and where patterns are validated, so that
classification never has to deal with malformed input.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path

from testfinder.core.exceptions import ConfigError, InvalidPatternError
from testfinder.core.models import (
    DEFAULT_DEPENDENCY_DIRECTORIES,
    CompositionPolicy,
    NormalizedRules,
)
from testfinder.core.patterns import (
    PatternOrigin,
    is_negated,
    strip_all,
    validate_pattern,
)

logger = logging.getLogger(__name__)

# Directory names holding fixtures and helpers, never tests by default
DEFAULT_FIXTURE_DIRECTORIES = (
    "fixture",
    "fixtures",
    "helper",
    "helpers",
    "__fixture__",
    "__fixtures__",
    "__helper__",
    "__helpers__",
)

# Artifacts kept next to sources, such as stored snapshots (foo.js.snap)
AUXILIARY_SOURCE_EXTENSIONS = frozenset({"snap"})

# Build output at the project root is never part of the watched set
DEFAULT_BUILD_OUTPUT_PATTERNS = ("dist/**",)

DOTFILE_PATTERN = "**/.*"

_FORBIDDEN_EXTENSION_CHARS = frozenset("/\\*?[]{}!")


def normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    """Validate extensions and strip their leading dots.

    Raises:
        ConfigError: If the list is empty or an entry is not a plain
            extension.
    """
    if isinstance(extensions, str):
        raise ConfigError(
            "Extensions must be a list of strings, not a single string",
            config_key="extensions",
        )

    result: set[str] = set()
    for extension in extensions:
        if not isinstance(extension, str):
            raise ConfigError(
                f"Extensions must be strings, got {type(extension).__name__}",
                config_key="extensions",
            )
        name = extension.strip().lstrip(".")
        if not name or _FORBIDDEN_EXTENSION_CHARS.intersection(name):
            raise ConfigError(
                f"Invalid file extension: {extension!r}",
                config_key="extensions",
            )
        result.add(name)

    if not result:
        raise ConfigError("At least one file extension is required", config_key="extensions")
    return frozenset(result)


def _directory_pattern(name: str) -> str:
    return f"**/{name}/"


def default_test_patterns(
    extensions: frozenset[str],
    dependency_directories: Sequence[str] = DEFAULT_DEPENDENCY_DIRECTORIES,
) -> tuple[str, ...]:
    """Build the test patterns used when none are configured.

    Any file with a recognized extension is a test, except underscore
    helpers, files below fixture or helper directories, dependency
    directories and dot entries.
    """
    ordered = sorted(extensions)
    patterns = [f"**/*.{ext}" for ext in ordered]
    patterns.extend(f"!**/_*.{ext}" for ext in ordered)
    patterns.extend(f"!{_directory_pattern(name)}" for name in DEFAULT_FIXTURE_DIRECTORIES)
    patterns.extend(f"!{_directory_pattern(name)}" for name in dependency_directories)
    patterns.append(f"!{DOTFILE_PATTERN}")
    return tuple(patterns)


def default_helper_patterns(extensions: frozenset[str]) -> tuple[str, ...]:
    """Build the helper patterns used when none are configured."""
    return tuple(f"**/_*.{ext}" for ext in sorted(extensions))


def default_source_patterns(
    extensions: frozenset[str],
    dependency_directories: Sequence[str] = DEFAULT_DEPENDENCY_DIRECTORIES,
) -> tuple[str, ...]:
    """Build the source patterns every rule set starts from.

    One inclusion per extension and per auxiliary artifact extension,
    followed by the standing exclusions.
    """
    patterns = [f"**/*.{ext}" for ext in sorted(extensions)]
    patterns.extend(f"**/*.{ext}" for ext in sorted(AUXILIARY_SOURCE_EXTENSIONS))
    patterns.extend(f"!{_directory_pattern(name)}" for name in dependency_directories)
    patterns.append(f"!{DOTFILE_PATTERN}")
    patterns.extend(f"!{pattern}" for pattern in DEFAULT_BUILD_OUTPUT_PATTERNS)
    return tuple(patterns)


def _prepare(
    patterns: Sequence[str] | None,
    origin: PatternOrigin,
    config_key: str,
    allow_empty: bool = False,
) -> tuple[str, ...] | None:
    """Strip relativeness from a caller-supplied list and validate it.

    Returns None when the list is absent.
    """
    if patterns is None:
        return None
    if isinstance(patterns, str):
        raise ConfigError(
            f"The '{config_key}' configuration must be a list of glob patterns, not a string",
            config_key=config_key,
        )

    for pattern in patterns:
        if not isinstance(pattern, str):
            raise InvalidPatternError(
                f"Patterns must be strings, got {type(pattern).__name__}",
                pattern=repr(pattern),
                origin=origin.value,
            )

    stripped = strip_all(patterns)
    if not stripped:
        if allow_empty:
            return ()
        raise ConfigError(
            f"The '{config_key}' configuration must contain at least one glob pattern",
            config_key=config_key,
        )

    for pattern in stripped:
        validate_pattern(pattern, origin)
    return stripped


def normalize(
    test_patterns: Sequence[str] | None = None,
    helper_patterns: Sequence[str] | None = None,
    ignore_patterns: Sequence[str] | None = None,
    extensions: Iterable[str] = ("js",),
    *,
    cwd: str | Path | None = None,
    dependency_directories: Sequence[str] | None = None,
    composition: CompositionPolicy = CompositionPolicy.INVERT,
) -> NormalizedRules:
    """Build a canonical rule set from user-declared pattern lists.

    Args:
        test_patterns: Test globs. Defaults to every file with a recognized
            extension outside fixture, helper, dependency and dot
            directories. A list made only of negations is appended to the
            defaults.
        helper_patterns: Helper globs. Defaults to underscore-prefixed files.
            The underscore convention applies even when this is given.
        ignore_patterns: Watcher-ignore globs, composed after the default
            source patterns. An empty list means nothing extra is ignored.
        extensions: Recognized file extensions, with or without dots.
        cwd: Directory that relative paths are matched against. Defaults to
            the process working directory at the time of the call.
        dependency_directories: Directory names holding external packages.
        composition: How ``!`` entries of ignore_patterns combine with the
            default source patterns.

    Returns:
        An immutable NormalizedRules value.

    Raises:
        ConfigError: If a list is empty or the extensions are invalid.
        InvalidPatternError: If a pattern is malformed.
    """
    normalized_extensions = normalize_extensions(extensions)

    if dependency_directories is None:
        dependencies = DEFAULT_DEPENDENCY_DIRECTORIES
    else:
        dependencies = tuple(name.strip("/") for name in dependency_directories if name.strip("/"))

    tests = _prepare(test_patterns, PatternOrigin.TEST, "files")
    if tests is None:
        tests = default_test_patterns(normalized_extensions, dependencies)
    elif all(is_negated(pattern) for pattern in tests):
        # Only exclusions given: refine the defaults instead of replacing them
        tests = default_test_patterns(normalized_extensions, dependencies) + tests

    helpers = _prepare(helper_patterns, PatternOrigin.HELPER, "helpers")
    if helpers is None:
        helpers = default_helper_patterns(normalized_extensions)

    ignored = _prepare(ignore_patterns, PatternOrigin.IGNORE, "ignored_by_watcher", allow_empty=True)

    working_directory = Path(os.path.abspath(cwd if cwd is not None else os.getcwd()))

    rules = NormalizedRules(
        test_patterns=tests,
        helper_patterns=helpers,
        source_patterns=default_source_patterns(normalized_extensions, dependencies),
        ignore_patterns=ignored or (),
        extensions=normalized_extensions,
        cwd=working_directory,
        dependency_directories=dependencies,
        composition=CompositionPolicy(composition),
    )

    logger.debug(
        f"Normalized {len(rules.test_patterns)} test, {len(rules.helper_patterns)} helper, "
        f"{len(rules.source_patterns)} source and {len(rules.ignore_patterns)} ignore patterns "
        f"for extensions {sorted(rules.extensions)}"
    )
    return rules

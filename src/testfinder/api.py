"""High-level API functions for testfinder.

This module ties configuration, normalization and discovery together so
that a test runner can get its test and helper files with a single call.

Example usage::

    import asyncio
    from testfinder.api import classify_file, find_tests_and_helpers

    result = asyncio.run(find_tests_and_helpers("/path/to/project"))
    for test_file in sorted(result.tests):
        print(test_file)

    classification = classify_file("test/foo.js", cwd="/path/to/project")
    print(classification.is_test, classification.is_helper, classification.is_source)
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

from testfinder.config import TestfinderConfig, load_config
from testfinder.core.classify import classify
from testfinder.core.discovery import Discoverer
from testfinder.core.logging import setup_logging_from_level
from testfinder.core.models import Classification, DiscoveryResult, NormalizedRules
from testfinder.core.normalize import normalize


def _load_project_config(start_path: str | Path | None) -> TestfinderConfig:
    """Load the configuration for a project and apply its log level."""
    config = load_config(start_path=start_path)
    setup_logging_from_level(config.log_level.value)
    return config


def build_rules(config: TestfinderConfig | None = None, cwd: str | Path | None = None) -> NormalizedRules:
    """Normalize a configuration into a rule set.

    Args:
        config: Configuration to use. Loaded from all sources when None,
            starting the config file search at cwd.
        cwd: Directory relative paths are matched against.

    Returns:
        A NormalizedRules instance.

    Raises:
        ConfigError: If the configuration is invalid.
        InvalidPatternError: If a pattern is malformed.
    """
    if config is None:
        config = _load_project_config(cwd)
    return config.to_rules(cwd=cwd)


async def find_tests_and_helpers(
    path: str | Path,
    *,
    test_patterns: Sequence[str] | None = None,
    helper_patterns: Sequence[str] | None = None,
    ignore_patterns: Sequence[str] | None = None,
    extensions: Sequence[str] | None = None,
    config: TestfinderConfig | None = None,
    concurrency_limit: int | None = None,
    timeout: float | None = None,
) -> DiscoveryResult:
    """Discover test and helper files below a project directory.

    Patterns are matched relative to ``path``. Explicit pattern arguments
    take precedence over the configuration; everything else comes from
    ``config`` (or the configuration found for the project).

    Args:
        path: Project directory to walk.
        test_patterns: Test globs overriding the configured ones.
        helper_patterns: Helper globs overriding the configured ones.
        ignore_patterns: Watcher-ignore globs overriding the configured ones.
        extensions: Extensions overriding the configured ones.
        config: Configuration to use instead of loading one.
        concurrency_limit: Maximum directories listed at once. Defaults to
            the configured concurrency.
        timeout: Deadline in seconds. Defaults to the configured timeout.

    Returns:
        DiscoveryResult with absolute test and helper paths.

    Raises:
        ConfigError: If the configuration or a pattern is invalid.
        DiscoveryError: If the directory cannot be walked.
        DiscoveryCancelledError: If the deadline passes.

    Example::

        import asyncio
        from testfinder.api import find_tests_and_helpers

        result = asyncio.run(find_tests_and_helpers(
            "/path/to/project",
            extensions=["js", "jsx"],
            test_patterns=["!**/fixtures/**"],
        ))
    """
    root = Path(os.path.abspath(path))
    if config is None:
        config = _load_project_config(root)

    rules = normalize(
        test_patterns if test_patterns is not None else config.patterns.files,
        helper_patterns if helper_patterns is not None else config.patterns.helpers,
        ignore_patterns if ignore_patterns is not None else config.patterns.ignored_by_watcher,
        extensions if extensions is not None else config.patterns.extensions,
        cwd=root,
        dependency_directories=config.discovery.dependency_directories,
        composition=config.discovery.composition,
    )

    discoverer = Discoverer(
        rules,
        concurrency_limit=concurrency_limit or config.discovery.concurrency,
        timeout=timeout if timeout is not None else config.discovery.timeout,
    )
    return await discoverer.discover(root)


def classify_file(
    path: str | Path,
    *,
    rules: NormalizedRules | None = None,
    cwd: str | Path | None = None,
) -> Classification:
    """Classify a single path.

    Args:
        path: Absolute path, or a path relative to cwd.
        rules: Rules to use. Built from the configuration when None.
        cwd: Working directory used when rules have to be built.

    Returns:
        The Classification of the path.
    """
    if rules is None:
        rules = build_rules(cwd=cwd)
    return classify(path, rules)

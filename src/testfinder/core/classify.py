"""Path classification for testfinder.

classify() answers three independent questions about a path: is it a
test, is it a helper, and is it part of the watched source set. Each
question is a small pure predicate over a relative posix path; classify()
composes them and applies the two standing overrides:

- a file whose name starts with an underscore is a helper and never a test
- a path inside a dependency directory has no role at all

None of the functions here perform I/O or raise for well-formed rules.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath

from testfinder.core.models import Classification, NormalizedRules
from testfinder.core.normalize import AUXILIARY_SOURCE_EXTENSIONS
from testfinder.core.patterns import evaluate

HELPER_PREFIX = "_"


def to_match_path(path: str | os.PathLike[str], cwd: Path) -> str:
    """Express a path relative to cwd in posix form.

    Absolute paths are made relative to cwd (with ``..`` segments when they
    lie outside it). Relative paths are taken as already relative to cwd.
    """
    raw = os.fspath(path)
    if os.path.isabs(raw):
        try:
            raw = os.path.relpath(raw, cwd)
        except ValueError:
            # Different drive on Windows, match the absolute path as is
            pass
    normalized = os.path.normpath(raw)
    # Always match against / separated paths
    return normalized.replace("\\", "/")


def file_extension(relative_path: str) -> str:
    """Return the last extension of a path, without the dot."""
    return PurePosixPath(relative_path).suffix[1:]


def is_underscore_named(relative_path: str) -> bool:
    """Check the helper naming convention on the last path segment."""
    return PurePosixPath(relative_path).name.startswith(HELPER_PREFIX)


def in_dependency_directory(relative_path: str, rules: NormalizedRules) -> bool:
    """Check whether any directory segment is a dependency directory."""
    directories = PurePosixPath(relative_path).parts[:-1]
    return any(part in rules.dependency_directories for part in directories)


def is_test_path(relative_path: str, rules: NormalizedRules) -> bool:
    """Test role: recognized extension, not underscore-named, matches test rules."""
    if file_extension(relative_path) not in rules.extensions:
        return False
    if is_underscore_named(relative_path):
        return False
    return evaluate(rules.test_rules, relative_path)


def is_helper_path(relative_path: str, rules: NormalizedRules) -> bool:
    """Helper role: underscore-named, or a recognized extension matching helper rules."""
    if is_underscore_named(relative_path):
        return True
    if file_extension(relative_path) not in rules.extensions:
        return False
    return evaluate(rules.helper_rules, relative_path)


def is_source_path(relative_path: str, rules: NormalizedRules) -> bool:
    """Source role: recognized or auxiliary extension matching source rules."""
    extension = file_extension(relative_path)
    if extension not in rules.extensions and extension not in AUXILIARY_SOURCE_EXTENSIONS:
        return False
    return evaluate(rules.source_rules, relative_path)


def classify(path: str | os.PathLike[str], rules: NormalizedRules) -> Classification:
    """Classify a path against a normalized rule set.

    Args:
        path: Absolute path, or a path relative to ``rules.cwd``.
        rules: Rules built by normalize().

    Returns:
        Classification with the three role flags. A path matching both the
        test and the helper rules is reported as a helper only.
    """
    relative_path = to_match_path(path, rules.cwd)

    if in_dependency_directory(relative_path, rules):
        return Classification(path=os.fspath(path), relative_path=relative_path)

    is_helper = is_helper_path(relative_path, rules)
    is_test = not is_helper and is_test_path(relative_path, rules)

    return Classification(
        path=os.fspath(path),
        relative_path=relative_path,
        is_test=is_test,
        is_helper=is_helper,
        is_source=is_source_path(relative_path, rules),
    )

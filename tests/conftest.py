"""Pytest fixtures for testfinder tests.

This module provides project trees laid out on disk for discovery tests
and a few ready-made rule sets for classification tests.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Generator

import pytest


def _configure_path() -> None:
    """Configure sys.path so the src directory is searched first."""
    src_path = str(Path(__file__).parent.parent / "src")
    if src_path in sys.path:
        sys.path.remove(src_path)
    sys.path.insert(0, src_path)


_configure_path()

from testfinder.config import reset_config  # noqa: E402
from testfinder.core import logging as testfinder_logging  # noqa: E402
from testfinder.core.models import NormalizedRules  # noqa: E402
from testfinder.core.normalize import normalize  # noqa: E402

# Files of a project relying on the default test and helper patterns
DEFAULT_PATTERNS_FILES = [
    "sub/directory/__tests__/_foo.js",
    "sub/directory/__tests__/foo.js",
    "sub/directory/__tests__/fixtures/foo.js",
    "sub/directory/__tests__/helpers/foo.js",
    "sub/directory/bar.spec.js",
    "sub/directory/bar.test.js",
    "test-foo.js",
    "test.js",
    "test/_foo-help.js",
    "test/baz.js",
    "test/deep/deep.js",
    "test/fixtures/foo-fixt.js",
    "test/helpers/test.js",
    "node_modules/foo/test.js",
    "node_modules/foo/_helper.js",
    ".git/hooks/test.js",
    "readme.md",
    "test/notes.txt",
]

# Files of a project recognizing both js and jsx
CUSTOM_EXTENSION_FILES = [
    "test/do-not-compile.js",
    "test/foo.jsx",
    "test/sub/bar.jsx",
    "test/sub/_helper.jsx",
    "test/helpers/a.jsx",
    "test/helpers/b.js",
    "test/fixtures/fixture.jsx",
    "test/types.ts",
]


def _write_tree(root: Path, files: list[str]) -> Path:
    for relative in files:
        file_path = root / relative
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text("// fixture\n")
    return root


@pytest.fixture
def default_patterns_tree(tmp_path: Path) -> Path:
    """Create a project tree exercising the default patterns.

    Contains tests at several depths, underscore helpers, fixture and
    helper directories, a dependency directory and a dot directory.
    """
    return _write_tree(tmp_path / "default-patterns", DEFAULT_PATTERNS_FILES)


@pytest.fixture
def custom_extension_tree(tmp_path: Path) -> Path:
    """Create a project tree mixing js, jsx and unrecognized files."""
    return _write_tree(tmp_path / "custom-extension", CUSTOM_EXTENSION_FILES)


@pytest.fixture
def default_rules() -> NormalizedRules:
    """Return the rules built from defaults only, rooted at /project."""
    return normalize(extensions=["js"], cwd="/project")


@pytest.fixture(autouse=True)
def reset_testfinder_state() -> Generator[None, None, None]:
    """Reset the config cache and the package logger around every test."""
    reset_config()
    yield
    reset_config()
    logger = logging.getLogger("testfinder")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    testfinder_logging._logger = None

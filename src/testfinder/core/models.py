"""Core data models for testfinder.

This module defines the immutable rule set produced by normalization, the
per-path Classification returned by the classifier, and the
DiscoveryResult returned by a directory walk.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from testfinder.core.patterns import PatternOrigin, Sign, SignedRule, parse_rule, parse_rules

# Directory names holding externally installed packages
DEFAULT_DEPENDENCY_DIRECTORIES = ("node_modules", "bower_components", "jspm_packages")


class CompositionPolicy(str, Enum):
    """How ``!`` entries of the watcher-ignore list combine with source rules.

    INVERT: a ``!pattern`` entry flips the verdict reached so far, so a path
        removed by a default negation comes back while a path included so
        far drops out.
    REINCLUDE: a ``!pattern`` entry always re-includes, gitignore style.

    Plain entries always exclude.
    """

    INVERT = "invert"
    REINCLUDE = "reinclude"


@dataclass(frozen=True)
class NormalizedRules:
    """Canonical, immutable rule set built once per session by normalize().

    Attributes:
        test_patterns: Ordered test globs, ``!`` marking negation.
        helper_patterns: Ordered helper globs, independent from tests.
        source_patterns: Default source globs derived from the extensions.
        ignore_patterns: Caller-supplied watcher-ignore globs, composed
            after source_patterns.
        extensions: Recognized file extensions, without leading dots.
        cwd: Working directory that relative paths are resolved against.
        dependency_directories: Directory names holding external code.
        composition: How ``!`` ignore entries combine with source_patterns.
    """

    test_patterns: tuple[str, ...]
    helper_patterns: tuple[str, ...]
    source_patterns: tuple[str, ...]
    ignore_patterns: tuple[str, ...]
    extensions: frozenset[str]
    cwd: Path
    dependency_directories: tuple[str, ...] = DEFAULT_DEPENDENCY_DIRECTORIES
    composition: CompositionPolicy = CompositionPolicy.INVERT

    @cached_property
    def test_rules(self) -> tuple[SignedRule, ...]:
        """Signed rules for the test role."""
        return parse_rules(self.test_patterns, origin=PatternOrigin.TEST)

    @cached_property
    def helper_rules(self) -> tuple[SignedRule, ...]:
        """Signed rules for the helper role."""
        return parse_rules(self.helper_patterns, origin=PatternOrigin.HELPER)

    @cached_property
    def source_rules(self) -> tuple[SignedRule, ...]:
        """Default source rules followed by the watcher-ignore entries."""
        negated_sign = Sign.INVERT if self.composition is CompositionPolicy.INVERT else Sign.INCLUDE
        ignore_rules = tuple(
            parse_rule(pattern, negated_sign=negated_sign, plain_sign=Sign.EXCLUDE)
            for pattern in self.ignore_patterns
        )
        return parse_rules(self.source_patterns) + ignore_rules


class Classification(BaseModel):
    """Roles of a single path under a rule set.

    ``is_test`` and ``is_helper`` are never both true. ``is_source`` is
    evaluated independently of the other two.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="The path as passed to classify()")
    relative_path: str = Field(..., description="Posix path relative to the rules' working directory")
    is_test: bool = Field(default=False, description="Whether the path is a test file")
    is_helper: bool = Field(default=False, description="Whether the path is a helper file")
    is_source: bool = Field(default=False, description="Whether the path belongs to the watched source set")


class DiscoveryResult(BaseModel):
    """Files bucketed by a directory walk.

    Both collections hold absolute paths and are unordered; callers that
    need a stable order must sort them.
    """

    root: Path = Field(..., description="The directory that was walked")
    tests: set[Path] = Field(default_factory=set, description="Absolute paths of test files")
    helpers: set[Path] = Field(default_factory=set, description="Absolute paths of helper files")
    directories_scanned: int = Field(default=0, description="Number of directories listed")
    files_examined: int = Field(default=0, description="Number of regular files classified")

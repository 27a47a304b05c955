"""Signed glob rules for testfinder.

Every pattern list handled by testfinder (test, helper, source and
watcher-ignore patterns) is turned into an ordered tuple of SignedRule
values. A rule couples a glob body with a sign telling what a match does
to the verdict reached so far:

- ``include`` sets it to True
- ``exclude`` sets it to False
- ``invert`` flips it

Rules are evaluated in order and the last matching rule wins. A path that
no rule matches is not part of the set.

Two matching modes exist. ``tree`` rules are delegated to ``pathspec``
using the gitignore "wildmatch" dialect: a pattern without a slash matches
at any depth, and a pattern matching a directory also matches everything
below it. ``glob`` rules are plain path globs anchored at the working
directory: ``*`` and ``?`` stay within one path segment, ``**`` as a whole
segment spans any number of directories, and nothing matches descendants
implicitly. Positive test and helper patterns use ``glob``; negations,
directory patterns and the source and watcher-ignore lists use ``tree``.

In both modes an unclosed ``[`` is matched as a literal bracket.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

import pathspec

from testfinder.core.exceptions import InvalidPatternError

logger = logging.getLogger(__name__)

NEGATION_PREFIX = "!"
RELATIVE_PREFIX = "./"


class Sign(str, Enum):
    """Effect of a matching rule on the verdict."""

    INCLUDE = "include"
    EXCLUDE = "exclude"
    INVERT = "invert"


class MatchMode(str, Enum):
    """How a rule's glob body is matched against a path."""

    TREE = "tree"
    GLOB = "glob"


class PatternOrigin(str, Enum):
    """Pattern list a rule was read from, used in error reports."""

    TEST = "test"
    HELPER = "helper"
    SOURCE = "source"
    IGNORE = "ignore"


# Lists whose positive patterns are matched as anchored globs
GLOB_ORIGINS = frozenset({PatternOrigin.TEST, PatternOrigin.HELPER})


@dataclass(frozen=True)
class SignedRule:
    """A glob body plus the effect a match has on the verdict.

    Attributes:
        pattern: Glob body, without any leading ``!``.
        sign: What a match does to the verdict.
        mode: Matching mode for the body.
    """

    pattern: str
    sign: Sign
    mode: MatchMode = MatchMode.TREE

    def matches(self, path: str) -> bool:
        """Check whether a posix-style relative path matches the glob body."""
        if self.mode is MatchMode.GLOB:
            return compile_glob(self.pattern).fullmatch(path) is not None
        return compile_pattern(self.pattern).match_file(path)

    def __str__(self) -> str:
        if self.sign is Sign.INCLUDE:
            return self.pattern
        return f"{NEGATION_PREFIX}{self.pattern}"


def is_negated(pattern: str) -> bool:
    """Return True if the pattern starts with the negation marker."""
    return pattern.startswith(NEGATION_PREFIX)


def strip_relativeness(pattern: str) -> str:
    """Remove leading ``./`` (or ``!./``) from a pattern.

    ``./foo.js`` becomes ``foo.js`` and ``!./bar`` becomes ``!bar``, so that
    patterns written relative to the working directory match exactly like
    their bare counterparts.
    """
    # Always use / in patterns, harmonizing matching across platforms
    if os.sep == "\\":
        pattern = pattern.replace("\\", "/")

    negated = is_negated(pattern)
    body = pattern[1:] if negated else pattern
    while body.startswith(RELATIVE_PREFIX):
        body = body[len(RELATIVE_PREFIX):]

    return f"{NEGATION_PREFIX}{body}" if negated else body


def strip_all(patterns: Iterable[str]) -> tuple[str, ...]:
    """Apply strip_relativeness to every pattern, preserving order."""
    return tuple(strip_relativeness(pattern) for pattern in patterns)


@lru_cache(maxsize=2048)
def compile_pattern(body: str) -> pathspec.PathSpec:
    """Compile a single glob body into a PathSpec.

    Results are cached by pattern text, so every NormalizedRules value
    sharing a pattern shares the compiled regex as well.

    Args:
        body: Glob body without a leading ``!``.

    Returns:
        A PathSpec holding exactly one gitwildmatch pattern.

    Raises:
        ValueError: If pathspec rejects the pattern.
    """
    line = body
    if line.startswith("#"):
        # A leading # would read as a gitignore comment
        line = "\\" + line
    return pathspec.PathSpec.from_lines("gitwildmatch", [line])


@lru_cache(maxsize=2048)
def compile_glob(body: str) -> re.Pattern[str]:
    """Compile a glob body into a regex matched against the whole path.

    Supports:
    - ``**`` as a full segment: zero or more directories
    - ``*``: any characters except ``/``
    - ``?``: a single character except ``/``
    - ``[abc]``, ``[a-z]``, ``[!abc]``: character classes
    - ``\\x``: the literal character ``x``

    A leading ``/`` is dropped, since every glob is already anchored.

    Raises:
        ValueError: If the body ends with an unfinished escape.
        re.error: If a character class is not a valid regex class.
    """
    start = 1 if body.startswith("/") else 0
    parts: list[str] = []
    i = start
    n = len(body)

    while i < n:
        c = body[i]

        if c == "*":
            j = i
            while j < n and body[j] == "*":
                j += 1
            whole_segment = (i == start or body[i - 1] == "/") and (j == n or body[j] == "/")
            if j - i >= 2 and whole_segment:
                if j < n:
                    # **/ matches zero or more directories
                    parts.append("(?:.*/)?")
                    i = j + 1
                else:
                    parts.append(".*")
                    i = j
            else:
                parts.append("[^/]*")
                i = j
        elif c == "?":
            parts.append("[^/]")
            i += 1
        elif c == "[":
            j = i + 1
            if j < n and body[j] in "!^":
                j += 1
            if j < n and body[j] == "]":
                j += 1
            while j < n and body[j] != "]":
                j += 1
            if j >= n:
                # No closing bracket, treat as literal
                parts.append(re.escape(c))
                i += 1
            else:
                stuff = body[i + 1:j]
                if stuff.startswith("!"):
                    stuff = "^" + stuff[1:]
                elif stuff.startswith("^"):
                    stuff = "\\" + stuff
                parts.append(f"[{stuff}]")
                i = j + 1
        elif c == "\\":
            if i + 1 >= n:
                raise ValueError(f"Escape character found with no next character to escape: {body!r}")
            parts.append(re.escape(body[i + 1]))
            i += 2
        else:
            parts.append(re.escape(c))
            i += 1

    return re.compile("".join(parts))


def rule_mode(pattern: str, origin: PatternOrigin) -> MatchMode:
    """Pick the matching mode for a normalized pattern from a given list.

    Positive test and helper patterns are anchored globs unless they name
    a directory with a trailing ``/``.
    """
    if origin in GLOB_ORIGINS and not is_negated(pattern) and not pattern.endswith("/"):
        return MatchMode.GLOB
    return MatchMode.TREE


def validate_pattern(pattern: str, origin: PatternOrigin) -> None:
    """Check that a pattern is a usable glob.

    Args:
        pattern: The pattern as normalized, possibly with a leading ``!``.
        origin: The list the pattern came from.

    Raises:
        InvalidPatternError: If the pattern is empty, repeats the negation
            marker, or is rejected by the glob library.
    """
    body = pattern[1:] if is_negated(pattern) else pattern
    if not body.strip():
        raise InvalidPatternError("Empty glob pattern", pattern=pattern, origin=origin.value)
    if is_negated(body):
        raise InvalidPatternError(
            "Repeated negation marker in glob pattern",
            pattern=pattern,
            origin=origin.value,
        )

    try:
        spec = compile_pattern(body)
        if rule_mode(pattern, origin) is MatchMode.GLOB:
            compile_glob(body)
    except (ValueError, re.error) as e:
        raise InvalidPatternError(
            f"Invalid glob pattern: {e}",
            pattern=pattern,
            origin=origin.value,
        ) from e

    if not spec.patterns or spec.patterns[0].include is None:
        raise InvalidPatternError(
            "Glob pattern can never match a path",
            pattern=pattern,
            origin=origin.value,
        )


def parse_rule(
    pattern: str,
    negated_sign: Sign = Sign.EXCLUDE,
    plain_sign: Sign = Sign.INCLUDE,
    origin: PatternOrigin | None = None,
) -> SignedRule:
    """Turn a normalized pattern string into a SignedRule.

    Args:
        pattern: Pattern, possibly with a leading ``!``.
        negated_sign: Sign given to ``!`` patterns.
        plain_sign: Sign given to patterns without ``!``.
        origin: List the pattern came from; decides the matching mode.
            Without one the rule uses ``tree`` matching.
    """
    mode = rule_mode(pattern, origin) if origin is not None else MatchMode.TREE
    if is_negated(pattern):
        return SignedRule(pattern=pattern[1:], sign=negated_sign, mode=mode)
    return SignedRule(pattern=pattern, sign=plain_sign, mode=mode)


def parse_rules(patterns: Iterable[str], origin: PatternOrigin | None = None) -> tuple[SignedRule, ...]:
    """Parse glob strings with standard negation (``!`` excludes)."""
    return tuple(parse_rule(pattern, origin=origin) for pattern in patterns)


def evaluate(rules: Sequence[SignedRule], path: str) -> bool:
    """Evaluate ordered signed rules against a path; the last match wins.

    Args:
        rules: Rules in evaluation order.
        path: Posix-style path relative to the rules' working directory.

    Returns:
        True if the path ends up included.
    """
    verdict = False
    for rule in rules:
        if not rule.matches(path):
            continue
        if rule.sign is Sign.INCLUDE:
            verdict = True
        elif rule.sign is Sign.EXCLUDE:
            verdict = False
        else:
            verdict = not verdict
    return verdict

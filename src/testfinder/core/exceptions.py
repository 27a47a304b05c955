"""Custom exception hierarchy for testfinder.

This module defines the exception classes raised while normalizing
patterns, loading configuration and discovering files. All exceptions
inherit from the base TestfinderError class, allowing callers to catch
every testfinder error with a single except clause.
"""

from __future__ import annotations


class TestfinderError(Exception):
    """Base exception for all testfinder errors.

    Attributes:
        message: Human-readable error message.
        context: Optional dictionary of additional context about the error.
    """

    # Keep pytest from collecting this class when imported into test modules
    __test__ = False

    def __init__(self, message: str, context: dict | None = None):
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            context: Optional dictionary of additional context about the error.
        """
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including context if present."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigError(TestfinderError):
    """Exception raised for configuration errors.

    Raised when pattern lists, extensions or configuration files are
    invalid. Configuration errors are fatal and surface before any file
    is scanned.

    Example:
        >>> raise ConfigError("Extensions must not be empty", config_key="extensions")
    """

    def __init__(self, message: str, config_key: str | None = None, context: dict | None = None):
        """Initialize the config error.

        Args:
            message: Human-readable error message.
            config_key: The configuration key that caused the error.
            context: Optional dictionary of additional context.
        """
        ctx = context or {}
        if config_key:
            ctx["config_key"] = config_key
        super().__init__(message, ctx)
        self.config_key = config_key


class InvalidPatternError(ConfigError):
    """Exception raised when a glob pattern cannot be compiled.

    Example:
        >>> raise InvalidPatternError("Empty pattern", pattern="!", origin="test")
    """

    def __init__(
        self,
        message: str,
        pattern: str,
        origin: str,
        context: dict | None = None,
    ):
        """Initialize the pattern error.

        Args:
            message: Human-readable error message.
            pattern: The offending pattern, as supplied by the caller.
            origin: Which pattern list it came from (test, helper or ignore).
            context: Optional dictionary of additional context.
        """
        ctx = context or {}
        ctx["pattern"] = pattern
        ctx["origin"] = origin
        super().__init__(message, context=ctx)
        self.pattern = pattern
        self.origin = origin


class DiscoveryError(TestfinderError):
    """Exception raised when walking a directory tree fails.

    Raised for a missing or unreadable root directory and for any I/O
    failure during traversal. Partial results are never returned.

    Attributes:
        path: The path that caused the error, if applicable.
        cause: The underlying exception, if any.
        errors: Individual errors when several failures were aggregated.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        cause: BaseException | None = None,
        errors: list[DiscoveryError] | None = None,
        context: dict | None = None,
    ):
        """Initialize the discovery error.

        Args:
            message: Human-readable error message.
            path: The path that caused the error, if applicable.
            cause: The underlying exception, if any.
            errors: Individual errors when several failures were aggregated.
            context: Optional dictionary of additional context.
        """
        ctx = context or {}
        if path:
            ctx["path"] = path
        if cause is not None:
            ctx["cause"] = str(cause)
        if errors:
            ctx["failures"] = len(errors)
        super().__init__(message, ctx)
        self.path = path
        self.cause = cause
        self.errors = errors or []


class DiscoveryCancelledError(DiscoveryError):
    """Exception raised when a discovery is cancelled or exceeds its deadline.

    Example:
        >>> raise DiscoveryCancelledError("Discovery cancelled", path="/project")
    """

"""Directory discovery for testfinder.

This module provides the Discoverer class which walks a directory tree,
classifies every regular file it finds and buckets the results into test
and helper collections. Directory listings run in worker threads through
asyncio.to_thread(), bounded by an asyncio.Semaphore, so large trees do
not block the event loop or flood the filesystem.

A walk either completes or fails as a whole: an unreadable directory, a
missing root, a cancellation or an exceeded deadline all raise instead of
returning a partial result.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path

from testfinder.core.classify import classify
from testfinder.core.exceptions import DiscoveryCancelledError, DiscoveryError
from testfinder.core.models import DiscoveryResult, NormalizedRules

logger = logging.getLogger(__name__)

# (st_dev, st_ino) identifying a directory, used to break symlink loops
DirectoryKey = tuple[int, int]


@dataclass
class DirectoryListing:
    """Outcome of listing and classifying a single directory.

    Attributes:
        directory: The directory that was listed.
        subdirectories: Child directories to descend into, with their keys.
        tests: Test files found directly in the directory.
        helpers: Helper files found directly in the directory.
        files_examined: Number of regular files classified.
    """

    directory: Path
    subdirectories: list[tuple[Path, DirectoryKey]] = field(default_factory=list)
    tests: list[Path] = field(default_factory=list)
    helpers: list[Path] = field(default_factory=list)
    files_examined: int = 0


class Discoverer:
    """Async walker that buckets test and helper files under a root.

    Dot entries and dependency directories are skipped while walking, so
    their subtrees are never listed. Every other regular file is passed
    to classify().

    Features:
    - Configurable concurrency limit via asyncio.Semaphore
    - Breadth-first walk with one worker-thread listing per directory
    - Cancellation via cancel() and an optional deadline
    - Symlinked directories followed once, loops broken by inode

    Example:
        >>> rules = normalize(extensions=["js"], cwd="/project")
        >>> result = asyncio.run(Discoverer(rules).discover("/project"))
        >>> sorted(result.tests)
    """

    DEFAULT_CONCURRENCY_LIMIT = 50

    def __init__(
        self,
        rules: NormalizedRules,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
        timeout: float | None = None,
    ):
        """Initialize the discoverer.

        Args:
            rules: Normalized rules used to classify every file.
            concurrency_limit: Maximum number of directories listed at once.
                              Defaults to 50.
            timeout: Optional deadline in seconds for a whole walk. None or
                    0 disables it.
        """
        if concurrency_limit < 1:
            raise ValueError("concurrency_limit must be at least 1")

        self.rules = rules
        self.concurrency_limit = concurrency_limit
        self.timeout = timeout or None

        self._semaphore = asyncio.Semaphore(concurrency_limit)
        self._cancel_event = asyncio.Event()

        self._directories_scanned = 0
        self._files_examined = 0

    @property
    def is_cancelled(self) -> bool:
        """Check if cancellation has been requested."""
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Request cancellation of the ongoing or next discovery.

        The walk stops before listing further directories and discover()
        raises DiscoveryCancelledError.
        """
        self._cancel_event.set()
        logger.info("Discovery cancellation requested")

    def reset(self) -> None:
        """Reset counters and the cancellation flag so the instance can be reused."""
        self._cancel_event.clear()
        self._directories_scanned = 0
        self._files_examined = 0
        self._semaphore = asyncio.Semaphore(self.concurrency_limit)

    def _should_descend(self, name: str) -> bool:
        return not name.startswith(".") and name not in self.rules.dependency_directories

    def _list_directory(self, directory: Path) -> DirectoryListing:
        """List and classify one directory. Runs in a worker thread.

        Raises:
            DiscoveryCancelledError: If cancellation was requested.
            DiscoveryError: If the directory or one of its entries cannot
                be read.
        """
        if self.is_cancelled:
            raise DiscoveryCancelledError("Discovery cancelled", path=str(directory))

        listing = DirectoryListing(directory=directory)
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    if entry.name.startswith("."):
                        continue
                    if entry.is_dir():
                        if self._should_descend(entry.name):
                            stat = entry.stat()
                            listing.subdirectories.append((Path(entry.path), (stat.st_dev, stat.st_ino)))
                    elif entry.is_file():
                        file_path = Path(entry.path)
                        listing.files_examined += 1
                        classification = classify(file_path, self.rules)
                        if classification.is_test:
                            listing.tests.append(file_path)
                        elif classification.is_helper:
                            listing.helpers.append(file_path)
        except OSError as e:
            raise DiscoveryError(
                f"Cannot read directory: {directory}",
                path=str(directory),
                cause=e,
            ) from e

        logger.debug(
            f"Listed {directory}: {len(listing.tests)} tests, {len(listing.helpers)} helpers, "
            f"{len(listing.subdirectories)} subdirectories"
        )
        return listing

    async def _list(self, directory: Path) -> DirectoryListing:
        """List a directory in a worker thread, respecting the concurrency limit."""
        async with self._semaphore:
            return await asyncio.to_thread(self._list_directory, directory)

    def _raise_failures(self, failures: list[BaseException], root: Path) -> None:
        """Raise a single error for the failures collected in one walk level."""
        for failure in failures:
            if isinstance(failure, DiscoveryCancelledError) or not isinstance(failure, DiscoveryError):
                raise failure

        if len(failures) == 1:
            raise failures[0]

        errors = [failure for failure in failures if isinstance(failure, DiscoveryError)]
        raise DiscoveryError(
            f"Discovery failed in {len(errors)} directories under {root}",
            path=str(root),
            cause=errors[0],
            errors=errors,
        )

    async def _walk(self, root: Path, root_key: DirectoryKey) -> DiscoveryResult:
        """Walk the tree breadth first and merge every listing."""
        result = DiscoveryResult(root=root)
        visited: set[DirectoryKey] = {root_key}
        pending = [root]

        while pending:
            if self.is_cancelled:
                raise DiscoveryCancelledError("Discovery cancelled", path=str(root))

            outcomes = await asyncio.gather(
                *(self._list(directory) for directory in pending),
                return_exceptions=True,
            )

            failures = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
            if failures:
                self._raise_failures(failures, root)

            next_level: list[Path] = []
            for listing in outcomes:
                self._directories_scanned += 1
                self._files_examined += listing.files_examined
                result.tests.update(listing.tests)
                result.helpers.update(listing.helpers)
                for subdirectory, key in listing.subdirectories:
                    if key in visited:
                        logger.debug(f"Skipping already visited directory: {subdirectory}")
                        continue
                    visited.add(key)
                    next_level.append(subdirectory)

            pending = next_level

        if self.is_cancelled:
            raise DiscoveryCancelledError("Discovery cancelled", path=str(root))

        result.directories_scanned = self._directories_scanned
        result.files_examined = self._files_examined
        return result

    async def discover(self, root_directory: str | os.PathLike[str]) -> DiscoveryResult:
        """Walk root_directory and bucket its test and helper files.

        Args:
            root_directory: Directory to walk. Relative paths are resolved
                against the process working directory.

        Returns:
            DiscoveryResult with absolute test and helper paths.

        Raises:
            DiscoveryError: If the root is missing, is not a directory, or
                any directory below it cannot be read.
            DiscoveryCancelledError: If cancel() was called or the deadline
                passed before the walk finished.
        """
        root = Path(os.path.abspath(root_directory))

        try:
            root_stat = root.stat()
        except FileNotFoundError as e:
            raise DiscoveryError(f"Root directory does not exist: {root}", path=str(root), cause=e) from e
        except OSError as e:
            raise DiscoveryError(f"Cannot access root directory: {root}", path=str(root), cause=e) from e

        if not root.is_dir():
            raise DiscoveryError(f"Root path is not a directory: {root}", path=str(root))

        self._directories_scanned = 0
        self._files_examined = 0
        start_time = time.time()
        root_key = (root_stat.st_dev, root_stat.st_ino)

        try:
            if self.timeout is not None:
                result = await asyncio.wait_for(self._walk(root, root_key), self.timeout)
            else:
                result = await self._walk(root, root_key)
        except asyncio.TimeoutError as e:
            self._cancel_event.set()
            raise DiscoveryCancelledError(
                f"Discovery exceeded its deadline of {self.timeout}s",
                path=str(root),
                cause=e,
            ) from e

        logger.info(
            f"Discovery complete: {len(result.tests)} tests, {len(result.helpers)} helpers "
            f"in {result.directories_scanned} directories ({time.time() - start_time:.2f}s)"
        )
        return result

    def get_stats(self) -> dict:
        """Get statistics of the current or last discovery."""
        return {
            "directories_scanned": self._directories_scanned,
            "files_examined": self._files_examined,
            "cancelled": self.is_cancelled,
        }


async def discover(
    root_directory: str | os.PathLike[str],
    rules: NormalizedRules,
    *,
    concurrency_limit: int = Discoverer.DEFAULT_CONCURRENCY_LIMIT,
    timeout: float | None = None,
) -> DiscoveryResult:
    """Walk a directory and bucket its test and helper files.

    Convenience wrapper creating a one-shot Discoverer. Use the class
    directly when the walk must be cancellable from elsewhere.
    """
    discoverer = Discoverer(rules, concurrency_limit=concurrency_limit, timeout=timeout)
    return await discoverer.discover(root_directory)

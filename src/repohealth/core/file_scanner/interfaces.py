"""
Abstract interfaces for file scanning operations.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from .models import FileStat, ScannedFile


class FileSystemInterface(ABC):
    """
    Minimal filesystem capability used by the scanning core.

    The real implementation reads the local disk; tests substitute an
    in-memory implementation.
    """

    @abstractmethod
    def resolve(self, path: Path | str) -> Path:
        """
        Return the absolute form of a path.

        Raises:
            OSError: If the path cannot be resolved
        """
        pass

    @abstractmethod
    def is_dir(self, path: Path) -> bool:
        """Check whether a path exists and is a directory."""
        pass

    @abstractmethod
    def is_file(self, path: Path) -> bool:
        """Check whether a path exists and is a regular file."""
        pass

    @abstractmethod
    def scandir(self, path: Path) -> list[FileStat]:
        """
        List the entries of a directory, sorted by name.

        Args:
            path: Directory to list

        Returns:
            FileStat for every entry

        Raises:
            OSError: If the directory cannot be listed
        """
        pass

    @abstractmethod
    def open_binary(self, path: Path) -> BinaryIO:
        """
        Open a file for binary reading.

        The returned object is a context manager and must be closed by the caller.

        Raises:
            OSError: If the file cannot be opened
        """
        pass


class FileScannerInterface(ABC):
    """
    Abstract interface for the unified scanner.

    Implementations perform one traversal and expose its results through
    a thread-safe cache.
    """

    @abstractmethod
    def scan_all(self) -> dict[str, ScannedFile]:
        """
        Traverse the repository and rebuild the cache from scratch.

        Returns:
            Copy of the new cache, keyed by relative path
        """
        pass

    @abstractmethod
    def get_cached_files(self) -> dict[str, ScannedFile]:
        """Return a copy of the current cache."""
        pass

    @abstractmethod
    def get_cached_file(self, relative_path: str) -> ScannedFile | None:
        """Return one cached record, or None if absent."""
        pass

    @abstractmethod
    def filter_cached_files(
        self, predicate: Callable[[ScannedFile], bool]
    ) -> list[ScannedFile]:
        """Return cached records for which predicate is true."""
        pass

    @abstractmethod
    def get_files(self) -> list[ScannedFile]:
        """Return cached records, scanning first if no traversal has completed."""
        pass

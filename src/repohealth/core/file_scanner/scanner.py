"""
Unified scanner: one traversal that classifies, caches and counts every
repository file, shared by all analyzers through a thread-safe cache.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from .cache import ScanCache
from .classifier import FileClassifier
from .errors import ScanCancelledError, ScanError
from .filesystem import LocalFileSystem
from .ignore_rules import DEFAULT_IGNORE_FILE_NAME, IgnoreRuleSet
from .interfaces import FileScannerInterface, FileSystemInterface
from .models import (
    DEFAULT_CACHE_THRESHOLD,
    DEFAULT_STREAM_CHUNK_SIZE,
    DEFAULT_STREAMING_THRESHOLD,
    DEFAULT_VCS_DIR_NAME,
    FileStat,
    ScannedFile,
    file_extension,
)

if TYPE_CHECKING:
    from repohealth.core.config import ScanConfig

logger = logging.getLogger(__name__)


class FileScanner(FileScannerInterface):
    """
    Concrete implementation of FileScannerInterface.

    Provides:
    - A single recursive traversal per scan_all() call (Idle -> Scanning -> Idle)
    - Exclusion of the version-control directory and ignore-rule matches
    - Text/binary classification from the first 512 bytes
    - Content caching for small text files, streaming line counts for large ones
    - Copy-on-read access to the results for concurrent analyzers

    Each scan_all() discards the previous results; scanning is not incremental.
    """

    def __init__(
        self,
        root_path: Path | str,
        file_system: FileSystemInterface | None = None,
        cache_threshold: int = DEFAULT_CACHE_THRESHOLD,
        streaming_threshold: int = DEFAULT_STREAMING_THRESHOLD,
        stream_chunk_size: int = DEFAULT_STREAM_CHUNK_SIZE,
        vcs_dir_name: str = DEFAULT_VCS_DIR_NAME,
        ignore_file_name: str = DEFAULT_IGNORE_FILE_NAME,
        ignore_rules: IgnoreRuleSet | None = None,
    ):
        """
        Initialize the FileScanner.

        Args:
            root_path: Repository root directory
            file_system: Filesystem to read from. Defaults to the local disk.
            cache_threshold: Largest file size (bytes) whose content is cached
            streaming_threshold: Files above this size are searched by streaming
            stream_chunk_size: Read size for streaming line counts
            vcs_dir_name: Version-control metadata directory, always skipped
            ignore_file_name: Ignore file read from the repository root
            ignore_rules: Pre-loaded rules. If None, they are loaded from
                          ignore_file_name at construction.

        Raises:
            ScanError: If the root path cannot be resolved
        """
        self._fs = file_system or LocalFileSystem()

        try:
            self._root_path = self._fs.resolve(root_path)
        except OSError as e:
            raise ScanError(f"Failed to resolve root path {root_path}: {e}", root_path) from e

        self._vcs_dir_name = vcs_dir_name
        self._streaming_threshold = streaming_threshold
        self._classifier = FileClassifier(
            self._fs,
            cache_threshold=cache_threshold,
            stream_chunk_size=stream_chunk_size,
        )
        self._ignore_rules = (
            ignore_rules
            if ignore_rules is not None
            else IgnoreRuleSet.load(self._root_path, file_system=self._fs, file_name=ignore_file_name)
        )
        self._cache = ScanCache()
        # Serializes the "scan if nothing cached yet" path of get_files()
        self._ensure_lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        root_path: Path | str,
        scan_config: "ScanConfig",
        file_system: FileSystemInterface | None = None,
    ) -> "FileScanner":
        """
        Create a scanner from a ScanConfig section.

        Args:
            root_path: Repository root directory
            scan_config: Scan section of the configuration
            file_system: Optional filesystem override
        """
        return cls(
            root_path,
            file_system=file_system,
            cache_threshold=scan_config.cache_threshold_bytes,
            streaming_threshold=scan_config.streaming_threshold_bytes,
            stream_chunk_size=scan_config.stream_chunk_size,
            vcs_dir_name=scan_config.vcs_dir_name,
            ignore_file_name=scan_config.ignore_file_name,
        )

    @property
    def root_path(self) -> Path:
        return self._root_path

    @property
    def file_system(self) -> FileSystemInterface:
        return self._fs

    @property
    def ignore_rules(self) -> IgnoreRuleSet:
        return self._ignore_rules

    @property
    def classifier(self) -> FileClassifier:
        return self._classifier

    @property
    def streaming_threshold(self) -> int:
        return self._streaming_threshold

    @property
    def cache(self) -> ScanCache:
        return self._cache

    def is_vcs_path(self, relative_path: str) -> bool:
        """True if any component of relative_path is the version-control directory."""
        return self._vcs_dir_name in relative_path.split("/")

    def relative_path(self, path: Path) -> str:
        """Return path relative to the root, '/' separated."""
        return path.relative_to(self._root_path).as_posix()

    def iter_files(self, cancel_event: threading.Event | None = None) -> Iterator[tuple[FileStat, str]]:
        """
        Walk the repository and yield every file that is not excluded.

        Directories matched by an ignore rule are pruned with their whole
        subtree. Nothing is cached; scan_all() and the search fallback
        share this walk.

        Args:
            cancel_event: Optional event checked before every entry

        Yields:
            (FileStat, relative_path) for each candidate file

        Raises:
            ScanError: If the root is not a directory or a directory cannot be listed
            ScanCancelledError: If cancel_event is set mid-walk
        """
        if not self._fs.is_dir(self._root_path):
            raise ScanError(f"Root path is not a directory: {self._root_path}", self._root_path)

        yield from self._walk(self._root_path, cancel_event)

    def _walk(
        self, directory: Path, cancel_event: threading.Event | None
    ) -> Iterator[tuple[FileStat, str]]:
        try:
            entries = self._fs.scandir(directory)
        except OSError as e:
            raise ScanError(f"Failed to list directory {directory}: {e}", directory) from e

        for entry in entries:
            if cancel_event is not None and cancel_event.is_set():
                raise ScanCancelledError(f"Scan cancelled at {entry.path}", entry.path)

            relative_path = self.relative_path(entry.path)

            if self.is_vcs_path(relative_path):
                continue

            # Rules are tested against directories too, unlike a files-only
            # walk: a matching directory is pruned with its whole subtree, so
            # files below it are absent even when no rule names them.
            if self._ignore_rules.matches(relative_path):
                logger.debug(f"Ignoring: {relative_path}")
                continue

            if entry.is_dir:
                yield from self._walk(entry.path, cancel_event)
            else:
                yield entry, relative_path

    def scan_all(self, cancel_event: threading.Event | None = None) -> dict[str, ScannedFile]:
        """
        Traverse the repository once and rebuild the cache.

        The cache write lock is held for the whole traversal, so readers
        never observe a partial result. On failure the cache is left empty.

        Args:
            cancel_event: Optional event for cooperative cancellation

        Returns:
            Copy of the new cache keyed by relative path

        Raises:
            ScanError: On a bad root or a directory walk error
        """
        logger.info(f"Scanning repository: {self._root_path}")
        start = time.perf_counter()

        with self._cache.rebuild() as building:
            for entry, relative_path in self.iter_files(cancel_event):
                building[relative_path] = self._scan_file(entry, relative_path)

        logger.info(
            f"Scanned {len(self._cache)} files in {time.perf_counter() - start:.2f}s"
        )
        return self._cache.get_all()

    def _scan_file(self, entry: FileStat, relative_path: str) -> ScannedFile:
        """
        Build the record for one file. Never raises for read errors.

        Args:
            entry: Filesystem metadata for the file
            relative_path: Key under which the record is cached
        """
        is_text, first_bytes = self._classifier.classify(entry.path)

        content: bytes | None = None
        line_count = 0
        if is_text:
            if self._classifier.should_cache_content(entry.size, is_text):
                content = self._classifier.read_content(entry.path)
            line_count = self._classifier.count_lines(entry.path, content)
        else:
            logger.debug(f"Binary or unreadable file: {relative_path}")

        return ScannedFile(
            path=entry.path,
            relative_path=relative_path,
            size=entry.size,
            extension=file_extension(entry.name),
            modified_time=entry.modified_time,
            is_text=is_text,
            line_count=line_count,
            content=content,
            first_bytes=first_bytes,
        )

    def get_cached_files(self) -> dict[str, ScannedFile]:
        return self._cache.get_all()

    def get_cached_file(self, relative_path: str) -> ScannedFile | None:
        return self._cache.get_one(relative_path)

    def filter_cached_files(
        self, predicate: Callable[[ScannedFile], bool]
    ) -> list[ScannedFile]:
        return self._cache.filter(predicate)

    def ensure_scanned(self) -> None:
        """Run a traversal unless one has already completed."""
        with self._ensure_lock:
            if not self._cache.is_populated:
                self.scan_all()

    def get_files(self) -> list[ScannedFile]:
        """
        Return all files, cached-or-scan-now.

        Analyzers call this instead of checking the cache themselves.

        Returns:
            Records ordered by relative path
        """
        self.ensure_scanned()
        return self._cache.filter(lambda _: True)

    def get_files_by_extension(self, extensions: list[str] | set[str]) -> list[ScannedFile]:
        """
        Return files whose extension is in extensions (case-insensitive).
        """
        wanted = {ext.lower() for ext in extensions}
        self.ensure_scanned()
        return self._cache.filter(lambda f: f.extension in wanted)

    def get_large_files(self, min_size_bytes: int) -> list[ScannedFile]:
        """Return files whose size is at least min_size_bytes."""
        self.ensure_scanned()
        return self._cache.filter(lambda f: f.size >= min_size_bytes)

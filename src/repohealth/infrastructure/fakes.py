"""
Fake implementations for testing.

Provides in-memory implementations of infrastructure interfaces
for use in unit and property tests without touching the local disk.
"""

from __future__ import annotations

import io
import posixpath
from pathlib import Path
from typing import BinaryIO

from repohealth.core.file_scanner import FileStat, FileSystemInterface


class InMemoryFileSystem(FileSystemInterface):
    """
    In-memory filesystem for testing.

    Implements FileSystemInterface over a dict of absolute path -> bytes.
    Paths given relative to the filesystem root are anchored there.
    Supports injecting read and listing failures to exercise the
    scanner's error handling.
    """

    def __init__(self, root: str = "/repo"):
        """
        Initialize an empty filesystem containing only its root directory.

        Args:
            root: Absolute path of the repository root
        """
        self._root = Path(root)
        self._files: dict[Path, bytes] = {}
        self._mtimes: dict[Path, float] = {}
        self._dirs: set[Path] = {Path("/"), self._root}
        self._unreadable: set[Path] = set()
        self._unlistable: set[Path] = set()
        # Every path passed to open_binary, in call order
        self.opened: list[Path] = []

    @property
    def root(self) -> Path:
        return self._root

    def _absolute(self, path: Path | str) -> Path:
        p = Path(path)
        if not p.is_absolute():
            p = self._root / p
        return Path(posixpath.normpath(p.as_posix()))

    def _add_parents(self, path: Path) -> None:
        for parent in path.parents:
            self._dirs.add(parent)

    def add_file(
        self,
        path: Path | str,
        content: bytes | str = b"",
        modified_time: float = 0.0,
    ) -> Path:
        """
        Create or overwrite a file, creating parent directories.

        Args:
            path: Absolute path, or path relative to the root
            content: File content; str is encoded as UTF-8
            modified_time: Reported modification timestamp

        Returns:
            The absolute path of the file
        """
        abs_path = self._absolute(path)
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._files[abs_path] = content
        self._mtimes[abs_path] = modified_time
        self._add_parents(abs_path)
        return abs_path

    def add_dir(self, path: Path | str) -> Path:
        """Create a directory and its parents."""
        abs_path = self._absolute(path)
        self._dirs.add(abs_path)
        self._add_parents(abs_path)
        return abs_path

    def remove(self, path: Path | str) -> None:
        """Remove a file, or a directory with everything below it."""
        abs_path = self._absolute(path)
        self._files.pop(abs_path, None)
        self._mtimes.pop(abs_path, None)
        if abs_path in self._dirs:
            self._dirs = {d for d in self._dirs if d != abs_path and abs_path not in d.parents}
            for f in [f for f in self._files if abs_path in f.parents]:
                del self._files[f]
                self._mtimes.pop(f, None)

    def make_unreadable(self, path: Path | str) -> None:
        """Make open_binary() raise PermissionError for path."""
        self._unreadable.add(self._absolute(path))

    def fail_listing(self, path: Path | str) -> None:
        """Make scandir() raise PermissionError for the directory at path."""
        self._unlistable.add(self._absolute(path))

    def resolve(self, path: Path | str) -> Path:
        return self._absolute(path)

    def is_dir(self, path: Path) -> bool:
        return self._absolute(path) in self._dirs

    def is_file(self, path: Path) -> bool:
        return self._absolute(path) in self._files

    def scandir(self, path: Path) -> list[FileStat]:
        abs_path = self._absolute(path)
        if abs_path in self._unlistable:
            raise PermissionError(f"Permission denied: '{abs_path}'")
        if abs_path not in self._dirs:
            if abs_path in self._files:
                raise NotADirectoryError(f"Not a directory: '{abs_path}'")
            raise FileNotFoundError(f"No such file or directory: '{abs_path}'")

        entries = [
            FileStat(path=d, name=d.name, is_dir=True)
            for d in self._dirs
            if d.parent == abs_path and d != abs_path
        ]
        entries.extend(
            FileStat(
                path=f,
                name=f.name,
                is_dir=False,
                size=len(content),
                modified_time=self._mtimes.get(f, 0.0),
            )
            for f, content in self._files.items()
            if f.parent == abs_path
        )
        entries.sort(key=lambda e: e.name)
        return entries

    def open_binary(self, path: Path) -> BinaryIO:
        abs_path = self._absolute(path)
        self.opened.append(abs_path)
        if abs_path in self._unreadable:
            raise PermissionError(f"Permission denied: '{abs_path}'")
        if abs_path in self._dirs:
            raise IsADirectoryError(f"Is a directory: '{abs_path}'")
        if abs_path not in self._files:
            raise FileNotFoundError(f"No such file or directory: '{abs_path}'")
        return io.BytesIO(self._files[abs_path])

    def open_count(self, path: Path | str) -> int:
        """Number of times open_binary() was called for path."""
        abs_path = self._absolute(path)
        return sum(1 for p in self.opened if p == abs_path)

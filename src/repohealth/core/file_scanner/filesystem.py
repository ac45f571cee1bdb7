"""
Local disk implementation of FileSystemInterface.
"""

import logging
import os
from pathlib import Path
from typing import BinaryIO

from .interfaces import FileSystemInterface
from .models import FileStat

logger = logging.getLogger(__name__)


class LocalFileSystem(FileSystemInterface):
    """
    FileSystemInterface backed by os.scandir and the builtin open().

    Symlinks are reported as non-directories so a traversal never follows
    a link into another tree; reading a symlinked file reads its target.
    """

    def resolve(self, path: Path | str) -> Path:
        return Path(os.path.abspath(os.path.expanduser(str(path))))

    def is_dir(self, path: Path) -> bool:
        return os.path.isdir(path)

    def is_file(self, path: Path) -> bool:
        return os.path.isfile(path)

    def scandir(self, path: Path) -> list[FileStat]:
        entries: list[FileStat] = []
        with os.scandir(path) as it:
            for entry in it:
                is_dir = entry.is_dir(follow_symlinks=False)
                if is_dir:
                    entries.append(
                        FileStat(path=Path(entry.path), name=entry.name, is_dir=True)
                    )
                    continue
                entries.append(self._file_stat(entry))
        entries.sort(key=lambda e: e.name)
        return entries

    def _file_stat(self, entry: os.DirEntry) -> FileStat:
        """Stat a non-directory entry, falling back to lstat for broken links."""
        try:
            st = entry.stat(follow_symlinks=True)
        except OSError:
            st = entry.stat(follow_symlinks=False)
            logger.debug(f"Broken symlink: {entry.path}")
        return FileStat(
            path=Path(entry.path),
            name=entry.name,
            is_dir=False,
            size=st.st_size,
            modified_time=st.st_mtime,
        )

    def open_binary(self, path: Path) -> BinaryIO:
        return open(path, "rb")

"""
Data models and constants for the file scanner module.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path

# Number of leading bytes inspected for binary detection
PREFIX_SIZE = 512

# Files up to this size have their full content cached during a scan
DEFAULT_CACHE_THRESHOLD = 1024 * 1024  # 1 MiB

# Files above this size are searched and counted with streaming reads
DEFAULT_STREAMING_THRESHOLD = 1024 * 1024  # 1 MiB

# Read size used by the streaming line counter
DEFAULT_STREAM_CHUNK_SIZE = 64 * 1024  # 64 KiB

# Version-control metadata directory, always excluded from scans
DEFAULT_VCS_DIR_NAME = ".git"


@dataclass(frozen=True)
class FileStat:
    """
    Filesystem metadata for one directory entry.

    Attributes:
        path: Absolute path to the entry
        name: Base name of the entry
        is_dir: True if the entry is a directory (symlinks are never directories)
        size: Size in bytes (0 for directories)
        modified_time: Modification timestamp (Unix epoch)
    """

    path: Path
    name: str
    is_dir: bool
    size: int = 0
    modified_time: float = 0.0


@dataclass(frozen=True)
class ScannedFile:
    """
    Represents one repository file discovered by a traversal.

    Records are immutable once inserted into the scan cache; a fresh
    traversal replaces the whole set.

    Attributes:
        path: Absolute path to the file
        relative_path: Path relative to the repository root, '/' separated
        size: File size in bytes
        extension: Lowercased extension including the dot ('' if none)
        modified_time: File modification timestamp (Unix epoch)
        is_text: False if a null byte was found in the first 512 bytes
                 or the file could not be read
        line_count: Number of lines (0 for binary or unreadable files)
        content: Full content, set only for text files within the cache threshold
        first_bytes: Prefix used for binary detection, hidden from the public view
    """

    path: Path
    relative_path: str
    size: int
    extension: str
    modified_time: float
    is_text: bool = False
    line_count: int = 0
    content: bytes | None = field(default=None, repr=False)
    first_bytes: bytes | None = field(default=None, repr=False, compare=False)

    @property
    def has_content(self) -> bool:
        """True if the full content was cached during the scan."""
        return self.content is not None

    def public_view(self) -> "ScannedFile":
        """Return a copy without the binary-detection prefix."""
        return replace(self, first_bytes=None)


@dataclass(frozen=True)
class MatchRecord:
    """
    One pattern hit produced by a search.

    Attributes:
        file: Path relative to the repository root
        line: 1-based line number
        content: Full text of the matching line
        pattern: The pattern string that matched
    """

    file: str
    line: int
    content: str
    pattern: str

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary."""
        return {
            "file": self.file,
            "line": self.line,
            "content": self.content,
            "pattern": self.pattern,
        }


def file_extension(name: str) -> str:
    """
    Return the lowercased extension of a file name, including the dot.

    Unlike Path.suffix, a leading dot counts: '.env' has extension '.env'.
    """
    index = name.rfind(".")
    if index == -1:
        return ""
    return name[index:].lower()

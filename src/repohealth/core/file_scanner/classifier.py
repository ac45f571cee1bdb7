"""
Per-file classification: text/binary detection, content caching decisions
and line counting.
"""

import logging
from pathlib import Path

from .interfaces import FileSystemInterface
from .lines import count_lines_in_bytes, count_lines_streaming
from .models import DEFAULT_CACHE_THRESHOLD, DEFAULT_STREAM_CHUNK_SIZE, PREFIX_SIZE

logger = logging.getLogger(__name__)


def is_text_prefix(prefix: bytes) -> bool:
    """A prefix is text unless it contains a null byte."""
    return b"\x00" not in prefix


class FileClassifier:
    """
    Classifies single files for the unified scanner.

    All read failures are absorbed: an unreadable file is reported as
    binary (classify) or as having no content / zero lines, so that one
    bad file never aborts a traversal.
    """

    def __init__(
        self,
        file_system: FileSystemInterface,
        cache_threshold: int = DEFAULT_CACHE_THRESHOLD,
        stream_chunk_size: int = DEFAULT_STREAM_CHUNK_SIZE,
    ):
        """
        Initialize the classifier.

        Args:
            file_system: Filesystem used to open files
            cache_threshold: Maximum size in bytes eligible for content caching
            stream_chunk_size: Read size for the streaming line counter
        """
        self._fs = file_system
        self._cache_threshold = cache_threshold
        self._stream_chunk_size = stream_chunk_size

    @property
    def cache_threshold(self) -> int:
        return self._cache_threshold

    def classify(self, path: Path) -> tuple[bool, bytes]:
        """
        Read up to 512 bytes and decide whether the file is text.

        Args:
            path: Absolute path to the file

        Returns:
            (is_text, first_bytes). Unreadable files yield (False, b"").
        """
        try:
            with self._fs.open_binary(path) as f:
                prefix = f.read(PREFIX_SIZE)
        except PermissionError as e:
            logger.warning(f"Permission denied reading file: {path} - {e}")
            return False, b""
        except OSError as e:
            logger.warning(f"Error reading file: {path} - {e}")
            return False, b""

        return is_text_prefix(prefix), prefix

    def should_cache_content(self, size: int, is_text: bool) -> bool:
        """True iff the file is text and within the cache threshold."""
        return is_text and size <= self._cache_threshold

    def read_content(self, path: Path) -> bytes | None:
        """
        Read a whole file into memory.

        Returns:
            File content, or None if it could not be read
        """
        try:
            with self._fs.open_binary(path) as f:
                return f.read()
        except OSError as e:
            logger.warning(f"Failed to cache content of {path}: {e}")
            return None

    def count_lines(self, path: Path, content: bytes | None = None) -> int:
        """
        Count lines from cached content, or by streaming the file.

        Args:
            path: Absolute path to the file
            content: Cached content, if any

        Returns:
            Line count, 0 if the file could not be streamed
        """
        if content is not None:
            return count_lines_in_bytes(content)

        try:
            with self._fs.open_binary(path) as f:
                return count_lines_streaming(f, self._stream_chunk_size)
        except OSError as e:
            logger.warning(f"Failed to count lines of {path}: {e}")
            return 0

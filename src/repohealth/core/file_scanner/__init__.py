"""
FileScanner module for repo-health.

Provides a single-pass repository traversal with ignore-rule support,
binary detection, content caching and line counting, exposed through a
thread-safe cache.
"""

from .cache import ScanCache
from .classifier import FileClassifier, is_text_prefix
from .errors import ScanCancelledError, ScanError
from .filesystem import LocalFileSystem
from .ignore_rules import IgnoreRuleSet, glob_match, load_rules, matches
from .interfaces import FileScannerInterface, FileSystemInterface
from .lines import (
    count_lines_in_bytes,
    count_lines_streaming,
    iter_lines_from_bytes,
    iter_lines_streaming,
)
from .models import (
    DEFAULT_CACHE_THRESHOLD,
    DEFAULT_STREAM_CHUNK_SIZE,
    DEFAULT_STREAMING_THRESHOLD,
    PREFIX_SIZE,
    FileStat,
    MatchRecord,
    ScannedFile,
    file_extension,
)
from .scanner import FileScanner

__all__ = [
    # Main classes
    "FileScanner",
    "FileScannerInterface",
    "ScanCache",
    "FileClassifier",
    # Filesystem access
    "FileSystemInterface",
    "LocalFileSystem",
    # Models
    "FileStat",
    "ScannedFile",
    "MatchRecord",
    "file_extension",
    # Ignore rules
    "IgnoreRuleSet",
    "load_rules",
    "matches",
    "glob_match",
    # Line helpers
    "count_lines_in_bytes",
    "count_lines_streaming",
    "iter_lines_from_bytes",
    "iter_lines_streaming",
    "is_text_prefix",
    # Errors
    "ScanError",
    "ScanCancelledError",
    # Constants
    "PREFIX_SIZE",
    "DEFAULT_CACHE_THRESHOLD",
    "DEFAULT_STREAMING_THRESHOLD",
    "DEFAULT_STREAM_CHUNK_SIZE",
]

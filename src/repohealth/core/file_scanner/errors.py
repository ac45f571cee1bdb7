"""
Exceptions raised by the file scanner.

Only structural failures surface as exceptions; per-file read errors are
logged and absorbed by the classifier.
"""

from pathlib import Path


class ScanError(Exception):
    """A traversal could not start or was aborted by a walk error."""

    def __init__(self, message: str, path: Path | str | None = None):
        super().__init__(message)
        self.path = path


class ScanCancelledError(ScanError):
    """A traversal was cancelled through its cancel event."""

    pass

"""
Abstract interface shared by issue-producing analyzers.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from repohealth.core.file_scanner import (
    FileSystemInterface,
    ScannedFile,
    iter_lines_from_bytes,
    iter_lines_streaming,
)
from repohealth.core.report import Issue


class AnalyzerInterface(ABC):
    """
    An analysis pass over a scanned repository.

    Implementations read the shared scan cache through the scanner's
    cached-or-scan-now accessors and never trigger a second traversal.
    """

    #: Short name used in logs
    name: str = "analyzer"

    @abstractmethod
    def analyze(self) -> list[Issue]:
        """
        Run the analysis.

        Returns:
            Issues found, possibly empty

        Raises:
            ScanError: If the repository could not be traversed
        """
        pass


def iter_file_lines(file_system: FileSystemInterface, file: ScannedFile) -> Iterator[str]:
    """
    Yield the lines of a file from cached content, or by streaming it.

    Raises:
        OSError: If an uncached file cannot be read
    """
    if file.content is not None:
        yield from iter_lines_from_bytes(file.content)
        return
    with file_system.open_binary(file.path) as f:
        yield from iter_lines_streaming(f)

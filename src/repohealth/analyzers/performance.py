"""
Performance checks: oversized text files checked into the repository.
"""

import logging

from repohealth.core.config import PerformanceConfig
from repohealth.core.file_scanner import FileScanner
from repohealth.core.report import Category, Issue, Severity

from .base import AnalyzerInterface

logger = logging.getLogger(__name__)

LARGE_FILE_RULE = "large-file-check"


class PerformanceAnalyzer(AnalyzerInterface):
    """Flags text files at or above the configured size limit."""

    name = "performance"

    def __init__(self, config: PerformanceConfig, scanner: FileScanner):
        self._config = config
        self._scanner = scanner
        self._binary_extensions = frozenset(ext.lower() for ext in config.binary_extensions)

    @property
    def size_limit_bytes(self) -> int:
        return self._config.large_file_size_mb * 1024 * 1024

    def analyze(self) -> list[Issue]:
        issues: list[Issue] = []
        for file in self._scanner.get_large_files(self.size_limit_bytes):
            if not file.is_text or file.extension in self._binary_extensions:
                continue
            size_mb = file.size / (1024 * 1024)
            issues.append(
                Issue(
                    id=f"large-file-{file.relative_path.replace('/', '-')}",
                    title="Large file detected",
                    description=(
                        f"File {file.relative_path} is {size_mb:.1f} MB, above the "
                        f"{self._config.large_file_size_mb} MB limit"
                    ),
                    category=Category.PERFORMANCE,
                    severity=Severity.MEDIUM,
                    file=file.relative_path,
                    rule=LARGE_FILE_RULE,
                    fix="Split the file, move generated data out of the repository, or use Git LFS",
                )
            )
        return issues

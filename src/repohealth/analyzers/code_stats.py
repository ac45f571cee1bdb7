"""
Code statistics: line counts per language from the scan cache.
"""

import logging
import posixpath

from repohealth.core.file_scanner import FileScanner, ScannedFile
from repohealth.core.language_registry import LanguageRegistry
from repohealth.core.report import CodeStats

logger = logging.getLogger(__name__)

# Directories whose contents are vendored or generated
SKIPPED_DIRECTORIES = frozenset({"node_modules", "vendor", ".git", "dist", "build", "target"})

# Extensions never counted as source, whatever their content
NON_SOURCE_EXTENSIONS = frozenset(
    {
        ".exe", ".dll", ".so", ".dylib", ".a", ".o", ".obj",
        ".jar", ".war", ".ear", ".class",
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".svg", ".ico",
        ".mp3", ".mp4", ".avi", ".mov", ".wmv", ".flv",
        ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
        ".zip", ".tar", ".gz", ".bz2", ".7z", ".rar",
        ".bin", ".dat", ".db", ".sqlite",
    }
)  # fmt: skip


def should_skip(file: ScannedFile) -> bool:
    """True for hidden files, vendored/generated directories and non-source extensions."""
    relative_path = file.relative_path
    if posixpath.basename(relative_path).startswith("."):
        return True
    if any(part.lower() in SKIPPED_DIRECTORIES for part in relative_path.split("/")):
        return True
    return file.extension in NON_SOURCE_EXTENSIONS


class CodeStatsAnalyzer:
    """Aggregates cached line counts by language."""

    name = "code_stats"

    def __init__(self, scanner: FileScanner, registry: LanguageRegistry | None = None):
        self._scanner = scanner
        self._registry = registry or LanguageRegistry()

    def analyze(self) -> CodeStats:
        """
        Compute totals, per-language line counts and percentages.

        A file is counted only if its language is known and it has at
        least one line.
        """
        stats = CodeStats()

        for file in self._scanner.get_files():
            if should_skip(file):
                continue
            language = self._registry.detect_from_path(file.relative_path)
            if not language or file.line_count <= 0:
                continue
            stats.total_files += 1
            stats.total_lines += file.line_count
            stats.language_breakdown[language] = (
                stats.language_breakdown.get(language, 0) + file.line_count
            )

        if stats.total_lines:
            for language, lines in stats.language_breakdown.items():
                stats.language_percent[language] = lines / stats.total_lines * 100

        logger.debug(
            f"Code stats: {stats.total_files} files, {stats.total_lines} lines, "
            f"{len(stats.language_breakdown)} languages"
        )
        return stats

"""
Code quality checks: overlong source files and complex Go functions.

File length comes straight from the cached line counts. Function
complexity is a line-based heuristic: a function runs from its 'func'
declaration to the next one, and every branching keyword or boolean
operator on one of its lines adds one.
"""

import logging
import re

from repohealth.core.config import QualityConfig
from repohealth.core.file_scanner import FileScanner, ScannedFile
from repohealth.core.report import Category, Issue, Severity

from .base import AnalyzerInterface, iter_file_lines
from .security import is_test_file

logger = logging.getLogger(__name__)

FILE_LINES_RULE = "max-file-lines"
COMPLEXITY_RULE = "cyclomatic-complexity"

FUNC_DECLARATION = re.compile(r"func\s+(\([^)]+\)\s+)?(\w+\s*)?\(")

# Each pattern counts at most once per line
COMPLEXITY_PATTERNS = tuple(
    re.compile(p)
    for p in (
        r"\bif\b",
        r"\bfor\b",
        r"\brange\b",
        r"\bswitch\b",
        r"\bcase\b",
        r"\bselect\b",
        r"&&",
        r"\|\|",
        r"\bgoto\b",
    )
)


def severity_by_ratio(value: int, limit: int) -> Severity:
    """High above three times the limit, medium above twice, otherwise low."""
    if value > limit * 3:
        return Severity.HIGH
    if value > limit * 2:
        return Severity.MEDIUM
    return Severity.LOW


def line_complexity(line: str) -> int:
    """Number of complexity patterns found on one line."""
    return sum(1 for pattern in COMPLEXITY_PATTERNS if pattern.search(line))


def function_complexities(lines: list[str]) -> list[tuple[int, int]]:
    """
    Score every function declared in a Go source file.

    Args:
        lines: File lines in order

    Returns:
        (1-based declaration line, complexity) per function, in file order
    """
    starts = [i for i, line in enumerate(lines) if FUNC_DECLARATION.search(line)]
    results: list[tuple[int, int]] = []
    for index, start in enumerate(starts):
        end = starts[index + 1] if index + 1 < len(starts) else len(lines)
        complexity = 1 + sum(line_complexity(line) for line in lines[start:end])
        results.append((start + 1, complexity))
    return results


class QualityAnalyzer(AnalyzerInterface):
    """
    Flags source files above the line limit and Go functions above the
    complexity threshold. Test files are exempt from the complexity check.
    """

    name = "quality"

    def __init__(self, config: QualityConfig, scanner: FileScanner):
        self._config = config
        self._scanner = scanner

    def analyze(self) -> list[Issue]:
        issues = self.check_file_lengths()
        issues.extend(self.check_complexity())
        logger.debug(f"Quality analysis found {len(issues)} issues")
        return issues

    def check_file_lengths(self) -> list[Issue]:
        """Report code files whose line count exceeds max_file_lines."""
        max_lines = self._config.max_file_lines
        issues: list[Issue] = []
        for file in self._scanner.get_files_by_extension(self._config.code_extensions):
            if file.line_count <= max_lines:
                continue
            issues.append(
                Issue(
                    id=f"large-file-lines-{file.relative_path.replace('/', '-')}",
                    title="File has too many lines",
                    description=(
                        f"File {file.relative_path} has {file.line_count} lines, "
                        f"exceeding the maximum of {max_lines} lines"
                    ),
                    category=Category.QUALITY,
                    severity=severity_by_ratio(file.line_count, max_lines),
                    file=file.relative_path,
                    rule=FILE_LINES_RULE,
                    fix="Consider breaking this file into smaller, more focused modules",
                )
            )
        return issues

    def check_complexity(self) -> list[Issue]:
        """Report Go functions whose complexity exceeds complexity_threshold."""
        issues: list[Issue] = []
        for file in self._scanner.get_files_by_extension([".go"]):
            if not file.is_text or is_test_file(file.relative_path):
                continue
            try:
                lines = list(iter_file_lines(self._scanner.file_system, file))
            except OSError as e:
                logger.warning(f"Error reading file {file.relative_path}: {e}")
                continue
            issues.extend(self._complexity_issues(file, lines))
        return issues

    def _complexity_issues(self, file: ScannedFile, lines: list[str]) -> list[Issue]:
        threshold = self._config.complexity_threshold
        issues: list[Issue] = []
        for line, complexity in function_complexities(lines):
            if complexity <= threshold:
                continue
            issues.append(
                Issue(
                    id=f"high-complexity-{file.relative_path.replace('/', '-')}-{line}",
                    title="High function complexity",
                    description=(
                        f"Complexity: {complexity} (threshold: {threshold}). This function has "
                        "many decision points making it harder to understand and test."
                    ),
                    category=Category.QUALITY,
                    severity=severity_by_ratio(complexity, threshold),
                    file=file.relative_path,
                    line=line,
                    rule=COMPLEXITY_RULE,
                    fix="Break into smaller functions, reduce nested conditions, or use early returns",
                )
            )
        return issues

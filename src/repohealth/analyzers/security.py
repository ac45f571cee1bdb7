"""
Secret and suspicious-file detection.

Two passes over the scan cache: regular-expression secret patterns
applied line by line to relevant text files, and filename globs applied
to every file path. Conventional test files are skipped by both.
"""

import logging
import posixpath
import re

from repohealth.core.config import SecurityConfig
from repohealth.core.file_scanner import (
    FileScanner,
    ScannedFile,
    file_extension,
    glob_match,
)
from repohealth.core.report import Category, Issue, Severity

from .base import AnalyzerInterface, iter_file_lines

logger = logging.getLogger(__name__)

SECRET_RULE = "secret-detection"
SUSPICIOUS_FILE_RULE = "suspicious-file-detection"

MAX_MATCH_DISPLAY_LENGTH = 80

# Keyword heuristics applied to the matched text, most severe first
_HIGH_RISK_SECRET = re.compile(
    r"(private[_ ]key|secret[_ ]key|password[\"']?\s*[:=]|token[\"']?\s*[:=])",
    re.IGNORECASE,
)
_MEDIUM_RISK_SECRET = re.compile(
    r"(api[_ ]key|access[_ ]key|apikey\s*[:=])",
    re.IGNORECASE,
)

_CRITICAL_FILE_NAMES = frozenset({".env", "id_rsa", "id_dsa", "id_ecdsa", "id_ed25519"})
_CRITICAL_FILE_GLOBS = (".env.*", "*.env")
_HIGH_RISK_EXTENSIONS = frozenset({".pem", ".key", ".p12", ".pfx", ".jks"})

_TEST_FILE_PREFIXES = ("test_",)
_TEST_FILE_SUFFIXES = (
    "_test.go",
    "_test.py",
    ".test.js",
    ".test.ts",
    ".spec.js",
    ".spec.ts",
)
_TEST_DIRECTORIES = frozenset(
    {
        "test",
        "tests",
        "testing",
        "__tests__",
        "spec",
        "specs",
        "testdata",
        "test-data",
        "fixtures",
        "mocks",
        "mock",
    }
)

# Path fragment identifying this module, whose own patterns would match
_ANALYZER_SOURCE_MARKER = "analyzers/security"


def truncate(text: str, max_length: int = MAX_MATCH_DISPLAY_LENGTH) -> str:
    """Shorten text to max_length characters, ending in '...' when cut."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def is_test_file(relative_path: str) -> bool:
    """
    Check whether a path follows a test-file naming or directory convention.

    Args:
        relative_path: '/' separated path relative to the repository root
    """
    lowered = relative_path.lower()
    name = posixpath.basename(lowered)
    if name.startswith(_TEST_FILE_PREFIXES) or name.endswith(_TEST_FILE_SUFFIXES):
        return True

    directory = posixpath.dirname(lowered)
    return any(part in _TEST_DIRECTORIES for part in directory.split("/") if part)


def is_analyzer_source(relative_path: str) -> bool:
    return _ANALYZER_SOURCE_MARKER in relative_path


def classify_secret_severity(matched_text: str) -> Severity:
    """Classify a secret match by the keywords it contains."""
    if _HIGH_RISK_SECRET.search(matched_text):
        return Severity.HIGH
    if _MEDIUM_RISK_SECRET.search(matched_text):
        return Severity.MEDIUM
    return Severity.LOW


def classify_suspicious_file_severity(relative_path: str) -> Severity:
    """
    Classify a suspicious file by its name.

    Environment files and SSH private keys are critical; key and
    certificate containers are high; any other suspicious name is medium.
    """
    name = posixpath.basename(relative_path).lower()
    if name in _CRITICAL_FILE_NAMES or any(
        glob_match(glob, name) for glob in _CRITICAL_FILE_GLOBS
    ):
        return Severity.CRITICAL

    if file_extension(name) in _HIGH_RISK_EXTENSIONS:
        return Severity.HIGH

    return Severity.MEDIUM


class SecurityAnalyzer(AnalyzerInterface):
    """
    Detects likely secrets in source and config files, and files whose
    names suggest sensitive material.

    Secret patterns are compiled once here; an invalid pattern is logged
    and skipped without failing construction.
    """

    name = "security"

    def __init__(self, config: SecurityConfig, scanner: FileScanner):
        """
        Initialize the analyzer.

        Args:
            config: Security section of the configuration
            scanner: Scanner whose cache is analyzed
        """
        self._config = config
        self._scanner = scanner
        self._patterns = self._compile_patterns(config.secret_patterns)
        self._relevant_extensions = frozenset(ext.lower() for ext in config.relevant_extensions)
        self._allowed_secrets = tuple(s.lower() for s in config.allowed_secrets if s)
        self._max_file_size = config.max_file_size_mb * 1024 * 1024

    @staticmethod
    def _compile_patterns(patterns: list[str]) -> list[re.Pattern[str]]:
        compiled: list[re.Pattern[str]] = []
        for pattern in patterns:
            try:
                compiled.append(re.compile(pattern))
            except re.error as e:
                logger.warning(f"Skipping invalid secret pattern {pattern!r}: {e}")
        return compiled

    @property
    def compiled_patterns(self) -> list[re.Pattern[str]]:
        return list(self._patterns)

    def analyze(self) -> list[Issue]:
        issues = self.scan_for_secrets()
        issues.extend(self.scan_for_suspicious_files())
        logger.debug(f"Security analysis found {len(issues)} issues")
        return issues

    def is_allowed_secret(self, matched_text: str) -> bool:
        lowered = matched_text.lower()
        return any(allowed in lowered for allowed in self._allowed_secrets)

    def _should_scan_for_secrets(self, file: ScannedFile) -> bool:
        if not file.is_text:
            return False
        if file.extension not in self._relevant_extensions:
            return False
        if is_test_file(file.relative_path) or is_analyzer_source(file.relative_path):
            return False
        if file.size > self._max_file_size:
            logger.debug(f"Skipping oversized file for secret scan: {file.relative_path}")
            return False
        return True

    def scan_for_secrets(self) -> list[Issue]:
        """
        Apply every compiled secret pattern to every line of relevant files.

        Returns:
            One issue per pattern match that is not an allowed secret
        """
        issues: list[Issue] = []
        if not self._patterns:
            return issues

        for file in self._scanner.get_files():
            if not self._should_scan_for_secrets(file):
                continue
            try:
                issues.extend(self._scan_file_for_secrets(file))
            except OSError as e:
                logger.warning(f"Error reading file {file.relative_path}: {e}")

        return issues

    def _scan_file_for_secrets(self, file: ScannedFile) -> list[Issue]:
        issues: list[Issue] = []
        lines = iter_file_lines(self._scanner.file_system, file)
        for line_num, line in enumerate(lines, start=1):
            for pattern in self._patterns:
                for match in pattern.finditer(line):
                    matched_text = match.group(0)
                    if not matched_text or self.is_allowed_secret(matched_text):
                        continue
                    issues.append(self._secret_issue(file.relative_path, line_num, matched_text))
        return issues

    def _secret_issue(self, relative_path: str, line: int, matched_text: str) -> Issue:
        return Issue(
            id=f"secret-{relative_path.replace('/', '-')}-{line}",
            title="Potential secret detected",
            description=(
                f"Found pattern that may contain credentials: {truncate(matched_text)}"
            ),
            category=Category.SECURITY,
            severity=classify_secret_severity(matched_text),
            file=relative_path,
            line=line,
            rule=SECRET_RULE,
            fix="Use environment variables or secure secret management",
        )

    def is_suspicious_file(self, relative_path: str) -> bool:
        """True if any suspicious glob matches the base name or the full path."""
        name = posixpath.basename(relative_path)
        return any(
            glob_match(pattern, name) or glob_match(pattern, relative_path)
            for pattern in self._config.suspicious_files
        )

    def scan_for_suspicious_files(self) -> list[Issue]:
        """
        Flag every non-test file whose name matches a suspicious glob.

        Content is not inspected; binary files are included.
        """
        issues: list[Issue] = []
        for file in self._scanner.get_files():
            if is_test_file(file.relative_path):
                continue
            if not self.is_suspicious_file(file.relative_path):
                continue
            issues.append(
                Issue(
                    id=f"suspicious-file-{file.relative_path.replace('/', '-')}",
                    title="Suspicious file detected",
                    description=(
                        f"File {file.relative_path} may contain sensitive information "
                        "and should not be in version control"
                    ),
                    category=Category.SECURITY,
                    severity=classify_suspicious_file_severity(file.relative_path),
                    file=file.relative_path,
                    rule=SUSPICIOUS_FILE_RULE,
                    fix="Remove the file from version control and add to .gitignore",
                )
            )
        return issues

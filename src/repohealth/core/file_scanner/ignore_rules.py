"""
Ignore-rule matching for repo-health.

Rules are shell-glob patterns read from the repository's ignore file.
A relative path is ignored if any rule matches either the full path or
its base name. Rules ending in '/' are also tried with the slash removed,
which lets directory patterns such as 'build/' exclude a directory.

Globs follow shell rules: '*' and '?' never match '/', a bracket class
is negated by a leading '!' or '^', and '\\' escapes the next character.
Matching is case-sensitive.

Known limitation: negation ('!pattern'), anchoring and '**' have no
special meaning; the first matching rule ignores the path.
"""

import logging
import posixpath
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from .filesystem import LocalFileSystem
from .interfaces import FileSystemInterface

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_FILE_NAME = ".gitignore"


def _class_char(pattern: str, i: int) -> tuple[str, int]:
    """Read one, possibly escaped, character of a bracket class."""
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            raise ValueError("trailing escape in character class")
    return pattern[i], i + 1


def _translate_class(pattern: str, start: int) -> tuple[str, int]:
    """
    Translate the bracket class beginning after the '[' at start.

    Returns:
        (regex, index just past the closing ']')

    Raises:
        ValueError: If the class is empty, unterminated or has a reversed range
    """
    i = start
    n = len(pattern)
    negate = i < n and pattern[i] in "!^"
    if negate:
        i += 1

    items: list[str] = []
    while True:
        if i >= n:
            raise ValueError("unterminated character class")
        if pattern[i] == "]":
            break
        lo, i = _class_char(pattern, i)
        if i + 1 < n and pattern[i] == "-" and pattern[i + 1] != "]":
            hi, i = _class_char(pattern, i + 1)
            if hi < lo:
                raise ValueError(f"reversed range {lo}-{hi}")
            items.append(f"{re.escape(lo)}-{re.escape(hi)}")
        else:
            items.append(re.escape(lo))

    if not items:
        raise ValueError("empty character class")

    body = "".join(items)
    # A class never matches the separator
    if negate:
        return f"[^/{body}]", i + 1
    return f"(?!/)[{body}]", i + 1


def translate_glob(pattern: str) -> str:
    """
    Translate a shell glob into an equivalent regular expression.

    Raises:
        ValueError: If the pattern is malformed
    """
    parts: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        i += 1
        if c == "*":
            while i < n and pattern[i] == "*":
                i += 1
            parts.append("[^/]*")
        elif c == "?":
            parts.append("[^/]")
        elif c == "[":
            translated, i = _translate_class(pattern, i)
            parts.append(translated)
        elif c == "\\":
            if i >= n:
                raise ValueError("trailing escape")
            parts.append(re.escape(pattern[i]))
            i += 1
        else:
            parts.append(re.escape(c))
    return "".join(parts)


@lru_cache(maxsize=1024)
def _compile_glob(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(translate_glob(pattern), re.DOTALL)
    except ValueError as e:
        logger.warning(f"Skipping malformed glob pattern {pattern!r}: {e}")
        return None


def glob_match(pattern: str, name: str) -> bool:
    """
    Check whether name matches the shell glob pattern in full.

    A malformed pattern matches nothing.
    """
    compiled = _compile_glob(pattern)
    return compiled is not None and compiled.fullmatch(name) is not None


def parse_rules(content: str) -> list[str]:
    """
    Parse ignore-file content into an ordered list of patterns.

    Blank lines and lines starting with '#' are skipped; surrounding
    whitespace is stripped.
    """
    rules: list[str] = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        rules.append(line)
    return rules


def load_rules(
    repo_root: Path | str,
    file_system: FileSystemInterface | None = None,
    file_name: str = DEFAULT_IGNORE_FILE_NAME,
) -> list[str]:
    """
    Load ignore patterns from the ignore file at the repository root.

    A missing file yields an empty list. An unreadable file is logged and
    also yields an empty list.

    Args:
        repo_root: Repository root directory
        file_system: Filesystem to read from (defaults to the local disk)
        file_name: Name of the ignore file

    Returns:
        Ordered list of pattern strings
    """
    fs = file_system or LocalFileSystem()
    ignore_path = Path(repo_root) / file_name

    if not fs.is_file(ignore_path):
        logger.debug(f"Ignore file not found: {ignore_path}")
        return []

    try:
        with fs.open_binary(ignore_path) as f:
            content = f.read().decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(f"Invalid UTF-8 encoding in {ignore_path}: {e}")
        return []
    except PermissionError as e:
        logger.warning(f"Permission denied reading {ignore_path}: {e}")
        return []
    except OSError as e:
        logger.warning(f"Error reading {ignore_path}: {e}")
        return []

    rules = parse_rules(content)
    logger.debug(f"Loaded {len(rules)} patterns from {ignore_path}")
    return rules


def matches(relative_path: str, rules: list[str] | tuple[str, ...]) -> bool:
    """
    Check whether a relative path is excluded by any rule.

    Args:
        relative_path: '/' separated path relative to the repository root
        rules: Patterns as returned by load_rules()

    Returns:
        True if the path should be ignored
    """
    base_name = posixpath.basename(relative_path)

    for pattern in rules:
        if pattern.endswith("/"):
            dir_pattern = pattern.rstrip("/")
            if dir_pattern and (
                glob_match(dir_pattern, relative_path) or glob_match(dir_pattern, base_name)
            ):
                return True

        if glob_match(pattern, relative_path) or glob_match(pattern, base_name):
            return True

    return False


@dataclass(frozen=True)
class IgnoreRuleSet:
    """
    Immutable, ordered set of ignore patterns loaded once per scanner.

    Attributes:
        patterns: Patterns in file order
        source: Path of the ignore file they came from, if any
    """

    patterns: tuple[str, ...] = ()
    source: Path | None = None

    @classmethod
    def load(
        cls,
        repo_root: Path | str,
        file_system: FileSystemInterface | None = None,
        file_name: str = DEFAULT_IGNORE_FILE_NAME,
    ) -> "IgnoreRuleSet":
        """Load the rule set from the ignore file at repo_root."""
        patterns = load_rules(repo_root, file_system=file_system, file_name=file_name)
        return cls(patterns=tuple(patterns), source=Path(repo_root) / file_name)

    @classmethod
    def from_patterns(cls, patterns: list[str]) -> "IgnoreRuleSet":
        """Build a rule set from raw lines, applying the same parsing rules."""
        return cls(patterns=tuple(parse_rules("\n".join(patterns))))

    def matches(self, relative_path: str) -> bool:
        """Check whether relative_path is excluded."""
        return matches(relative_path, self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

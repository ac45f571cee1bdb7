"""
Pattern Searcher for repo-health.

Provides line-oriented regular-expression search over the scanned
repository, served from the scan cache when it is populated and from the
filesystem otherwise.
"""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from repohealth.core.file_scanner import (
    FileScanner,
    MatchRecord,
    file_extension,
    iter_lines_from_bytes,
    iter_lines_streaming,
)

logger = logging.getLogger(__name__)


class PatternSearcherError(Exception):
    """Base exception for pattern searcher errors."""

    pass


class PatternSearcherInterface(ABC):
    """Abstract interface for line-oriented pattern search."""

    @abstractmethod
    def search(self, pattern: str, extensions: Iterable[str] | None = None) -> list[MatchRecord]:
        """
        Search every eligible repository file for lines matching pattern.

        Args:
            pattern: Regular expression tested against each line
            extensions: Extension allow-list (e.g. ['.go', '.py']).
                        Empty or None allows every extension.

        Returns:
            List of MatchRecord ordered by file, then line

        Raises:
            PatternSearcherError: If pattern is not a valid regular expression
        """
        raise NotImplementedError


@dataclass(frozen=True)
class _Candidate:
    """A text file eligible for searching."""

    path: Path
    relative_path: str
    size: int
    content: bytes | None = None


def normalize_extensions(extensions: Iterable[str] | None) -> frozenset[str]:
    """Lowercase an extension allow-list, adding a leading dot where missing."""
    if not extensions:
        return frozenset()
    normalized = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        normalized.add(ext if ext.startswith(".") else f".{ext}")
    return frozenset(normalized)


class PatternSearcher(PatternSearcherInterface):
    """
    Regex searcher backed by a FileScanner.

    Files above the scanner's streaming threshold are read line by line;
    smaller files are searched from cached content or a single buffered
    read. Both strategies produce identical records.
    """

    def __init__(self, scanner: FileScanner):
        """
        Initialize pattern searcher.

        Args:
            scanner: Scanner providing the cache, ignore rules and filesystem
        """
        self._scanner = scanner
        self._fs = scanner.file_system

    def search(self, pattern: str, extensions: Iterable[str] | None = None) -> list[MatchRecord]:
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise PatternSearcherError(f"Invalid regex pattern: {e}") from e

        allowed = normalize_extensions(extensions)

        if self._scanner.cache.is_populated:
            candidates = self._candidates_from_cache(allowed)
        else:
            logger.debug("Scan cache is empty, searching the filesystem directly")
            candidates = self._candidates_from_filesystem(allowed)

        results: list[MatchRecord] = []
        for candidate in candidates:
            results.extend(self._search_file(candidate, compiled, pattern))

        logger.debug(f"Pattern {pattern!r} matched {len(results)} lines")
        return results

    def _candidates_from_cache(self, allowed: frozenset[str]) -> list[_Candidate]:
        files = self._scanner.filter_cached_files(
            lambda f: f.is_text and (not allowed or f.extension in allowed)
        )
        return [
            _Candidate(
                path=f.path,
                relative_path=f.relative_path,
                size=f.size,
                content=f.content,
            )
            for f in files
        ]

    def _candidates_from_filesystem(self, allowed: frozenset[str]) -> list[_Candidate]:
        """
        Walk the repository with the scanner's exclusion rules.

        Raises:
            ScanError: If the walk itself fails
        """
        candidates: list[_Candidate] = []
        for entry, relative_path in self._scanner.iter_files():
            ext = file_extension(entry.name)
            if allowed and ext not in allowed:
                continue
            is_text, _ = self._scanner.classifier.classify(entry.path)
            if not is_text:
                logger.debug(f"Skipping binary file: {relative_path}")
                continue
            candidates.append(
                _Candidate(path=entry.path, relative_path=relative_path, size=entry.size)
            )
        candidates.sort(key=lambda c: c.relative_path)
        return candidates

    def _iter_lines(self, candidate: _Candidate) -> Iterator[str]:
        """
        Yield decoded lines of one file.

        Raises:
            OSError: If the file has to be read from disk and cannot be
        """
        if candidate.size > self._scanner.streaming_threshold:
            with self._fs.open_binary(candidate.path) as f:
                yield from iter_lines_streaming(f)
            return

        content = candidate.content
        if content is None:
            with self._fs.open_binary(candidate.path) as f:
                content = f.read()
        yield from iter_lines_from_bytes(content)

    def _search_file(
        self, candidate: _Candidate, compiled: re.Pattern[str], pattern: str
    ) -> list[MatchRecord]:
        results: list[MatchRecord] = []
        try:
            for line_num, line in enumerate(self._iter_lines(candidate), start=1):
                if compiled.search(line):
                    results.append(
                        MatchRecord(
                            file=candidate.relative_path,
                            line=line_num,
                            content=line,
                            pattern=pattern,
                        )
                    )
        except OSError as e:
            logger.warning(f"Error reading file {candidate.relative_path}: {e}")
            return []
        return results

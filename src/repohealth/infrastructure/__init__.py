"""
Infrastructure Layer - Pattern search and test doubles.
"""

from repohealth.infrastructure.fakes import InMemoryFileSystem
from repohealth.infrastructure.pattern_searcher import (
    PatternSearcher,
    PatternSearcherError,
    PatternSearcherInterface,
    normalize_extensions,
)

__all__ = [
    # Pattern searcher
    "PatternSearcherInterface",
    "PatternSearcher",
    "PatternSearcherError",
    "normalize_extensions",
    # Fakes for testing
    "InMemoryFileSystem",
]

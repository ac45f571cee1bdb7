"""
Thread-safe cache of scan results.

A traversal owns the cache exclusively while it rebuilds it; afterwards
any number of analyzers read it concurrently. Readers always receive
copies, never the live mapping.
"""

import logging
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager

from repohealth.core.rwlock import ReadWriteLock

from .models import ScannedFile

logger = logging.getLogger(__name__)


class ScanCache:
    """
    Mapping from relative path to ScannedFile for one completed traversal.

    Writers go through rebuild(); readers through get_all(), get_one() and
    filter(). Predicates passed to filter() run under the read lock and
    must not call back into the cache.
    """

    def __init__(self):
        self._lock = ReadWriteLock()
        self._files: dict[str, ScannedFile] = {}
        self._populated = False

    @contextmanager
    def rebuild(self) -> Iterator[dict[str, ScannedFile]]:
        """
        Hold the write lock and yield a fresh mapping to populate.

        The previous contents are discarded on entry. The new mapping is
        installed only if the block completes; if it raises, the cache is
        left empty and unpopulated.
        """
        with self._lock.write_locked():
            self._files = {}
            self._populated = False
            building: dict[str, ScannedFile] = {}
            yield building
            self._files = building
            self._populated = True
            logger.debug(f"Scan cache rebuilt with {len(building)} entries")

    def replace(self, files: Mapping[str, ScannedFile]) -> None:
        """Install a complete mapping in one step."""
        with self.rebuild() as building:
            building.update(files)

    def clear(self) -> None:
        """Discard all entries and mark the cache unpopulated."""
        with self._lock.write_locked():
            self._files = {}
            self._populated = False

    @property
    def is_populated(self) -> bool:
        """True once a traversal has completed since the last clear."""
        with self._lock.read_locked():
            return self._populated

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._files)

    def get_all(self) -> dict[str, ScannedFile]:
        """Return a copy of every entry, without binary-detection prefixes."""
        with self._lock.read_locked():
            return {key: record.public_view() for key, record in self._files.items()}

    def get_one(self, relative_path: str) -> ScannedFile | None:
        """Return a copy of one entry, or None if absent."""
        with self._lock.read_locked():
            record = self._files.get(relative_path)
            return record.public_view() if record is not None else None

    def filter(self, predicate: Callable[[ScannedFile], bool]) -> list[ScannedFile]:
        """
        Return copies of the entries for which predicate is true.

        The predicate is evaluated once per entry while the read lock is held.
        Results are ordered by relative path.
        """
        matched: list[ScannedFile] = []
        with self._lock.read_locked():
            for _, record in sorted(self._files.items()):
                view = record.public_view()
                if predicate(view):
                    matched.append(view)
        return matched

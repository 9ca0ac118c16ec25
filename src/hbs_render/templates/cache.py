"""
In-memory caches keyed by logical name and validated by file modification time.
"""
from dataclasses import dataclass
from typing import Dict, Generic, Iterator, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached artifact and the modification time it was built from."""

    artifact: T
    mtime: int


class TemplateCache(Generic[T]):
    """
    Mapping from logical name to CacheEntry.

    Entries are never evicted by age: they are overwritten when a different
    modification time is observed or dropped in bulk by ``clear``.
    """

    def __init__(self):
        self._entries: Dict[str, CacheEntry[T]] = {}

    def get(self, key: str, mtime: int) -> Optional[T]:
        """
        Return the cached artifact if it was built from ``mtime``.

        Args:
            key: Logical name
            mtime: Current on-disk modification time in nanoseconds

        Returns:
            Cached artifact or None when missing or stale
        """
        entry = self._entries.get(key)
        if entry is None or entry.mtime != mtime:
            return None
        return entry.artifact

    def set(self, key: str, artifact: T, mtime: int) -> None:
        """Store an artifact, replacing any previous entry for key."""
        self._entries[key] = CacheEntry(artifact, mtime)

    def entry(self, key: str) -> Optional[CacheEntry[T]]:
        return self._entries.get(key)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

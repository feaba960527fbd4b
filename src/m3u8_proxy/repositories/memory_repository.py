"""In-memory implementation of SegmentStore.

Entries live in a plain dict for the lifetime of the process; nothing is
persisted across restarts.
"""

from collections.abc import Iterator

from m3u8_proxy.entities import CacheEntryEntity


class InMemorySegmentRepository:
    """Dict-backed segment store.

    This class satisfies the SegmentStore protocol through structural
    typing - no explicit inheritance needed.

    The repository does no locking of its own; CacheService serialises
    access to it.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntryEntity] = {}

    @classmethod
    def create(cls) -> "InMemorySegmentRepository":
        """Factory method to create an empty repository."""
        return cls()

    def get(self, key: str) -> CacheEntryEntity | None:
        return self._entries.get(key)

    def set(self, entry: CacheEntryEntity) -> None:
        # Re-inserting moves the key to the end so dict order tracks insertion time
        self._entries.pop(entry.key, None)
        self._entries[entry.key] = entry

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def entries(self) -> Iterator[CacheEntryEntity]:
        return iter(list(self._entries.values()))

    def count(self) -> int:
        return len(self._entries)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

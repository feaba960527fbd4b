"""Segment storage protocol.

Defines the interface for the raw key/value store behind the segment
cache. Expiry and capacity policy live in CacheService; a store only
keeps entries.

Implementations can include:
- In-process dict (default)
- Any other mapping-like backend
"""

from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from m3u8_proxy.entities import CacheEntryEntity


@runtime_checkable
class SegmentStore(Protocol):
    """Protocol for segment cache storage backends.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.
    """

    def get(self, key: str) -> CacheEntryEntity | None:
        """Return the entry stored under ``key``, expired or not."""
        ...

    def set(self, entry: CacheEntryEntity) -> None:
        """Store ``entry`` under its key, replacing any previous entry."""
        ...

    def delete(self, key: str) -> bool:
        """Delete an entry.

        Returns:
            True if an entry was removed, False otherwise
        """
        ...

    def entries(self) -> Iterator[CacheEntryEntity]:
        """Iterate over a snapshot of all stored entries."""
        ...

    def count(self) -> int:
        """Number of stored entries, expired ones included."""
        ...

    def clear(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries deleted
        """
        ...

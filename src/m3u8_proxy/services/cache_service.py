"""Segment cache service.

Wraps a SegmentStore with the cache policy: a fixed time-to-live checked
lazily on read, and a capacity bound enforced by evicting the oldest
insertions first. Reads never refresh an entry.
"""

import logging
import threading
import time
from collections.abc import Callable, Mapping

from m3u8_proxy.config import settings
from m3u8_proxy.entities import CacheEntryEntity, CacheStatsEntity
from m3u8_proxy.protocols import SegmentStore
from m3u8_proxy.repositories import InMemorySegmentRepository

logger = logging.getLogger(__name__)


class CacheService:
    """Bounded, time-expiring segment cache.

    The service depends on the SegmentStore PROTOCOL, not on a concrete
    store, and takes its clock as a parameter so expiry can be driven
    deterministically in tests.

    Every operation holds a single lock, so check-then-act sequences
    (lazy expiry, evict-then-insert) are atomic even when the service is
    shared between the event loop and worker threads.

    Example:
        ```python
        from m3u8_proxy.services import CacheService

        cache = CacheService.create()
        cache.put("https://cdn.example/a/seg-1.ts", b"...", {"content-type": "video/mp2t"})
        entry = cache.get("https://cdn.example/a/seg-1.ts")

        # Tiny cache for tests
        cache = CacheService.create(capacity=2, ttl=1)
        ```
    """

    def __init__(
        self,
        repository: SegmentStore,
        capacity: int | None = None,
        ttl: float | None = None,
        enabled: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache service.

        Args:
            repository: Segment storage backend (required).
            capacity: Maximum number of entries. Defaults to settings.
            ttl: Entry time-to-live in seconds. Defaults to settings.
            enabled: When False every read misses and writes are dropped.
            clock: Returns the current time in seconds.
        """
        self._repository = repository
        self._capacity = settings.cache_max_size if capacity is None else capacity
        self._ttl = settings.cache_ttl if ttl is None else ttl
        self._enabled = enabled
        self._clock = clock
        self._lock = threading.Lock()

    @classmethod
    def create(
        cls,
        repository: SegmentStore | None = None,
        capacity: int | None = None,
        ttl: float | None = None,
        enabled: bool | None = None,
        clock: Callable[[], float] = time.time,
    ) -> "CacheService":
        """Factory method to create CacheService with sensible defaults.

        Args:
            repository: Storage backend. If None, uses an in-memory store.
            capacity: Max entries. If None, uses settings.
            ttl: Time-to-live in seconds. If None, uses settings.
            enabled: If None, follows settings.cache_enabled.
            clock: Time source in seconds.

        Returns:
            Configured CacheService instance
        """
        return cls(
            repository=repository or InMemorySegmentRepository.create(),
            capacity=capacity,
            ttl=ttl,
            enabled=settings.cache_enabled if enabled is None else enabled,
            clock=clock,
        )

    def get(self, key: str) -> CacheEntryEntity | None:
        """Look up a live entry.

        An expired entry found here is deleted and reported as a miss.

        Args:
            key: Absolute URL the entry was stored under

        Returns:
            The entry, or None on a miss
        """
        if not self._enabled:
            return None

        with self._lock:
            entry = self._repository.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock(), self._ttl):
                self._repository.delete(key)
                return None
            return entry

    def contains_fresh(self, key: str) -> bool:
        """Whether a live entry exists for ``key``."""
        return self.get(key) is not None

    def put(self, key: str, payload: bytes, headers: Mapping[str, str] | None = None) -> None:
        """Store a payload, replacing any existing entry for the key.

        When the cache is already full an eviction pass runs first.

        Args:
            key: Absolute URL the payload was fetched from
            payload: Response body
            headers: Response headers (names are lower-cased)
        """
        if not self._enabled:
            return

        with self._lock:
            if self._repository.count() >= self._capacity:
                self._cleanup_locked()
            self._repository.set(
                CacheEntryEntity(
                    key=key,
                    payload=bytes(payload),
                    headers={name.lower(): value for name, value in (headers or {}).items()},
                    inserted_at=self._clock(),
                )
            )

    def evict_expired(self) -> int:
        """Remove every entry older than the TTL.

        Returns:
            Number of entries removed
        """
        with self._lock:
            return self._evict_expired_locked()

    def evict_to_capacity(self) -> int:
        """Remove the oldest insertions until the cache fits its capacity.

        Returns:
            Number of entries removed
        """
        with self._lock:
            return self._evict_to_capacity_locked()

    def cleanup(self) -> int:
        """Expire stale entries, then trim to capacity.

        Returns:
            Number of entries left in the cache
        """
        with self._lock:
            self._cleanup_locked()
            return self._repository.count()

    def stats(self) -> CacheStatsEntity:
        """Snapshot of the cache after dropping expired entries."""
        with self._lock:
            self._evict_expired_locked()
            sizes = [entry.size for entry in self._repository.entries()]

        total = sum(sizes)
        return CacheStatsEntity(
            entries=len(sizes),
            total_bytes=total,
            avg_entry_bytes=total / len(sizes) if sizes else 0.0,
            capacity=self._capacity,
            ttl_seconds=self._ttl,
        )

    def clear(self) -> int:
        """Clear all cache entries.

        Returns:
            Number of entries deleted
        """
        with self._lock:
            return self._repository.clear()

    def __len__(self) -> int:
        with self._lock:
            return self._repository.count()

    def _cleanup_locked(self) -> tuple[int, int]:
        expired = self._evict_expired_locked()
        overflow = self._evict_to_capacity_locked()
        return expired, overflow

    def _evict_expired_locked(self) -> int:
        now = self._clock()
        expired = [
            entry.key for entry in self._repository.entries() if entry.is_expired(now, self._ttl)
        ]
        for key in expired:
            self._repository.delete(key)

        if expired:
            logger.info(
                "Cleaned up %d expired cache entries. Current size: %d",
                len(expired),
                self._repository.count(),
            )
        return len(expired)

    def _evict_to_capacity_locked(self) -> int:
        excess = self._repository.count() - self._capacity
        if excess <= 0:
            return 0

        oldest = sorted(self._repository.entries(), key=lambda entry: entry.inserted_at)[:excess]
        for entry in oldest:
            self._repository.delete(entry.key)

        logger.info(
            "Cache size limit reached. Removed %d oldest entries. Current size: %d",
            len(oldest),
            self._repository.count(),
        )
        return len(oldest)

    @property
    def enabled(self) -> bool:
        """Whether the cache stores and serves entries."""
        return self._enabled

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def repository(self) -> SegmentStore:
        """Get the underlying repository (for testing)."""
        return self._repository

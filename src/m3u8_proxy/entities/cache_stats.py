"""Cache statistics domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheStatsEntity:
    """Point-in-time snapshot of the segment cache.

    Attributes:
        entries: Number of live entries
        total_bytes: Sum of all payload sizes
        avg_entry_bytes: Mean payload size (0 when empty)
        capacity: Maximum number of entries
        ttl_seconds: Entry time-to-live in seconds
    """

    entries: int
    total_bytes: int
    avg_entry_bytes: float
    capacity: int
    ttl_seconds: float

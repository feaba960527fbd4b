"""Cache entry domain entity."""

from dataclasses import dataclass, field

DEFAULT_SEGMENT_CONTENT_TYPE = "video/mp2t"


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a cached segment or key payload.

    Entries are never mutated; a new fetch of the same URL replaces the
    entry as a whole.

    Attributes:
        key: The absolute URL the payload was fetched from
        payload: The response body
        headers: Lower-cased response headers captured at fetch time
        inserted_at: Clock reading (seconds) when the entry was stored
    """

    key: str
    payload: bytes
    inserted_at: float
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def size(self) -> int:
        """Payload size in bytes."""
        return len(self.payload)

    @property
    def content_type(self) -> str:
        """Cached content type, falling back to MPEG-TS."""
        return self.headers.get("content-type") or DEFAULT_SEGMENT_CONTENT_TYPE

    def age(self, now: float) -> float:
        return now - self.inserted_at

    def is_expired(self, now: float, ttl: float) -> bool:
        """An entry stays visible while its age is at most ``ttl``."""
        return self.age(now) > ttl

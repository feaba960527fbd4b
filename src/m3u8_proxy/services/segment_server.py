"""Serving of single segment (and key) requests."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from m3u8_proxy.entities import DEFAULT_SEGMENT_CONTENT_TYPE
from m3u8_proxy.exceptions import OriginFetchError
from m3u8_proxy.protocols import OriginClient
from m3u8_proxy.services.cache_service import CacheService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentPayload:
    """Bytes to return for a segment request."""

    content: bytes
    content_type: str
    cached: bool = False


class SegmentServer:
    """Answers segment requests from the cache, falling back to origin.

    Only the Prefetcher writes to the cache. A segment fetched here on a
    miss is returned to the player and not stored.
    """

    def __init__(self, cache_service: CacheService, origin_client: OriginClient) -> None:
        self._cache = cache_service
        self._origin = origin_client

    async def serve(self, url: str, headers: Mapping[str, str] | None = None) -> SegmentPayload:
        """Return the segment at ``url``.

        Args:
            url: Absolute segment URL, used verbatim as the cache key
            headers: Player headers to forward to origin on a miss

        Returns:
            SegmentPayload with the body and its content type

        Raises:
            OriginFetchError: If the origin fetch failed on a cache miss
        """
        entry = self._cache.get(url)
        if entry is not None:
            logger.debug("Cache hit for segment %s", url)
            return SegmentPayload(content=entry.payload, content_type=entry.content_type, cached=True)

        logger.debug("Cache miss for segment %s", url)
        response = await self._origin.get(url, headers)
        if not response.is_success:
            raise OriginFetchError(url, response.status_code, response.reason_phrase)

        return SegmentPayload(content=response.content, content_type=DEFAULT_SEGMENT_CONTENT_TYPE)

"""Best-effort background prefetching of segments into the cache.

When a media playlist is proxied, every segment and key it lists is
fetched from origin in the background so the player's follow-up
requests can be answered from the cache. Prefetching never delays the
playlist response, and its failures are never reported to the player.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping

from m3u8_proxy.exceptions import OriginFetchError
from m3u8_proxy.protocols import OriginClient
from m3u8_proxy.services.cache_service import CacheService

logger = logging.getLogger(__name__)


class Prefetcher:
    """Spawns detached fetch tasks that populate the segment cache.

    Tasks are owned by the prefetcher, not by the request that scheduled
    them: they keep running after the request finishes. Strong references
    are held until each task completes.

    Example:
        ```python
        prefetcher = Prefetcher(cache_service=cache, origin_client=client)
        prefetcher.schedule(["https://cdn.example/a/seg-1.ts"], {"Referer": "https://example.com/"})
        ```
    """

    def __init__(self, cache_service: CacheService, origin_client: OriginClient) -> None:
        """Initialize the prefetcher.

        Args:
            cache_service: Cache to populate (required).
            origin_client: Client used to reach origin (required).
        """
        self._cache = cache_service
        self._origin = origin_client
        self._tasks: set[asyncio.Task] = set()

    def schedule(self, urls: Iterable[str], headers: Mapping[str, str] | None = None) -> int:
        """Start prefetching a batch of URLs without waiting for it.

        Duplicates within the batch are dropped and URLs that already have
        a live cache entry are skipped.

        Args:
            urls: Absolute segment or key URLs
            headers: Player headers to forward to origin

        Returns:
            Number of fetch tasks started
        """
        if not self._cache.enabled:
            logger.info("Cache disabled - skipping prefetch operations")
            return 0

        batch = list(dict.fromkeys(urls))
        if not batch:
            return 0

        self._cache.cleanup()
        forwarded = dict(headers or {})

        started = 0
        for url in batch:
            if self._cache.contains_fresh(url):
                continue
            task = asyncio.create_task(self.prefetch(url, forwarded))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            started += 1

        logger.info("Started prefetching %d of %d segments", started, len(batch))
        return started

    async def prefetch(self, url: str, headers: Mapping[str, str] | None = None) -> bool:
        """Fetch one URL into the cache.

        Never raises: origin and transport failures are logged and the
        URL is simply left uncached.

        Args:
            url: Absolute segment or key URL
            headers: Player headers to forward to origin

        Returns:
            True if the payload was cached, False otherwise
        """
        if not self._cache.enabled or self._cache.contains_fresh(url):
            return False

        try:
            response = await self._origin.get(url, headers)
        except OriginFetchError as e:
            logger.error("Error prefetching segment %s: %s", url, e)
            return False
        except Exception:
            logger.exception("Unexpected error prefetching segment %s", url)
            return False

        if not response.is_success:
            logger.error(
                "Failed to prefetch segment: %d %s (%s)",
                response.status_code,
                response.reason_phrase,
                url,
            )
            return False

        self._cache.put(url, response.content, response.headers)
        logger.debug("Prefetched and cached segment: %s", url)
        return True

    async def wait_idle(self) -> None:
        """Wait until every scheduled prefetch has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel in-flight prefetches (application shutdown)."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    @property
    def pending(self) -> int:
        """Number of prefetch tasks still running."""
        return len(self._tasks)

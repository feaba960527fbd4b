"""Periodic background sweep of the segment cache."""

import asyncio
import logging

from m3u8_proxy.config import settings
from m3u8_proxy.services.cache_service import CacheService

logger = logging.getLogger(__name__)


class CacheJanitor:
    """Recurring cache sweep owned by the application lifespan.

    Each sweep drops expired entries, then trims the oldest insertions
    if the cache is still over capacity. Sweeps are idempotent and may
    overlap with reads and writes.

    Example:
        ```python
        janitor = CacheJanitor(cache_service, interval=1800)
        janitor.start()
        ...
        await janitor.stop()
        ```
    """

    def __init__(self, cache_service: CacheService, interval: float | None = None) -> None:
        """Initialize the janitor.

        Args:
            cache_service: The cache to sweep (required).
            interval: Seconds between sweeps. Defaults to settings.
        """
        self._cache = cache_service
        self._interval = interval or settings.cache_cleanup_interval
        self._task: asyncio.Task | None = None

    def sweep(self) -> tuple[int, int]:
        """Run one sweep.

        Returns:
            Tuple of (expired entries removed, overflow entries removed)
        """
        expired = self._cache.evict_expired()
        overflow = self._cache.evict_to_capacity()
        logger.debug(
            "Cache sweep removed %d expired and %d overflow entries", expired, overflow
        )
        return expired, overflow

    def start(self) -> None:
        """Start the sweep loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="cache-janitor")
        logger.info("Started periodic cache cleanup every %.0f seconds", self._interval)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Stopped periodic cache cleanup")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.sweep()
            except Exception:
                # A failed sweep must not end the loop; the next one retries
                logger.exception("Cache sweep failed")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def interval(self) -> float:
        return self._interval

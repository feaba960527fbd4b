"""Manifest proxy service.

Fetches a playlist from origin, rewrites it so every URI points back at
the proxy, and kicks off prefetching of the segments a media playlist
lists.
"""

import logging
from collections.abc import Mapping

from m3u8_proxy.entities import RewriteResult
from m3u8_proxy.exceptions import OriginFetchError
from m3u8_proxy.protocols import OriginClient
from m3u8_proxy.services.playlist_rewriter import rewrite_playlist
from m3u8_proxy.services.prefetcher import Prefetcher

logger = logging.getLogger(__name__)


class ManifestService:
    """Orchestrates fetch, rewrite and prefetch for one playlist request.

    Example:
        ```python
        service = ManifestService(origin_client=client, prefetcher=prefetcher)
        result = await service.proxy(
            "https://cdn.example/a/index.m3u8",
            headers={},
            proxy_base="https://proxy.example",
        )
        print(result.text)
        ```
    """

    def __init__(self, origin_client: OriginClient, prefetcher: Prefetcher) -> None:
        """Initialize the manifest service.

        Args:
            origin_client: Client used to fetch playlists (required).
            prefetcher: Prefetcher for segments of media playlists (required).
        """
        self._origin = origin_client
        self._prefetcher = prefetcher

    async def proxy(
        self,
        url: str,
        headers: Mapping[str, str],
        proxy_base: str,
    ) -> RewriteResult:
        """Fetch and rewrite the playlist at ``url``.

        Business logic:
        1. Fetch the playlist from origin with the player's headers
        2. Rewrite it as a master or media playlist
        3. For media playlists, schedule prefetching of discovered URLs
           (not awaited)

        Args:
            url: Absolute playlist URL
            headers: Player headers to forward to origin
            proxy_base: Scheme and host of this proxy

        Returns:
            RewriteResult with the rewritten playlist

        Raises:
            OriginFetchError: If the origin fetch failed
        """
        response = await self._origin.get(url, headers)
        if not response.is_success:
            logger.error(
                "Failed to fetch M3U8: %d %s for URL: %s",
                response.status_code,
                response.reason_phrase,
                url,
            )
            logger.error("Response body: %s", response.text)
            raise OriginFetchError(url, response.status_code, response.reason_phrase)

        result = rewrite_playlist(response.text, url, headers, proxy_base)

        if not result.is_master and result.segment_urls:
            logger.info(
                "Starting to prefetch %d segments for %s", len(result.segment_urls), url
            )
            self._prefetcher.schedule(result.segment_urls, headers)

        return result

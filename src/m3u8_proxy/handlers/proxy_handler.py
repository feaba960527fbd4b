"""HTTP handlers for proxy operations.

Handlers validate query parameters, delegate to services and turn
service results and errors into HTTP responses.
"""

import logging

from fastapi import HTTPException, Response, status

from m3u8_proxy.config import Settings
from m3u8_proxy.dto import CacheStatsResponse, HealthCheckResponse, parse_forwarded_headers
from m3u8_proxy.exceptions import OriginFetchError
from m3u8_proxy.services import (
    MANIFEST_MIME_TYPE,
    CacheService,
    ManifestService,
    SegmentServer,
)

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Allow-Methods": "*",
}
NO_CACHE = "no-cache, no-store, must-revalidate"
SEGMENT_CACHE_CONTROL = "public, max-age=3600"


class ProxyHandler:
    """HTTP handlers for manifest, segment and cache statistics requests.

    This handler delegates business logic to the services and handles
    HTTP-specific concerns like:
    - Feature toggles and query validation
    - Response headers (content type, CORS, caching directives)
    - Mapping origin failures to status codes

    Example:
        ```python
        handler = ProxyHandler(
            settings=settings,
            cache_service=cache,
            manifest_service=manifests,
            segment_server=segments,
        )

        @app.get("/m3u8-proxy")
        async def m3u8_proxy(request: Request, url: str | None = None, headers: str | None = None):
            return await handler.proxy_manifest(url, headers, str(request.base_url))
        ```
    """

    def __init__(
        self,
        settings: Settings,
        cache_service: CacheService,
        manifest_service: ManifestService,
        segment_server: SegmentServer,
    ) -> None:
        """Initialize the proxy handler.

        Args:
            settings: Feature toggles (required).
            cache_service: Segment cache, for statistics (required).
            manifest_service: Playlist fetch/rewrite service (required).
            segment_server: Segment serving service (required).
        """
        self._settings = settings
        self._cache = cache_service
        self._manifests = manifest_service
        self._segments = segment_server

    async def proxy_manifest(
        self,
        url: str | None,
        headers_param: str | None,
        proxy_base: str,
    ) -> Response:
        """Handle GET /m3u8-proxy requests.

        Args:
            url: Absolute playlist URL (query parameter)
            headers_param: JSON object of headers to forward (query parameter)
            proxy_base: Scheme and host the player reached the proxy on

        Returns:
            The rewritten playlist

        Raises:
            HTTPException: 404 when disabled, 400 on bad parameters,
                500 when the origin fetch fails
        """
        self._ensure_enabled("M3U8 proxying is disabled")
        url, headers = self._parse_query(url, headers_param)

        try:
            result = await self._manifests.proxy(url, headers, proxy_base)
        except OriginFetchError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to fetch M3U8: {e}",
            ) from e

        return Response(
            content=result.text,
            media_type=MANIFEST_MIME_TYPE,
            headers={**CORS_HEADERS, "Cache-Control": NO_CACHE},
        )

    async def proxy_segment(self, url: str | None, headers_param: str | None) -> Response:
        """Handle GET /ts-proxy requests.

        Args:
            url: Absolute segment or key URL (query parameter)
            headers_param: JSON object of headers to forward (query parameter)

        Returns:
            The segment bytes

        Raises:
            HTTPException: 404 when disabled, 400 on bad parameters,
                the origin status (or 500) when the origin fetch fails
        """
        self._ensure_enabled("TS proxying is disabled")
        url, headers = self._parse_query(url, headers_param)

        try:
            segment = await self._segments.serve(url, headers)
        except OriginFetchError as e:
            logger.error("Error proxying TS file: %s", e)
            status_code = e.status_code if e.status_code and e.status_code >= 400 else 500
            raise HTTPException(
                status_code=status_code,
                detail=f"Failed to fetch TS file: {e}",
            ) from e

        return Response(
            content=segment.content,
            media_type=segment.content_type,
            headers={**CORS_HEADERS, "Cache-Control": SEGMENT_CACHE_CONTROL},
        )

    async def get_cache_stats(self) -> CacheStatsResponse:
        """Handle GET /cache-stats requests.

        Returns:
            CacheStatsResponse after a cleanup pass
        """
        self._cache.cleanup()
        return CacheStatsResponse.from_entity(self._cache.stats())

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        return HealthCheckResponse(
            status="healthy",
            proxy_enabled=self._settings.proxy_enabled,
            cache_enabled=self._cache.enabled,
            cache_entries=len(self._cache),
        )

    def _ensure_enabled(self, message: str) -> None:
        if not self._settings.proxy_enabled:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)

    @staticmethod
    def _parse_query(url: str | None, headers_param: str | None) -> tuple[str, dict[str, str]]:
        if not url:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="URL parameter is required",
            )

        parsed = parse_forwarded_headers(headers_param)
        if not parsed.ok:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=parsed.error)

        return url, parsed.headers

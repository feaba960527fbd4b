"""Service layer for business logic.

This layer contains the playlist rewriting, caching and prefetching
logic. Services depend on protocols (interfaces), not concrete
implementations, making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from m3u8_proxy.services import CacheService, Prefetcher

    cache = CacheService.create()
    prefetcher = Prefetcher(cache_service=cache, origin_client=client)
    ```
"""

from .cache_service import CacheService
from .janitor import CacheJanitor
from .manifest_service import ManifestService
from .playlist_rewriter import (
    MANIFEST_MIME_TYPE,
    build_proxy_url,
    is_master_playlist,
    rewrite_playlist,
)
from .prefetcher import Prefetcher
from .segment_server import SegmentPayload, SegmentServer
from .url_resolver import resolve_url

__all__ = [
    "CacheService",
    "CacheJanitor",
    "ManifestService",
    "Prefetcher",
    "SegmentServer",
    "SegmentPayload",
    "MANIFEST_MIME_TYPE",
    "build_proxy_url",
    "is_master_playlist",
    "rewrite_playlist",
    "resolve_url",
]

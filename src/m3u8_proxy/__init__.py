"""M3U8 Proxy - Rewriting HLS proxy with a segment prefetch cache.

This package provides a layered architecture for proxying HLS playlists
and segments:

Layers:
    - protocols: Interface contracts (SegmentStore, OriginClient)
    - repositories: Data access implementations
    - services: Business logic (rewriting, caching, prefetching)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from m3u8_proxy.services import CacheService, rewrite_playlist

    cache = CacheService.create(capacity=100)
    result = rewrite_playlist(text, "https://cdn.example/a/index.m3u8", {}, "https://proxy.example")
    ```

For HTTP API:
    ```python
    from m3u8_proxy.api.app import app, create_app
    ```
"""

__version__ = "0.1.0"

from m3u8_proxy.config import get_settings, settings
from m3u8_proxy.dto import HeaderParseResult, parse_forwarded_headers
from m3u8_proxy.entities import CacheEntryEntity, CacheStatsEntity, OriginResponse, RewriteResult
from m3u8_proxy.exceptions import OriginFetchError, ProxyError, ResolutionError
from m3u8_proxy.handlers import ProxyHandler
from m3u8_proxy.protocols import OriginClient, SegmentStore
from m3u8_proxy.repositories import HttpxOriginClient, InMemorySegmentRepository
from m3u8_proxy.services import (
    CacheJanitor,
    CacheService,
    ManifestService,
    Prefetcher,
    SegmentServer,
    resolve_url,
    rewrite_playlist,
)

__all__ = [
    "__version__",
    # Configuration
    "settings",
    "get_settings",
    # Errors
    "ProxyError",
    "ResolutionError",
    "OriginFetchError",
    # Protocols (interfaces)
    "SegmentStore",
    "OriginClient",
    # Services (business logic)
    "CacheService",
    "CacheJanitor",
    "ManifestService",
    "Prefetcher",
    "SegmentServer",
    "resolve_url",
    "rewrite_playlist",
    # Handlers (HTTP)
    "ProxyHandler",
    # Repositories (data access)
    "InMemorySegmentRepository",
    "HttpxOriginClient",
    # Entities (domain models)
    "CacheEntryEntity",
    "CacheStatsEntity",
    "OriginResponse",
    "RewriteResult",
    # DTOs (API contracts)
    "HeaderParseResult",
    "parse_forwarded_headers",
]

"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from m3u8_proxy.config import Settings
from m3u8_proxy.handlers import ProxyHandler
from m3u8_proxy.protocols import OriginClient
from m3u8_proxy.repositories import HttpxOriginClient, InMemorySegmentRepository
from m3u8_proxy.services import (
    CacheJanitor,
    CacheService,
    ManifestService,
    Prefetcher,
    SegmentServer,
)

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> ProxyHandler:
    """Dependency injection for ProxyHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The ProxyHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "proxy_handler", None)
    if handler is None:
        raise RuntimeError("ProxyHandler not initialized. Check lifespan setup.")
    return handler


def get_proxy_base(request: Request) -> str:
    """Scheme and host the player used to reach this proxy.

    A TLS-terminating edge reports the player's scheme in
    ``X-Forwarded-Proto``; only the first hop's value is considered.
    """
    base_url = request.base_url
    forwarded_proto = request.headers.get("x-forwarded-proto", "")
    if forwarded_proto.split(",")[0].strip().lower() == "https":
        base_url = base_url.replace(scheme="https")
    return str(base_url).rstrip("/")


def build_lifespan(settings: Settings, origin_client: OriginClient | None = None):
    """Create the lifespan context manager for the FastAPI app.

    Args:
        settings: Application settings
        origin_client: Origin client to use. If None, an HttpxOriginClient
            is created from settings (and closed on shutdown).

    Returns:
        An async context manager factory suitable for ``FastAPI(lifespan=...)``
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initializes all layers and stores them in app.state:
        1. Repositories (segment store, origin client) - created explicitly
        2. Services (cache, prefetcher, janitor, manifest, segment server)
        3. Handler (HTTP endpoints) - stored in app.state.proxy_handler

        Cleanup:
            Stops background work and removes all services from app.state
        """
        client = origin_client or HttpxOriginClient.create(
            user_agent=settings.origin_user_agent,
            timeout=settings.origin_timeout,
        )

        cache_service = CacheService.create(
            repository=InMemorySegmentRepository.create(),
            capacity=settings.cache_max_size,
            ttl=settings.cache_ttl,
            enabled=settings.cache_enabled,
        )
        prefetcher = Prefetcher(cache_service=cache_service, origin_client=client)
        janitor = CacheJanitor(cache_service, interval=settings.cache_cleanup_interval)
        proxy_handler = ProxyHandler(
            settings=settings,
            cache_service=cache_service,
            manifest_service=ManifestService(origin_client=client, prefetcher=prefetcher),
            segment_server=SegmentServer(cache_service=cache_service, origin_client=client),
        )

        # Store in app.state (FastAPI pattern)
        app.state.settings = settings
        app.state.origin_client = client
        app.state.cache_service = cache_service
        app.state.prefetcher = prefetcher
        app.state.janitor = janitor
        app.state.proxy_handler = proxy_handler

        if cache_service.enabled:
            janitor.start()
        else:
            logger.info("Segment cache disabled")

        logger.info("✓ Proxy service initialized")
        logger.info(
            "✓ Cache capacity: %d entries, TTL: %d seconds",
            cache_service.capacity,
            cache_service.ttl,
        )
        if not settings.proxy_enabled:
            logger.info("M3U8 proxying is disabled")

        yield

        await janitor.stop()
        await prefetcher.aclose()
        if origin_client is None:
            await client.close()

        # Cleanup - remove from app.state
        del app.state.proxy_handler
        del app.state.janitor
        del app.state.prefetcher
        del app.state.cache_service
        del app.state.origin_client
        del app.state.settings
        logger.info("✓ Proxy service shut down")

    return lifespan


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[ProxyHandler, Depends(get_handler)]
ProxyBaseDep = Annotated[str, Depends(get_proxy_base)]

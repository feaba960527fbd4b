import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from m3u8_proxy import __version__
from m3u8_proxy.api.dependencies import HandlerDep, ProxyBaseDep, build_lifespan
from m3u8_proxy.config import Settings, configure_logging, get_settings
from m3u8_proxy.dto import CacheStatsResponse, ErrorResponse, HealthCheckResponse
from m3u8_proxy.protocols import OriginClient

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(statusCode=status_code, statusMessage=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTP errors as ``{"statusCode", "statusMessage"}``."""
    return _error_response(exc.status_code, str(exc.detail))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the failure and report a generic 500."""
    logger.exception("Unexpected error handling %s", request.url.path)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def create_app(
    settings: Settings | None = None,
    origin_client: OriginClient | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings. Defaults to environment settings.
        origin_client: Origin client override (tests inject fakes here).

    Returns:
        FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="M3U8 Proxy",
        description="Rewriting HLS proxy with segment prefetch cache",
        version=__version__,
        lifespan=build_lifespan(settings, origin_client),
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "M3U8 Proxy",
            "version": __version__,
            "description": "Rewriting HLS proxy with segment prefetch cache",
            "endpoints": {
                "manifest": "/m3u8-proxy?url=<playlist>&headers=<json>",
                "segment": "/ts-proxy?url=<segment>&headers=<json>",
                "stats": "/cache-stats",
                "health": "/health",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.get("/m3u8-proxy")
    async def m3u8_proxy(
        handler: HandlerDep,
        proxy_base: ProxyBaseDep,
        url: str | None = None,
        headers: str | None = None,
    ):
        """Fetch a playlist from origin and rewrite it to route through this proxy."""
        return await handler.proxy_manifest(url, headers, proxy_base)

    @app.get("/ts-proxy")
    async def ts_proxy(
        handler: HandlerDep,
        url: str | None = None,
        headers: str | None = None,
    ):
        """Serve a segment or key, from cache when prefetched."""
        return await handler.proxy_segment(url, headers)

    @app.get("/cache-stats", response_model=CacheStatsResponse)
    async def cache_stats(handler: HandlerDep) -> JSONResponse:
        """Get segment cache statistics."""
        stats = await handler.get_cache_stats()
        return JSONResponse(
            content=stats.model_dump(),
            headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
        )

    return app


configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "m3u8_proxy.api.app:app",
        host=_settings.api_host,
        port=_settings.api_port,
        reload=_settings.api_reload,
    )

"""Tests for serving segments from cache or origin."""

import pytest

from m3u8_proxy.exceptions import OriginFetchError
from m3u8_proxy.services import CacheService, SegmentServer

SEG = "https://cdn.example/a/seg-1.ts"


@pytest.fixture
def cache(clock):
    return CacheService.create(capacity=10, ttl=60, enabled=True, clock=clock)


@pytest.fixture
def server(cache, origin):
    return SegmentServer(cache_service=cache, origin_client=origin)


class TestSegmentServer:
    @pytest.mark.asyncio
    async def test_hit_uses_cache_only(self, server, cache, origin):
        cache.put(SEG, b"cached", {"content-type": "video/iso.segment"})

        segment = await server.serve(SEG)

        assert segment.content == b"cached"
        assert segment.content_type == "video/iso.segment"
        assert segment.cached is True
        assert origin.calls == []

    @pytest.mark.asyncio
    async def test_hit_without_content_type(self, server, cache):
        cache.put(SEG, b"cached")
        assert (await server.serve(SEG)).content_type == "video/mp2t"

    @pytest.mark.asyncio
    async def test_miss_fetches_once_and_does_not_cache(self, server, cache, origin):
        origin.add(SEG, b"from-origin", content_type="application/octet-stream")

        segment = await server.serve(SEG, {"Referer": "https://site.example/"})

        assert segment.content == b"from-origin"
        assert segment.content_type == "video/mp2t"
        assert segment.cached is False
        assert origin.calls == [(SEG, {"Referer": "https://site.example/"})]
        assert cache.get(SEG) is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_expired_entry_falls_through(self, server, cache, origin, clock):
        cache.put(SEG, b"stale")
        clock.advance(61)
        origin.add(SEG, b"fresh")

        assert (await server.serve(SEG)).content == b"fresh"

    @pytest.mark.asyncio
    async def test_origin_error_status(self, server, origin):
        origin.add(SEG, b"", status_code=404)

        with pytest.raises(OriginFetchError) as exc_info:
            await server.serve(SEG)

        assert exc_info.value.status_code == 404
        assert "404" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_failure(self, server):
        with pytest.raises(OriginFetchError) as exc_info:
            await server.serve(SEG)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_disabled_cache_always_fetches(self, origin, clock):
        cache = CacheService.create(enabled=False, clock=clock)
        server = SegmentServer(cache_service=cache, origin_client=origin)
        cache.put(SEG, b"ignored")
        origin.add(SEG, b"origin")

        assert (await server.serve(SEG)).content == b"origin"
        assert origin.urls() == [SEG]

"""
Tests for the proxy HTTP API.
"""

import time

import pytest
from fastapi.testclient import TestClient

from m3u8_proxy.api.app import create_app
from m3u8_proxy.config import Settings

MASTER_URL = "https://cdn.example/a/master.m3u8"
MEDIA_URL = "https://cdn.example/a/index.m3u8"
SEG_URL = "https://cdn.example/a/seg-1.ts"

MASTER = (
    b"#EXTM3U\n"
    b"#EXT-X-STREAM-INF:RESOLUTION=1920x1080\n"
    b"hi.m3u8\n"
    b"#EXT-X-STREAM-INF:RESOLUTION=640x360\n"
    b"lo.m3u8\n"
)
MEDIA = b"#EXTM3U\n#EXTINF:6.0,\nseg-1.ts\n#EXTINF:6.0,\nseg-2.ts\n#EXT-X-ENDLIST\n"


def make_settings(**overrides) -> Settings:
    values = {
        "disable_m3u8": False,
        "disable_cache": False,
        "cache_max_size": 2000,
        "cache_ttl": 7200,
        "cache_cleanup_interval": 1800,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def client(origin):
    """Create a test client with lifespan and a scripted origin."""
    app = create_app(settings=make_settings(), origin_client=origin)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def uncached_client(origin):
    app = create_app(settings=make_settings(disable_cache=True), origin_client=origin)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def disabled_client(origin):
    app = create_app(settings=make_settings(disable_m3u8=True), origin_client=origin)
    with TestClient(app) as test_client:
        yield test_client


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "M3U8 Proxy"
    assert data["endpoints"]["stats"] == "/cache-stats"


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "proxy_enabled": True,
        "cache_enabled": True,
        "cache_entries": 0,
    }


class TestManifestProxy:
    def test_missing_url(self, client, origin):
        response = client.get("/m3u8-proxy")
        assert response.status_code == 400
        assert response.json() == {"statusCode": 400, "statusMessage": "URL parameter is required"}
        assert origin.calls == []

    def test_bad_headers_json_never_reaches_origin(self, client, origin):
        response = client.get("/m3u8-proxy", params={"url": MASTER_URL, "headers": "{bad json"})
        assert response.status_code == 400
        assert response.json()["statusMessage"].startswith("Invalid headers format")
        assert origin.calls == []

    def test_master_playlist_end_to_end(self, client, origin):
        origin.add(MASTER_URL, MASTER)

        response = client.get("/m3u8-proxy", params={"url": MASTER_URL})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/vnd.apple.mpegurl"
        assert response.headers["cache-control"] == "no-cache, no-store, must-revalidate"
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.text.split("\n") == [
            "#EXTM3U",
            "#EXT-X-STREAM-INF:RESOLUTION=1920x1080",
            "http://testserver/m3u8-proxy?url=https%3A%2F%2Fcdn.example%2Fa%2Fhi.m3u8&headers=%7B%7D",
            "#EXT-X-STREAM-INF:RESOLUTION=640x360",
            "http://testserver/m3u8-proxy?url=https%3A%2F%2Fcdn.example%2Fa%2Flo.m3u8&headers=%7B%7D",
            "",
        ]

    def test_forwards_headers(self, client, origin):
        origin.add(MASTER_URL, MASTER)

        response = client.get(
            "/m3u8-proxy",
            params={"url": MASTER_URL, "headers": '{"Referer":"https://site.example/"}'},
        )

        assert response.status_code == 200
        assert origin.calls[0] == (MASTER_URL, {"Referer": "https://site.example/"})
        assert "headers=%7B%22Referer%22%3A%22https%3A%2F%2Fsite.example%2F%22%7D" in response.text

    def test_media_playlist_without_cache(self, uncached_client, origin):
        origin.add(MEDIA_URL, MEDIA)

        response = uncached_client.get("/m3u8-proxy", params={"url": MEDIA_URL})

        lines = response.text.split("\n")
        assert response.status_code == 200
        assert lines[2] == (
            "http://testserver/ts-proxy?url=https%3A%2F%2Fcdn.example%2Fa%2Fseg-1.ts&headers=%7B%7D"
        )
        assert lines[5] == "#EXT-X-ENDLIST"
        assert origin.urls() == [MEDIA_URL]

    def test_forwarded_https_scheme_is_used_in_rewritten_urls(self, uncached_client, origin):
        origin.add(MEDIA_URL, MEDIA)

        response = uncached_client.get(
            "/m3u8-proxy",
            params={"url": MEDIA_URL},
            headers={"X-Forwarded-Proto": "https"},
        )

        lines = response.text.split("\n")
        assert response.status_code == 200
        assert lines[2].startswith("https://testserver/ts-proxy?url=")
        assert lines[4].startswith("https://testserver/ts-proxy?url=")

    def test_forwarded_http_scheme_keeps_request_scheme(self, uncached_client, origin):
        origin.add(MEDIA_URL, MEDIA)

        response = uncached_client.get(
            "/m3u8-proxy",
            params={"url": MEDIA_URL},
            headers={"X-Forwarded-Proto": "http"},
        )

        assert response.text.split("\n")[2].startswith("http://testserver/ts-proxy?url=")

    def test_media_playlist_prefetches_in_background(self, client, origin):
        origin.add(MEDIA_URL, MEDIA)
        origin.add(SEG_URL, b"one")
        origin.add("https://cdn.example/a/seg-2.ts", b"two")

        response = client.get("/m3u8-proxy", params={"url": MEDIA_URL})
        assert response.status_code == 200

        entries = 0
        for _ in range(200):
            entries = client.get("/cache-stats").json()["entries"]
            if entries == 2:
                break
            time.sleep(0.01)
        assert entries == 2

        fetches_before = len(origin.calls)
        segment = client.get("/ts-proxy", params={"url": SEG_URL})
        assert segment.content == b"one"
        assert len(origin.calls) == fetches_before

    def test_origin_failure(self, client, origin):
        origin.add(MASTER_URL, b"nope", status_code=404)

        response = client.get("/m3u8-proxy", params={"url": MASTER_URL})

        assert response.status_code == 500
        assert "Failed to fetch M3U8" in response.json()["statusMessage"]

    def test_disabled(self, disabled_client, origin):
        response = disabled_client.get("/m3u8-proxy", params={"url": MASTER_URL})
        assert response.status_code == 404
        assert response.json()["statusMessage"] == "M3U8 proxying is disabled"

    def test_disabled_checked_before_validation(self, disabled_client):
        assert disabled_client.get("/m3u8-proxy").status_code == 404


class TestSegmentProxy:
    def test_cold_cache_fetches_once_and_does_not_cache(self, client, origin):
        origin.add(SEG_URL, b"\x47\x00\x11binary")

        response = client.get("/ts-proxy", params={"url": SEG_URL})

        assert response.status_code == 200
        assert response.content == b"\x47\x00\x11binary"
        assert response.headers["content-type"] == "video/mp2t"
        assert response.headers["cache-control"] == "public, max-age=3600"
        assert origin.urls() == [SEG_URL]
        assert client.get("/cache-stats").json()["entries"] == 0

    def test_cache_hit(self, client, origin):
        client.app.state.cache_service.put(SEG_URL, b"cached", {"content-type": "video/iso.segment"})

        response = client.get("/ts-proxy", params={"url": SEG_URL})

        assert response.status_code == 200
        assert response.content == b"cached"
        assert response.headers["content-type"] == "video/iso.segment"
        assert origin.calls == []

    def test_missing_url(self, client):
        assert client.get("/ts-proxy").status_code == 400

    def test_bad_headers(self, client, origin):
        response = client.get("/ts-proxy", params={"url": SEG_URL, "headers": "[1]"})
        assert response.status_code == 400
        assert origin.calls == []

    def test_origin_status_is_propagated(self, client, origin):
        origin.add(SEG_URL, b"", status_code=404)

        response = client.get("/ts-proxy", params={"url": SEG_URL})

        assert response.status_code == 404
        assert "Failed to fetch TS file" in response.json()["statusMessage"]

    def test_transport_failure_is_500(self, client):
        response = client.get("/ts-proxy", params={"url": SEG_URL})
        assert response.status_code == 500

    def test_disabled(self, disabled_client):
        response = disabled_client.get("/ts-proxy", params={"url": SEG_URL})
        assert response.status_code == 404
        assert response.json()["statusMessage"] == "TS proxying is disabled"


class TestCacheStats:
    def test_empty(self, client):
        response = client.get("/cache-stats")
        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-cache, no-store, must-revalidate"
        assert response.json() == {
            "entries": 0,
            "totalSizeMB": "0.00",
            "avgEntrySizeKB": "0.00",
            "maxSize": 2000,
            "expiryHours": 2,
        }
        assert '"expiryHours":2}' in response.text

    def test_sizes(self, client):
        cache = client.app.state.cache_service
        cache.put("https://cdn.example/a.ts", b"x" * (1024 * 1024))
        cache.put("https://cdn.example/b.ts", b"x" * (1024 * 1024))

        data = client.get("/cache-stats").json()
        assert data["entries"] == 2
        assert data["totalSizeMB"] == "2.00"
        assert data["avgEntrySizeKB"] == "1024.00"

    def test_available_when_proxying_disabled(self, disabled_client):
        assert disabled_client.get("/cache-stats").status_code == 200


def test_cors_preflight(client):
    response = client.options(
        "/ts-proxy",
        headers={"Origin": "https://player.example", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_unknown_route_uses_error_format(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"statusCode": 404, "statusMessage": "Not Found"}

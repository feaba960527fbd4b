#!/usr/bin/env python3
"""
Demo script for the m3u8 proxy.

This script walks through playlist rewriting, the segment cache policy
and background prefetching against a simulated origin (no network needed).
"""

import asyncio

import httpx

from m3u8_proxy.repositories import HttpxOriginClient
from m3u8_proxy.services import CacheService, ManifestService, Prefetcher, rewrite_playlist

PROXY_BASE = "http://localhost:8000"

MASTER = """#EXTM3U
#EXT-X-MEDIA:TYPE=AUDIO,GROUP-ID="aac",NAME="English",URI="https://cdn.example/live/audio_en.m3u8"
#EXT-X-STREAM-INF:BANDWIDTH=5000000,RESOLUTION=1920x1080,AUDIO="aac"
1080p/index.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=800000,RESOLUTION=640x360,AUDIO="aac"
360p/index.m3u8
"""

MEDIA = """#EXTM3U
#EXT-X-TARGETDURATION:6
#EXT-X-KEY:METHOD=AES-128,URI="https://keys.example/live/k1.bin"
#EXTINF:6.0,
seg-100.ts
#EXTINF:6.0,
seg-101.ts
#EXTINF:6.0,
seg-102.ts
"""


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def demo_rewrite() -> None:
    """Demonstrate master and media playlist rewriting."""
    print_section("Playlist Rewriting")

    headers = {"Referer": "https://player.example/"}

    print("\n📝 Master playlist:")
    result = rewrite_playlist(MASTER, "https://cdn.example/live/master.m3u8", headers, PROXY_BASE)
    for line in result.text.splitlines():
        print(f"  {line}")

    print("\n📝 Media playlist:")
    result = rewrite_playlist(MEDIA, "https://cdn.example/live/360p/index.m3u8", headers, PROXY_BASE)
    for line in result.text.splitlines():
        print(f"  {line}")

    print(f"\n🔍 Discovered {len(result.segment_urls)} URLs to prefetch:")
    for url in result.segment_urls:
        print(f"  - {url}")


def demo_cache_policy() -> None:
    """Demonstrate TTL expiry and oldest-insertion eviction."""
    print_section("Cache Policy")

    now = [0.0]
    cache = CacheService.create(capacity=3, ttl=60, enabled=True, clock=lambda: now[0])

    print("\n📦 Inserting 5 segments into a cache of capacity 3:")
    for i in range(5):
        cache.put(f"https://cdn.example/seg-{i}.ts", b"x" * 1024)
        now[0] += 1
        print(f"  ✓ seg-{i}.ts (size now {len(cache)})")

    print(f"\n🧹 Cleanup leaves {cache.cleanup()} entries:")
    for i in range(5):
        hit = cache.get(f"https://cdn.example/seg-{i}.ts") is not None
        print(f"  seg-{i}.ts: {'HIT' if hit else 'miss'}")

    now[0] += 61
    print("\n⏱  After the TTL has passed:")
    stats = cache.stats()
    print(f"  Entries: {stats.entries}, total bytes: {stats.total_bytes}")


async def demo_prefetch() -> None:
    """Demonstrate proxying a media playlist and prefetching its segments."""
    print_section("Manifest Proxy + Prefetch")

    def origin(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith(".m3u8"):
            return httpx.Response(200, text=MEDIA)
        if request.url.path.endswith("seg-102.ts"):
            return httpx.Response(404)
        return httpx.Response(200, content=b"\x47" * 188, headers={"Content-Type": "video/mp2t"})

    client = HttpxOriginClient.create(transport=httpx.MockTransport(origin))
    cache = CacheService.create(capacity=100, ttl=3600, enabled=True)
    prefetcher = Prefetcher(cache_service=cache, origin_client=client)
    service = ManifestService(origin_client=client, prefetcher=prefetcher)

    result = await service.proxy("https://cdn.example/live/360p/index.m3u8", {}, PROXY_BASE)
    print(f"\n📄 Rewritten playlist returned ({len(result.text)} chars)")
    print(f"  Prefetches in flight: {prefetcher.pending}")

    await prefetcher.wait_idle()
    stats = cache.stats()
    print(f"\n📊 Cache after prefetch: {stats.entries} entries, {stats.total_bytes} bytes")
    for url in result.segment_urls:
        print(f"  {'✓' if cache.get(url) else '✗'} {url}")

    await client.close()


def main() -> None:
    """Run all demos."""
    print("\n🚀 M3U8 Proxy Demo")
    print("=" * 70)
    print("This demo showcases playlist rewriting and segment caching")

    try:
        demo_rewrite()
        demo_cache_policy()
        asyncio.run(demo_prefetch())

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)

    except Exception as e:
        print(f"\n❌ Error: {e}")


if __name__ == "__main__":
    main()

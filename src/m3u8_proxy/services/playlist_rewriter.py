"""Rewriting of HLS playlists so every follow-up request goes through the proxy.

Master playlists have their variant URIs and alternate media (audio,
subtitles) pointed at the manifest proxy; media playlists have their
segment URIs pointed at the segment proxy. Encryption keys go through
the segment proxy in both cases. Everything else is copied verbatim, line
for line.
"""

import json
import logging
import re
from collections.abc import Mapping
from urllib.parse import quote

from m3u8_proxy.entities import RewriteResult
from m3u8_proxy.exceptions import ResolutionError
from m3u8_proxy.services.url_resolver import resolve_url

logger = logging.getLogger(__name__)

MANIFEST_MIME_TYPE = "application/vnd.apple.mpegurl"

MANIFEST_PROXY_PATH = "/m3u8-proxy"
SEGMENT_PROXY_PATH = "/ts-proxy"

# Only variant stream tags carry RESOLUTION=, so its presence marks a master playlist
MASTER_PLAYLIST_MARKER = "RESOLUTION="

TAG_PREFIX = "#"
KEY_TAG = "#EXT-X-KEY:"
MEDIA_TAG = "#EXT-X-MEDIA:"

_EMBEDDED_URL = re.compile(r"https?://[^\"\s]+")

# encodeURIComponent leaves these unescaped
_COMPONENT_SAFE = "!~*'()"


def is_master_playlist(text: str) -> bool:
    """Classify a playlist by looking for the variant resolution attribute."""
    return MASTER_PLAYLIST_MARKER in text


def encode_headers(headers: Mapping[str, str]) -> str:
    """Serialise forwarded headers as compact JSON for a proxy URL."""
    return json.dumps(dict(headers), separators=(",", ":"), ensure_ascii=False)


def build_proxy_url(
    proxy_base: str,
    path: str,
    target_url: str,
    headers: Mapping[str, str],
) -> str:
    """Build ``{proxy_base}{path}?url=...&headers=...``.

    Args:
        proxy_base: Scheme and host the player reaches the proxy on
        path: MANIFEST_PROXY_PATH or SEGMENT_PROXY_PATH
        target_url: Absolute origin URL
        headers: Headers to forward to origin on the follow-up request

    Returns:
        The proxy URL
    """
    encoded_url = quote(target_url, safe=_COMPONENT_SAFE)
    encoded_headers = quote(encode_headers(headers), safe=_COMPONENT_SAFE)
    return f"{proxy_base.rstrip('/')}{path}?url={encoded_url}&headers={encoded_headers}"


def rewrite_playlist(
    text: str,
    request_url: str,
    headers: Mapping[str, str],
    proxy_base: str,
) -> RewriteResult:
    """Rewrite a playlist so all URIs route through the proxy.

    Args:
        text: Raw playlist text as returned by the origin
        request_url: URL the playlist was fetched from (base for relative URIs)
        headers: Player headers to carry into every proxy URL
        proxy_base: Scheme and host of this proxy

    Returns:
        RewriteResult with the rewritten text and, for media playlists,
        the absolute segment and key URLs discovered
    """
    rewriter = _PlaylistRewriter(request_url, headers, proxy_base)
    if is_master_playlist(text):
        return rewriter.rewrite_master(text)
    return rewriter.rewrite_media(text)


class _PlaylistRewriter:
    def __init__(self, request_url: str, headers: Mapping[str, str], proxy_base: str) -> None:
        self._request_url = request_url
        self._headers = headers
        self._proxy_base = proxy_base

    def rewrite_master(self, text: str) -> RewriteResult:
        lines = []
        for line in text.split("\n"):
            if line.startswith(TAG_PREFIX):
                if line.startswith(KEY_TAG):
                    line, _ = self._rewrite_embedded(line, SEGMENT_PROXY_PATH)
                elif line.startswith(MEDIA_TAG):
                    line, _ = self._rewrite_embedded(line, MANIFEST_PROXY_PATH)
            elif line.strip():
                variant_url = self._resolve(line)
                if variant_url:
                    line = self._proxy_url(MANIFEST_PROXY_PATH, variant_url)
            lines.append(line)

        return RewriteResult(text="\n".join(lines), is_master=True)

    def rewrite_media(self, text: str) -> RewriteResult:
        lines = []
        segment_urls = []
        for line in text.split("\n"):
            if line.startswith(TAG_PREFIX):
                if line.startswith(KEY_TAG):
                    line, key_url = self._rewrite_embedded(line, SEGMENT_PROXY_PATH)
                    if key_url:
                        segment_urls.append(key_url)
            elif line.strip():
                segment_url = self._resolve(line)
                if segment_url:
                    segment_urls.append(segment_url)
                    line = self._proxy_url(SEGMENT_PROXY_PATH, segment_url)
            lines.append(line)

        return RewriteResult(text="\n".join(lines), segment_urls=segment_urls, is_master=False)

    def _rewrite_embedded(self, line: str, path: str) -> tuple[str, str | None]:
        """Replace the first absolute URL inside a tag line."""
        match = _EMBEDDED_URL.search(line)
        if not match:
            return line, None
        url = match.group(0)
        return line.replace(url, self._proxy_url(path, url), 1), url

    def _resolve(self, line: str) -> str | None:
        try:
            return resolve_url(line, self._request_url)
        except ResolutionError as e:
            # Unresolvable lines are passed through untouched
            logger.debug("Leaving playlist line as-is: %s", e)
            return None

    def _proxy_url(self, path: str, url: str) -> str:
        return build_proxy_url(self._proxy_base, path, url, self._headers)

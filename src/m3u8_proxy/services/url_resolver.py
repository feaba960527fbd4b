"""Resolution of playlist URIs into absolute URLs.

Playlists reference variants, segments and keys with absolute URLs,
protocol-relative URLs or paths relative to the playlist itself. Every
one of them must be turned into an absolute URL before it can be
wrapped in a proxy URL.
"""

import re
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from m3u8_proxy.exceptions import ResolutionError

# [scheme:]//host[:port][/path?query], with scheme and "//" both optional
_PERMISSIVE_URL = re.compile(
    r"^(?:(https?:)?//)?(([^/?]+?)(?::(\d{0,5})(?=[/?]|$))?)([/?][\S\s]*|$)",
    re.IGNORECASE,
)
_HTTP_SCHEME = re.compile(r"^https?:", re.IGNORECASE)

_DEFAULT_PORTS = {"http": 80, "https": 443}

# Characters left untouched when normalising, matching browser URL parsing;
# "%" keeps existing escapes intact
_PATH_SAFE = "/%:@!$&'()*+,;=-._~|^[]"
_QUERY_SAFE = _PATH_SAFE + "?"

# Leading and trailing C0 controls and spaces are not part of a URL
_STRIP_CHARS = "".join(chr(c) for c in range(0x21))


def resolve_url(uri: str, base: str | None = None) -> str:
    """Resolve a playlist URI into a normalised absolute URL.

    With a ``base``, standard relative resolution applies: absolute URIs
    are returned as-is, relative paths and protocol-relative ``//host/x``
    URIs are joined against ``base``.

    Without a ``base``, the input must look like ``[scheme:]//host[:port]...``
    or ``host[:port]...``; a missing scheme becomes ``https:`` when the
    port is 443 and ``http:`` otherwise.

    Args:
        uri: The URI as written in the playlist
        base: URL of the playlist the URI came from

    Returns:
        The absolute URL

    Raises:
        ResolutionError: If no absolute URL with a host can be produced

    Example:
        ```python
        resolve_url("seg-1.ts", "https://cdn.example/a/index.m3u8")
        # 'https://cdn.example/a/seg-1.ts'
        resolve_url("cdn.example:443/live.m3u8")
        # 'https://cdn.example/live.m3u8'
        ```
    """
    uri = uri.strip(_STRIP_CHARS)

    if base:
        return _normalize(urljoin(base.strip(_STRIP_CHARS), uri), uri)

    match = _PERMISSIVE_URL.match(uri)
    if not match:
        raise ResolutionError(uri, "does not look like a URL")

    candidate = uri
    if not match.group(1):
        if _HTTP_SCHEME.match(uri):
            # Claims a scheme but is malformed, e.g. "http:/notenoughslashes"
            raise ResolutionError(uri, "malformed scheme")
        if not uri.startswith("//"):
            candidate = "//" + candidate
        candidate = ("https:" if match.group(4) == "443" else "http:") + candidate

    return _normalize(candidate, uri)


def _normalize(url: str, original: str) -> str:
    """Normalise an absolute URL, rejecting ones without a scheme or host."""
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as e:
        raise ResolutionError(original, str(e)) from e

    scheme = parts.scheme.lower()
    hostname = parts.hostname
    if not scheme or not hostname:
        raise ResolutionError(original, "empty host")

    netloc = f"[{hostname}]" if ":" in hostname else hostname
    if port is not None and _DEFAULT_PORTS.get(scheme) != port:
        netloc = f"{netloc}:{port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    path = quote(parts.path, safe=_PATH_SAFE) or "/"
    query = quote(parts.query, safe=_QUERY_SAFE)
    return urlunsplit((scheme, netloc, path, query, parts.fragment))

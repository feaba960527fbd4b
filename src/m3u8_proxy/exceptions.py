"""Exceptions raised by the proxy services.

Handlers translate these into HTTP responses; services never build
HTTP responses themselves.
"""


class ProxyError(Exception):
    """Base class for proxy errors."""


class ResolutionError(ProxyError, ValueError):
    """A playlist URI could not be turned into an absolute URL."""

    def __init__(self, uri: str, reason: str = "not a resolvable URL") -> None:
        super().__init__(f"Cannot resolve {uri!r}: {reason}")
        self.uri = uri
        self.reason = reason


class OriginFetchError(ProxyError):
    """The origin returned a non-success status or could not be reached.

    Attributes:
        url: The origin URL that was requested
        status_code: Origin status code, or None for transport failures
        reason: Origin status text or transport error description
    """

    def __init__(self, url: str, status_code: int | None = None, reason: str = "") -> None:
        self.url = url
        self.status_code = status_code
        self.reason = reason
        if status_code is None:
            message = f"Failed to reach origin: {reason}"
        else:
            message = f"Origin responded {status_code} {reason}".rstrip()
        super().__init__(message)

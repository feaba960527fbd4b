"""httpx-based origin client.

Fetches manifests, segments and keys from origin CDNs on behalf of the
player. Every request carries a browser-like ``User-Agent`` unless the
player-supplied headers override it.
"""

import logging
from collections.abc import Mapping

import httpx

from m3u8_proxy.config import settings
from m3u8_proxy.entities import OriginResponse
from m3u8_proxy.exceptions import OriginFetchError

logger = logging.getLogger(__name__)


class HttpxOriginClient:
    """httpx implementation of the OriginClient protocol.

    This class satisfies the OriginClient protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        client = HttpxOriginClient.create()
        response = await client.get("https://cdn.example/a/seg-1.ts")
        print(response.status_code, len(response.content))
        await client.close()
        ```
    """

    def __init__(
        self,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the origin client.

        Args:
            user_agent: Default ``User-Agent``. Defaults to settings.origin_user_agent.
            timeout: Request timeout in seconds. Defaults to settings.origin_timeout;
                None there means requests never time out.
            transport: Optional httpx transport (e.g. ``httpx.MockTransport`` in tests).
        """
        self._user_agent = user_agent or settings.origin_user_agent
        self._timeout = timeout if timeout is not None else settings.origin_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._transport,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @classmethod
    def create(
        cls,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HttpxOriginClient":
        """Factory method to create HttpxOriginClient with defaults.

        Args:
            user_agent: Default User-Agent. If None, uses settings.
            timeout: Timeout in seconds. If None, uses settings.
            transport: Optional custom transport.

        Returns:
            Configured HttpxOriginClient
        """
        return cls(user_agent=user_agent, timeout=timeout, transport=transport)

    def build_headers(self, headers: Mapping[str, str] | None = None) -> httpx.Headers:
        """Merge player headers over the default ``User-Agent``.

        Header names compare case-insensitively, so ``user-agent`` from the
        player replaces the default rather than being sent alongside it.
        """
        merged = httpx.Headers({"User-Agent": self._user_agent})
        if headers:
            merged.update(headers)
        return merged

    async def get(self, url: str, headers: Mapping[str, str] | None = None) -> OriginResponse:
        """Fetch ``url`` from origin and read the whole body.

        Args:
            url: Absolute origin URL
            headers: Player-supplied headers

        Returns:
            OriginResponse for any HTTP status

        Raises:
            OriginFetchError: If the request failed at the transport level
        """
        try:
            response = await self.client.get(url, headers=self.build_headers(headers))
        except httpx.HTTPError as e:
            raise OriginFetchError(url, reason=str(e) or type(e).__name__) from e

        return OriginResponse(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            content=response.content,
            headers={name.lower(): value for name, value in response.headers.items()},
        )

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None

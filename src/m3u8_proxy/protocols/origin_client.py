"""Origin client protocol.

Defines the interface used to reach origin CDNs for manifests,
segments and keys.
"""

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from m3u8_proxy.entities import OriginResponse


@runtime_checkable
class OriginClient(Protocol):
    """Protocol for HTTP clients fetching from origin servers.

    Example:
        ```python
        client: OriginClient = HttpxOriginClient.create()
        response = await client.get(url, {"Referer": "https://example.com/"})
        if response.is_success:
            ...
        ```
    """

    async def get(self, url: str, headers: Mapping[str, str] | None = None) -> OriginResponse:
        """Issue a GET request and read the whole body.

        The client's default headers are sent unless ``headers`` overrides
        them (names compare case-insensitively).

        Args:
            url: Absolute origin URL
            headers: Extra headers supplied by the player

        Returns:
            The origin response, whatever its status

        Raises:
            OriginFetchError: If the origin could not be reached
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...

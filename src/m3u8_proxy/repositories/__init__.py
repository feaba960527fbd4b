"""Repository layer for data access.

This layer hides external resources (the segment store, origin CDNs)
behind protocol-based interfaces. Any class implementing the required
methods satisfies the protocol.
"""

from m3u8_proxy.protocols import OriginClient, SegmentStore

from .httpx_origin_client import HttpxOriginClient
from .memory_repository import InMemorySegmentRepository

__all__ = [
    "OriginClient",
    "SegmentStore",
    "HttpxOriginClient",
    "InMemorySegmentRepository",
]

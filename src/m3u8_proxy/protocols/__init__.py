"""Protocol interfaces for swappable implementations.

Protocols enable:
- Easy swapping of implementations (in-memory store, another HTTP client)
- Unit testing with fake implementations
- Clear separation of concerns
"""

from .origin_client import OriginClient
from .segment_store import SegmentStore

__all__ = [
    "OriginClient",
    "SegmentStore",
]

"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cache_entry import DEFAULT_SEGMENT_CONTENT_TYPE, CacheEntryEntity
from .cache_stats import CacheStatsEntity
from .origin_response import OriginResponse
from .rewrite_result import RewriteResult

__all__ = [
    "DEFAULT_SEGMENT_CONTENT_TYPE",
    "CacheEntryEntity",
    "CacheStatsEntity",
    "OriginResponse",
    "RewriteResult",
]

"""Data Transfer Objects for API contracts.

These models define the external API contract.
Internal domain logic should use entities from the entities package.
"""

from .requests import HeaderParseResult, parse_forwarded_headers
from .responses import CacheStatsResponse, ErrorResponse, HealthCheckResponse

__all__ = [
    "HeaderParseResult",
    "parse_forwarded_headers",
    "CacheStatsResponse",
    "ErrorResponse",
    "HealthCheckResponse",
]

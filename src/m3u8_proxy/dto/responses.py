"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field

from m3u8_proxy.entities import CacheStatsEntity


def _whole_or_fraction(value: float) -> int | float:
    """Render whole numbers without a trailing ".0" (2, not 2.0)."""
    return int(value) if value.is_integer() else value


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics.

    Sizes are strings with two decimals, as existing dashboards expect.
    """

    entries: int = Field(..., description="Number of live cache entries", ge=0)
    totalSizeMB: str = Field(..., description="Total cached payload size in MiB")
    avgEntrySizeKB: str = Field(..., description="Average payload size in KiB")
    maxSize: int = Field(..., description="Maximum number of cache entries", ge=0)
    expiryHours: int | float = Field(..., description="Entry time-to-live in hours", ge=0)

    @classmethod
    def from_entity(cls, stats: CacheStatsEntity) -> "CacheStatsResponse":
        return cls(
            entries=stats.entries,
            totalSizeMB=f"{stats.total_bytes / (1024 * 1024):.2f}",
            avgEntrySizeKB=f"{stats.avg_entry_bytes / 1024:.2f}",
            maxSize=stats.capacity,
            expiryHours=_whole_or_fraction(stats.ttl_seconds / 3600),
        )


class ErrorResponse(BaseModel):
    """Response DTO for every error the proxy reports."""

    statusCode: int = Field(..., description="HTTP status code")
    statusMessage: str = Field(..., description="Human-readable error message")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy'")
    proxy_enabled: bool = Field(..., description="Whether manifest and segment proxying is on")
    cache_enabled: bool = Field(..., description="Whether the segment cache is on")
    cache_entries: int = Field(..., description="Number of entries currently cached", ge=0)

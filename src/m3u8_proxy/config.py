import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:93.0) Gecko/20100101 Firefox/93.0"
)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_optional_float(name: str) -> float | None:
    value = os.getenv(name)
    return float(value) if value else None


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Feature toggles
    disable_m3u8: bool = _env_flag("DISABLE_M3U8")
    disable_cache: bool = _env_flag("DISABLE_CACHE")

    # Segment cache
    cache_max_size: int = int(os.getenv("CACHE_MAX_SIZE", "2000"))
    cache_ttl: int = int(os.getenv("CACHE_TTL", "7200"))  # 2 hours default
    cache_cleanup_interval: float = float(os.getenv("CACHE_CLEANUP_INTERVAL", "1800"))

    # Origin
    origin_user_agent: str = os.getenv("ORIGIN_USER_AGENT", DEFAULT_USER_AGENT)
    origin_timeout: float | None = _env_optional_float("ORIGIN_TIMEOUT")  # None: no timeout

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = _env_flag("API_RELOAD")

    @property
    def cache_enabled(self) -> bool:
        """Whether segment caching and prefetching are active."""
        return not self.disable_cache

    @property
    def proxy_enabled(self) -> bool:
        """Whether manifest and segment proxying are served."""
        return not self.disable_m3u8

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_max_size <= 0:
            raise ValueError(f"CACHE_MAX_SIZE must be positive, got {self.cache_max_size}")

        if self.cache_ttl <= 0:
            raise ValueError(f"CACHE_TTL must be positive, got {self.cache_ttl}")

        if self.cache_cleanup_interval <= 0:
            raise ValueError(
                f"CACHE_CLEANUP_INTERVAL must be positive, got {self.cache_cleanup_interval}"
            )

        if self.origin_timeout is not None and self.origin_timeout <= 0:
            raise ValueError(f"ORIGIN_TIMEOUT must be positive, got {self.origin_timeout}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for the proxy process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

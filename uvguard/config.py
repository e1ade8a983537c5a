"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger, mask_url
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the UV data-access layer."""
    model_config = SettingsConfigDict(env_prefix="UVGUARD_", extra="ignore")

    openuv_api_key: str | None = None
    openuv_base_url: str = "https://api.openuv.io/api/v1/uv"
    request_timeout_seconds: float = 10.0
    default_altitude: int = 100  # metres, sent as `alt`
    cache_duration_seconds: float = 300.0
    cache_max_entries: int | None = None
    max_retries: int = 3
    backoff_base_ms: int = 100
    history_flush_seconds: float = 1.0
    store_backend: str = "memory"  # options: memory, redis
    store_redis_url: str | None = None
    store_prefix: str = "uvExposure:"
    log_level: str = "INFO"

    @field_validator("openuv_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("max_retries", mode="after")
    @classmethod
    def at_least_one_attempt(cls, v: int) -> int:
        """A retry budget below one would never run the operation."""
        if v < 1:
            raise ValueError("max_retries must be >= 1")
        return v


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    dumped = settings.model_dump()
    dumped["openuv_api_key"] = "***" if settings.openuv_api_key else None
    if settings.store_redis_url:
        dumped["store_redis_url"] = mask_url(settings.store_redis_url)
    logger.debug(f"Loaded settings: {dumped}")

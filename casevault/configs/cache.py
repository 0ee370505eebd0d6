"""
Shared cache and rate limit settings.

Selects the key-value store backing the sync debounce cache and
configures per-endpoint request limits.

Dependencies: pydantic_settings
System role: Shared state configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """Key-value store selection."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CACHE_",
        case_sensitive=False,
        extra="ignore",
    )

    backend: str = Field(
        default="memory",
        description="Store backend: 'memory' (single instance) or 'redis' (shared)",
    )
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    key_prefix: str = Field(default="casevault", description="Prefix applied to every stored key")


class RateLimitSettings(BaseSettings):
    """Fixed-window request limits per client and endpoint group."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Enable request rate limiting")
    window_seconds: int = Field(default=60, description="Length of each counting window")
    api_limit: int = Field(default=60, description="General API requests per window")
    search_limit: int = Field(default=20, description="Search executions per window")
    upload_limit: int = Field(default=30, description="Upload registrations per window")

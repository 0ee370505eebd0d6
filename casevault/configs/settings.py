"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from casevault.configs.base import BaseSettings
from casevault.configs.cache import CacheSettings, RateLimitSettings
from casevault.configs.client import ClientSettings
from casevault.configs.database import DatabaseSettings
from casevault.configs.ingestion import IngestionSettings
from casevault.configs.llm import LLMSettings
from casevault.configs.search import SearchSettings
from casevault.configs.vault import VaultSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = DatabaseSettings()
    vault: VaultSettings = VaultSettings()
    ingestion: IngestionSettings = IngestionSettings()
    search: SearchSettings = SearchSettings()
    llm: LLMSettings = LLMSettings()
    cache: CacheSettings = CacheSettings()
    rate_limit: RateLimitSettings = RateLimitSettings()
    client: ClientSettings = ClientSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from casevault.configs import get_settings
        settings = get_settings()
    """
    return Settings()

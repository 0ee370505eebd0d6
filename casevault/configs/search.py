"""
Search configuration settings.

Limits for LLM summary generation on search results.

Dependencies: pydantic_settings
System role: Search pipeline configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SearchSettings(BaseSettings):
    """Settings for search execution and caching."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SEARCH_",
        case_sensitive=False,
        extra="ignore",
    )

    summarize_top_n: int = Field(
        default=10,
        description="Number of kept chunks that receive an individual summary",
    )

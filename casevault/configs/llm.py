"""
LLM configuration settings.

Model selection for search summaries and case analysis.

Dependencies: pydantic_settings
System role: Chat model configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """Settings for the chat model used for summaries."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    model_id: str = Field(default="gemini-2.5-flash", description="Chat model identifier")
    temperature: float = Field(default=0.3, description="Sampling temperature")
    google_api_key: str | None = Field(default=None, description="Google Generative AI key")

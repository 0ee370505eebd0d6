"""
Client SDK settings.

Defaults for the upload orchestrator and adaptive status poller.

Dependencies: pydantic_settings
System role: Client-side configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Settings for the CaseVault client SDK."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CLIENT_",
        case_sensitive=False,
        extra="ignore",
    )

    api_base_url: str = Field(default="http://localhost:8000/api/v1", description="CaseVault API root")
    timeout_seconds: float = Field(default=60.0, description="Per-request timeout")
    upload_batch_size: int = Field(default=6, description="Files per upload sub-batch")
    poll_floor_ms: int = Field(default=2000, description="Shortest polling interval")
    poll_ceiling_ms: int = Field(default=15000, description="Longest polling interval")
    poll_backoff_factor: float = Field(default=1.5, description="Interval growth per unchanged poll")

"""
Remote vault service configuration.

Connection settings for the external OCR / chunking / search provider
that owns each case's vault.

Dependencies: pydantic_settings
System role: Remote processing service configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VaultSettings(BaseSettings):
    """Settings for the remote vault API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VAULT_",
        case_sensitive=False,
        extra="ignore",
    )

    api_base_url: str = Field(
        default="https://api.case.dev",
        description="Base URL of the remote vault API",
    )
    api_key: str = Field(
        default="",
        description="Bearer token for the remote vault API",
    )
    timeout_seconds: float = Field(
        default=30.0,
        description="Per-request timeout for remote calls",
    )

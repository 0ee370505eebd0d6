"""
Ingestion orchestration settings.

Debounce windows for status reconciliation and downstream analysis,
plus batch limits for upload registration and confirmation.

Dependencies: pydantic_settings
System role: Tunables for the sync engine and analysis trigger
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IngestionSettings(BaseSettings):
    """Timing and batching settings for document ingestion."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    sync_debounce_active_seconds: float = Field(
        default=2.0,
        description="Minimum gap between remote syncs while documents are processing",
    )
    sync_debounce_idle_seconds: float = Field(
        default=10.0,
        description="Minimum gap between remote syncs when nothing is processing",
    )
    sync_cache_ttl_seconds: int = Field(
        default=60,
        description="Seconds of inactivity before a case's sync bookkeeping is dropped",
    )
    analysis_debounce_seconds: float = Field(
        default=5.0,
        description="Quiet period after the last completion before case analysis runs",
    )
    max_batch_size: int = Field(
        default=20,
        description="Maximum number of files per batch registration or confirmation",
    )
    analysis_max_documents: int = Field(
        default=5,
        description="Number of completed documents sampled for case analysis",
    )
    analysis_sample_chars: int = Field(
        default=2000,
        description="Characters of OCR text taken from each sampled document",
    )

"""
Ingestion orchestration: remote status reconciliation and the debounced
analysis trigger it feeds.
"""

from casevault.core.ingestion.analysis_trigger import AnalysisTrigger
from casevault.core.ingestion.sync_engine import (
    IngestionSyncEngine,
    SyncCacheEntry,
    merge_remote,
)

__all__ = [
    "AnalysisTrigger",
    "IngestionSyncEngine",
    "SyncCacheEntry",
    "merge_remote",
]

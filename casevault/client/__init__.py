"""
CaseVault client SDK.

Upload orchestration and adaptive status polling against the HTTP API.
"""

from casevault.client.adaptive_poller import AdaptivePoller, documents_signature
from casevault.client.api_client import CaseApiClient
from casevault.client.upload_orchestrator import UploadOrchestrator, build_tasks, load_tasks
from casevault.client.upload_task import UploadStep, UploadSummary, UploadTask

__all__ = [
    "AdaptivePoller",
    "CaseApiClient",
    "UploadOrchestrator",
    "UploadStep",
    "UploadSummary",
    "UploadTask",
    "build_tasks",
    "documents_signature",
    "load_tasks",
]

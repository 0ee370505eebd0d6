"""
Core business logic module.

Contains the exception hierarchy, status ordering, time and storage
abstractions, and the ingestion orchestration components.
"""

from casevault.core.exceptions import (
    AlreadyInProgressError,
    CaseVaultException,
    ExternalServiceError,
    NotFoundError,
    RateLimitedError,
    ValidationError,
)
from casevault.core.status_priority import (
    IngestionStatus,
    is_terminal,
    is_unsettled,
    priority,
    should_advance,
)

__all__ = [
    # Exceptions
    "CaseVaultException",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "AlreadyInProgressError",
    "RateLimitedError",
    # Status ordering
    "IngestionStatus",
    "priority",
    "should_advance",
    "is_terminal",
    "is_unsettled",
]

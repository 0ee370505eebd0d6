"""
Ingestion status ordering.

A total order over document ingestion states used whenever a remotely
observed status is merged into a local record. ``failed`` ranks highest
so an error is never hidden behind a stale "processing" read.

Dependencies: None (pure domain layer)
System role: Monotonic status merge rule shared by sync and confirm paths
"""

import enum


class IngestionStatus(str, enum.Enum):
    """
    Document ingestion lifecycle states.

    PENDING: Record created, file not yet handed to the remote pipeline
    UPLOADING: Transfer to storage in progress
    PROCESSING: Remote OCR / chunking / indexing running
    COMPLETED: Searchable (terminal)
    FAILED: Remote pipeline or trigger failed (terminal)
    """

    PENDING = "pending"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


STATUS_PRIORITY: dict[str, int] = {
    IngestionStatus.PENDING.value: 1,
    IngestionStatus.UPLOADING.value: 2,
    IngestionStatus.PROCESSING.value: 3,
    IngestionStatus.COMPLETED.value: 4,
    IngestionStatus.FAILED.value: 5,
}

TERMINAL_STATUSES = frozenset({IngestionStatus.COMPLETED.value, IngestionStatus.FAILED.value})


def _value(status: "IngestionStatus | str | None") -> str:
    if isinstance(status, IngestionStatus):
        return status.value
    return status or ""


def priority(status: IngestionStatus | str | None) -> int:
    """Return the priority of a status; unknown or missing states rank 0."""
    return STATUS_PRIORITY.get(_value(status), 0)


def should_advance(local: IngestionStatus | str | None, remote: IngestionStatus | str | None) -> bool:
    """
    Decide whether a remote observation may replace the local status.

    Args:
        local: Status currently stored locally
        remote: Status reported by the remote service

    Returns:
        bool: True iff the remote status ranks strictly higher
    """
    return priority(remote) > priority(local)


def is_terminal(status: IngestionStatus | str | None) -> bool:
    """True for ``completed`` and ``failed``."""
    return _value(status) in TERMINAL_STATUSES


def is_unsettled(status: IngestionStatus | str | None) -> bool:
    """True for any status the sync engine still needs to reconcile."""
    return not is_terminal(status)

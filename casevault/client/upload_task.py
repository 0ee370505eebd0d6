"""
Client-side upload task state.

One UploadTask per selected file. Tasks never leave the client; the
server only learns about a file once its document record is acquired.

Dependencies: None
System role: Progress model for the upload orchestrator
"""

import enum
import uuid
from dataclasses import dataclass, field
from pathlib import Path


class UploadStep(str, enum.Enum):
    QUEUED = "queued"
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class UploadTask:
    """A file moving through acquire → transfer → confirm."""

    case_id: uuid.UUID
    filename: str
    content: bytes
    content_type: str
    path: Path | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    state: UploadStep = UploadStep.QUEUED
    progress: int = 0
    step_message: str | None = None
    error: str | None = None
    document_id: uuid.UUID | None = None
    upload_url: str | None = None

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    @property
    def is_finished(self) -> bool:
        return self.state in (UploadStep.COMPLETED, UploadStep.ERROR)

    def advance(self, state: UploadStep, progress: int, message: str | None = None) -> None:
        self.state = state
        self.progress = progress
        self.step_message = message

    def fail(self, error: str) -> None:
        self.state = UploadStep.ERROR
        self.error = error
        self.step_message = error


@dataclass
class UploadSummary:
    total: int
    completed: int
    failed: int
    document_ids: list[uuid.UUID] = field(default_factory=list)

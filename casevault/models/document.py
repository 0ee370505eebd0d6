"""
Document domain models and schemas.

Request/response schemas for upload registration, confirmation, retry
and status listing.

Dependencies: pydantic
System role: Document API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from casevault.core.status_priority import IngestionStatus


class DocumentResponse(BaseModel):
    """Response schema for a document and its ingestion status."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    case_id: uuid.UUID
    object_id: str
    filename: str
    content_type: str
    size_bytes: int | None = None
    page_count: int | None = None
    ingestion_status: IngestionStatus
    summary: str | None = None
    uploaded_at: datetime


class DocumentListResponse(BaseModel):
    documents: list[DocumentResponse]
    total: int


class UploadIntent(BaseModel):
    """A file the client is about to upload."""

    filename: str = Field(min_length=1, max_length=255, description="Original filename")
    content_type: str = Field(min_length=1, description="MIME type of the file")
    size_bytes: int | None = Field(default=None, ge=0, description="File size in bytes")


class BatchUploadRequest(BaseModel):
    files: list[UploadIntent] = Field(description="Files to register, at most the batch limit")


class UploadTargetResponse(BaseModel):
    """Upload registration result with the presigned transfer URL."""

    document_id: uuid.UUID
    object_id: str
    upload_url: str
    expires_in: int


class BatchUploadResult(BaseModel):
    """One entry of a batch registration, in request order."""

    filename: str
    success: bool
    document_id: uuid.UUID | None = None
    object_id: str | None = None
    upload_url: str | None = None
    expires_in: int | None = None
    error: str | None = None


class ConfirmBatchRequest(BaseModel):
    document_ids: list[uuid.UUID] = Field(description="Documents whose transfer finished")


class ConfirmResult(BaseModel):
    """Outcome of triggering ingestion for one document."""

    document_id: uuid.UUID
    filename: str
    success: bool
    skipped: bool = False
    workflow_id: str | None = None
    error: str | None = None
    message: str | None = None


class RetryResult(BaseModel):
    document_id: uuid.UUID
    filename: str
    success: bool
    workflow_id: str | None = None
    status: str | None = None
    message: str | None = None


class RetryAllResponse(BaseModel):
    message: str
    retried_count: int
    total_pending: int
    errors: list[str] | None = None


class DocumentTextResponse(BaseModel):
    object_id: str
    filename: str
    text: str
    text_length: int
    page_count: int | None = None


class DocumentProcessingResponse(BaseModel):
    """Returned with 202 while OCR text is not available yet."""

    error: str = "Document is still processing"
    status: str

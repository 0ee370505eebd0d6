"""
Document API endpoints.

Routes:
- GET /cases/{case_id}/documents - List documents (reconciles status with the vault)
- POST /cases/{case_id}/documents - Register one upload, returns presigned URL
- POST /cases/{case_id}/documents/batch - Register up to 20 uploads
- POST /cases/{case_id}/documents/confirm - Confirm up to 20 finished transfers
- POST /cases/{case_id}/documents/retry - Retry every stuck document
- GET /cases/{case_id}/documents/{document_id} - Get one (?sync=true to reconcile)
- DELETE /cases/{case_id}/documents/{document_id} - Delete document
- POST /cases/{case_id}/documents/{document_id}/confirm - Confirm one transfer
- POST /cases/{case_id}/documents/{document_id}/retry - Retry one document
- GET /cases/{case_id}/documents/{document_id}/text - OCR text (202 while processing)

Dependencies: casevault.application.services, casevault.models
System role: Document HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from casevault.api.deps import get_document_service, rate_limited
from casevault.api.error_handling import handle_api_errors
from casevault.application.services import DocumentService
from casevault.models.common import BatchResponse, MessageResponse
from casevault.models.document import (
    BatchUploadRequest,
    BatchUploadResult,
    ConfirmBatchRequest,
    ConfirmResult,
    DocumentListResponse,
    DocumentProcessingResponse,
    DocumentResponse,
    DocumentTextResponse,
    RetryAllResponse,
    RetryResult,
    UploadIntent,
    UploadTargetResponse,
)

router = APIRouter(prefix="/cases/{case_id}/documents", tags=["documents"])

api_limit = Depends(rate_limited("api"))
upload_limit = Depends(rate_limited("upload"))


@router.get("", response_model=DocumentListResponse, dependencies=[api_limit])
@handle_api_errors
async def list_documents(
    case_id: UUID,
    service: DocumentService = Depends(get_document_service),
) -> DocumentListResponse:
    """
    List a case's documents, newest first.

    Unsettled documents are reconciled with the vault at most once per
    debounce window; remote failures fall back to the stored status.
    """
    documents = await service.list_documents(case_id)
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(d) for d in documents],
        total=len(documents),
    )


@router.post("", response_model=UploadTargetResponse, dependencies=[upload_limit])
@handle_api_errors
async def register_upload(
    case_id: UUID,
    request: UploadIntent,
    service: DocumentService = Depends(get_document_service),
) -> UploadTargetResponse:
    """Register one file and return the URL to PUT it to."""
    return await service.register_upload(case_id, request)


@router.post(
    "/batch",
    response_model=BatchResponse[BatchUploadResult],
    dependencies=[upload_limit],
)
@handle_api_errors
async def register_upload_batch(
    case_id: UUID,
    request: BatchUploadRequest,
    service: DocumentService = Depends(get_document_service),
) -> BatchResponse[BatchUploadResult]:
    results = await service.register_batch(case_id, request.files)
    return BatchResponse[BatchUploadResult].from_results(results)


@router.post(
    "/confirm",
    response_model=BatchResponse[ConfirmResult],
    dependencies=[api_limit],
)
@handle_api_errors
async def confirm_upload_batch(
    case_id: UUID,
    request: ConfirmBatchRequest,
    service: DocumentService = Depends(get_document_service),
) -> BatchResponse[ConfirmResult]:
    """Trigger ingestion for finished transfers. Safe to repeat."""
    results = await service.confirm_batch(case_id, request.document_ids)
    return BatchResponse[ConfirmResult].from_results(results)


@router.post("/retry", response_model=RetryAllResponse, dependencies=[api_limit])
@handle_api_errors
async def retry_stuck_documents(
    case_id: UUID,
    service: DocumentService = Depends(get_document_service),
) -> RetryAllResponse:
    return await service.retry_stuck(case_id)


@router.get("/{document_id}", response_model=DocumentResponse, dependencies=[api_limit])
@handle_api_errors
async def get_document(
    case_id: UUID,
    document_id: UUID,
    sync: bool = Query(default=False, description="Reconcile with the vault before returning"),
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    document = await service.get_document(case_id, document_id, sync=sync)
    return DocumentResponse.model_validate(document)


@router.delete("/{document_id}", response_model=MessageResponse, dependencies=[api_limit])
@handle_api_errors
async def delete_document(
    case_id: UUID,
    document_id: UUID,
    service: DocumentService = Depends(get_document_service),
) -> MessageResponse:
    filename = await service.delete_document(case_id, document_id)
    return MessageResponse(message=f'Document "{filename}" deleted successfully')


@router.post("/{document_id}/confirm", response_model=ConfirmResult, dependencies=[api_limit])
@handle_api_errors
async def confirm_upload(
    case_id: UUID,
    document_id: UUID,
    service: DocumentService = Depends(get_document_service),
) -> ConfirmResult:
    """
    Trigger ingestion for one finished transfer.

    Documents already processing or completed are skipped. A trigger
    failure marks the document failed and returns 502.
    """
    return await service.confirm_upload(case_id, document_id)


@router.post("/{document_id}/retry", response_model=RetryResult, dependencies=[api_limit])
@handle_api_errors
async def retry_document(
    case_id: UUID,
    document_id: UUID,
    service: DocumentService = Depends(get_document_service),
) -> RetryResult:
    return await service.retry_document(case_id, document_id)


@router.get(
    "/{document_id}/text",
    response_model=DocumentTextResponse,
    responses={status.HTTP_202_ACCEPTED: {"model": DocumentProcessingResponse}},
    dependencies=[api_limit],
)
@handle_api_errors
async def get_document_text(
    case_id: UUID,
    document_id: UUID,
    service: DocumentService = Depends(get_document_service),
):
    result = await service.get_text(case_id, document_id)
    if isinstance(result, DocumentProcessingResponse):
        return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content=result.model_dump())
    return result

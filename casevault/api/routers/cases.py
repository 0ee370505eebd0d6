"""
Case API endpoints.

Routes:
- POST /cases - Create case (and its vault)
- GET /cases - List cases
- GET /cases/{case_id} - Get case
- DELETE /cases/{case_id} - Delete case, documents and searches
- GET /cases/{case_id}/analysis - Stored tags and summary
- POST /cases/{case_id}/analysis - Run analysis now

Dependencies: casevault.application.services, casevault.models
System role: Case HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from casevault.api.deps import (
    get_analysis_service,
    get_case_service,
    rate_limited,
)
from casevault.api.error_handling import handle_api_errors
from casevault.application.services import AnalysisService, CaseService
from casevault.models.case import (
    CaseAnalysisResponse,
    CaseListResponse,
    CaseResponse,
    CreateCaseRequest,
)
from casevault.models.common import MessageResponse

router = APIRouter(prefix="/cases", tags=["cases"], dependencies=[Depends(rate_limited("api"))])


@router.post("", response_model=CaseResponse, status_code=status.HTTP_201_CREATED)
@handle_api_errors
async def create_case(
    request: CreateCaseRequest,
    service: CaseService = Depends(get_case_service),
) -> CaseResponse:
    case = await service.create_case(request.name, request.description)
    return CaseResponse.model_validate(case)


@router.get("", response_model=CaseListResponse)
@handle_api_errors
async def list_cases(
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    service: CaseService = Depends(get_case_service),
) -> CaseListResponse:
    cases = await service.list_cases(limit=limit, offset=offset)
    return CaseListResponse(
        cases=[CaseResponse.model_validate(c) for c in cases],
        total=len(cases),
    )


@router.get("/{case_id}", response_model=CaseResponse)
@handle_api_errors
async def get_case(
    case_id: UUID,
    service: CaseService = Depends(get_case_service),
) -> CaseResponse:
    return CaseResponse.model_validate(await service.get_case(case_id))


@router.delete("/{case_id}", response_model=MessageResponse)
@handle_api_errors
async def delete_case(
    case_id: UUID,
    service: CaseService = Depends(get_case_service),
) -> MessageResponse:
    """Delete a case. Remote vault removal is best-effort."""
    await service.delete_case(case_id)
    return MessageResponse(message="Case deleted successfully")


@router.get("/{case_id}/analysis", response_model=CaseAnalysisResponse)
@handle_api_errors
async def get_case_analysis(
    case_id: UUID,
    service: AnalysisService = Depends(get_analysis_service),
) -> CaseAnalysisResponse:
    return await service.get_analysis(case_id)


@router.post("/{case_id}/analysis", response_model=CaseAnalysisResponse)
@handle_api_errors
async def run_case_analysis(
    case_id: UUID,
    service: AnalysisService = Depends(get_analysis_service),
) -> CaseAnalysisResponse:
    """Generate tags and a summary from the case's completed documents."""
    return await service.analyze(case_id)

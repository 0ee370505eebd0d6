"""
Search API endpoints.

Routes:
- POST /cases/{case_id}/search - Execute a search (recorded unless skip_history)
- GET /cases/{case_id}/searches - Recent searches
- GET /cases/{case_id}/searches/{search_id} - Replay cached results
- PATCH /cases/{case_id}/searches/{search_id} - Update threshold / cache / count
- POST /cases/{case_id}/searches/{search_id}/requery - Re-run at a new threshold

Dependencies: casevault.application.services, casevault.models
System role: Search HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from casevault.api.deps import get_search_service, rate_limited
from casevault.api.error_handling import handle_api_errors
from casevault.application.services import SearchCacheManager
from casevault.models.search import (
    CachedSearchResponse,
    RequeryRequest,
    SearchHistoryResponse,
    SearchRecordResponse,
    SearchRequest,
    SearchResultPayload,
    UpdateSearchRequest,
)

router = APIRouter(prefix="/cases/{case_id}", tags=["search"])

search_limit = Depends(rate_limited("search"))
api_limit = Depends(rate_limited("api"))


@router.post("/search", response_model=SearchResultPayload, dependencies=[search_limit])
@handle_api_errors
async def search_case(
    case_id: UUID,
    request: SearchRequest,
    service: SearchCacheManager = Depends(get_search_service),
) -> SearchResultPayload:
    return await service.execute(
        case_id,
        request.query,
        method=request.method,
        top_k=request.top_k,
        relevance_threshold=request.relevance_threshold,
        skip_history=request.skip_history,
    )


@router.get("/searches", response_model=SearchHistoryResponse, dependencies=[api_limit])
@handle_api_errors
async def list_searches(
    case_id: UUID,
    limit: int = Query(default=20, ge=1, le=100),
    service: SearchCacheManager = Depends(get_search_service),
) -> SearchHistoryResponse:
    records = await service.list_recent(case_id, limit=limit)
    return SearchHistoryResponse(
        searches=[SearchRecordResponse.model_validate(r) for r in records],
    )


@router.get(
    "/searches/{search_id}",
    response_model=CachedSearchResponse,
    dependencies=[api_limit],
)
@handle_api_errors
async def get_search(
    case_id: UUID,
    search_id: UUID,
    service: SearchCacheManager = Depends(get_search_service),
) -> CachedSearchResponse:
    """Return a recorded search with its cached results, without recomputing."""
    return await service.get_cached(case_id, search_id)


@router.patch(
    "/searches/{search_id}",
    response_model=SearchRecordResponse,
    dependencies=[api_limit],
)
@handle_api_errors
async def update_search(
    case_id: UUID,
    search_id: UUID,
    request: UpdateSearchRequest,
    service: SearchCacheManager = Depends(get_search_service),
) -> SearchRecordResponse:
    return await service.update(
        case_id,
        search_id,
        relevance_threshold=request.relevance_threshold,
        results_cache=request.results_cache,
        result_count=request.result_count,
        total_result_count=request.total_result_count,
    )


@router.post(
    "/searches/{search_id}/requery",
    response_model=SearchResultPayload,
    dependencies=[search_limit],
)
@handle_api_errors
async def requery_search(
    case_id: UUID,
    search_id: UUID,
    request: RequeryRequest,
    service: SearchCacheManager = Depends(get_search_service),
) -> SearchResultPayload:
    """Run the recorded query again at a new relevance threshold."""
    return await service.requery(
        case_id,
        search_id,
        request.relevance_threshold,
        persist=request.persist,
    )

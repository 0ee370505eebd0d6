"""
Search request/response schemas.

SearchResultPayload is also the JSON stored verbatim in the search
history cache, so replaying a search returns exactly what was shown.

Dependencies: pydantic
System role: Search API contracts and cached payload format
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TOP_K = 50


class SearchChunkPayload(BaseModel):
    text: str
    object_id: str
    chunk_index: int
    hybrid_score: float
    vector_score: float = 0.0
    bm25_score: float = 0.0


class SearchSourcePayload(BaseModel):
    id: str
    filename: str
    page_count: int | None = None


class SearchResultPayload(BaseModel):
    """Full search response; serialized into ``results_cache``."""

    search_id: uuid.UUID | None = None
    method: str
    query: str
    chunks: list[SearchChunkPayload] = Field(default_factory=list)
    sources: list[SearchSourcePayload] = Field(default_factory=list)
    response: str | None = None
    overall_summary: str = ""
    chunk_summaries: dict[str, str] = Field(default_factory=dict)
    total_before_filter: int = 0
    min_relevance_applied: float = Field(ge=0.0, le=1.0)
    top_k: int = DEFAULT_TOP_K


class SearchRequest(BaseModel):
    query: str = Field(min_length=1, description="Search text")
    method: str = Field(default="hybrid", description="hybrid | fast | global | local")
    top_k: int = Field(default=DEFAULT_TOP_K, ge=1, le=200, description="Chunks requested from the vault")
    relevance_threshold: int = Field(default=75, ge=0, le=100, description="Minimum hybrid score, percent")
    skip_history: bool = Field(default=False, description="Do not record this search")


class SearchRecordResponse(BaseModel):
    """Search history entry without the cached payload."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    case_id: uuid.UUID
    query: str
    result_count: int
    total_result_count: int
    relevance_threshold: int
    searched_at: datetime


class SearchHistoryResponse(BaseModel):
    searches: list[SearchRecordResponse]


class CachedSearchResponse(BaseModel):
    """History entry plus its cached payload (None when the cache is unreadable)."""

    search: SearchRecordResponse
    results: SearchResultPayload | None = None


class UpdateSearchRequest(BaseModel):
    relevance_threshold: int | None = Field(default=None, ge=0, le=100)
    results_cache: SearchResultPayload | None = None
    result_count: int | None = Field(default=None, ge=0)
    total_result_count: int | None = Field(default=None, ge=0)


class RequeryRequest(BaseModel):
    relevance_threshold: int = Field(ge=0, le=100)
    persist: bool = Field(default=False, description="Store the new results on the history entry")

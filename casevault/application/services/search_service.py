"""
Search execution and result caching.

A search is expensive: one remote retrieval call plus up to eleven LLM
calls for summaries. Every executed search is stored with its full
response so the history view can replay it verbatim, and changing the
relevance threshold runs a fresh search rather than re-filtering the
cached chunks (chunks below the old threshold were never kept).

Dependencies: casevault.boundary.db, casevault.boundary.vault, casevault.boundary.llm
System role: SearchCacheManager behind the search endpoints
"""

import asyncio
import json
import logging
from typing import Sequence
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from casevault.application.services.case_service import load_case
from casevault.boundary.db.CRUD.search_crud import search_crud
from casevault.boundary.db.models.search_model import SearchModel
from casevault.boundary.llm.summarizer import LLMSummarizer
from casevault.boundary.vault.client import VaultClient
from casevault.boundary.vault.schemas import SearchChunk, SearchSource
from casevault.core.exceptions import NotFoundError, ValidationError
from casevault.models.search import (
    CachedSearchResponse,
    DEFAULT_TOP_K,
    SearchChunkPayload,
    SearchRecordResponse,
    SearchResultPayload,
    SearchSourcePayload,
)

logger = logging.getLogger(__name__)


def chunk_key(object_id: str, chunk_index: int) -> str:
    return f"{object_id}-{chunk_index}"


def _validate_threshold(relevance_threshold: int) -> None:
    if not 0 <= relevance_threshold <= 100:
        raise ValidationError(
            "relevance_threshold must be between 0 and 100",
            field="relevance_threshold",
            details={"received": relevance_threshold},
        )


def filter_chunks(
    chunks: Sequence[SearchChunk],
    sources: Sequence[SearchSource],
    relevance_threshold: int,
) -> tuple[list[SearchChunk], list[SearchSource]]:
    """
    Keep chunks scoring at least ``relevance_threshold`` percent and the
    sources they reference.
    """
    minimum = relevance_threshold / 100
    kept = [c for c in chunks if c.hybrid_score >= minimum]
    referenced = {c.object_id for c in kept}
    return kept, [s for s in sources if s.id in referenced]


def parse_results_cache(raw: str | None) -> SearchResultPayload | None:
    """Decode a stored payload; None if it is missing or unreadable."""
    if not raw:
        return None
    try:
        return SearchResultPayload.model_validate_json(raw)
    except (PydanticValidationError, ValueError):
        logger.warning("Unreadable search cache entry", extra={"length": len(raw)})
        return None


class SearchCacheManager:
    """
    Executes searches and manages their cached history.

    Args:
        db: AsyncSession for search history
        vault_client: Remote retrieval
        summarizer: Chat model wrapper; None disables summaries
        summarize_top_n: Number of kept chunks that get an individual summary
    """

    def __init__(
        self,
        db: AsyncSession,
        vault_client: VaultClient,
        summarizer: LLMSummarizer | None = None,
        summarize_top_n: int = 10,
    ) -> None:
        self.db = db
        self.vault_client = vault_client
        self.summarizer = summarizer
        self.summarize_top_n = summarize_top_n

    async def _summaries(
        self,
        query: str,
        case_name: str,
        chunks: list[SearchChunk],
        sources: list[SearchSource],
    ) -> tuple[str, dict[str, str]]:
        """Overall + per-chunk summaries, run concurrently; failures become ''."""
        if self.summarizer is None or not chunks:
            return "", {}

        names = {s.id: s.filename for s in sources}
        top = chunks[: self.summarize_top_n]

        overall_call = self.summarizer.summarize_search(
            query=query,
            case_name=case_name,
            source_names=[s.filename for s in sources],
            excerpts=[c.text[:200] for c in chunks[:5]],
        )
        chunk_calls = [
            self.summarizer.summarize_chunk(query, names.get(c.object_id, "Unknown"), c.text)
            for c in top
        ]
        outcomes = await asyncio.gather(overall_call, *chunk_calls, return_exceptions=True)

        overall, *per_chunk = outcomes
        if isinstance(overall, BaseException):
            logger.warning("Overall summary failed", extra={"error": str(overall)})
            overall = ""

        chunk_summaries: dict[str, str] = {}
        for chunk, outcome in zip(top, per_chunk):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Chunk summary failed",
                    extra={"object_id": chunk.object_id, "chunk_index": chunk.chunk_index},
                )
                continue
            if outcome:
                chunk_summaries[chunk_key(chunk.object_id, chunk.chunk_index)] = outcome

        return overall, chunk_summaries

    async def execute(
        self,
        case_id: UUID,
        query: str,
        method: str = "hybrid",
        top_k: int = DEFAULT_TOP_K,
        relevance_threshold: int = 75,
        skip_history: bool = False,
    ) -> SearchResultPayload:
        """
        Run a search, summarise it, and record it.

        Args:
            case_id: Case UUID
            query: Search text
            method: Vault search method
            top_k: Chunks requested from the vault
            relevance_threshold: Minimum hybrid score in percent (0-100)
            skip_history: Return results without writing a history entry

        Returns:
            SearchResultPayload: Filtered results with summaries; ``search_id``
            is set when the search was recorded

        Raises:
            ValidationError: If the threshold is out of range or the query empty
            NotFoundError: If the case does not exist
            ExternalServiceError: If the vault search fails
        """
        _validate_threshold(relevance_threshold)
        if not query.strip():
            raise ValidationError("Query is required", field="query")

        case = await load_case(self.db, case_id)
        result = await self.vault_client.search(case.vault_id, query, method=method, top_k=top_k)

        chunks, sources = filter_chunks(result.chunks, result.sources, relevance_threshold)
        overall, chunk_summaries = await self._summaries(query, case.name, chunks, sources)

        payload = SearchResultPayload(
            method=result.method or method,
            query=result.query or query,
            chunks=[SearchChunkPayload(**c.model_dump()) for c in chunks],
            sources=[SearchSourcePayload(**s.model_dump()) for s in sources],
            response=result.response,
            overall_summary=overall,
            chunk_summaries=chunk_summaries,
            total_before_filter=len(result.chunks),
            min_relevance_applied=relevance_threshold / 100,
            top_k=top_k,
        )

        if skip_history:
            return payload

        record = await search_crud.create(
            self.db,
            case_id=case_id,
            query=query,
            result_count=len(chunks),
            total_result_count=len(result.chunks),
            relevance_threshold=relevance_threshold,
            results_cache=payload.model_dump_json(),
        )
        await self.db.commit()
        logger.info(
            "Search recorded",
            extra={"case_id": str(case_id), "search_id": str(record.id), "kept": len(chunks)},
        )
        return payload.model_copy(update={"search_id": record.id})

    async def _get_record(self, case_id: UUID, search_id: UUID) -> SearchModel:
        record = await search_crud.get_for_case(self.db, case_id, search_id)
        if record is None:
            raise NotFoundError("Search", str(search_id))
        return record

    async def get_cached(self, case_id: UUID, search_id: UUID) -> CachedSearchResponse:
        """Replay a recorded search without recomputation."""
        record = await self._get_record(case_id, search_id)
        payload = parse_results_cache(record.results_cache)
        if payload is not None:
            payload = payload.model_copy(update={"search_id": record.id})
        return CachedSearchResponse(
            search=SearchRecordResponse.model_validate(record),
            results=payload,
        )

    async def requery(
        self,
        case_id: UUID,
        search_id: UUID,
        relevance_threshold: int,
        persist: bool = False,
    ) -> SearchResultPayload:
        """
        Re-run a recorded search at a new threshold.

        The full pipeline runs again with the recorded method and ``top_k``
        without writing a new history entry. With ``persist`` the recorded
        entry takes the new threshold, results and both counts.
        """
        _validate_threshold(relevance_threshold)
        record = await self._get_record(case_id, search_id)
        cached = parse_results_cache(record.results_cache)
        method = cached.method if cached else "hybrid"
        top_k = cached.top_k if cached else DEFAULT_TOP_K

        payload = await self.execute(
            case_id,
            record.query,
            method=method,
            top_k=top_k,
            relevance_threshold=relevance_threshold,
            skip_history=True,
        )
        if not persist:
            return payload

        await self.update(
            case_id,
            search_id,
            relevance_threshold=relevance_threshold,
            results_cache=payload,
            result_count=len(payload.chunks),
            total_result_count=payload.total_before_filter,
        )
        return payload.model_copy(update={"search_id": search_id})

    async def update(
        self,
        case_id: UUID,
        search_id: UUID,
        relevance_threshold: int | None = None,
        results_cache: SearchResultPayload | None = None,
        result_count: int | None = None,
        total_result_count: int | None = None,
    ) -> SearchRecordResponse:
        """
        Update the mutable fields of a recorded search.

        Raises:
            ValidationError: If the threshold is outside 0-100
            NotFoundError: If the search does not exist for the case
        """
        await self._get_record(case_id, search_id)

        fields: dict = {}
        if relevance_threshold is not None:
            _validate_threshold(relevance_threshold)
            fields["relevance_threshold"] = relevance_threshold
        if results_cache is not None:
            fields["results_cache"] = json.dumps(
                results_cache.model_dump(mode="json", exclude={"search_id"})
            )
        if result_count is not None:
            fields["result_count"] = result_count
        if total_result_count is not None:
            fields["total_result_count"] = total_result_count

        record = await search_crud.update_by_id(self.db, search_id, **fields) if fields else None
        await self.db.commit()
        if record is None:
            record = await self._get_record(case_id, search_id)
        return SearchRecordResponse.model_validate(record)

    async def list_recent(self, case_id: UUID, limit: int = 20) -> Sequence[SearchModel]:
        await load_case(self.db, case_id)
        return await search_crud.list_recent(self.db, case_id, limit=limit)

"""
Case analysis service.

Samples OCR text from a case's completed documents and asks the chat
model for classification tags and a short summary, which are stored on
the case. Runs on demand from the API and as the debounced background
job fired when documents finish processing.

Dependencies: casevault.boundary.db, casevault.boundary.vault, casevault.boundary.llm
System role: Downstream analysis job
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from casevault.application.services.case_service import load_case
from casevault.boundary.db.CRUD.case_crud import case_crud
from casevault.boundary.db.CRUD.document_crud import document_crud
from casevault.boundary.llm.summarizer import LLMSummarizer
from casevault.boundary.vault.client import VaultClient
from casevault.core.exceptions import ExternalServiceError, RateLimitedError
from casevault.core.status_priority import IngestionStatus
from casevault.models.case import CaseAnalysisResponse

logger = logging.getLogger(__name__)


class AnalysisService:
    """
    Tags and summary generation for a case.

    Args:
        db: AsyncSession for case and document access
        vault_client: Source of OCR text
        summarizer: Chat model wrapper
        max_documents: Completed documents sampled per run
        sample_chars: Leading characters taken from each sampled document
    """

    def __init__(
        self,
        db: AsyncSession,
        vault_client: VaultClient,
        summarizer: LLMSummarizer,
        max_documents: int = 5,
        sample_chars: int = 2000,
    ) -> None:
        self.db = db
        self.vault_client = vault_client
        self.summarizer = summarizer
        self.max_documents = max_documents
        self.sample_chars = sample_chars

    async def get_analysis(self, case_id: UUID) -> CaseAnalysisResponse:
        case = await load_case(self.db, case_id)
        return CaseAnalysisResponse(case_id=case.id, tags=list(case.tags or []), summary=case.ai_summary)

    async def analyze(self, case_id: UUID) -> CaseAnalysisResponse:
        """
        Generate and store tags + summary for a case.

        Nothing is stored when the case has no completed documents or when
        no text could be fetched for any of them.

        Raises:
            NotFoundError: If the case does not exist
        """
        case = await load_case(self.db, case_id)
        completed = await document_crud.get_by_statuses(
            self.db, case_id, [IngestionStatus.COMPLETED]
        )
        if not completed:
            return CaseAnalysisResponse(
                case_id=case_id,
                message="No completed documents to analyze",
            )

        samples: list[str] = []
        for document in completed[: self.max_documents]:
            try:
                text = await self.vault_client.get_text(case.vault_id, document.object_id)
            except (ExternalServiceError, RateLimitedError) as e:
                logger.warning(
                    "Could not fetch text for analysis",
                    extra={"document_id": str(document.id), "error": str(e)},
                )
                continue
            samples.append(f"[{document.filename}]:\n{text.text[: self.sample_chars]}")

        if not samples:
            return CaseAnalysisResponse(
                case_id=case_id,
                message="Could not extract text from documents",
            )

        analysis = await self.summarizer.analyze_case(
            case_name=case.name,
            description=case.description,
            document_names=[d.filename for d in completed],
            samples=samples,
        )
        await case_crud.update_analysis(self.db, case_id, analysis.tags, analysis.summary)
        await self.db.commit()

        logger.info(
            "Case analysis stored",
            extra={"case_id": str(case_id), "tag_count": len(analysis.tags), "documents": len(samples)},
        )
        return CaseAnalysisResponse(case_id=case_id, tags=analysis.tags, summary=analysis.summary)


async def run_case_analysis(
    case_id: UUID,
    session_factory: async_sessionmaker[AsyncSession],
    vault_client: VaultClient,
    summarizer: LLMSummarizer,
    max_documents: int = 5,
    sample_chars: int = 2000,
) -> CaseAnalysisResponse:
    """
    Background entry point: runs analysis in a session of its own.

    The request that noticed the completion has long returned by the time
    this runs, so its session cannot be reused.
    """
    async with session_factory() as session:
        service = AnalysisService(
            session,
            vault_client,
            summarizer,
            max_documents=max_documents,
            sample_chars=sample_chars,
        )
        return await service.analyze(case_id)

"""
Document CRUD operations.

Provides Create, Read, Update, Delete operations for DocumentModel
with case-scoped queries and the versioned status writes used by the
sync engine and the confirm/retry paths.

Dependencies: sqlalchemy, casevault.boundary.db.models.document_model
System role: Document persistence operations
"""

from typing import Any, Iterable, Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from casevault.boundary.db.CRUD.base_crud import BaseCRUD
from casevault.boundary.db.models.document_model import DocumentModel
from casevault.core.status_priority import IngestionStatus


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Every status write bumps ``status_version``. ``apply_sync_update``
    only succeeds when the version still matches what the caller read,
    so two overlapping sync passes cannot interleave writes on one row.
    """

    def __init__(self) -> None:
        super().__init__(DocumentModel)

    async def get_by_case_id(
        self,
        session: AsyncSession,
        case_id: UUID,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve all documents of a case, most recently uploaded first.

        Args:
            session: Async database session
            case_id: Parent case UUID

        Returns:
            Sequence of DocumentModels belonging to the case
        """
        stmt = (
            select(DocumentModel)
            .where(DocumentModel.case_id == case_id)
            .order_by(DocumentModel.uploaded_at.desc(), DocumentModel.id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_for_case(
        self,
        session: AsyncSession,
        case_id: UUID,
        document_id: UUID,
    ) -> DocumentModel | None:
        """Fetch a document only if it belongs to ``case_id``."""
        stmt = (
            select(DocumentModel)
            .where(DocumentModel.id == document_id, DocumentModel.case_id == case_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many_for_case(
        self,
        session: AsyncSession,
        case_id: UUID,
        document_ids: Iterable[UUID],
    ) -> Sequence[DocumentModel]:
        """Fetch the subset of ``document_ids`` that belong to ``case_id``."""
        ids = list(document_ids)
        if not ids:
            return []
        stmt = select(DocumentModel).where(
            DocumentModel.case_id == case_id,
            DocumentModel.id.in_(ids),
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_statuses(
        self,
        session: AsyncSession,
        case_id: UUID,
        statuses: Iterable[IngestionStatus],
        limit: int | None = None,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve a case's documents whose status is one of ``statuses``.

        Args:
            session: Async database session
            case_id: Parent case UUID
            statuses: Statuses to include
            limit: Maximum number of documents to return

        Returns:
            Matching documents, oldest upload first
        """
        stmt = (
            select(DocumentModel)
            .where(
                DocumentModel.case_id == case_id,
                DocumentModel.ingestion_status.in_(list(statuses)),
            )
            .order_by(DocumentModel.uploaded_at)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def set_status(
        self,
        session: AsyncSession,
        id: UUID,
        status: IngestionStatus,
    ) -> DocumentModel | None:
        """
        Unconditionally write a status and bump the version.

        Used by explicit user actions (confirm, retry, failure marking).
        """
        return await self.update_by_id(
            session,
            id,
            ingestion_status=status,
            status_version=DocumentModel.status_version + 1,
        )

    async def apply_sync_update(
        self,
        session: AsyncSession,
        id: UUID,
        expected_version: int,
        **fields: Any,
    ) -> bool:
        """
        Compare-and-swap update guarded by ``status_version``.

        Args:
            session: Async database session
            id: Document UUID
            expected_version: Version the caller read before deciding the update
            **fields: Columns to write (ingestion_status, page_count, size_bytes)

        Returns:
            True if the row was updated, False if another writer got there first
        """
        stmt = (
            update(DocumentModel)
            .where(
                DocumentModel.id == id,
                DocumentModel.status_version == expected_version,
            )
            .values(status_version=expected_version + 1, **fields)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount == 1


document_crud = DocumentCRUD()

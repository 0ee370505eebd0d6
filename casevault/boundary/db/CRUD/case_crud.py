"""
Case CRUD operations.

Dependencies: sqlalchemy, casevault.boundary.db.models.case_model
System role: Case persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from casevault.boundary.db.CRUD.base_crud import BaseCRUD
from casevault.boundary.db.models.case_model import CaseModel


class CaseCRUD(BaseCRUD[CaseModel]):
    """CRUD operations for CaseModel."""

    def __init__(self) -> None:
        super().__init__(CaseModel)

    async def list_recent(
        self,
        session: AsyncSession,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[CaseModel]:
        """
        List cases, newest first.

        Args:
            session: Async database session
            limit: Maximum number of cases to return
            offset: Number of cases to skip

        Returns:
            Sequence of CaseModel ordered by created_at descending
        """
        stmt = select(CaseModel).order_by(CaseModel.created_at.desc()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def update_analysis(
        self,
        session: AsyncSession,
        id: UUID,
        tags: list[str],
        summary: str,
    ) -> CaseModel | None:
        """
        Overwrite the AI tags and summary of a case.

        Running analysis twice leaves the same shape behind, so repeated
        triggers are harmless.
        """
        return await self.update_by_id(session, id, tags=tags, ai_summary=summary)


case_crud = CaseCRUD()

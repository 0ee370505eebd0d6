"""
Search history CRUD operations.

Dependencies: sqlalchemy, casevault.boundary.db.models.search_model
System role: Search result cache persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from casevault.boundary.db.CRUD.base_crud import BaseCRUD
from casevault.boundary.db.models.search_model import SearchModel


class SearchCRUD(BaseCRUD[SearchModel]):
    """CRUD operations for SearchModel with case-scoped lookups."""

    def __init__(self) -> None:
        super().__init__(SearchModel)

    async def get_for_case(
        self,
        session: AsyncSession,
        case_id: UUID,
        search_id: UUID,
    ) -> SearchModel | None:
        """Fetch a search record only if it belongs to ``case_id``."""
        stmt = (
            select(SearchModel)
            .where(SearchModel.id == search_id, SearchModel.case_id == case_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_recent(
        self,
        session: AsyncSession,
        case_id: UUID,
        limit: int = 20,
    ) -> Sequence[SearchModel]:
        """
        Recent searches for a case, newest first.

        Args:
            session: Async database session
            case_id: Parent case UUID
            limit: Maximum number of records

        Returns:
            Sequence of SearchModel ordered by searched_at descending
        """
        stmt = (
            select(SearchModel)
            .where(SearchModel.case_id == case_id)
            .order_by(SearchModel.searched_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


search_crud = SearchCRUD()

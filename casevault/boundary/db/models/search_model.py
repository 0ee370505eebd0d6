"""
Search history ORM model.

Stores each executed search with the full serialized response so it can
be replayed without calling the remote service or the LLM again.

Dependencies: sqlalchemy, casevault.boundary.db.base
System role: Search result cache persistence
"""

from datetime import datetime
from uuid import UUID as PyUUID

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casevault.boundary.db.base import Base, UUIDMixin, utcnow


class SearchModel(Base, UUIDMixin):
    """
    Search history row.

    Immutable after insert except for relevance_threshold, results_cache
    and result_count, which change only on an explicit update or a
    persisted re-query.

    Attributes:
        id: UUID primary key
        case_id: Foreign key to CaseModel (cascade delete)
        query: Query text as entered
        result_count: Chunks kept after the relevance filter
        total_result_count: Chunks returned before filtering
        relevance_threshold: Threshold percentage (0-100) applied
        results_cache: JSON text of the full search response
        searched_at: Execution timestamp (UTC)
    """

    __tablename__ = "search_history"

    case_id: Mapped[PyUUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    query: Mapped[str] = mapped_column(Text, nullable=False)

    result_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    total_result_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    relevance_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=75)

    results_cache: Mapped[str | None] = mapped_column(Text, nullable=True)

    searched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    # Relationships
    case = relationship("CaseModel", back_populates="searches")

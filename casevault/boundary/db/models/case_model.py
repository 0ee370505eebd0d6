"""
Case ORM model.

A case is the unit of organisation: it owns one remote vault, the
documents uploaded into it, the search history run against it, and the
AI analysis (tags + summary) derived from its documents.

Dependencies: sqlalchemy, casevault.boundary.db.base
System role: Case persistence
"""

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casevault.boundary.db.base import Base, TimestampMixin, UUIDMixin


class CaseModel(Base, UUIDMixin, TimestampMixin):
    """
    Case ORM model.

    Attributes:
        id: UUID primary key (auto-generated)
        name: Display name
        description: Optional free text
        vault_id: Identifier of the remote vault holding the case's files
        tags: AI-generated tags (JSON list, empty until analysis runs)
        ai_summary: AI-generated case summary
        created_at: Case creation timestamp (UTC)
        updated_at: Last modification timestamp (UTC)

    Relationships:
        documents: One-to-many with DocumentModel (cascade delete)
        searches: One-to-many with SearchModel (cascade delete)
    """

    __tablename__ = "cases"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    vault_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        doc="Remote vault identifier",
    )

    tags: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    ai_summary: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    documents = relationship(
        "DocumentModel",
        back_populates="case",
        cascade="all, delete-orphan",
    )
    searches = relationship(
        "SearchModel",
        back_populates="case",
        cascade="all, delete-orphan",
    )

"""
Document ORM model.

Represents a file handed to the remote processing service and tracks its
ingestion lifecycle until it is searchable.

Dependencies: sqlalchemy, casevault.boundary.db.base, casevault.core.status_priority
System role: Document persistence for ingestion tracking
"""

from datetime import datetime
from uuid import UUID as PyUUID

from sqlalchemy import BigInteger, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casevault.boundary.db.base import Base, TimestampMixin, UUIDMixin, utcnow
from casevault.core.status_priority import IngestionStatus


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Document ORM model tracking ingestion pipeline state.

    Lifecycle: registration (PENDING) → transfer (UPLOADING) → remote OCR
    and indexing (PROCESSING) → COMPLETED or FAILED. Status only moves up
    the priority order; terminal states are left alone by sync and are
    reset only by an explicit retry.

    Attributes:
        id: UUID primary key (auto-generated)
        case_id: Foreign key to CaseModel (cascade delete)
        object_id: Remote object reference inside the case's vault
        filename: Original filename
        content_type: MIME type derived from the extension
        size_bytes: File size, backfilled from the remote service when unknown
        page_count: Page count reported by OCR
        ingestion_status: Current lifecycle state
        summary: Cached AI summary of the document
        status_version: Incremented on every status write (compare-and-swap guard)
        uploaded_at: Registration timestamp (UTC)

    Relationships:
        case: Parent CaseModel (back_populates=documents)
    """

    __tablename__ = "documents"

    case_id: Mapped[PyUUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    object_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        index=True,
        doc="Remote object identifier",
    )

    filename: Mapped[str] = mapped_column(String(255), nullable=False)

    content_type: Mapped[str] = mapped_column(String(128), nullable=False)

    size_bytes: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    page_count: Mapped[int | None] = mapped_column(Integer, nullable=True)

    ingestion_status: Mapped[IngestionStatus] = mapped_column(
        Enum(
            IngestionStatus,
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=IngestionStatus.PENDING,
    )

    summary: Mapped[str | None] = mapped_column(Text, nullable=True)

    status_version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # Relationships
    case = relationship("CaseModel", back_populates="documents")

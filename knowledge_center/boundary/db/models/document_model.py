"""
Document ORM model.

Represents uploaded knowledge-center documents with processing status and
file metadata. Tracks the ingestion lifecycle from upload to vector storage.

Dependencies: sqlalchemy, knowledge_center.boundary.db.base
System role: Document persistence for ingestion tracking
"""

import enum

from sqlalchemy import BigInteger, Enum, Index, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from knowledge_center.boundary.db.base import Base, UUIDMixin, TimestampMixin


class DocumentStatus(str, enum.Enum):
    """
    Document processing lifecycle states.

    UPLOADED: File stored, ingestion not started yet
    PROCESSING: Extraction, chunking and embedding in progress
    READY: Text extracted but no chunk embedded (keyword search only)
    VECTORIZED: Chunks embedded and searchable
    ERROR: Processing failed; error_message holds the reason
    """

    UPLOADED = "UPLOADED"
    PROCESSING = "PROCESSING"
    READY = "READY"
    VECTORIZED = "VECTORIZED"
    ERROR = "ERROR"


ALLOWED_TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    DocumentStatus.UPLOADED: frozenset({DocumentStatus.PROCESSING}),
    DocumentStatus.PROCESSING: frozenset(
        {DocumentStatus.READY, DocumentStatus.VECTORIZED, DocumentStatus.ERROR}
    ),
    # Terminal states only leave through an explicit reprocess
    DocumentStatus.READY: frozenset({DocumentStatus.PROCESSING}),
    DocumentStatus.VECTORIZED: frozenset({DocumentStatus.PROCESSING}),
    DocumentStatus.ERROR: frozenset({DocumentStatus.PROCESSING}),
}


def can_transition(current: DocumentStatus, target: DocumentStatus) -> bool:
    """Return True when the lifecycle allows moving from current to target."""
    return target in ALLOWED_TRANSITIONS[current]


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Document ORM model tracking ingestion pipeline state.

    Lifecycle: Upload (UPLOADED) → ingestion (PROCESSING) → VECTORIZED,
    READY (degraded) or ERROR. A VECTORIZED document always has content.

    Attributes:
        id: UUID primary key (auto-generated)
        teacher_id: Owning teacher (tenant scope)
        school_id: Owning school (tenant scope)
        title: Display title given at upload
        description: Free-text description
        category: Folder-like category (default "general")
        tags: List of tag strings
        content: Full extracted text; null until extracted
        chunk_preview: Lightweight index of chunks ({index, text, metadata})
        status: Current processing state
        error_message: Human-readable failure reason when status is ERROR
        original_name: Filename as uploaded
        filename: Stored object name
        file_type: Upper-case extension (PDF, DOCX, ...)
        mime_type: Declared content type
        file_size: Size in bytes
        s3_key: Blob store key

    Relationships:
        chunks: ChunkModel rows (deleted with the document)
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_tenant_status", "teacher_id", "school_id", "status"),
    )

    teacher_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    school_id: Mapped[str] = mapped_column(String(64), nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="general")
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    chunk_preview: Mapped[list[dict] | None] = mapped_column(JSON(none_as_null=True), nullable=True)

    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, native_enum=False, length=20),
        nullable=False,
        default=DocumentStatus.UPLOADED,
    )
    error_message: Mapped[str | None] = mapped_column(
        String(2048),
        nullable=True,
        doc="Error details if processing failed",
    )

    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_type: Mapped[str] = mapped_column(String(16), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    s3_key: Mapped[str] = mapped_column(String(1024), nullable=False)

    chunks = relationship(
        "ChunkModel",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChunkModel.chunk_index",
    )

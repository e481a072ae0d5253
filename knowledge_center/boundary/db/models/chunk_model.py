"""
Chunk ORM model.

One contiguous slice of a document's text with its embedding vector.
The vector column uses pgvector on PostgreSQL and a JSON list elsewhere
so the schema can be created on SQLite for local runs and tests. The
column carries no fixed dimension; the configured dimension is enforced
by the embedder and vector store, and checked against stored rows when
the service container starts.

Dependencies: sqlalchemy, pgvector, knowledge_center.boundary.db.base
System role: Vector record persistence
"""

import uuid
from datetime import datetime

from pgvector.sqlalchemy import Vector
from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from knowledge_center.boundary.db.base import Base, UUIDMixin, utc_now


class ChunkModel(Base, UUIDMixin):
    """
    Chunk ORM model.

    Attributes:
        id: UUID primary key
        document_id: Owning document (ON DELETE CASCADE)
        chunk_index: Zero-based, contiguous position within the document
        chunk_text: Trimmed chunk text
        embedding: Vector of the configured embedding dimension
        embedding_model: Model that produced the vector
        chunk_metadata: Offsets and source index ({start_char, end_char, source_index})
        created_at: Insert timestamp (UTC)

    Constraints:
        (document_id, chunk_index) is unique
    """

    __tablename__ = "document_chunks"
    __table_args__ = (
        UniqueConstraint("document_id", "chunk_index", name="uq_document_chunks_document_index"),
    )

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    chunk_text: Mapped[str] = mapped_column(Text, nullable=False)
    embedding = mapped_column(
        Vector().with_variant(JSON(), "sqlite"),
        nullable=True,
    )
    embedding_model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    chunk_metadata: Mapped[dict | None] = mapped_column(
        "metadata", JSON(none_as_null=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    document = relationship("DocumentModel", back_populates="chunks")

"""
Chunk CRUD operations.

Chunks are written one row per transaction during ingestion and removed
in bulk when a document is reprocessed or deleted.

Dependencies: sqlalchemy, knowledge_center.boundary.db.models
System role: Vector record persistence operations
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_center.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_center.boundary.db.models.chunk_model import ChunkModel


class ChunkCRUD(BaseCRUD[ChunkModel]):
    """CRUD operations for ChunkModel."""

    def __init__(self) -> None:
        """Initialize ChunkCRUD with ChunkModel."""
        super().__init__(ChunkModel)

    async def add_chunk(
        self,
        session: AsyncSession,
        document_id: UUID,
        chunk_index: int,
        chunk_text: str,
        embedding: list[float] | None,
        embedding_model: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ChunkModel:
        """
        Insert one chunk row.

        Args:
            session: Async database session
            document_id: Owning document
            chunk_index: Contiguous index within the document
            chunk_text: Chunk text
            embedding: Embedding vector
            embedding_model: Model that produced the vector
            metadata: Offsets and source index

        Returns:
            Created ChunkModel
        """
        return await self.create(
            session,
            document_id=document_id,
            chunk_index=chunk_index,
            chunk_text=chunk_text,
            embedding=embedding,
            embedding_model=embedding_model,
            chunk_metadata=metadata,
        )

    async def get_by_document(
        self,
        session: AsyncSession,
        document_id: UUID,
        limit: int | None = None,
    ) -> Sequence[ChunkModel]:
        """
        Retrieve a document's chunks ordered by index.

        Args:
            session: Async database session
            document_id: Owning document
            limit: Maximum number of chunks to return

        Returns:
            Sequence of ChunkModels
        """
        stmt = (
            select(ChunkModel)
            .where(ChunkModel.document_id == document_id)
            .order_by(ChunkModel.chunk_index)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_by_document(self, session: AsyncSession, document_id: UUID) -> int:
        """Count a document's chunks."""
        stmt = select(func.count(ChunkModel.id)).where(ChunkModel.document_id == document_id)
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def stored_dimension(self, session: AsyncSession) -> int | None:
        """Length of one stored embedding, or None when no chunk has a vector."""
        stmt = select(ChunkModel.embedding).where(ChunkModel.embedding.is_not(None)).limit(1)
        result = await session.execute(stmt)
        embedding = result.scalar_one_or_none()
        return None if embedding is None else len(embedding)

    async def delete_by_document(self, session: AsyncSession, document_id: UUID) -> int:
        """
        Delete every chunk of a document.

        Args:
            session: Async database session
            document_id: Owning document

        Returns:
            int: Number of rows deleted
        """
        stmt = delete(ChunkModel).where(ChunkModel.document_id == document_id)
        result = await session.execute(stmt)
        return result.rowcount or 0


chunk_crud = ChunkCRUD()

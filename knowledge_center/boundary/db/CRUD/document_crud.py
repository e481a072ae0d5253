"""
Document CRUD operations.

Provides Create, Read, Update, Delete operations for DocumentModel with
tenant-scoped queries, aggregate statistics and guarded status transitions.

Dependencies: sqlalchemy, knowledge_center.boundary.db.models
System role: Document persistence operations
"""

import logging
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_center.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_center.boundary.db.models.document_model import (
    DocumentModel,
    DocumentStatus,
    can_transition,
)
from knowledge_center.core.exceptions import InvalidStatusTransition

logger = logging.getLogger(__name__)


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Extends BaseCRUD with queries filtered by teacher/school and a
    status update that enforces the document lifecycle.
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def get_for_teacher(
        self,
        session: AsyncSession,
        id: UUID,
        teacher_id: str,
    ) -> DocumentModel | None:
        """
        Retrieve a document only if it belongs to the teacher.

        Args:
            session: Async database session
            id: Document UUID
            teacher_id: Owning teacher

        Returns:
            DocumentModel if found and owned, None otherwise
        """
        stmt = select(DocumentModel).where(
            DocumentModel.id == id,
            DocumentModel.teacher_id == teacher_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_teacher(
        self,
        session: AsyncSession,
        teacher_id: str,
        category: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve a teacher's documents, newest first.

        Args:
            session: Async database session
            teacher_id: Owning teacher
            category: Optional category filter
            limit: Maximum number of documents to return
            offset: Number of documents to skip

        Returns:
            Sequence of DocumentModels
        """
        stmt = (
            select(DocumentModel)
            .where(DocumentModel.teacher_id == teacher_id)
            .order_by(DocumentModel.created_at.desc())
            .offset(offset)
        )
        if category is not None:
            stmt = stmt.where(DocumentModel.category == category)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_for_scope(
        self,
        session: AsyncSession,
        teacher_id: str,
        school_id: str,
        status: DocumentStatus = DocumentStatus.VECTORIZED,
    ) -> int:
        """
        Count a tenant's documents in the given status.

        Args:
            session: Async database session
            teacher_id: Owning teacher
            school_id: Owning school
            status: Status to count

        Returns:
            int: Number of matching documents
        """
        stmt = select(func.count(DocumentModel.id)).where(
            DocumentModel.teacher_id == teacher_id,
            DocumentModel.school_id == school_id,
            DocumentModel.status == status,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def get_stats(self, session: AsyncSession, teacher_id: str) -> dict[str, Any]:
        """
        Aggregate a teacher's documents by status and category.

        Args:
            session: Async database session
            teacher_id: Owning teacher

        Returns:
            dict: total_documents, by_status, by_category, total_size
        """
        where = DocumentModel.teacher_id == teacher_id

        total = await session.execute(select(func.count(DocumentModel.id)).where(where))
        size = await session.execute(
            select(func.coalesce(func.sum(DocumentModel.file_size), 0)).where(where)
        )
        by_status = await session.execute(
            select(DocumentModel.status, func.count(DocumentModel.id))
            .where(where)
            .group_by(DocumentModel.status)
        )
        by_category = await session.execute(
            select(DocumentModel.category, func.count(DocumentModel.id))
            .where(where)
            .group_by(DocumentModel.category)
        )

        return {
            "total_documents": int(total.scalar_one()),
            "by_status": {status.value: count for status, count in by_status.all()},
            "by_category": {category: count for category, count in by_category.all()},
            "total_size": int(size.scalar_one()),
        }

    async def transition_status(
        self,
        session: AsyncSession,
        id: UUID,
        target: DocumentStatus,
        recover: bool = False,
        **fields,
    ) -> DocumentModel:
        """
        Move a document to a new status, enforcing the lifecycle.

        Args:
            session: Async database session
            id: Document UUID
            target: New status
            recover: Also allow PROCESSING -> PROCESSING, restarting a run
                that was interrupted without reaching a final status
            **fields: Extra columns to update in the same statement

        Returns:
            Updated DocumentModel

        Raises:
            ValueError: Document not found
            InvalidStatusTransition: Transition not allowed, or VECTORIZED
                requested for a document without content
        """
        document = await self.get_by_id(session, id)
        if document is None:
            raise ValueError(f"Document {id} not found")

        restarting = (
            recover
            and document.status == DocumentStatus.PROCESSING
            and target == DocumentStatus.PROCESSING
        )
        if not restarting and not can_transition(document.status, target):
            raise InvalidStatusTransition(document.status.value, target.value, str(id))

        if target == DocumentStatus.VECTORIZED:
            content = fields.get("content", document.content)
            if not content:
                raise InvalidStatusTransition(
                    document.status.value,
                    target.value,
                    str(id),
                    reason="vectorized documents must have extracted content",
                )

        updated = await self.update_by_id(session, id, status=target, **fields)
        logger.info(
            f"{__name__}:transition_status - {document.status.value} -> {target.value}",
            extra={"document_id": str(id)},
        )
        return updated

    async def mark_failed(
        self,
        session: AsyncSession,
        id: UUID,
        error_message: str,
    ) -> DocumentModel:
        """
        Mark document as failed with error details.

        Args:
            session: Async database session
            id: Document UUID
            error_message: Human-readable error description

        Returns:
            Updated DocumentModel
        """
        # Truncate error message to fit column (2048 chars)
        truncated_error = error_message[:2000]
        return await self.transition_status(
            session,
            id,
            DocumentStatus.ERROR,
            error_message=truncated_error,
            content=None,
            chunk_preview=None,
        )


document_crud = DocumentCRUD()

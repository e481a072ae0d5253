"""
Document service orchestrator.

Coordinates document upload, background processing, listing, metadata
updates, vector maintenance and deletion for one teacher's knowledge center.

Dependencies: knowledge_center.boundary, knowledge_center.core
System role: Document management orchestration
"""

import asyncio
import logging
from datetime import datetime
from pathlib import PurePosixPath
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_center.boundary.aws.s3_client import S3DocumentClient
from knowledge_center.boundary.db.CRUD.chunk_crud import chunk_crud
from knowledge_center.boundary.db.CRUD.document_crud import document_crud
from knowledge_center.boundary.db.models import (
    ChunkModel,
    DocumentModel,
    DocumentStatus,
    can_transition,
)
from knowledge_center.configs import DocumentPipelineSettings
from knowledge_center.core.document_processing.ingestion import IngestionOrchestrator
from knowledge_center.core.document_processing.task_runner import IngestionTaskRunner
from knowledge_center.core.exceptions import (
    BlobStoreError,
    DocumentNotFoundError,
    DocumentProcessingError,
    InvalidStatusTransition,
    ValidationError,
)
from knowledge_center.models import DocumentStats
from knowledge_center.observability import log_with_context

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Document service orchestrator.

    Uploads are stored and recorded synchronously; extraction and embedding
    run on the task runner so the caller gets the UPLOADED document back
    immediately. Every read and write is restricted to the owning teacher.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        blob_store: S3DocumentClient,
        orchestrator: IngestionOrchestrator,
        runner: IngestionTaskRunner,
        settings: DocumentPipelineSettings,
    ) -> None:
        """
        Initialize document service.

        Args:
            session_factory: Async session factory
            blob_store: Raw file storage
            orchestrator: Ingestion pipeline
            runner: Background task runner
            settings: Upload validation settings
        """
        self._session_factory = session_factory
        self._blob_store = blob_store
        self._orchestrator = orchestrator
        self._runner = runner
        self._settings = settings

    async def upload_document(
        self,
        teacher_id: str,
        school_id: str,
        data: bytes,
        original_name: str,
        content_type: str,
        title: str,
        description: str = "",
        category: str | None = None,
        tags: list[str] | None = None,
    ) -> DocumentModel:
        """
        Accept an upload and start processing in the background.

        Steps:
        1. Validate title, owner, extension and size
        2. Store the file in the blob store
        3. Create the document row with UPLOADED status
        4. Submit ingestion to the task runner

        Args:
            teacher_id: Owning teacher
            school_id: Owning school
            data: File bytes
            original_name: Uploaded filename
            content_type: Declared MIME type
            title: Display title
            description: Free-text description
            category: Category (default "general")
            tags: Tag strings

        Returns:
            DocumentModel: The created document (status UPLOADED)

        Raises:
            ValidationError: Rejected upload
            BlobStoreError: File could not be stored
            RuntimeError: Task runner is shut down; the upload is discarded
        """
        extension = self._validate_upload(teacher_id, school_id, data, original_name, title)
        category = (category or "").strip() or "general"

        blob = await asyncio.to_thread(
            self._blob_store.upload,
            data,
            teacher_id,
            category,
            original_name,
            content_type,
        )

        try:
            async with self._session_factory() as session:
                document = await document_crud.create(
                    session,
                    teacher_id=teacher_id,
                    school_id=school_id,
                    title=title.strip(),
                    description=description.strip(),
                    category=category,
                    tags=self._clean_tags(tags),
                    status=DocumentStatus.UPLOADED,
                    original_name=original_name,
                    filename=PurePosixPath(blob.key).name,
                    file_type=extension.upper(),
                    mime_type=content_type,
                    file_size=len(data),
                    s3_key=blob.key,
                )
                await session.commit()
        except Exception:
            await self._delete_blob(blob.key)
            raise

        try:
            self._runner.submit(document.id, self._orchestrator.ingest(document.id, payload=data))
        except (RuntimeError, DocumentProcessingError) as e:
            logger.warning(
                f"{__name__}:upload_document - Ingestion not scheduled, discarding upload",
                extra={"document_id": str(document.id), "error": str(e)},
            )
            async with self._session_factory() as session:
                await document_crud.delete_by_id(session, document.id)
                await session.commit()
            await self._delete_blob(blob.key)
            raise

        logger.info(
            f"{__name__}:upload_document - Document accepted",
            extra={
                "document_id": str(document.id),
                "teacher_id": teacher_id,
                "file_type": document.file_type,
                "file_size": document.file_size,
            },
        )
        return document

    async def list_documents(
        self,
        teacher_id: str,
        category: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[DocumentModel]:
        """List a teacher's documents, newest first, optionally in one category."""
        async with self._session_factory() as session:
            return await document_crud.get_by_teacher(
                session, teacher_id, category=category, limit=limit, offset=offset
            )

    async def list_documents_by_tag(self, teacher_id: str, tag: str) -> list[DocumentModel]:
        """List a teacher's documents carrying a tag (case-insensitive)."""
        wanted = tag.strip().lower()
        documents = await self.list_documents(teacher_id)
        return [
            document
            for document in documents
            if any(existing.lower() == wanted for existing in document.tags or [])
        ]

    async def get_document(self, document_id: UUID, teacher_id: str) -> DocumentModel:
        """
        Get one of the teacher's documents.

        Raises:
            DocumentNotFoundError: Missing or owned by another teacher
        """
        async with self._session_factory() as session:
            return await self._get_owned(session, document_id, teacher_id)

    async def update_document(
        self,
        document_id: UUID,
        teacher_id: str,
        title: str | None = None,
        description: str | None = None,
        category: str | None = None,
        tags: list[str] | None = None,
    ) -> DocumentModel:
        """
        Update editable metadata. Fields left as None are unchanged.

        Raises:
            DocumentNotFoundError: Missing or owned by another teacher
            ValidationError: Blank title
        """
        fields: dict = {}
        if title is not None:
            if not title.strip():
                raise ValidationError("Title cannot be empty", field="title")
            fields["title"] = title.strip()
        if description is not None:
            fields["description"] = description.strip()
        if category is not None:
            fields["category"] = category.strip() or "general"
        if tags is not None:
            fields["tags"] = self._clean_tags(tags)

        async with self._session_factory() as session:
            document = await self._get_owned(session, document_id, teacher_id)
            if not fields:
                return document
            document = await document_crud.update_by_id(session, document_id, **fields)
            await session.commit()

        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:update_document - Metadata updated",
            document_id=document_id,
            fields=", ".join(sorted(fields)),
        )
        return document

    async def get_stats(self, teacher_id: str) -> DocumentStats:
        """Counts by status and category, and total stored bytes."""
        async with self._session_factory() as session:
            stats = await document_crud.get_stats(session, teacher_id)
        return DocumentStats(**stats)

    async def reprocess_document(self, document_id: UUID, teacher_id: str) -> DocumentModel:
        """
        Rebuild a document's chunks in the background.

        Stored extracted text is reused; the file is fetched again only
        when no text is stored. A document left in PROCESSING by an
        interrupted run (no task in flight) is restarted.

        Raises:
            DocumentNotFoundError: Missing or owned by another teacher
            DocumentProcessingError: Ingestion is in flight for the document
            InvalidStatusTransition: Status does not allow reprocessing
        """
        if document_id in self._runner.in_flight:
            raise DocumentProcessingError(
                "Document is already being processed", str(document_id)
            )

        document = await self.get_document(document_id, teacher_id)
        recover = document.status == DocumentStatus.PROCESSING
        if not recover and not can_transition(document.status, DocumentStatus.PROCESSING):
            raise InvalidStatusTransition(
                document.status.value, DocumentStatus.PROCESSING.value, str(document_id)
            )
        if recover:
            logger.warning(
                f"{__name__}:reprocess_document - Restarting interrupted processing",
                extra={"document_id": str(document_id)},
            )

        self._runner.submit(
            document_id, self._orchestrator.reprocess(document_id, recover=recover)
        )
        logger.info(
            f"{__name__}:reprocess_document - Reprocessing scheduled",
            extra={"document_id": str(document_id), "recover": recover},
        )
        return document

    async def clear_vectors(self, document_id: UUID, teacher_id: str) -> int:
        """
        Delete a document's chunks and leave it READY with its text.

        Returns:
            int: Chunks removed

        Raises:
            DocumentNotFoundError: Missing or owned by another teacher
            ValidationError: Document has no extracted text
            InvalidStatusTransition: Document is processing
        """
        async with self._session_factory() as session:
            document = await self._get_owned(session, document_id, teacher_id)
            if not document.content:
                raise ValidationError("Document has no extracted text", field="content")

            removed = await chunk_crud.delete_by_document(session, document_id)
            await document_crud.transition_status(session, document_id, DocumentStatus.PROCESSING)
            await document_crud.transition_status(
                session, document_id, DocumentStatus.READY, chunk_preview=None
            )
            await session.commit()

        logger.info(
            f"{__name__}:clear_vectors - Vectors cleared",
            extra={"document_id": str(document_id), "removed": removed},
        )
        return removed

    async def delete_document(self, document_id: UUID, teacher_id: str) -> None:
        """
        Delete a document's row, chunks and stored file.

        Raises:
            DocumentNotFoundError: Missing or owned by another teacher
            DocumentProcessingError: Ingestion is in flight for the document
        """
        if document_id in self._runner.in_flight:
            raise DocumentProcessingError(
                "Cannot delete a document while it is being processed", str(document_id)
            )

        async with self._session_factory() as session:
            document = await self._get_owned(session, document_id, teacher_id)
            s3_key = document.s3_key
            await chunk_crud.delete_by_document(session, document_id)
            await document_crud.delete_by_id(session, document_id)
            await session.commit()

        await self._delete_blob(s3_key)
        logger.info(
            f"{__name__}:delete_document - Document deleted",
            extra={"document_id": str(document_id)},
        )

    async def get_download_url(
        self,
        document_id: UUID,
        teacher_id: str,
        expires_in: int | None = None,
    ) -> tuple[str, datetime]:
        """
        Presigned URL for the stored file.

        Returns:
            tuple[str, datetime]: (url, expires_at)
        """
        document = await self.get_document(document_id, teacher_id)
        return await asyncio.to_thread(self._blob_store.signed_url, document.s3_key, expires_in)

    async def list_chunks(
        self,
        document_id: UUID,
        teacher_id: str,
        limit: int | None = None,
    ) -> Sequence[ChunkModel]:
        """A document's stored chunks ordered by index."""
        async with self._session_factory() as session:
            await self._get_owned(session, document_id, teacher_id)
            return await chunk_crud.get_by_document(session, document_id, limit=limit)

    async def _get_owned(
        self,
        session: AsyncSession,
        document_id: UUID,
        teacher_id: str,
    ) -> DocumentModel:
        document = await document_crud.get_for_teacher(session, document_id, teacher_id)
        if document is None:
            raise DocumentNotFoundError(str(document_id))
        return document

    def _validate_upload(
        self,
        teacher_id: str,
        school_id: str,
        data: bytes,
        original_name: str,
        title: str,
    ) -> str:
        """Return the lower-case extension of an acceptable upload."""
        if not teacher_id or not school_id:
            raise ValidationError("Teacher and school are required", field="teacher_id")
        if not title or not title.strip():
            raise ValidationError("Title is required", field="title")

        extension = PurePosixPath(original_name or "").suffix.lower().lstrip(".")
        if extension not in self._settings.allowed_extensions:
            raise ValidationError(
                f"File type not allowed: {extension or 'none'}",
                field="file",
                details={"allowed": self._settings.allowed_extensions},
            )
        if len(data) > self._settings.max_file_size:
            raise ValidationError(
                "File too large",
                field="file",
                details={"size": len(data), "max_size": self._settings.max_file_size},
            )
        return extension

    @staticmethod
    def _clean_tags(tags: list[str] | None) -> list[str]:
        return list(dict.fromkeys(tag.strip() for tag in tags or [] if tag and tag.strip()))

    async def _delete_blob(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._blob_store.delete, key)
        except BlobStoreError as e:
            logger.warning(
                f"{__name__}:_delete_blob - Stored file left behind",
                extra={"s3_key": key, "error": str(e)},
            )

"""
Ingestion orchestrator.

Drives one document through extract -> chunk -> embed -> persist and owns
its status transitions:

    UPLOADED/READY/VECTORIZED/ERROR -> PROCESSING -> VECTORIZED | READY | ERROR

Every chunk row is committed on its own as soon as it is embedded, so a
crash mid-document leaves the chunks written so far and a PROCESSING row;
reprocessing with recover=True restarts such a row.
Previous chunks are removed when processing starts, which makes
reprocessing replace rather than append.

Dependencies: sqlalchemy, knowledge_center.boundary, knowledge_center.core
System role: Document pipeline coordinator
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_center.boundary.aws.s3_client import S3DocumentClient
from knowledge_center.boundary.db.CRUD.chunk_crud import chunk_crud
from knowledge_center.boundary.db.CRUD.document_crud import document_crud
from knowledge_center.boundary.db.models import DocumentStatus
from knowledge_center.configs import DocumentPipelineSettings, EmbeddingSettings
from knowledge_center.core.document_processing.chunker import TextChunker
from knowledge_center.core.document_processing.embedder import Embedder
from knowledge_center.core.document_processing.text_extractor import TextExtractor
from knowledge_center.core.exceptions import (
    BlobStoreError,
    DocumentNotFoundError,
    DocumentProcessingError,
    EmbeddingProviderError,
    ExtractionFailureError,
)
from knowledge_center.models import IngestionResult, TextChunk
from knowledge_center.observability import log_exception_with_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _DocumentSnapshot:
    """Fields of the document row needed after its session closes."""

    id: UUID
    content: str | None
    s3_key: str
    mime_type: str
    original_name: str


class IngestionOrchestrator:
    """Process uploaded documents into searchable chunks."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        blob_store: S3DocumentClient,
        embedder: Embedder,
        pipeline_settings: DocumentPipelineSettings,
        embedding_settings: EmbeddingSettings,
        extractor: TextExtractor | None = None,
        chunker: TextChunker | None = None,
    ) -> None:
        """
        Initialize orchestrator with its collaborators.

        Args:
            session_factory: Async session factory
            blob_store: Source of document bytes
            embedder: Chunk embedder
            pipeline_settings: Chunking and preview settings
            embedding_settings: Inter-call delay
            extractor: Text extractor (default TextExtractor)
            chunker: Chunker (built from pipeline settings when None)
        """
        self._session_factory = session_factory
        self._blob_store = blob_store
        self._embedder = embedder
        self._pipeline = pipeline_settings
        self._request_delay = embedding_settings.request_delay_ms / 1000
        self._extractor = extractor or TextExtractor()
        self._chunker = chunker or TextChunker(
            chunk_size=pipeline_settings.chunk_size,
            chunk_overlap=pipeline_settings.chunk_overlap,
            max_chunks=pipeline_settings.max_chunks,
        )

    async def ingest(
        self,
        document_id: UUID,
        payload: bytes | None = None,
        reuse_content: bool = False,
        recover: bool = False,
    ) -> IngestionResult:
        """
        Run the pipeline for one document.

        Extraction failures end in ERROR and are reported in the result
        rather than raised. Invariant violations and unexpected errors mark
        the document ERROR and propagate.

        Args:
            document_id: Document UUID
            payload: File bytes; fetched from the blob store when None
            reuse_content: Chunk the stored extracted text instead of re-extracting
            recover: Restart a document left in PROCESSING by an interrupted run

        Returns:
            IngestionResult: Final status and counters

        Raises:
            DocumentNotFoundError: No such document
            InvalidStatusTransition: Document cannot enter PROCESSING
        """
        started = time.perf_counter()
        document = await self._begin(document_id, recover)

        def elapsed_ms() -> float:
            return round((time.perf_counter() - started) * 1000, 2)

        try:
            try:
                text = await self._obtain_text(document, payload, reuse_content)
                chunking = self._chunker.chunk(text)
                if not chunking.chunks:
                    raise ExtractionFailureError(
                        "No text could be extracted from the document", str(document_id)
                    )
            except (DocumentProcessingError, BlobStoreError) as e:
                logger.warning(
                    f"{__name__}:ingest - Extraction failed",
                    extra={"document_id": str(document_id), "error": e.message},
                )
                await self._fail(document_id, e.message)
                return IngestionResult(
                    document_id=document_id,
                    status=DocumentStatus.ERROR.value,
                    processing_time_ms=elapsed_ms(),
                    error=e.message,
                )

            persisted, skipped, preview, reason = await self._embed_and_store(
                document_id, chunking.chunks
            )

            target = DocumentStatus.VECTORIZED if persisted else DocumentStatus.READY
            async with self._session_factory() as session:
                await document_crud.transition_status(
                    session,
                    document_id,
                    target,
                    content=text,
                    chunk_preview=preview or None,
                    error_message=None if persisted else reason,
                )
                await session.commit()

        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:ingest - Ingestion aborted",
                e,
                document_id=str(document_id),
            )
            await self._fail(document_id, str(e))
            raise

        result = IngestionResult(
            document_id=document_id,
            status=target.value,
            chunk_count=persisted,
            skipped_chunks=skipped,
            truncated=chunking.truncated,
            processing_time_ms=elapsed_ms(),
        )
        logger.info(
            f"{__name__}:ingest - Document processed",
            extra={
                "document_id": str(document_id),
                "status": result.status,
                "chunk_count": persisted,
                "skipped_chunks": skipped,
                "truncated": chunking.truncated,
                "processing_time_ms": result.processing_time_ms,
            },
        )
        return result

    async def reprocess(self, document_id: UUID, recover: bool = False) -> IngestionResult:
        """
        Rebuild a document's chunks, reusing stored text when present.

        Args:
            document_id: Document UUID
            recover: Document is stuck in PROCESSING with no run in flight

        Returns:
            IngestionResult: Final status and counters
        """
        return await self.ingest(document_id, reuse_content=True, recover=recover)

    async def _begin(self, document_id: UUID, recover: bool = False) -> _DocumentSnapshot:
        async with self._session_factory() as session:
            document = await document_crud.get_by_id(session, document_id)
            if document is None:
                raise DocumentNotFoundError(str(document_id))

            document = await document_crud.transition_status(
                session,
                document_id,
                DocumentStatus.PROCESSING,
                recover=recover,
                error_message=None,
            )
            removed = await chunk_crud.delete_by_document(session, document_id)
            await session.commit()

        if removed:
            logger.info(
                f"{__name__}:_begin - Removed previous chunks",
                extra={"document_id": str(document_id), "removed": removed},
            )
        return _DocumentSnapshot(
            id=document.id,
            content=document.content,
            s3_key=document.s3_key,
            mime_type=document.mime_type,
            original_name=document.original_name,
        )

    async def _obtain_text(
        self,
        document: _DocumentSnapshot,
        payload: bytes | None,
        reuse_content: bool,
    ) -> str:
        if reuse_content and document.content:
            return document.content

        if payload is None:
            payload = await asyncio.to_thread(self._blob_store.get_bytes, document.s3_key)

        text = await self._extractor.extract(payload, document.mime_type, document.original_name)
        # PostgreSQL text columns reject NUL
        return text.replace("\x00", "")

    async def _embed_and_store(
        self,
        document_id: UUID,
        chunks: list[TextChunk],
    ) -> tuple[int, int, list[dict], str | None]:
        """Embed chunks one by one and commit each row; returns (persisted, skipped, preview, reason)."""
        try:
            await self._embedder.ensure_initialized()
        except EmbeddingProviderError as e:
            logger.warning(
                f"{__name__}:_embed_and_store - Embedder unavailable, storing text only",
                extra={"document_id": str(document_id), "error": e.message},
            )
            return 0, len(chunks), [], f"Embedding unavailable: {e.message}"

        persisted = 0
        skipped = 0
        preview: list[dict] = []
        last_error: str | None = None

        for position, chunk in enumerate(chunks):
            if position and self._request_delay:
                await asyncio.sleep(self._request_delay)

            try:
                vector = await self._embedder.embed(chunk.text)
            except EmbeddingProviderError as e:
                skipped += 1
                last_error = e.message
                logger.warning(
                    f"{__name__}:_embed_and_store - Skipping chunk after embedding failure",
                    extra={
                        "document_id": str(document_id),
                        "source_index": chunk.index,
                        "error": e.message,
                    },
                )
                continue

            metadata = {**chunk.metadata, "source_index": chunk.index}
            async with self._session_factory() as session:
                await chunk_crud.add_chunk(
                    session,
                    document_id=document_id,
                    chunk_index=persisted,
                    chunk_text=chunk.text,
                    embedding=vector,
                    embedding_model=self._embedder.model_name,
                    metadata=metadata,
                )
                await session.commit()

            preview.append(
                {
                    "index": persisted,
                    "text": chunk.text[: self._pipeline.preview_chars] + "...",
                    "metadata": metadata,
                }
            )
            persisted += 1

        reason = None if persisted else f"No chunk could be embedded: {last_error}"
        return persisted, skipped, preview, reason

    async def _fail(self, document_id: UUID, reason: str) -> None:
        try:
            async with self._session_factory() as session:
                await document_crud.mark_failed(session, document_id, reason)
                await session.commit()
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_fail - Could not mark document as failed",
                e,
                document_id=str(document_id),
            )

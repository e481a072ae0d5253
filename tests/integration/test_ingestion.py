"""
Test suite for IngestionOrchestrator.

Runs the full pipeline against the in-memory database with deterministic
fake embeddings and a mocked S3 client.

System role: Verification of document ingestion workflow
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from knowledge_center.boundary.db import DocumentStatus, chunk_crud, document_crud
from knowledge_center.core.document_processing import Embedder, IngestionOrchestrator
from knowledge_center.core.exceptions import (
    DocumentNotFoundError,
    EmbeddingDimensionMismatch,
    EmbeddingProviderError,
    InvalidStatusTransition,
)

TEXT_2500 = "a" * 2500


async def _load(session_factory, document_id):
    async with session_factory() as session:
        document = await document_crud.get_by_id(session, document_id)
        chunks = await chunk_crud.get_by_document(session, document_id)
    return document, chunks


def _orchestrator(session_factory, blob_store, embedder, pipeline_settings, embedding_settings):
    return IngestionOrchestrator(
        session_factory=session_factory,
        blob_store=blob_store,
        embedder=embedder,
        pipeline_settings=pipeline_settings,
        embedding_settings=embedding_settings,
    )


class TestIngestHappyPath:
    """Test suite for successful ingestion."""

    @pytest.mark.asyncio
    async def test_2500_character_document_is_vectorized_with_four_chunks(
        self, orchestrator, make_document, session_factory
    ) -> None:
        # Arrange
        document = await make_document()

        # Act
        result = await orchestrator.ingest(document.id, payload=TEXT_2500.encode())

        # Assert
        stored, chunks = await _load(session_factory, document.id)
        assert result.status == "VECTORIZED"
        assert result.chunk_count == 4
        assert stored.status == DocumentStatus.VECTORIZED
        assert stored.content == TEXT_2500
        assert [c.chunk_index for c in chunks] == [0, 1, 2, 3]
        assert [(c.chunk_metadata["start_char"], c.chunk_metadata["end_char"]) for c in chunks] == [
            (0, 1000),
            (800, 1800),
            (1600, 2500),
            (2400, 2500),
        ]

    @pytest.mark.asyncio
    async def test_stores_preview_and_vectors(
        self, orchestrator, make_document, session_factory, embedding_settings
    ) -> None:
        document = await make_document()

        await orchestrator.ingest(document.id, payload=TEXT_2500.encode())

        stored, chunks = await _load(session_factory, document.id)
        assert len(stored.chunk_preview) == 4
        assert stored.chunk_preview[0]["index"] == 0
        assert stored.chunk_preview[0]["text"] == "a" * 200 + "..."
        assert all(len(c.embedding) == embedding_settings.dimension for c in chunks)
        assert all(c.embedding_model == "fake-embedding" for c in chunks)

    @pytest.mark.asyncio
    async def test_fetches_payload_from_blob_store(
        self, orchestrator, make_document, mock_s3_client, session_factory
    ) -> None:
        document = await make_document()
        mock_s3_client.objects[document.s3_key] = b"Cells are the basic unit of life."

        result = await orchestrator.ingest(document.id)

        stored, chunks = await _load(session_factory, document.id)
        assert result.status == "VECTORIZED"
        assert stored.content == "Cells are the basic unit of life."
        assert len(chunks) == 1


class TestIngestFailures:
    """Test suite for extraction failures and degraded outcomes."""

    @pytest.mark.asyncio
    async def test_empty_document_ends_in_error(
        self, orchestrator, make_document, session_factory
    ) -> None:
        document = await make_document()

        result = await orchestrator.ingest(document.id, payload=b"")

        stored, chunks = await _load(session_factory, document.id)
        assert result.status == "ERROR"
        assert stored.status == DocumentStatus.ERROR
        assert stored.content is None
        assert "No text" in stored.error_message
        assert chunks == []

    @pytest.mark.asyncio
    async def test_unsupported_format_ends_in_error(
        self, orchestrator, make_document, session_factory
    ) -> None:
        document = await make_document(mime_type="image/png", original_name="scan.png")

        result = await orchestrator.ingest(document.id, payload=b"\x89PNG")

        stored, _ = await _load(session_factory, document.id)
        assert result.status == "ERROR"
        assert "Unsupported file format" in result.error
        assert stored.status == DocumentStatus.ERROR

    @pytest.mark.asyncio
    async def test_missing_blob_ends_in_error(
        self, orchestrator, make_document, session_factory
    ) -> None:
        document = await make_document()

        result = await orchestrator.ingest(document.id)

        stored, _ = await _load(session_factory, document.id)
        assert result.status == "ERROR"
        assert stored.status == DocumentStatus.ERROR

    @pytest.mark.asyncio
    async def test_unknown_document_raises(self, orchestrator) -> None:
        with pytest.raises(DocumentNotFoundError):
            await orchestrator.ingest(uuid.uuid4(), payload=b"text")

    @pytest.mark.asyncio
    async def test_document_already_processing_is_rejected(
        self, orchestrator, make_document
    ) -> None:
        document = await make_document(status=DocumentStatus.PROCESSING)

        with pytest.raises(InvalidStatusTransition):
            await orchestrator.ingest(document.id, payload=b"text")

    @pytest.mark.asyncio
    async def test_recover_restarts_interrupted_document(
        self, orchestrator, make_document, session_factory
    ) -> None:
        # Arrange: a crashed run left the row in PROCESSING with its text stored
        document = await make_document(
            status=DocumentStatus.PROCESSING, content="Mitochondria make ATP."
        )

        # Act
        result = await orchestrator.reprocess(document.id, recover=True)

        # Assert
        stored, chunks = await _load(session_factory, document.id)
        assert result.status == "VECTORIZED"
        assert stored.status == DocumentStatus.VECTORIZED
        assert [c.chunk_text for c in chunks] == ["Mitochondria make ATP."]

    @pytest.mark.asyncio
    async def test_failed_chunk_is_skipped(
        self,
        session_factory,
        blob_store,
        fake_embeddings,
        embedding_settings,
        pipeline_settings,
        make_document,
    ) -> None:
        # Arrange
        embedder = Embedder(embedding_settings, embeddings_factory=lambda: fake_embeddings)
        real_embed = embedder.embed
        calls = {"count": 0}

        async def flaky_embed(text: str):
            calls["count"] += 1
            if calls["count"] == 2:
                raise EmbeddingProviderError("rate limited")
            return await real_embed(text)

        embedder.embed = flaky_embed
        orchestrator = _orchestrator(
            session_factory, blob_store, embedder, pipeline_settings, embedding_settings
        )
        document = await make_document()

        # Act
        result = await orchestrator.ingest(document.id, payload=TEXT_2500.encode())

        # Assert
        stored, chunks = await _load(session_factory, document.id)
        assert result.status == "VECTORIZED"
        assert result.chunk_count == 3
        assert result.skipped_chunks == 1
        assert [c.chunk_index for c in chunks] == [0, 1, 2]
        assert [c.chunk_metadata["source_index"] for c in chunks] == [0, 2, 3]
        assert stored.status == DocumentStatus.VECTORIZED

    @pytest.mark.asyncio
    async def test_unavailable_embedder_leaves_document_ready(
        self,
        session_factory,
        blob_store,
        embedding_settings,
        pipeline_settings,
        make_document,
    ) -> None:
        embedder = Embedder(
            embedding_settings,
            embeddings_factory=MagicMock(side_effect=RuntimeError("no api key")),
        )
        orchestrator = _orchestrator(
            session_factory, blob_store, embedder, pipeline_settings, embedding_settings
        )
        document = await make_document()

        result = await orchestrator.ingest(document.id, payload=b"Mitosis has four phases.")

        stored, chunks = await _load(session_factory, document.id)
        assert result.status == "READY"
        assert result.skipped_chunks == 1
        assert stored.status == DocumentStatus.READY
        assert stored.content == "Mitosis has four phases."
        assert chunks == []

    @pytest.mark.asyncio
    async def test_dimension_mismatch_marks_error_and_raises(
        self,
        session_factory,
        blob_store,
        embedding_settings,
        pipeline_settings,
        make_document,
    ) -> None:
        wrong = MagicMock()
        wrong.aembed_query = AsyncMock(return_value=[0.5] * (embedding_settings.dimension + 1))
        embedder = Embedder(embedding_settings, embeddings_factory=lambda: wrong)
        orchestrator = _orchestrator(
            session_factory, blob_store, embedder, pipeline_settings, embedding_settings
        )
        document = await make_document()

        with pytest.raises(EmbeddingDimensionMismatch):
            await orchestrator.ingest(document.id, payload=b"Mitosis has four phases.")

        stored, chunks = await _load(session_factory, document.id)
        assert stored.status == DocumentStatus.ERROR
        assert chunks == []


class TestReprocess:
    """Test suite for reprocessing."""

    @pytest.mark.asyncio
    async def test_reprocess_replaces_chunks(
        self, orchestrator, make_document, session_factory, mock_s3_client
    ) -> None:
        # Arrange
        document = await make_document()
        await orchestrator.ingest(document.id, payload=TEXT_2500.encode())
        _, first_chunks = await _load(session_factory, document.id)

        # Act
        result = await orchestrator.reprocess(document.id)

        # Assert
        stored, second_chunks = await _load(session_factory, document.id)
        assert result.chunk_count == 4
        assert [c.chunk_text for c in second_chunks] == [c.chunk_text for c in first_chunks]
        assert {c.id for c in second_chunks}.isdisjoint({c.id for c in first_chunks})
        assert stored.status == DocumentStatus.VECTORIZED
        mock_s3_client.get_object.assert_not_called()

    @pytest.mark.asyncio
    async def test_reprocess_after_error_refetches_file(
        self, orchestrator, make_document, session_factory, mock_s3_client
    ) -> None:
        document = await make_document()
        await orchestrator.ingest(document.id, payload=b"")
        mock_s3_client.objects[document.s3_key] = b"Recovered text about enzymes."

        result = await orchestrator.reprocess(document.id)

        stored, chunks = await _load(session_factory, document.id)
        assert result.status == "VECTORIZED"
        assert stored.content == "Recovered text about enzymes."
        assert stored.error_message is None
        assert len(chunks) == 1

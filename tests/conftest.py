"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory SQLite database, deterministic embeddings, mocked S3,
and fully wired pipeline and services
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite, langchain_core
System role: Test infrastructure and fixture management
"""

import io
import uuid
from unittest.mock import MagicMock

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

TEST_DIMENSION = 16


@pytest.fixture
async def test_engine():
    """
    Create in-memory SQLite async engine with the schema created.

    Yields:
        AsyncEngine: Engine shared by every session of the test
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool

    from knowledge_center.boundary.db import create_all_tables, drop_all_tables

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all_tables(engine)

    yield engine

    await drop_all_tables(engine)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the test engine."""
    from knowledge_center.boundary.db import get_async_session_factory

    return get_async_session_factory(test_engine)


@pytest.fixture
async def test_async_db(session_factory):
    """
    Create a session on the in-memory database.

    Yields:
        AsyncSession: Test database session, rolled back afterwards
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def embedding_settings():
    """Embedding settings with a small dimension, no delay and no retries."""
    from knowledge_center.configs import EmbeddingSettings

    return EmbeddingSettings(
        model="fake-embedding",
        dimension=TEST_DIMENSION,
        api_key="test-key",
        request_delay_ms=0,
        max_retries=1,
    )


@pytest.fixture
def pipeline_settings():
    """Default chunking and upload settings."""
    from knowledge_center.configs import DocumentPipelineSettings

    return DocumentPipelineSettings(chunk_size=1000, chunk_overlap=200, max_chunks=50)


@pytest.fixture
def retrieval_settings():
    """Default retrieval settings."""
    from knowledge_center.configs import RetrievalSettings

    return RetrievalSettings(similarity_threshold=0.7, top_k=10)


@pytest.fixture
def fake_embeddings() -> DeterministicFakeEmbedding:
    """Same text always maps to the same vector."""
    return DeterministicFakeEmbedding(size=TEST_DIMENSION)


@pytest.fixture
def embedder(embedding_settings, fake_embeddings):
    """Embedder backed by deterministic fake embeddings."""
    from knowledge_center.core.document_processing import Embedder

    return Embedder(embedding_settings, embeddings_factory=lambda: fake_embeddings)


@pytest.fixture
def mock_s3_client() -> MagicMock:
    """
    Mock boto3 S3 client with an in-memory object map.

    Returns:
        MagicMock: put_object/get_object/delete_object operate on .objects
    """
    client = MagicMock()
    client.objects = {}

    def put_object(Bucket, Key, Body, **kwargs):
        client.objects[Key] = Body

    def get_object(Bucket, Key):
        from botocore.exceptions import ClientError

        if Key not in client.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        return {"Body": io.BytesIO(client.objects[Key])}

    def delete_object(Bucket, Key):
        client.objects.pop(Key, None)

    client.put_object.side_effect = put_object
    client.get_object.side_effect = get_object
    client.delete_object.side_effect = delete_object
    client.generate_presigned_url.return_value = "https://test-bucket.s3.amazonaws.com/signed"
    return client


@pytest.fixture
def blob_store(mock_s3_client):
    """S3DocumentClient over the mocked boto3 client."""
    from knowledge_center.boundary.aws import S3DocumentClient

    return S3DocumentClient(bucket="test-bucket", client=mock_s3_client)


@pytest.fixture
def vector_store(session_factory, retrieval_settings):
    """Vector store on the in-memory database (in-process cosine)."""
    from knowledge_center.boundary.vdb import PgVectorStore

    return PgVectorStore(session_factory, retrieval_settings, dimension=TEST_DIMENSION)


@pytest.fixture
def orchestrator(session_factory, blob_store, embedder, pipeline_settings, embedding_settings):
    """Ingestion orchestrator wired to test collaborators."""
    from knowledge_center.core.document_processing import IngestionOrchestrator

    return IngestionOrchestrator(
        session_factory=session_factory,
        blob_store=blob_store,
        embedder=embedder,
        pipeline_settings=pipeline_settings,
        embedding_settings=embedding_settings,
    )


@pytest.fixture
def runner():
    """Ingestion task runner."""
    from knowledge_center.core.document_processing import IngestionTaskRunner

    return IngestionTaskRunner()


@pytest.fixture
def rag_service(embedder, vector_store):
    """RAG service over fake embeddings and the test store."""
    from knowledge_center.core.rag import RAGService

    return RAGService(embedder, vector_store)


@pytest.fixture
def document_service(session_factory, blob_store, orchestrator, runner, pipeline_settings):
    """Document service wired to test collaborators."""
    from knowledge_center.application.services import DocumentService

    return DocumentService(
        session_factory=session_factory,
        blob_store=blob_store,
        orchestrator=orchestrator,
        runner=runner,
        settings=pipeline_settings,
    )


@pytest.fixture
def make_document(session_factory):
    """
    Factory inserting a document row.

    Returns:
        Callable: async (teacher_id, school_id, **fields) -> DocumentModel
    """
    from knowledge_center.boundary.db import DocumentStatus, document_crud

    async def _make(teacher_id: str = "teacher-1", school_id: str = "school-1", **fields):
        values = {
            "title": "Photosynthesis notes",
            "description": "",
            "category": "biology",
            "tags": [],
            "status": DocumentStatus.UPLOADED,
            "original_name": "notes.txt",
            "filename": f"{uuid.uuid4()}.txt",
            "file_type": "TXT",
            "mime_type": "text/plain",
            "file_size": 0,
            "s3_key": f"documents/{teacher_id}/biology/{uuid.uuid4()}.txt",
        }
        values.update(fields)
        async with session_factory() as session:
            document = await document_crud.create(
                session, teacher_id=teacher_id, school_id=school_id, **values
            )
            await session.commit()
        return document

    return _make

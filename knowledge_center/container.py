"""
Service container.

Builds the shared clients and services once at process startup and tears
them down at shutdown. Collaborators are passed explicitly to every
service constructor; nothing is cached at module level.

Dependencies: knowledge_center.configs, knowledge_center.boundary,
    knowledge_center.core, knowledge_center.application
System role: Composition root and lifecycle owner
"""

import logging
from typing import Callable

from langchain_core.embeddings import Embeddings
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from knowledge_center.application.services import DocumentService
from knowledge_center.boundary.aws import S3DocumentClient
from knowledge_center.boundary.db import (
    chunk_crud,
    create_all_tables,
    get_async_engine,
    get_async_session_factory,
)
from knowledge_center.boundary.vdb import PgVectorStore
from knowledge_center.configs import Settings, get_settings
from knowledge_center.core.document_processing import (
    Embedder,
    IngestionOrchestrator,
    IngestionTaskRunner,
)
from knowledge_center.core.exceptions import EmbeddingDimensionMismatch
from knowledge_center.core.rag import RAGService
from knowledge_center.observability import configure_logging

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Container for the process-wide service instances."""

    def __init__(
        self,
        settings: Settings | None = None,
        engine: AsyncEngine | None = None,
        s3_client=None,
        embeddings_factory: Callable[[], Embeddings] | None = None,
    ) -> None:
        """
        Initialize the container without opening any connection.

        Args:
            settings: Application settings (get_settings() when None)
            engine: Pre-built async engine (created from settings when None)
            s3_client: Pre-built boto3 S3 client
            embeddings_factory: Builds the LangChain embeddings client
        """
        self.settings = settings or get_settings()
        self._engine = engine
        self._s3_client = s3_client
        self._embeddings_factory = embeddings_factory

        self.session_factory: async_sessionmaker[AsyncSession] | None = None
        self.blob_store: S3DocumentClient | None = None
        self.embedder: Embedder | None = None
        self.vector_store: PgVectorStore | None = None
        self.orchestrator: IngestionOrchestrator | None = None
        self.runner: IngestionTaskRunner | None = None
        self.rag_service: RAGService | None = None
        self.document_service: DocumentService | None = None
        self._started = False

    @property
    def engine(self) -> AsyncEngine | None:
        return self._engine

    async def startup(
        self,
        create_tables: bool = False,
        configure_logs: bool = True,
    ) -> "ServiceContainer":
        """
        Build engine, clients and services.

        The embedding client itself is created lazily by the embedder's
        ensure_initialized() on first use.

        Args:
            create_tables: Create the schema (and pgvector extension) if missing
            configure_logs: Install the root log handler

        Returns:
            ServiceContainer: self

        Raises:
            EmbeddingDimensionMismatch: Stored vectors have another dimension
                than the configured one
        """
        if self._started:
            return self

        settings = self.settings
        if configure_logs:
            configure_logging(settings.log_level)

        if self._engine is None:
            self._engine = get_async_engine(settings.database)
        if create_tables:
            await create_all_tables(self._engine)
        self.session_factory = get_async_session_factory(self._engine)
        await self._check_stored_dimension()

        self.blob_store = S3DocumentClient(
            bucket=settings.s3_documents.bucket,
            region=settings.s3_documents.region,
            prefix=settings.s3_documents.prefix,
            presigned_url_expiry=settings.s3_documents.presigned_url_expiry,
            client=self._s3_client,
        )
        self.embedder = Embedder(settings.embedding, embeddings_factory=self._embeddings_factory)
        self.vector_store = PgVectorStore(
            self.session_factory,
            settings.retrieval,
            dimension=settings.embedding.dimension,
        )
        self.orchestrator = IngestionOrchestrator(
            session_factory=self.session_factory,
            blob_store=self.blob_store,
            embedder=self.embedder,
            pipeline_settings=settings.pipeline,
            embedding_settings=settings.embedding,
        )
        self.runner = IngestionTaskRunner()
        self.rag_service = RAGService(self.embedder, self.vector_store)
        self.document_service = DocumentService(
            session_factory=self.session_factory,
            blob_store=self.blob_store,
            orchestrator=self.orchestrator,
            runner=self.runner,
            settings=settings.pipeline,
        )

        self._started = True
        logger.info(
            f"{__name__}:startup - Services ready",
            extra={"environment": settings.environment},
        )
        return self

    async def shutdown(self) -> None:
        """Wait for in-flight ingestion, release the embedder and dispose the engine."""
        if not self._started:
            return

        await self.runner.shutdown()
        await self.embedder.aclose()
        await self._engine.dispose()

        self._started = False
        logger.info(f"{__name__}:shutdown - Services stopped")

    async def _check_stored_dimension(self) -> None:
        expected = self.settings.embedding.dimension
        async with self.session_factory() as session:
            stored = await chunk_crud.stored_dimension(session)
        if stored is not None and stored != expected:
            logger.error(
                f"{__name__}:_check_stored_dimension - Stored vectors do not match configuration",
                extra={"expected": expected, "stored": stored},
            )
            raise EmbeddingDimensionMismatch(expected, stored, {"table": "document_chunks"})

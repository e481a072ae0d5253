"""
Chunk vector store over the relational database.

Similarity search runs natively through the pgvector cosine distance
operator when the database is PostgreSQL, and falls back to an in-process
cosine scan over the tenant's chunks when the native query fails or the
dialect has no vector support. A keyword match over document fields backs
the RAG service when no query vector can be produced.

Dependencies: sqlalchemy, pgvector, numpy
System role: Tenant-scoped similarity and keyword search
"""

import logging
import re
from typing import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_center.boundary.db.CRUD.chunk_crud import chunk_crud
from knowledge_center.boundary.db.CRUD.document_crud import document_crud
from knowledge_center.boundary.db.models import ChunkModel, DocumentModel, DocumentStatus
from knowledge_center.boundary.vdb.similarity import cosine_similarity, validate_dimension
from knowledge_center.configs import RetrievalSettings
from knowledge_center.core.exceptions import SearchBackendError
from knowledge_center.models import DocumentRef, SearchResult, TenantScope

logger = logging.getLogger(__name__)

_MIN_KEYWORD_LENGTH = 4
_MAX_KEYWORDS = 8


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def extract_keywords(query: str) -> list[str]:
    """
    Search terms for the keyword fallback.

    The whole query comes first, followed by its distinct longer words.
    """
    query = query.strip()
    if not query:
        return []
    terms = [query]
    for word in re.findall(r"\w+", query.lower()):
        if len(word) >= _MIN_KEYWORD_LENGTH and word not in terms:
            terms.append(word)
        if len(terms) > _MAX_KEYWORDS:
            break
    return terms


def _document_ref(document: DocumentModel) -> DocumentRef:
    return DocumentRef(
        id=document.id,
        title=document.title,
        category=document.category,
        teacher_id=document.teacher_id,
        school_id=document.school_id,
    )


class PgVectorStore:
    """
    Tenant-scoped search over stored chunks.

    Only chunks of VECTORIZED documents owned by the caller's
    (teacher, school) pair are considered. Vector results are raw cosine
    similarity on [-1, 1], filtered by the threshold (inclusive), sorted
    descending and truncated to top_k.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: RetrievalSettings,
        dimension: int,
    ) -> None:
        """
        Initialize the store.

        Args:
            session_factory: Async session factory
            settings: Retrieval settings (threshold, limits, native toggle)
            dimension: Configured embedding dimension
        """
        self._session_factory = session_factory
        self._settings = settings
        self._dimension = dimension

    async def search(
        self,
        query_vector: Sequence[float],
        scope: TenantScope,
        top_k: int | None = None,
        threshold: float | None = None,
    ) -> list[SearchResult]:
        """
        Rank the tenant's chunks by cosine similarity to the query vector.

        Args:
            query_vector: Query embedding
            scope: Tenant scope
            top_k: Maximum results (settings default when None)
            threshold: Minimum similarity (settings default when None)

        Returns:
            list[SearchResult]: Matches sorted by similarity, descending

        Raises:
            EmbeddingDimensionMismatch: Query or stored vector has the wrong length
            SearchBackendError: Neither native nor in-process search could run
        """
        validate_dimension(query_vector, self._dimension)
        top_k = top_k or self._settings.top_k
        threshold = self._settings.similarity_threshold if threshold is None else threshold

        async with self._session_factory() as session:
            if self._settings.use_native_search and self._is_postgres(session):
                try:
                    return await self._native_search(
                        session, list(query_vector), scope, top_k, threshold
                    )
                except SQLAlchemyError as e:
                    logger.warning(
                        f"{__name__}:search - Native vector search failed, scanning in process",
                        extra={"error": str(e), "teacher_id": scope.teacher_id},
                    )
                    await session.rollback()

            try:
                return await self._scan_search(session, query_vector, scope, top_k, threshold)
            except SQLAlchemyError as e:
                raise SearchBackendError(
                    f"Similarity search failed: {e}", operation="scan"
                ) from e

    async def keyword_search(
        self,
        query: str,
        scope: TenantScope,
        limit: int | None = None,
    ) -> list[SearchResult]:
        """
        Degraded search: substring match over document title, description and content.

        Each matching document contributes its leading chunks, scored with
        the configured fallback score.

        Args:
            query: Raw query text
            scope: Tenant scope
            limit: Maximum results (settings default when None)

        Returns:
            list[SearchResult]: Keyword matches, newest documents first

        Raises:
            SearchBackendError: The keyword query could not run
        """
        limit = limit or self._settings.top_k
        terms = extract_keywords(query)
        if not terms:
            return []

        conditions = []
        for term in terms:
            pattern = f"%{_escape_like(term)}%"
            conditions.extend(
                [
                    DocumentModel.title.ilike(pattern, escape="\\"),
                    DocumentModel.description.ilike(pattern, escape="\\"),
                    DocumentModel.content.ilike(pattern, escape="\\"),
                ]
            )

        stmt = (
            select(DocumentModel)
            .where(
                DocumentModel.teacher_id == scope.teacher_id,
                DocumentModel.school_id == scope.school_id,
                DocumentModel.status == DocumentStatus.VECTORIZED,
                or_(*conditions),
            )
            .order_by(DocumentModel.created_at.desc())
            .limit(limit)
        )

        results: list[SearchResult] = []
        try:
            async with self._session_factory() as session:
                documents = (await session.execute(stmt)).scalars().all()
                for document in documents:
                    chunks = await chunk_crud.get_by_document(
                        session,
                        document.id,
                        limit=self._settings.keyword_chunks_per_document,
                    )
                    ref = _document_ref(document)
                    results.extend(
                        SearchResult(
                            chunk_id=chunk.id,
                            chunk_text=chunk.chunk_text,
                            chunk_index=chunk.chunk_index,
                            document=ref,
                            similarity=self._settings.keyword_fallback_score,
                            match_type="keyword",
                        )
                        for chunk in chunks
                    )
        except SQLAlchemyError as e:
            raise SearchBackendError(f"Keyword search failed: {e}", operation="keyword") from e

        logger.info(
            f"{__name__}:keyword_search - Keyword fallback matched",
            extra={"teacher_id": scope.teacher_id, "result_count": len(results[:limit])},
        )
        return results[:limit]

    async def count_documents(self, scope: TenantScope) -> int:
        """
        Count the tenant's VECTORIZED documents.

        Raises:
            SearchBackendError: The count query could not run
        """
        try:
            async with self._session_factory() as session:
                return await document_crud.count_for_scope(
                    session, scope.teacher_id, scope.school_id
                )
        except SQLAlchemyError as e:
            raise SearchBackendError(f"Document count failed: {e}", operation="count") from e

    @staticmethod
    def _is_postgres(session: AsyncSession) -> bool:
        return session.get_bind().dialect.name == "postgresql"

    @staticmethod
    def _scope_filter(scope: TenantScope) -> tuple:
        return (
            DocumentModel.teacher_id == scope.teacher_id,
            DocumentModel.school_id == scope.school_id,
            DocumentModel.status == DocumentStatus.VECTORIZED,
            ChunkModel.embedding.is_not(None),
        )

    async def _native_search(
        self,
        session: AsyncSession,
        query_vector: list[float],
        scope: TenantScope,
        top_k: int,
        threshold: float,
    ) -> list[SearchResult]:
        similarity = 1 - ChunkModel.embedding.cosine_distance(query_vector)
        stmt = (
            select(ChunkModel, DocumentModel, similarity.label("similarity"))
            .join(DocumentModel, ChunkModel.document_id == DocumentModel.id)
            .where(*self._scope_filter(scope), similarity >= threshold)
            .order_by(similarity.desc())
            .limit(top_k)
        )
        rows = (await session.execute(stmt)).all()

        return [
            SearchResult(
                chunk_id=chunk.id,
                chunk_text=chunk.chunk_text,
                chunk_index=chunk.chunk_index,
                document=_document_ref(document),
                similarity=max(-1.0, min(1.0, float(score))),
            )
            for chunk, document, score in rows
        ]

    async def _scan_search(
        self,
        session: AsyncSession,
        query_vector: Sequence[float],
        scope: TenantScope,
        top_k: int,
        threshold: float,
    ) -> list[SearchResult]:
        stmt = (
            select(ChunkModel, DocumentModel)
            .join(DocumentModel, ChunkModel.document_id == DocumentModel.id)
            .where(*self._scope_filter(scope))
        )
        rows = (await session.execute(stmt)).all()

        scored: list[SearchResult] = []
        for chunk, document in rows:
            validate_dimension(chunk.embedding, self._dimension)
            score = cosine_similarity(query_vector, chunk.embedding)
            if score < threshold:
                continue
            scored.append(
                SearchResult(
                    chunk_id=chunk.id,
                    chunk_text=chunk.chunk_text,
                    chunk_index=chunk.chunk_index,
                    document=_document_ref(document),
                    similarity=score,
                )
            )

        scored.sort(key=lambda result: result.similarity, reverse=True)
        logger.debug(
            f"{__name__}:_scan_search - Scored chunks in process",
            extra={"candidates": len(rows), "matches": len(scored)},
        )
        return scored[:top_k]


__all__ = ["PgVectorStore", "extract_keywords"]

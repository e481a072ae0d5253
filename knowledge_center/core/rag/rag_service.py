"""
Retrieval-augmented context service.

Embeds a query, searches the tenant's chunks and renders the matches as a
structured text block for a downstream analysis prompt. Retrieval is
best-effort: provider or backend failures degrade to keyword search and
then to an empty result, never to an exception. Dimension mismatches are
the exception and always propagate.

Dependencies: knowledge_center.boundary.vdb, knowledge_center.core.document_processing
System role: Query-time retrieval and context assembly
"""

import logging
from collections import OrderedDict

from knowledge_center.boundary.vdb.pg_vector_store import PgVectorStore
from knowledge_center.core.document_processing.embedder import Embedder
from knowledge_center.core.exceptions import EmbeddingProviderError, SearchBackendError
from knowledge_center.models import RAGContext, SearchResult, TenantScope

logger = logging.getLogger(__name__)

NO_SCOPE_MESSAGE = "No relevant documents were found in the knowledge center."
NO_MATCHES_MESSAGE = "No relevant documents were found in the knowledge center for this topic."

SEPARATOR = "=" * 51

ANALYSIS_GUIDANCE = (
    "ANALYSIS GUIDANCE:\n"
    "- Use these excerpts as a REFERENCE to judge the accuracy of the explanation\n"
    "- Check whether the explanation is CONSISTENT with these materials\n"
    "- Point out concepts from the documents that are MISSING from the explanation\n"
    "- Recommend specific examples from these documents where relevant\n"
)


def _percent(score: float) -> str:
    return f"{score * 100:.1f}%"


def build_context_text(chunks: list[SearchResult]) -> str:
    """
    Render search results grouped by document.

    Documents appear in the order of their first (best) chunk. Each block
    shows title, category, average relevance and every chunk's text.
    """
    grouped: OrderedDict = OrderedDict()
    for chunk in chunks:
        grouped.setdefault(chunk.document.id, []).append(chunk)

    lines = [f"KNOWLEDGE CENTER CONTEXT ({len(chunks)} excerpts found):", ""]
    for document_chunks in grouped.values():
        document = document_chunks[0].document
        average = sum(c.similarity for c in document_chunks) / len(document_chunks)

        lines.extend(
            [
                SEPARATOR,
                f'Document: "{document.title}"',
                f"Category: {document.category or 'Uncategorized'}",
                f"Relevance: {_percent(average)}",
                SEPARATOR,
                "",
            ]
        )
        for position, chunk in enumerate(document_chunks, start=1):
            lines.append(f"--- Excerpt {position} (Similarity: {_percent(chunk.similarity)}) ---")
            lines.append(chunk.chunk_text.strip())
            lines.append("")
        lines.append("")

    lines.append(ANALYSIS_GUIDANCE)
    return "\n".join(lines)


class RAGService:
    """Query-time retrieval over a tenant's vectorized documents."""

    def __init__(self, embedder: Embedder, vector_store: PgVectorStore) -> None:
        """
        Initialize RAG service.

        Args:
            embedder: Query embedder (same model as ingestion)
            vector_store: Tenant-scoped chunk store
        """
        self._embedder = embedder
        self._store = vector_store

    async def search_relevant_chunks(
        self,
        query: str,
        scope: TenantScope,
        limit: int | None = None,
    ) -> list[SearchResult]:
        """
        Rank the tenant's chunks against a query.

        Falls back to keyword search when the query cannot be embedded or
        the similarity search fails; returns an empty list when that fails too.

        Args:
            query: Query text
            scope: Tenant scope
            limit: Maximum results (store default when None)

        Returns:
            list[SearchResult]: Matches sorted by similarity, descending

        Raises:
            InvariantViolation: Embedding dimension mismatch
        """
        try:
            vector = await self._embedder.embed(query)
            results = await self._store.search(vector, scope, top_k=limit)
            logger.info(
                f"{__name__}:search_relevant_chunks - Vector search complete",
                extra={"teacher_id": scope.teacher_id, "result_count": len(results)},
            )
            return results
        except (EmbeddingProviderError, SearchBackendError) as e:
            logger.warning(
                f"{__name__}:search_relevant_chunks - Falling back to keyword search",
                extra={"teacher_id": scope.teacher_id, "error": str(e)},
            )

        try:
            return await self._store.keyword_search(query, scope, limit=limit)
        except SearchBackendError as e:
            logger.error(
                f"{__name__}:search_relevant_chunks - Keyword fallback failed",
                extra={"teacher_id": scope.teacher_id, "error": str(e)},
            )
            return []

    async def generate_context(
        self,
        query: str,
        scope: TenantScope | None,
        limit: int | None = None,
    ) -> RAGContext:
        """
        Build the context handed to the analysis prompt.

        Without a scope, or without matches, the context text is a canned
        placeholder so consumers always receive well-formed text.

        Args:
            query: Query text
            scope: Tenant scope, or None when the caller has no tenant
            limit: Maximum chunks

        Returns:
            RAGContext: Chunks, rendered text, distinct titles and the
                tenant's vectorized document count
        """
        if scope is None:
            logger.warning(f"{__name__}:generate_context - No tenant scope given")
            return RAGContext(context_text=NO_SCOPE_MESSAGE, total_documents=0)

        chunks = await self.search_relevant_chunks(query, scope, limit)
        total_documents = await self._count_documents(scope)

        if not chunks:
            logger.info(
                f"{__name__}:generate_context - No relevant documents",
                extra={"teacher_id": scope.teacher_id, "total_documents": total_documents},
            )
            return RAGContext(context_text=NO_MATCHES_MESSAGE, total_documents=total_documents)

        titles = list(dict.fromkeys(chunk.document.title for chunk in chunks))
        logger.info(
            f"{__name__}:generate_context - Context assembled",
            extra={"chunk_count": len(chunks), "document_count": len(titles)},
        )
        return RAGContext(
            relevant_chunks=chunks,
            context_text=build_context_text(chunks),
            document_titles=titles,
            total_documents=total_documents,
        )

    async def search_multi_query(
        self,
        queries: list[str],
        scope: TenantScope,
        limit: int = 10,
    ) -> list[SearchResult]:
        """
        Search several related queries and merge the results.

        Duplicate chunks keep their first occurrence. The merged list is
        sorted by similarity, descending, and truncated to limit.
        """
        seen: set = set()
        merged: list[SearchResult] = []
        for query in queries:
            for result in await self.search_relevant_chunks(query, scope, limit):
                if result.chunk_id in seen:
                    continue
                seen.add(result.chunk_id)
                merged.append(result)

        merged.sort(key=lambda result: result.similarity, reverse=True)
        return merged[:limit]

    async def _count_documents(self, scope: TenantScope) -> int:
        try:
            return await self._store.count_documents(scope)
        except SearchBackendError as e:
            logger.warning(
                f"{__name__}:_count_documents - Document count unavailable",
                extra={"teacher_id": scope.teacher_id, "error": str(e)},
            )
            return 0

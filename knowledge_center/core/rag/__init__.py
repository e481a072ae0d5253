"""Retrieval-augmented context assembly."""

from knowledge_center.core.rag.rag_service import (
    NO_MATCHES_MESSAGE,
    NO_SCOPE_MESSAGE,
    RAGService,
    build_context_text,
)

__all__ = ["NO_MATCHES_MESSAGE", "NO_SCOPE_MESSAGE", "RAGService", "build_context_text"]

"""
Pydantic value objects shared across layers.
"""

from knowledge_center.models.chunk import ChunkingResult, TextChunk
from knowledge_center.models.document import DocumentStats
from knowledge_center.models.ingestion import IngestionResult
from knowledge_center.models.search import DocumentRef, RAGContext, SearchResult, TenantScope

__all__ = [
    "ChunkingResult",
    "DocumentRef",
    "DocumentStats",
    "IngestionResult",
    "RAGContext",
    "SearchResult",
    "TenantScope",
    "TextChunk",
]

"""
Retrieval models.

Tenant scope, ranked search results and the assembled RAG context.

Dependencies: pydantic
System role: Data contracts between the vector store, RAG service and consumers
"""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class TenantScope(BaseModel):
    """(teacher, school) pair isolating one user's documents."""

    teacher_id: str = Field(min_length=1)
    school_id: str = Field(min_length=1)


class DocumentRef(BaseModel):
    """Document metadata attached to a search hit."""

    id: UUID
    title: str
    category: str | None = None
    teacher_id: str
    school_id: str


class SearchResult(BaseModel):
    """A chunk matched by a query."""

    chunk_id: UUID
    chunk_text: str
    chunk_index: int
    document: DocumentRef
    similarity: float = Field(description="Raw cosine similarity, or the fallback score")
    match_type: Literal["vector", "keyword"] = "vector"


class RAGContext(BaseModel):
    """Context handed to the downstream analysis prompt."""

    relevant_chunks: list[SearchResult] = Field(default_factory=list)
    context_text: str
    document_titles: list[str] = Field(default_factory=list)
    total_documents: int = Field(
        default=0,
        description="Vectorized documents in the tenant scope, matched or not",
    )

"""
Ingestion result model.

Dependencies: pydantic
System role: Return type of the ingestion orchestrator
"""

from uuid import UUID

from pydantic import BaseModel, Field


class IngestionResult(BaseModel):
    """Outcome of processing one document."""

    document_id: UUID
    status: str = Field(description="Final document status")
    chunk_count: int = Field(default=0, description="Chunk rows persisted")
    skipped_chunks: int = Field(default=0, description="Chunks dropped after embedding failures")
    truncated: bool = Field(default=False, description="Chunk cap was hit")
    processing_time_ms: float = Field(default=0.0)
    error: str | None = None

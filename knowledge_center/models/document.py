"""
Document service models.

Dependencies: pydantic
System role: Return types for document listing and statistics
"""

from pydantic import BaseModel, Field


class DocumentStats(BaseModel):
    """Aggregate view of a teacher's documents."""

    total_documents: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_category: dict[str, int] = Field(default_factory=dict)
    total_size: int = Field(default=0, description="Sum of file sizes in bytes")

"""
Database models package.

Exports:
  - DocumentModel, DocumentStatus: Document ORM model and status enum
  - ChunkModel: Chunk (vector record) ORM model

Dependencies: sqlalchemy, pgvector, knowledge_center.boundary.db.base
System role: Database model definitions for domain entities
"""

from knowledge_center.boundary.db.models.document_model import (
    ALLOWED_TRANSITIONS,
    DocumentModel,
    DocumentStatus,
    can_transition,
)
from knowledge_center.boundary.db.models.chunk_model import ChunkModel

__all__ = [
    "ALLOWED_TRANSITIONS",
    "ChunkModel",
    "DocumentModel",
    "DocumentStatus",
    "can_transition",
]

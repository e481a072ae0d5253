"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(): Connection management
  - create_all_tables(), drop_all_tables(): Schema lifecycle
  - DocumentModel, DocumentStatus, ChunkModel: Core domain entities
  - document_crud, chunk_crud: CRUD operation singletons

Dependencies: sqlalchemy, pgvector, knowledge_center.configs
System role: Database adapter providing persistent storage for documents and
their embedded chunks.
"""

from knowledge_center.boundary.db.base import Base, TimestampMixin, UUIDMixin
from knowledge_center.boundary.db.connection import (
    create_all_tables,
    drop_all_tables,
    get_async_engine,
    get_async_session_factory,
)
from knowledge_center.boundary.db.models import ChunkModel, DocumentModel, DocumentStatus
from knowledge_center.boundary.db.CRUD import (
    BaseCRUD,
    ChunkCRUD,
    DocumentCRUD,
    chunk_crud,
    document_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "create_all_tables",
    "drop_all_tables",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "ChunkModel",
    "DocumentModel",
    "DocumentStatus",
    # CRUD classes
    "BaseCRUD",
    "ChunkCRUD",
    "DocumentCRUD",
    # CRUD singletons
    "chunk_crud",
    "document_crud",
]

"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from knowledge_center.boundary.db.CRUD import document_crud, chunk_crud

    document = await document_crud.get_by_id(db, document_id)
"""

from knowledge_center.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_center.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud
from knowledge_center.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud

__all__ = [
    "BaseCRUD",
    "ChunkCRUD",
    "chunk_crud",
    "DocumentCRUD",
    "document_crud",
]

"""
Vector boundary: embedding client, similarity math and chunk vector store.

Dependencies: langchain_google_genai, numpy, pgvector, sqlalchemy
System role: Embedding and similarity search adapters
"""

from knowledge_center.boundary.vdb.embeddings_wrapper import (
    FixedDimensionEmbeddings,
    build_embeddings,
)
from knowledge_center.boundary.vdb.pg_vector_store import PgVectorStore, extract_keywords
from knowledge_center.boundary.vdb.similarity import cosine_similarity, validate_dimension

__all__ = [
    "FixedDimensionEmbeddings",
    "PgVectorStore",
    "build_embeddings",
    "cosine_similarity",
    "extract_keywords",
    "validate_dimension",
]

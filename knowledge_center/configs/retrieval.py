"""
Retrieval configuration settings.

Similarity scores are raw cosine similarity on [-1, 1].

Dependencies: pydantic, pydantic_settings
System role: Similarity search and RAG context configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrievalSettings(BaseSettings):
    """Similarity search and context assembly configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RAG_",
        case_sensitive=False,
        extra="ignore",
    )

    similarity_threshold: float = Field(
        default=0.7,
        description="Minimum cosine similarity for a chunk to be returned",
        ge=-1.0,
        le=1.0,
    )
    top_k: int = Field(default=10, description="Default number of chunks to return", ge=1)
    keyword_fallback_score: float = Field(
        default=0.5,
        description="Score assigned to keyword-fallback matches",
    )
    keyword_chunks_per_document: int = Field(
        default=3,
        description="Leading chunks taken from each keyword-matched document",
        ge=1,
    )
    use_native_search: bool = Field(
        default=True,
        description="Use the pgvector distance operator when the database supports it",
    )

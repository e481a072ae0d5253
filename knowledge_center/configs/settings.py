"""
Top-level settings object.

Each section reads its own env prefix; Settings just groups them so the
container can be built from one value.

Dependencies: pydantic_settings
System role: Configuration entry point
"""

from functools import lru_cache

from pydantic import Field

from knowledge_center.configs.base import BaseSettings
from knowledge_center.configs.database import DatabaseSettings
from knowledge_center.configs.embedding import EmbeddingSettings
from knowledge_center.configs.pipeline import DocumentPipelineSettings
from knowledge_center.configs.retrieval import RetrievalSettings
from knowledge_center.configs.s3_documents import S3DocumentsSettings


class Settings(BaseSettings):
    """All configuration sections."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    s3_documents: S3DocumentsSettings = Field(default_factory=S3DocumentsSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    pipeline: DocumentPipelineSettings = Field(default_factory=DocumentPipelineSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)


@lru_cache
def get_settings() -> Settings:
    """Settings loaded once per process; call get_settings.cache_clear() in tests that patch env."""
    return Settings()

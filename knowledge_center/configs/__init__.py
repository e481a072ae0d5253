"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from knowledge_center.configs.database import DatabaseSettings
from knowledge_center.configs.embedding import EmbeddingSettings
from knowledge_center.configs.pipeline import DocumentPipelineSettings
from knowledge_center.configs.retrieval import RetrievalSettings
from knowledge_center.configs.s3_documents import S3DocumentsSettings
from knowledge_center.configs.settings import Settings, get_settings

__all__ = [
    "DatabaseSettings",
    "DocumentPipelineSettings",
    "EmbeddingSettings",
    "RetrievalSettings",
    "S3DocumentsSettings",
    "Settings",
    "get_settings",
]

"""
Document processing pipeline.

Components:
    - TextExtractor: payload -> plain text
    - TextChunker: text -> overlapping chunks
    - Embedder: chunk/query text -> vector
    - IngestionOrchestrator: per-document pipeline and status transitions
    - IngestionTaskRunner: background execution of ingestion jobs
"""

from knowledge_center.core.document_processing.chunker import TextChunker
from knowledge_center.core.document_processing.embedder import Embedder
from knowledge_center.core.document_processing.ingestion import IngestionOrchestrator
from knowledge_center.core.document_processing.task_runner import IngestionTaskRunner
from knowledge_center.core.document_processing.text_extractor import (
    TextExtractor,
    resolve_content_type,
)

__all__ = [
    "Embedder",
    "IngestionOrchestrator",
    "IngestionTaskRunner",
    "TextChunker",
    "TextExtractor",
    "resolve_content_type",
]

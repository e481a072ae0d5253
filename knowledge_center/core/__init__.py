"""
Core business logic module.

Contains the exception hierarchy, the document processing pipeline and the
retrieval-augmented context service.
"""

from knowledge_center.core.exceptions import (
    BlobStoreError,
    DocumentNotFoundError,
    DocumentProcessingError,
    EmbeddingDimensionMismatch,
    EmbeddingProviderError,
    ExtractionFailureError,
    InvalidStatusTransition,
    InvariantViolation,
    KnowledgeCenterException,
    SearchBackendError,
    UnsupportedFormatError,
    ValidationError,
)

__all__ = [
    "BlobStoreError",
    "DocumentNotFoundError",
    "DocumentProcessingError",
    "EmbeddingDimensionMismatch",
    "EmbeddingProviderError",
    "ExtractionFailureError",
    "InvalidStatusTransition",
    "InvariantViolation",
    "KnowledgeCenterException",
    "SearchBackendError",
    "UnsupportedFormatError",
    "ValidationError",
]

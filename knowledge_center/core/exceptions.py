"""
Exception hierarchy for the knowledge center.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class KnowledgeCenterException(Exception):
    """Base exception for all knowledge center errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(KnowledgeCenterException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class DocumentNotFoundError(KnowledgeCenterException):
    """Raised when a document cannot be found for the caller's tenant."""

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["document_id"] = document_id
        super().__init__(f"Document not found: {document_id}", details)


class DocumentProcessingError(KnowledgeCenterException):
    """Base exception for document processing errors."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            document_id: ID of the document that failed
            details: Additional context
        """
        details = details or {}
        if document_id:
            details["document_id"] = document_id
        super().__init__(message, details)


class UnsupportedFormatError(DocumentProcessingError):
    """Raised when no extractor handles the declared content type."""

    def __init__(
        self,
        content_type: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["content_type"] = content_type
        self.content_type = content_type
        super().__init__(f"Unsupported file format: {content_type}", document_id, details)


class ExtractionFailureError(DocumentProcessingError):
    """Raised when text extraction fails or yields no text."""

    pass


class EmbeddingProviderError(KnowledgeCenterException):
    """Raised when the remote embedding call fails (network, auth, quota)."""

    pass


class SearchBackendError(KnowledgeCenterException):
    """Raised when a similarity or keyword query cannot be executed."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize search backend error.

        Args:
            message: Error message
            operation: Operation that failed (native_search, scan, keyword)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class BlobStoreError(KnowledgeCenterException):
    """Raised when an object storage operation fails."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if key:
            details["key"] = key
        super().__init__(message, details)


class InvariantViolation(KnowledgeCenterException):
    """
    Raised when a data invariant is broken.

    Never degraded into a fallback: callers must let it propagate.
    """

    pass


class EmbeddingDimensionMismatch(InvariantViolation):
    """Raised when a vector's length differs from the configured dimension."""

    def __init__(
        self,
        expected: int,
        actual: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details.update({"expected": expected, "actual": actual})
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Embedding dimension mismatch: expected {expected}, got {actual}",
            details,
        )


class InvalidStatusTransition(InvariantViolation):
    """Raised when a document status change is not allowed."""

    def __init__(
        self,
        current: str,
        target: str,
        document_id: str | None = None,
        reason: str | None = None,
    ) -> None:
        details: dict[str, Any] = {"current": current, "target": target}
        if document_id:
            details["document_id"] = document_id
        message = f"Cannot move document from {current} to {target}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, details)

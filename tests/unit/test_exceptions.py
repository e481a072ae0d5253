"""
Test suite for the exception hierarchy.

System role: Verification of error taxonomy
"""

from knowledge_center.core.exceptions import (
    DocumentNotFoundError,
    DocumentProcessingError,
    EmbeddingDimensionMismatch,
    ExtractionFailureError,
    InvalidStatusTransition,
    InvariantViolation,
    KnowledgeCenterException,
    SearchBackendError,
    UnsupportedFormatError,
    ValidationError,
)


class TestKnowledgeCenterException:
    """Test suite for the base exception."""

    def test_str_without_details(self) -> None:
        assert str(KnowledgeCenterException("boom")) == "boom"

    def test_str_with_details(self) -> None:
        error = KnowledgeCenterException("boom", {"key": "value"})

        assert str(error) == "boom | Details: {'key': 'value'}"


class TestHierarchy:
    """Test suite for subclass relationships and context."""

    def test_extraction_errors_are_processing_errors(self) -> None:
        assert issubclass(UnsupportedFormatError, DocumentProcessingError)
        assert issubclass(ExtractionFailureError, DocumentProcessingError)

    def test_dimension_mismatch_is_invariant_violation(self) -> None:
        error = EmbeddingDimensionMismatch(expected=1536, actual=768)

        assert isinstance(error, InvariantViolation)
        assert error.details == {"expected": 1536, "actual": 768}

    def test_invalid_transition_message(self) -> None:
        error = InvalidStatusTransition("UPLOADED", "VECTORIZED", "doc-1", reason="no content")

        assert error.message == "Cannot move document from UPLOADED to VECTORIZED: no content"
        assert error.details["document_id"] == "doc-1"

    def test_context_fields(self) -> None:
        assert ValidationError("bad", field="title").details == {"field": "title"}
        assert SearchBackendError("down", operation="scan").details == {"operation": "scan"}
        assert DocumentNotFoundError("abc").details == {"document_id": "abc"}
        assert UnsupportedFormatError("image/png").details == {"content_type": "image/png"}

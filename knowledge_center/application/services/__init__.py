"""Application services."""

from knowledge_center.application.services.document_service import DocumentService

__all__ = ["DocumentService"]

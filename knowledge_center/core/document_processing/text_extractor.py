"""
Text extraction using LangChain document loaders.

Turns an uploaded payload into plain text. PDF pages go through
PyPDFLoader, DOCX files through Docx2txtLoader, and plain text is decoded
as UTF-8. Legacy binary Word files (.doc) are not OOXML archives, which
Docx2txtLoader requires, so they are reported as unsupported. Loaders
read from a temporary directory that is removed whether extraction
succeeds or fails.

Dependencies: langchain_community.document_loaders, pypdf, docx2txt
System role: First stage of document ingestion pipeline
"""

import asyncio
import logging
import shutil
import tempfile
from pathlib import Path, PurePosixPath

from langchain_community.document_loaders import Docx2txtLoader, PyPDFLoader

from knowledge_center.core.exceptions import ExtractionFailureError, UnsupportedFormatError

logger = logging.getLogger(__name__)

PDF_TYPES = frozenset({"application/pdf"})
WORD_TYPES = frozenset(
    {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"}
)
LEGACY_WORD_TYPE = "application/msword"
TEXT_TYPES = frozenset({"text/plain", "text/markdown", "text/x-markdown"})

# Used when the declared type is missing or generic
EXTENSION_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
    ".md": "text/markdown",
}


def resolve_content_type(content_type: str | None, filename: str | None = None) -> str:
    """
    Normalize the declared content type, guessing from the extension when generic.

    Args:
        content_type: Declared MIME type (parameters such as charset are dropped)
        filename: Original filename

    Returns:
        str: Lower-case MIME type
    """
    declared = (content_type or "").split(";")[0].strip().lower()
    if declared and declared != "application/octet-stream":
        return declared
    if filename:
        guessed = EXTENSION_TYPES.get(PurePosixPath(filename).suffix.lower())
        if guessed:
            return guessed
    return declared or "application/octet-stream"


class TextExtractor:
    """Extract plain text from PDF, Word and text payloads."""

    def supports(self, content_type: str) -> bool:
        """Return True when the content type has an extractor."""
        return content_type in PDF_TYPES | WORD_TYPES | TEXT_TYPES

    async def extract(
        self,
        payload: bytes,
        content_type: str | None,
        filename: str | None = None,
    ) -> str:
        """
        Extract text off the event loop.

        Args:
            payload: File bytes
            content_type: Declared MIME type
            filename: Original filename, used for the extension

        Returns:
            str: Extracted text (may be empty; callers decide)

        Raises:
            UnsupportedFormatError: No extractor for the content type
            ExtractionFailureError: The loader failed on the payload
        """
        return await asyncio.to_thread(self.extract_sync, payload, content_type, filename)

    def extract_sync(
        self,
        payload: bytes,
        content_type: str | None,
        filename: str | None = None,
    ) -> str:
        """Blocking variant of extract."""
        resolved = resolve_content_type(content_type, filename)

        if resolved in TEXT_TYPES:
            return self._decode_text(payload)
        if resolved in PDF_TYPES:
            return self._load_with(PyPDFLoader, payload, ".pdf")
        if resolved in WORD_TYPES:
            return self._load_with(Docx2txtLoader, payload, ".docx")
        if resolved == LEGACY_WORD_TYPE:
            raise UnsupportedFormatError(
                resolved, details={"reason": "legacy .doc files must be converted to .docx"}
            )

        raise UnsupportedFormatError(resolved)

    @staticmethod
    def _decode_text(payload: bytes) -> str:
        try:
            return payload.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ExtractionFailureError(f"Text file is not valid UTF-8: {e}") from e

    @staticmethod
    def _load_with(loader_cls, payload: bytes, suffix: str) -> str:
        temp_dir = tempfile.mkdtemp(prefix="kc_extract_")
        try:
            path = Path(temp_dir) / f"source{suffix}"
            path.write_bytes(payload)

            documents = loader_cls(str(path)).load()
            text = "\n\n".join(doc.page_content for doc in documents if doc.page_content)

            logger.debug(
                f"{__name__}:_load_with - Extracted text",
                extra={"suffix": suffix, "pages": len(documents), "chars": len(text)},
            )
            return text
        except Exception as e:
            raise ExtractionFailureError(f"Failed to extract text: {e}") from e
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)

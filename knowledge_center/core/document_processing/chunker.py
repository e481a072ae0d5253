"""
Overlapping fixed-size text chunker.

Splits extracted text into windows of chunk_size characters that overlap
by chunk_overlap, shortening a window to the last paragraph break (or
failing that, the last sentence end) found past its midpoint. A safety
cap bounds the number of chunks per document.

Dependencies: knowledge_center.models
System role: Second stage of document ingestion pipeline
"""

import logging

from knowledge_center.models import ChunkingResult, TextChunk

logger = logging.getLogger(__name__)

PARAGRAPH_BREAK = "\n\n"
SENTENCE_END = ". "


class TextChunker:
    """Split text into overlapping windows that prefer natural breaks."""

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        max_chunks: int = 50,
    ) -> None:
        """
        Initialize chunker.

        Args:
            chunk_size: Window size in characters
            chunk_overlap: Characters shared by consecutive windows
            max_chunks: Maximum chunks produced for one text

        Raises:
            ValueError: When overlap is not smaller than chunk size
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError("chunk_overlap must be >= 0 and smaller than chunk_size")
        if max_chunks <= 0:
            raise ValueError("max_chunks must be positive")

        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        self._max_chunks = max_chunks
        # A shortened window must stay longer than the overlap or the start never moves
        self._min_cut = max(chunk_size // 2, chunk_overlap)

    def chunk(self, text: str) -> ChunkingResult:
        """
        Split text into chunks.

        Offsets are taken on the untrimmed text; chunk text is trimmed.
        Empty or whitespace-only text yields no chunks.

        Args:
            text: Full extracted text

        Returns:
            ChunkingResult: Chunks in order, and whether the cap truncated them
        """
        length = len(text)
        if not text.strip():
            return ChunkingResult(chunks=[], truncated=False, text_length=length)

        chunks: list[TextChunk] = []
        truncated = False
        start = 0

        while start < length:
            if len(chunks) >= self._max_chunks:
                truncated = True
                logger.warning(
                    f"{__name__}:chunk - Chunk cap reached, remaining text dropped",
                    extra={
                        "max_chunks": self._max_chunks,
                        "text_length": length,
                        "stopped_at": start,
                    },
                )
                break

            end = min(start + self._chunk_size, length)
            shortened = False
            if end < length:
                cut = self._natural_break(text[start:end])
                if cut is not None:
                    end = start + cut
                    shortened = True

            piece = text[start:end].strip()
            if piece:
                chunks.append(
                    TextChunk(index=len(chunks), text=piece, start_char=start, end_char=end)
                )

            window = end - start if shortened else self._chunk_size
            start += window - self._chunk_overlap

        return ChunkingResult(chunks=chunks, truncated=truncated, text_length=length)

    def _natural_break(self, window: str) -> int | None:
        """Window length ending at the preferred break past the midpoint, if any."""
        cut = window.rfind(PARAGRAPH_BREAK)
        if cut > self._min_cut:
            return cut

        cut = window.rfind(SENTENCE_END)
        if cut != -1 and cut + 1 > self._min_cut:
            return cut + 1

        return None

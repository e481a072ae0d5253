"""
Chunk domain models.

Represents the chunker's output before embedding.

Dependencies: pydantic
System role: Document chunk data structure
"""

from pydantic import BaseModel, Field


class TextChunk(BaseModel):
    """One window of document text with its character offsets."""

    index: int = Field(description="Zero-based sequence index from the chunker", ge=0)
    text: str = Field(description="Trimmed chunk text")
    start_char: int = Field(description="Inclusive start offset in the source text", ge=0)
    end_char: int = Field(description="Exclusive end offset in the source text", ge=0)

    @property
    def metadata(self) -> dict:
        """Offsets as stored alongside the chunk row."""
        return {"start_char": self.start_char, "end_char": self.end_char}


class ChunkingResult(BaseModel):
    """Chunker output."""

    chunks: list[TextChunk] = Field(default_factory=list)
    truncated: bool = Field(
        default=False,
        description="True when the chunk cap stopped chunking before the end of the text",
    )
    text_length: int = Field(default=0, description="Length of the chunked text")

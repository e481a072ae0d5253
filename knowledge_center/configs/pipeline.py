"""
Configuration settings for the document ingestion pipeline.

Dependencies: pydantic, pydantic_settings
System role: Centralized pipeline configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DocumentPipelineSettings(BaseSettings):
    """Settings for document ingestion pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="DOC_PIPELINE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking settings
    chunk_size: int = Field(
        default=1000,
        description="Maximum chunk size in characters",
        gt=0,
    )
    chunk_overlap: int = Field(
        default=200,
        description="Overlap between consecutive chunks",
        ge=0,
    )
    max_chunks: int = Field(
        default=50,
        description="Safety cap on chunks per document",
        gt=0,
    )
    preview_chars: int = Field(
        default=200,
        description="Characters of each chunk kept in the document preview index",
        gt=0,
    )

    # Upload validation
    allowed_extensions: list[str] = Field(
        default=["pdf", "doc", "docx", "txt", "md", "ppt", "pptx", "xls", "xlsx"],
        description="File extensions accepted on upload",
    )
    max_file_size: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum upload size in bytes",
        gt=0,
    )

    @model_validator(mode="after")
    def _check_overlap(self) -> "DocumentPipelineSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self

"""
Test suite for configuration settings.

System role: Verification of pydantic-settings configuration
"""

import pytest
from pydantic import ValidationError

from knowledge_center.configs import (
    DatabaseSettings,
    DocumentPipelineSettings,
    EmbeddingSettings,
    RetrievalSettings,
)


class TestDocumentPipelineSettings:
    """Test suite for pipeline settings."""

    def test_defaults(self) -> None:
        settings = DocumentPipelineSettings()

        assert settings.chunk_size == 1000
        assert settings.chunk_overlap == 200
        assert settings.max_chunks == 50
        assert "pdf" in settings.allowed_extensions

    def test_overlap_must_be_smaller_than_size(self) -> None:
        with pytest.raises(ValidationError):
            DocumentPipelineSettings(chunk_size=500, chunk_overlap=500)

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOC_PIPELINE_CHUNK_SIZE", "400")
        monkeypatch.setenv("DOC_PIPELINE_CHUNK_OVERLAP", "50")

        settings = DocumentPipelineSettings()

        assert settings.chunk_size == 400
        assert settings.chunk_overlap == 50


class TestEmbeddingSettings:
    """Test suite for embedding settings."""

    def test_max_input_chars(self) -> None:
        settings = EmbeddingSettings(max_input_tokens=2048, chars_per_token=4)

        assert settings.max_input_chars == 8192

    def test_dimension_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            EmbeddingSettings(dimension=0)


class TestRetrievalSettings:
    """Test suite for retrieval settings."""

    def test_threshold_on_cosine_scale(self) -> None:
        assert RetrievalSettings().similarity_threshold == 0.7

        with pytest.raises(ValidationError):
            RetrievalSettings(similarity_threshold=70)


class TestDatabaseSettings:
    """Test suite for database URL construction."""

    def test_builds_asyncpg_url(self) -> None:
        settings = DatabaseSettings(
            host="db", port=5433, user="kc", password="secret", db="kc", url=""
        )

        assert settings.async_database_url == "postgresql+asyncpg://kc:secret@db:5433/kc"

    def test_url_override_is_converted(self) -> None:
        settings = DatabaseSettings(url="postgres://kc:secret@db:5432/kc")

        assert settings.async_database_url == "postgresql+asyncpg://kc:secret@db:5432/kc"

    def test_require_ssl(self) -> None:
        settings = DatabaseSettings(sslmode="require", url="")

        assert settings.async_database_url.endswith("?ssl=require")

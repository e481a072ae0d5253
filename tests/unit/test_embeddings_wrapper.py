"""
Test suite for the embedding client factory.

System role: Verification of provider configuration
"""

from unittest.mock import patch

from knowledge_center.boundary.vdb import build_embeddings
from knowledge_center.configs import EmbeddingSettings

MODULE = "knowledge_center.boundary.vdb.embeddings_wrapper"


class TestBuildEmbeddings:
    """Test suite for build_embeddings."""

    def test_passes_model_dimension_and_key(self) -> None:
        settings = EmbeddingSettings(model="models/gemini-embedding-001", dimension=768, api_key="k")

        with patch(f"{MODULE}.FixedDimensionEmbeddings") as embeddings_cls:
            build_embeddings(settings)

        embeddings_cls.assert_called_once_with(
            model="models/gemini-embedding-001",
            output_dimensionality=768,
            google_api_key="k",
        )

    def test_omits_empty_key(self) -> None:
        settings = EmbeddingSettings(api_key="")

        with patch(f"{MODULE}.FixedDimensionEmbeddings") as embeddings_cls:
            build_embeddings(settings)

        assert "google_api_key" not in embeddings_cls.call_args.kwargs

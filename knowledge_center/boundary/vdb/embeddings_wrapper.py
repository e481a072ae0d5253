"""
Google Generative AI Embeddings wrapper with fixed output dimensionality.

Wraps GoogleGenerativeAIEmbeddings so every call, sync or async, requests
the configured dimension. Stored and query vectors must share it.

Dependencies: langchain_google_genai, langchain_core
System role: Embedding provider adapter
"""

import asyncio
import logging
from typing import List

from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings

from knowledge_center.configs import EmbeddingSettings

logger = logging.getLogger(__name__)


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """
    GoogleGenerativeAIEmbeddings wrapper with fixed output dimensionality.

    The base class ignores output_dimensionality in the constructor, so the
    dimension is re-applied on every embed call.
    """

    _output_dimensionality: int = 1536

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 1536,
        **kwargs,
    ) -> None:
        """
        Initialize embeddings with fixed output dimensionality.

        Args:
            model: Google embedding model ID
            output_dimensionality: Fixed dimension for all embeddings
            **kwargs: Additional arguments for GoogleGenerativeAIEmbeddings
        """
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - Initialized with model={model}, "
            f"output_dimensionality={output_dimensionality}"
        )

    def embed_documents(
        self,
        texts: List[str],
        *,
        batch_size: int = 100,
        task_type: str | None = None,
        titles: List[str] | None = None,
        output_dimensionality: int | None = None,
    ) -> List[List[float]]:
        """Embed documents with the configured dimension."""
        dim = output_dimensionality or self._output_dimensionality
        return super().embed_documents(
            texts,
            batch_size=batch_size,
            task_type=task_type,
            titles=titles,
            output_dimensionality=dim,
        )

    def embed_query(
        self,
        text: str,
        task_type: str | None = None,
        title: str | None = None,
        output_dimensionality: int | None = None,
    ) -> List[float]:
        """Embed a query with the configured dimension."""
        dim = output_dimensionality or self._output_dimensionality
        return super().embed_query(
            text,
            task_type=task_type,
            title=title,
            output_dimensionality=dim,
        )

    async def aembed_query(self, text: str, **kwargs) -> List[float]:
        """Run embed_query off the event loop so the dimension override applies."""
        return await asyncio.to_thread(self.embed_query, text)


def build_embeddings(settings: EmbeddingSettings) -> Embeddings:
    """
    Build the configured embedding client.

    Args:
        settings: Embedding settings

    Returns:
        Embeddings: LangChain embeddings client
    """
    kwargs = {}
    if settings.api_key:
        kwargs["google_api_key"] = settings.api_key
    return FixedDimensionEmbeddings(
        model=settings.model,
        output_dimensionality=settings.dimension,
        **kwargs,
    )

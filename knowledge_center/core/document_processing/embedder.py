"""
Embedder: text to fixed-dimension vector through a LangChain Embeddings client.

The provider client is built once by ensure_initialized(), guarded by an
asyncio lock so concurrent first calls share one construction. Every
vector returned is checked against the configured dimension.

Dependencies: langchain_core, tenacity
System role: Embedding stage of ingestion and query-time search
"""

import asyncio
import logging
from functools import partial
from typing import Callable

from langchain_core.embeddings import Embeddings
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from knowledge_center.boundary.vdb.embeddings_wrapper import build_embeddings
from knowledge_center.boundary.vdb.similarity import validate_dimension
from knowledge_center.configs import EmbeddingSettings
from knowledge_center.core.exceptions import EmbeddingProviderError, InvariantViolation

logger = logging.getLogger(__name__)


class Embedder:
    """Embed chunk and query text with one configured model."""

    def __init__(
        self,
        settings: EmbeddingSettings,
        embeddings_factory: Callable[[], Embeddings] | None = None,
    ) -> None:
        """
        Initialize embedder without contacting the provider.

        Args:
            settings: Embedding settings (model, dimension, budget, retries)
            embeddings_factory: Builds the LangChain client; defaults to the
                Google Generative AI client from settings
        """
        self._settings = settings
        self._factory = embeddings_factory or partial(build_embeddings, settings)
        self._embeddings: Embeddings | None = None
        self._init_lock = asyncio.Lock()

    @property
    def model_name(self) -> str:
        return self._settings.model

    @property
    def dimension(self) -> int:
        return self._settings.dimension

    @property
    def is_initialized(self) -> bool:
        return self._embeddings is not None

    async def ensure_initialized(self) -> Embeddings:
        """
        Build the provider client once.

        A failed build is not memoized; the next call tries again.

        Returns:
            Embeddings: Provider client

        Raises:
            EmbeddingProviderError: Client construction failed
        """
        if self._embeddings is not None:
            return self._embeddings

        async with self._init_lock:
            if self._embeddings is None:
                try:
                    self._embeddings = await asyncio.to_thread(self._factory)
                except Exception as e:
                    raise EmbeddingProviderError(
                        f"Failed to initialize embedding client: {e}",
                        {"model": self._settings.model},
                    ) from e
                logger.info(
                    f"{__name__}:ensure_initialized - Embedding client ready",
                    extra={"model": self._settings.model, "dimension": self._settings.dimension},
                )
        return self._embeddings

    def prepare_text(self, text: str) -> str:
        """Trim text and cut it to the provider's character budget."""
        text = text.strip()
        limit = self._settings.max_input_chars
        if len(text) > limit:
            logger.debug(
                f"{__name__}:prepare_text - Truncating input",
                extra={"chars": len(text), "limit": limit},
            )
            text = text[:limit]
        return text

    async def embed(self, text: str) -> list[float]:
        """
        Embed one text.

        Args:
            text: Chunk or query text

        Returns:
            list[float]: Vector of the configured dimension

        Raises:
            EmbeddingProviderError: Empty input, or the provider call failed
                after all retries
            EmbeddingDimensionMismatch: Provider returned a vector of the wrong length
        """
        embeddings = await self.ensure_initialized()
        prepared = self.prepare_text(text)
        if not prepared:
            raise EmbeddingProviderError("Cannot embed empty text")

        try:
            vector = await self._embed_with_retry(embeddings, prepared)
        except InvariantViolation:
            raise
        except Exception as e:
            raise EmbeddingProviderError(
                f"Embedding request failed: {e}",
                {"model": self._settings.model},
            ) from e

        vector = [float(value) for value in vector]
        validate_dimension(vector, self._settings.dimension)
        return vector

    async def _embed_with_retry(self, embeddings: Embeddings, text: str) -> list[float]:
        attempts = self._settings.max_retries
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(Exception),
            stop=stop_after_attempt(attempts),
            wait=wait_exponential_jitter(initial=0.5, max=8, jitter=1),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:embed - Retry {retry_state.attempt_number}/{attempts} "
                f"after provider error"
            ),
            reraise=True,
        ):
            with attempt:
                return await embeddings.aembed_query(text)
        raise EmbeddingProviderError("Embedding retries exhausted")

    async def aclose(self) -> None:
        """Drop the provider client; the next call rebuilds it."""
        async with self._init_lock:
            self._embeddings = None

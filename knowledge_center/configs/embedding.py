"""
Embedding provider configuration.

One embedding model is active at a time; its dimension is recorded here and
validated on every vector produced or compared.

Dependencies: pydantic, pydantic_settings
System role: Embedding model configuration for ingestion and retrieval
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingSettings(BaseSettings):
    """Remote embedding model configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    model: str = Field(
        default="models/gemini-embedding-001",
        description="Google Gemini embedding model ID",
    )
    dimension: int = Field(
        default=1536,
        description="Fixed embedding vector dimension for every stored and query vector",
        gt=0,
    )
    api_key: str = Field(
        default="",
        description="Google API key (falls back to GOOGLE_API_KEY when empty)",
    )
    max_input_tokens: int = Field(
        default=2048,
        description="Provider token budget per input; longer text is truncated",
        gt=0,
    )
    chars_per_token: int = Field(
        default=4,
        description="Characters-per-token heuristic used for truncation",
        gt=0,
    )
    request_delay_ms: int = Field(
        default=200,
        description="Pause between sequential chunk embedding calls",
        ge=0,
    )
    max_retries: int = Field(
        default=3,
        description="Attempts per embedding call before giving up",
        ge=1,
    )

    @property
    def max_input_chars(self) -> int:
        """Character budget derived from the token budget."""
        return self.max_input_tokens * self.chars_per_token

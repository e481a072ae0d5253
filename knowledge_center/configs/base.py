"""
Process-wide settings shared by every configuration group.

Values come from the environment or a local .env file. Concern-specific
groups (database, storage, embedding, pipeline, retrieval) live in their
own modules with their own prefixes.

Dependencies: pydantic, pydantic_settings
System role: Root of the settings hierarchy
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class BaseSettings(PydanticBaseSettings):
    """Deployment environment and logging level."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(
        default="development",
        description="Deployment name: development, staging or production",
    )
    debug: bool = Field(default=False, description="Verbose diagnostics")
    log_level: str = Field(default="INFO", description="Root log level name")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

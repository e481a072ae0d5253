"""
Relational store connection settings.

Read from POSTGRES_* variables. A full POSTGRES_URL wins over the split
host/port/user fields and is rewritten to the asyncpg driver when needed.

Dependencies: pydantic, pydantic_settings
System role: Engine configuration for documents and chunks
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_center.configs.base import BaseSettings

_ASYNC_SCHEME = "postgresql+asyncpg://"
_SYNC_SCHEMES = ("postgres://", "postgresql://")


class DatabaseSettings(BaseSettings):
    """Connection target and pool sizing for the async engine."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="localhost")
    port: int = Field(default=5432)
    user: str = Field(default="postgres")
    password: str = Field(default="postgres")
    db: str = Field(default="knowledge_center", description="Database name")

    pool_size: int = Field(default=10, gt=0)
    max_overflow: int = Field(default=20, ge=0)
    pool_timeout: int = Field(default=30, gt=0, description="Seconds to wait for a pooled connection")
    echo_sql: bool = Field(default=False)

    sslmode: str = Field(default="prefer", description="'require' adds ssl=require to the URL")
    url: str = Field(default="", description="Complete URL, used verbatim apart from the driver")

    @property
    def async_database_url(self) -> str:
        """SQLAlchemy URL for create_async_engine."""
        if self.url:
            for scheme in _SYNC_SCHEMES:
                if self.url.startswith(scheme):
                    return _ASYNC_SCHEME + self.url[len(scheme):]
            return self.url

        query = "?ssl=require" if self.sslmode == "require" else ""
        return f"{_ASYNC_SCHEME}{self.user}:{self.password}@{self.host}:{self.port}/{self.db}{query}"

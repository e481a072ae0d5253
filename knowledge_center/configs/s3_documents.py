"""
Object storage settings for uploaded document files.

Dependencies: pydantic, pydantic_settings
System role: Blob store configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class S3DocumentsSettings(BaseSettings):
    """Bucket, key layout and download link lifetime for stored documents."""

    model_config = SettingsConfigDict(
        env_prefix="S3_DOCUMENTS_",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(
        default="knowledge-center-dev-documents",
        description="Bucket holding the original uploaded files",
    )
    region: str = Field(default="us-east-1", description="Bucket region")
    prefix: str = Field(
        default="documents/",
        description="Key prefix; files are stored under <prefix><teacher>/<category>/",
    )
    presigned_url_expiry: int = Field(
        default=3600,
        description="Lifetime of download links in seconds",
        gt=0,
    )

"""
AWS boundary modules.

Exports: S3DocumentClient, BlobUploadResult
"""

from .s3_client import BlobUploadResult, S3DocumentClient

__all__ = ["BlobUploadResult", "S3DocumentClient"]

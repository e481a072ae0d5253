"""
S3 client for document bucket operations.

Stores uploaded documents under a per-teacher, per-category prefix and
fetches them back for (re)processing.

Dependencies: boto3
System role: Blob store for raw document files
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import PurePosixPath

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel

from knowledge_center.core.exceptions import BlobStoreError

logger = logging.getLogger(__name__)


class BlobUploadResult(BaseModel):
    """Result of storing a document in the bucket."""

    key: str
    url: str
    size: int
    content_type: str


class S3DocumentClient:
    """S3 client for document bucket operations."""

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        prefix: str = "documents/",
        presigned_url_expiry: int = 3600,
        client=None,
    ) -> None:
        """
        Initialize S3 client for document bucket.

        Args:
            bucket: S3 bucket name for document storage
            region: AWS region for S3 bucket
            prefix: Key prefix for all documents
            presigned_url_expiry: Default URL expiry in seconds
            client: Pre-built boto3 S3 client (created when None)
        """
        self._bucket = bucket
        self._region = region
        self._prefix = prefix
        self._expiry = presigned_url_expiry
        self._s3_client = client or boto3.client("s3", region_name=region)

    def build_key(self, owner_id: str, category: str | None, original_name: str) -> str:
        """
        Build the object key: <prefix><owner>/<category>/<uuid>.<ext>.

        Args:
            owner_id: Owning teacher
            category: Document category (defaults to "general")
            original_name: Uploaded filename, used for its extension

        Returns:
            str: Object key
        """
        extension = PurePosixPath(original_name).suffix.lower()
        return f"{self._prefix}{owner_id}/{category or 'general'}/{uuid.uuid4()}{extension}"

    def upload(
        self,
        data: bytes,
        owner_id: str,
        category: str | None,
        original_name: str,
        content_type: str = "application/octet-stream",
    ) -> BlobUploadResult:
        """
        Upload document bytes.

        Args:
            data: File payload
            owner_id: Owning teacher
            category: Document category
            original_name: Uploaded filename
            content_type: MIME type of the file

        Returns:
            BlobUploadResult: Key, presigned URL, size and content type

        Raises:
            BlobStoreError: When the upload fails
        """
        key = self.build_key(owner_id, category, original_name)
        try:
            self._s3_client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                Metadata={
                    "original-name": original_name.encode("ascii", "ignore").decode(),
                    "uploaded-at": datetime.now(timezone.utc).isoformat(),
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise BlobStoreError(f"Failed to upload document to S3: {e}", key) from e

        logger.info(
            f"{__name__}:upload - Stored document",
            extra={"s3_key": key, "size": len(data)},
        )
        url, _ = self.signed_url(key)
        return BlobUploadResult(key=key, url=url, size=len(data), content_type=content_type)

    def get_bytes(self, key: str) -> bytes:
        """
        Download an object's bytes.

        Args:
            key: S3 object key

        Returns:
            bytes: Object payload

        Raises:
            BlobStoreError: When the object is missing or the download fails
        """
        try:
            response = self._s3_client.get_object(Bucket=self._bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey"):
                raise BlobStoreError(f"File not found in S3: {key}", key) from e
            raise BlobStoreError(f"Failed to download from S3: {e}", key) from e
        except BotoCoreError as e:
            raise BlobStoreError(f"Failed to download from S3: {e}", key) from e

    def delete(self, key: str) -> None:
        """
        Delete an object.

        Args:
            key: S3 object key

        Raises:
            BlobStoreError: When the delete fails
        """
        try:
            self._s3_client.delete_object(Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise BlobStoreError(f"Failed to delete document from S3: {e}", key) from e

    def signed_url(self, key: str, expires_in: int | None = None) -> tuple[str, datetime]:
        """
        Generate presigned URL for downloading/viewing an S3 object.

        Args:
            key: S3 object key (path in bucket)
            expires_in: URL expiry in seconds (settings default when None)

        Returns:
            tuple[str, datetime]: (presigned_url, expires_at)

        Raises:
            BlobStoreError: If presigned URL generation fails
        """
        expires_in = expires_in or self._expiry
        try:
            presigned_url = self._s3_client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise BlobStoreError(f"Failed to generate download URL: {e}", key) from e
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        return presigned_url, expires_at

    def file_exists(self, key: str) -> bool:
        """
        Check if a file exists in S3.

        Args:
            key: S3 object key to check

        Returns:
            bool: True if file exists, False otherwise
        """
        try:
            self._s3_client.head_object(Bucket=self._bucket, Key=key)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey"):
                return False
            raise BlobStoreError(f"Failed to check object: {e}", key) from e

"""
Test suite for S3DocumentClient.

Uses a mocked boto3 client; no AWS calls are made.

System role: Verification of blob store adapter
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from knowledge_center.boundary.aws import S3DocumentClient
from knowledge_center.core.exceptions import BlobStoreError


def _client_error(code: str, operation: str = "GetObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestBuildKey:
    """Test suite for object key layout."""

    def test_key_layout(self, blob_store: S3DocumentClient) -> None:
        key = blob_store.build_key("teacher-1", "biology", "Cell Notes.PDF")

        assert key.startswith("documents/teacher-1/biology/")
        assert key.endswith(".pdf")

    def test_missing_category_defaults_to_general(self, blob_store: S3DocumentClient) -> None:
        key = blob_store.build_key("teacher-1", None, "notes.txt")

        assert key.startswith("documents/teacher-1/general/")

    def test_keys_are_unique(self, blob_store: S3DocumentClient) -> None:
        first = blob_store.build_key("t", "c", "a.txt")
        second = blob_store.build_key("t", "c", "a.txt")

        assert first != second


class TestUpload:
    """Test suite for upload."""

    def test_upload_stores_object_with_metadata(
        self, blob_store: S3DocumentClient, mock_s3_client: MagicMock
    ) -> None:
        # Act
        result = blob_store.upload(b"hello", "teacher-1", "biology", "notes.txt", "text/plain")

        # Assert
        assert mock_s3_client.objects[result.key] == b"hello"
        kwargs = mock_s3_client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "test-bucket"
        assert kwargs["ContentType"] == "text/plain"
        assert kwargs["Metadata"]["original-name"] == "notes.txt"
        assert result.size == 5
        assert result.url == "https://test-bucket.s3.amazonaws.com/signed"

    def test_upload_failure_is_wrapped(
        self, blob_store: S3DocumentClient, mock_s3_client: MagicMock
    ) -> None:
        mock_s3_client.put_object.side_effect = _client_error("AccessDenied", "PutObject")

        with pytest.raises(BlobStoreError):
            blob_store.upload(b"x", "teacher-1", None, "a.txt")


class TestGetBytes:
    """Test suite for download."""

    def test_returns_payload(self, blob_store: S3DocumentClient, mock_s3_client: MagicMock) -> None:
        mock_s3_client.objects["documents/k.txt"] = b"payload"

        assert blob_store.get_bytes("documents/k.txt") == b"payload"

    def test_missing_object(self, blob_store: S3DocumentClient) -> None:
        with pytest.raises(BlobStoreError) as exc_info:
            blob_store.get_bytes("documents/missing.txt")

        assert "not found" in exc_info.value.message
        assert exc_info.value.details["key"] == "documents/missing.txt"


class TestSignedUrlAndExists:
    """Test suite for presigned URLs and existence checks."""

    def test_signed_url_uses_default_expiry(
        self, blob_store: S3DocumentClient, mock_s3_client: MagicMock
    ) -> None:
        url, expires_at = blob_store.signed_url("documents/k.txt")

        assert url.startswith("https://")
        assert mock_s3_client.generate_presigned_url.call_args.kwargs["ExpiresIn"] == 3600
        assert expires_at.tzinfo is not None

    def test_file_exists(self, blob_store: S3DocumentClient, mock_s3_client: MagicMock) -> None:
        mock_s3_client.head_object.return_value = {}

        assert blob_store.file_exists("documents/k.txt") is True

    def test_file_missing(self, blob_store: S3DocumentClient, mock_s3_client: MagicMock) -> None:
        mock_s3_client.head_object.side_effect = _client_error("404", "HeadObject")

        assert blob_store.file_exists("documents/k.txt") is False

    def test_file_exists_other_error(
        self, blob_store: S3DocumentClient, mock_s3_client: MagicMock
    ) -> None:
        mock_s3_client.head_object.side_effect = _client_error("403", "HeadObject")

        with pytest.raises(BlobStoreError):
            blob_store.file_exists("documents/k.txt")

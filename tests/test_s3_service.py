"""Unit tests for S3 service"""

import re

import pytest
from unittest.mock import Mock, patch
from botocore.exceptions import ClientError, EndpointConnectionError

from atelier.services.s3_service import (
    S3Service,
    S3ConnectionError,
    InvalidFileTypeError,
    FileTooLargeError,
)


@pytest.fixture
def mock_s3_client():
    """Mock S3 client"""
    with patch("boto3.client") as mock_client:
        mock_instance = Mock()
        mock_client.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def mock_settings():
    with patch("atelier.services.s3_service.settings") as mock_settings:
        mock_settings.aws_region = "eu-west-1"
        mock_settings.s3_bucket = "test-bucket"
        mock_settings.aws_access_key_id = None
        mock_settings.aws_secret_access_key = None
        mock_settings.aws_endpoint_url = None
        mock_settings.max_upload_size_bytes = 10 * 1024 * 1024
        yield mock_settings


@pytest.fixture
def s3_service(mock_s3_client, mock_settings):
    """S3 service instance with mocked client"""
    return S3Service()


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestS3ServiceValidation:
    """Test file validation"""

    def test_validate_file_success(self, s3_service):
        s3_service.validate_file(5 * 1024 * 1024, "application/pdf")
        s3_service.validate_file(1, "image/png")

    def test_validate_file_too_large(self, s3_service):
        with pytest.raises(FileTooLargeError, match="exceeds maximum"):
            s3_service.validate_file(10 * 1024 * 1024 + 1, "application/pdf")

    def test_validate_empty_file(self, s3_service):
        with pytest.raises(FileTooLargeError, match="empty"):
            s3_service.validate_file(0, "application/pdf")

    @pytest.mark.parametrize("mime_type", ["application/x-msdownload", "text/html", "video/mp4"])
    def test_validate_file_invalid_mime_type(self, s3_service, mime_type):
        with pytest.raises(InvalidFileTypeError, match="not allowed"):
            s3_service.validate_file(1024, mime_type)


class TestS3KeyGeneration:
    """Test S3 key generation"""

    def test_generate_s3_key(self, s3_service):
        key = s3_service.generate_s3_key(42, "Design Brief.PDF")

        assert re.fullmatch(r"projects/42/\d{4}/\d{2}/\d{2}/[0-9a-f]{32}\.pdf", key)

    def test_key_without_extension(self, s3_service):
        key = s3_service.generate_s3_key(7, "README")

        assert re.fullmatch(r"projects/7/\d{4}/\d{2}/\d{2}/[0-9a-f]{32}", key)

    def test_keys_are_unique(self, s3_service):
        assert s3_service.generate_s3_key(1, "a.png") != s3_service.generate_s3_key(1, "a.png")


class TestUpload:
    """upload_bytes"""

    def test_upload_returns_public_url(self, s3_service, mock_s3_client):
        url = s3_service.upload_bytes(b"data", "projects/1/file.pdf", "application/pdf")

        assert url == "https://test-bucket.s3.eu-west-1.amazonaws.com/projects/1/file.pdf"
        mock_s3_client.put_object.assert_called_once_with(
            Bucket="test-bucket",
            Key="projects/1/file.pdf",
            Body=b"data",
            ContentType="application/pdf",
        )

    def test_content_type_guessed_from_key(self, s3_service, mock_s3_client):
        s3_service.upload_bytes(b"data", "projects/1/logo.png")

        assert mock_s3_client.put_object.call_args.kwargs["ContentType"] == "image/png"

    def test_local_endpoint_url(self, s3_service, mock_settings):
        mock_settings.aws_endpoint_url = "http://localhost:9000"

        url = s3_service.upload_bytes(b"data", "projects/1/file.pdf", "application/pdf")

        assert url == "http://localhost:9000/test-bucket/projects/1/file.pdf"

    def test_upload_error(self, s3_service, mock_s3_client):
        mock_s3_client.put_object.side_effect = client_error("AccessDenied", "PutObject")

        with pytest.raises(S3ConnectionError, match="AccessDenied"):
            s3_service.upload_bytes(b"data", "projects/1/file.pdf", "application/pdf")


class TestS3ObjectOperations:
    """Test deletion and bucket checks"""

    def test_delete_object_success(self, s3_service, mock_s3_client):
        assert s3_service.delete_object("projects/1/file.pdf") is True
        mock_s3_client.delete_object.assert_called_once_with(
            Bucket="test-bucket", Key="projects/1/file.pdf"
        )

    def test_delete_object_error(self, s3_service, mock_s3_client):
        mock_s3_client.delete_object.side_effect = client_error("InternalError", "DeleteObject")

        with pytest.raises(S3ConnectionError):
            s3_service.delete_object("projects/1/file.pdf")

    def test_check_bucket(self, s3_service, mock_s3_client):
        s3_service.check_bucket()

        mock_s3_client.head_bucket.assert_called_once_with(Bucket="test-bucket")

    def test_check_missing_bucket(self, s3_service, mock_s3_client):
        mock_s3_client.head_bucket.side_effect = client_error("404", "HeadBucket")

        with pytest.raises(S3ConnectionError, match="unavailable: 404"):
            s3_service.check_bucket()

    def test_check_unreachable_endpoint(self, s3_service, mock_s3_client):
        mock_s3_client.head_bucket.side_effect = EndpointConnectionError(
            endpoint_url="http://localhost:9000"
        )

        with pytest.raises(S3ConnectionError, match="unreachable"):
            s3_service.check_bucket()

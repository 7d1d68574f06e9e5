"""S3 service for storing project files"""

import logging
import mimetypes
from datetime import datetime
from typing import Optional
from uuid import uuid4
import boto3
from botocore.exceptions import ClientError, BotoCoreError
from botocore.config import Config

from atelier.config import settings

logger = logging.getLogger(__name__)


class S3ServiceError(Exception):
    """Base exception for S3 service errors"""
    pass


class S3ConnectionError(S3ServiceError):
    """S3 connection error"""
    pass


class InvalidFileTypeError(S3ServiceError):
    """Invalid file type error"""
    pass


class FileTooLargeError(S3ServiceError):
    """File too large error"""
    pass


class S3Service:
    """Service for S3 operations on project files"""

    ALLOWED_MIME_TYPES = {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/svg+xml",
        "application/pdf",
        "application/zip",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "text/plain",
        "text/csv",
    }

    def __init__(self):
        """Initialize S3 client with retry configuration"""
        retry_config = Config(
            retries={
                "max_attempts": 3,
                "mode": "standard",
            },
            connect_timeout=5,
            read_timeout=30,
        )

        client_kwargs = {
            "region_name": settings.aws_region,
            "config": retry_config,
        }

        # Add credentials if provided (not needed for IAM roles)
        if settings.aws_access_key_id and settings.aws_secret_access_key:
            client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
            client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key

        # Use custom endpoint for local development (MinIO)
        if settings.aws_endpoint_url:
            client_kwargs["endpoint_url"] = settings.aws_endpoint_url

        try:
            self.s3_client = boto3.client("s3", **client_kwargs)
            logger.info(f"S3 client initialized for bucket: {settings.s3_bucket}")
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Failed to initialize S3 client: {e}")
            raise S3ConnectionError(f"Failed to initialize S3 client: {e}")

    def validate_file(self, file_size: int, mime_type: str) -> None:
        """
        Validate file size and MIME type.

        Args:
            file_size: File size in bytes
            mime_type: MIME type of the file

        Raises:
            FileTooLargeError: If file is empty or exceeds maximum size
            InvalidFileTypeError: If MIME type is not allowed
        """
        max_size = settings.max_upload_size_bytes
        if file_size > max_size:
            raise FileTooLargeError(
                f"File size {file_size} bytes exceeds maximum of {max_size} bytes"
            )

        if file_size <= 0:
            raise FileTooLargeError("File is empty")

        if mime_type not in self.ALLOWED_MIME_TYPES:
            raise InvalidFileTypeError(
                f"File type {mime_type} is not allowed"
            )

    def generate_s3_key(self, project_id: int, file_name: str) -> str:
        """
        Generate S3 key following the structure:
        projects/{project_id}/{year}/{month}/{day}/{uuid}{extension}

        Args:
            project_id: Project id
            file_name: Original file name (used for the extension only)

        Returns:
            S3 key string
        """
        now = datetime.utcnow()
        extension = ""
        if "." in file_name:
            extension = "." + file_name.rsplit(".", 1)[1].lower()

        return f"projects/{project_id}/{now:%Y}/{now:%m}/{now:%d}/{uuid4().hex}{extension}"

    def object_url(self, s3_key: str) -> str:
        if settings.aws_endpoint_url:
            # For local development with MinIO
            return f"{settings.aws_endpoint_url}/{settings.s3_bucket}/{s3_key}"
        return f"https://{settings.s3_bucket}.s3.{settings.aws_region}.amazonaws.com/{s3_key}"

    def upload_bytes(
        self, file_bytes: bytes, s3_key: str, content_type: Optional[str] = None
    ) -> str:
        """
        Upload bytes to S3.

        Args:
            file_bytes: Bytes to upload
            s3_key: S3 key for the object
            content_type: Content type of the file (guessed from the key if omitted)

        Returns:
            S3 URL of uploaded object

        Raises:
            S3ConnectionError: If upload fails
        """
        if not content_type:
            content_type = mimetypes.guess_type(s3_key)[0] or "application/octet-stream"

        try:
            self.s3_client.put_object(
                Bucket=settings.s3_bucket,
                Key=s3_key,
                Body=file_bytes,
                ContentType=content_type,
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"Error uploading bytes: {error_code} - {e}")
            raise S3ConnectionError(f"Failed to upload file: {error_code}")
        except BotoCoreError as e:
            logger.error(f"Unexpected error uploading bytes: {e}")
            raise S3ConnectionError(f"Failed to upload file: {str(e)}")

        s3_url = self.object_url(s3_key)
        logger.info(f"Uploaded {len(file_bytes)} bytes to {s3_url}")
        return s3_url

    def delete_object(self, s3_key: str) -> bool:
        """
        Delete an object from S3.

        Args:
            s3_key: S3 key of the object to delete

        Returns:
            True if deletion was successful

        Raises:
            S3ConnectionError: If the object could not be deleted
        """
        try:
            self.s3_client.delete_object(Bucket=settings.s3_bucket, Key=s3_key)
            logger.info(f"Deleted object: {s3_key}")
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting object: {e}")
            raise S3ConnectionError(f"Failed to delete object: {e}")

    def check_bucket(self) -> None:
        """Raise S3ConnectionError unless the bucket is reachable"""
        try:
            self.s3_client.head_bucket(Bucket=settings.s3_bucket)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            raise S3ConnectionError(f"Bucket {settings.s3_bucket} unavailable: {error_code}")
        except BotoCoreError as e:
            raise S3ConnectionError(f"S3 unreachable: {e}")

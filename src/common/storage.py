"""Object storage for uploaded artifacts (event images, profile images, waivers).

Files never pass through this service: clients upload and download directly
against the bucket using short-lived presigned URLs.
"""

import secrets
import typing as t
from functools import lru_cache

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from django.utils import timezone
from django.utils.module_loading import import_string
from django.utils.text import get_valid_filename
from pydantic import BaseModel

logger = structlog.get_logger(__name__)


class StorageError(Exception):
    """Raised when the blob store cannot fulfil a request."""


class PresignedUpload(BaseModel):
    upload_url: str
    file_url: str
    key: str


class BlobStore(t.Protocol):
    """Protocol for blob store backends."""

    def presigned_upload(self, prefix: str, file_name: str, mime_type: str) -> PresignedUpload:
        """Issue a short-lived URL the client can PUT a single object to.

        Args:
            prefix: Folder the object is stored under (e.g. ``waivers/completed``).
            file_name: Original client-side file name.
            mime_type: Content type the client will upload with.

        Returns:
            The upload URL, the permanent object URL and the generated key.
        """
        ...

    def presigned_download(self, key: str, ttl_seconds: int) -> str:
        """Issue a short-lived GET URL for an existing object."""
        ...

    def delete(self, key: str) -> None:
        """Delete an object. Deleting a missing object is not an error."""
        ...

    def list(self, prefix: str) -> list[str]:
        """Return every key under the prefix."""
        ...


def build_object_key(prefix: str, file_name: str) -> str:
    """Generate a collision-free object key that keeps the original file name readable."""
    timestamp = int(timezone.now().timestamp() * 1000)
    safe_name = get_valid_filename(file_name) or "file"
    return f"{prefix.strip('/')}/{timestamp}-{secrets.token_hex(8)}-{safe_name}"


class S3BlobStore:
    """Blob store backed by an S3-compatible bucket."""

    def __init__(self, client: t.Any | None = None, bucket: str | None = None) -> None:
        """Create the store, building a boto3 client from settings when none is given."""
        self.bucket = bucket or settings.AWS_S3_BUCKET
        self.client = client or boto3.client(
            "s3",
            region_name=settings.AWS_REGION,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            endpoint_url=settings.AWS_S3_ENDPOINT_URL,
        )

    def _object_url(self, key: str) -> str:
        if settings.AWS_S3_ENDPOINT_URL:
            return f"{settings.AWS_S3_ENDPOINT_URL.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"

    def presigned_upload(self, prefix: str, file_name: str, mime_type: str) -> PresignedUpload:
        """Issue a presigned PUT URL for a freshly generated key under ``prefix``."""
        key = build_object_key(prefix, file_name)
        try:
            url = self.client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": mime_type},
                ExpiresIn=settings.PRESIGNED_UPLOAD_EXPIRES_IN,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("blob_presign_upload_failed", key=key, error=str(e))
            raise StorageError("Could not generate upload URL.") from e
        logger.info("blob_presigned_upload_issued", key=key, mime_type=mime_type)
        return PresignedUpload(upload_url=url, file_url=self._object_url(key), key=key)

    def presigned_download(self, key: str, ttl_seconds: int) -> str:
        """Issue a presigned GET URL."""
        try:
            return t.cast(
                str,
                self.client.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": self.bucket, "Key": key},
                    ExpiresIn=ttl_seconds,
                ),
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("blob_presign_download_failed", key=key, error=str(e))
            raise StorageError("Could not generate download URL.") from e

    def delete(self, key: str) -> None:
        """Delete an object."""
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error("blob_delete_failed", key=key, error=str(e))
            raise StorageError(f"Could not delete {key}.") from e

    def list(self, prefix: str) -> list[str]:
        """List keys under a prefix, following continuation pages."""
        keys: list[str] = []
        paginator = self.client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except (BotoCoreError, ClientError) as e:
            logger.error("blob_list_failed", prefix=prefix, error=str(e))
            raise StorageError(f"Could not list {prefix}.") from e
        return keys


@lru_cache(maxsize=1)
def get_blob_store() -> BlobStore:
    """Return the configured blob store backend (``settings.BLOB_STORE_BACKEND``)."""
    backend_class = import_string(settings.BLOB_STORE_BACKEND)
    return t.cast(BlobStore, backend_class())

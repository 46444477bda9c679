"""
Storage Service - object storage for images and manuscripts.

Two buckets on an S3-compatible store:
- article-images: public. Article images and avatars; callers get a public URL.
- manuscripts: private. Manuscript and supplementary files; callers get a
  time-limited signed URL, and only after the router has checked access.

Objects are addressed by opaque paths. Uploads overwrite an existing object
at the same path.
"""

import logging
import os
import time
import uuid
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from config.settings import settings
from exceptions import FileTooLargeError, StorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


def file_extension(filename: Optional[str], default: str = "bin") -> str:
    """Lower-case extension without the dot, e.g. 'Paper.PDF' -> 'pdf'."""
    if filename:
        ext = os.path.splitext(filename)[1].lstrip(".").lower()
        if ext:
            return ext
    return default


class StorageService:
    """Thin wrapper over a boto3 S3 client."""

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=settings.STORAGE_REGION,
                endpoint_url=settings.STORAGE_ENDPOINT_URL,
            )
        return self._client

    # ==================== Primitives ====================

    def upload(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Store bytes at bucket/path (overwriting). Returns the path."""
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self.client.put_object(Bucket=bucket, Key=path, Body=data, **extra)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Upload to {bucket}/{path} failed: {e}", exc_info=True)
            raise StorageError("Failed to upload file")
        logger.info(f"Uploaded {len(data)} bytes to {bucket}/{path}")
        return path

    def public_url(self, bucket: str, path: str) -> str:
        if settings.STORAGE_PUBLIC_BASE_URL:
            return f"{settings.STORAGE_PUBLIC_BASE_URL.rstrip('/')}/{bucket}/{path}"
        if settings.STORAGE_ENDPOINT_URL:
            return f"{settings.STORAGE_ENDPOINT_URL.rstrip('/')}/{bucket}/{path}"
        return f"https://{bucket}.s3.{settings.STORAGE_REGION}.amazonaws.com/{path}"

    def create_signed_url(self, bucket: str, path: str, expires_in: Optional[int] = None) -> str:
        expires_in = expires_in or settings.SIGNED_URL_EXPIRES_SECONDS
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket, "Key": path},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Signed URL for {bucket}/{path} failed: {e}", exc_info=True)
            raise StorageError("Failed to create signed URL")

    # ==================== Journal uploads ====================

    def _check_image(self, data: bytes, content_type: Optional[str]) -> None:
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError("Please upload an image file")
        if len(data) > settings.MAX_IMAGE_UPLOAD_BYTES:
            raise FileTooLargeError(settings.MAX_IMAGE_UPLOAD_BYTES)

    def upload_article_image(self, data: bytes, filename: Optional[str], content_type: Optional[str]) -> tuple[str, str]:
        """Random object name in the public bucket. Returns (path, public_url)."""
        self._check_image(data, content_type)
        path = f"{uuid.uuid4().hex}.{file_extension(filename, 'jpg')}"
        self.upload(settings.ARTICLE_IMAGES_BUCKET, path, data, content_type)
        return path, self.public_url(settings.ARTICLE_IMAGES_BUCKET, path)

    def upload_avatar(self, user_id: int, data: bytes, filename: Optional[str], content_type: Optional[str]) -> str:
        """One avatar per user at <user_id>/avatar.<ext>. Returns the public URL."""
        self._check_image(data, content_type)
        path = f"{user_id}/avatar.{file_extension(filename, 'jpg')}"
        self.upload(settings.ARTICLE_IMAGES_BUCKET, path, data, content_type)
        return self.public_url(settings.ARTICLE_IMAGES_BUCKET, path)

    def upload_submission_file(
        self,
        user_id: int,
        file_type: str,
        data: bytes,
        filename: Optional[str],
        content_type: Optional[str],
    ) -> str:
        """Private upload at <user_id>/<type>_<ms timestamp>.<ext>. Returns the path."""
        if not data:
            raise ValidationError("File is empty")
        path = f"{user_id}/{file_type}_{int(time.time() * 1000)}.{file_extension(filename)}"
        return self.upload(settings.MANUSCRIPTS_BUCKET, path, data, content_type)

    def manuscript_signed_url(self, path: str) -> str:
        return self.create_signed_url(settings.MANUSCRIPTS_BUCKET, path)


_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """FastAPI dependency returning the process-wide storage service."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service

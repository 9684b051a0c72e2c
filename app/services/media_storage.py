"""Object-storage gateway for task completion media.

Two backends are available, selected by ``MEDIA_STORAGE_BACKEND``:

- ``s3``: AWS S3 presigned PUT URLs through boto3
- ``supabase``: Supabase Storage signed upload URLs

Services depend only on :class:`MediaStorage`, so tests can substitute an
in-memory implementation.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import boto3
from botocore.config import Config as BotoConfig
from supabase import create_client, Client

from ..config import get_settings
from .errors import ServiceError

logger = logging.getLogger(__name__)


class MediaStorageError(ServiceError):
    """Object storage is unavailable or rejected the request"""

    pass


@dataclass
class PresignedUpload:
    upload_url: str
    file_url: str
    storage_key: str
    expires_in: int


class MediaStorage(ABC):
    @abstractmethod
    def create_upload_url(
        self, storage_key: str, content_type: str, expires_in: int
    ) -> PresignedUpload:
        """Issue a time-limited URL the client can write the object to"""

    @abstractmethod
    def delete_objects(self, storage_keys: List[str]) -> None:
        """Remove stored objects; missing keys are not an error"""


class S3MediaStorage(MediaStorage):
    def __init__(
        self,
        bucket: str,
        region: str,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        client=None,
    ):
        if not bucket:
            raise MediaStorageError("Missing S3 configuration: S3_BUCKET_NAME")

        self.bucket = bucket
        self.region = region
        self.client = client or boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=BotoConfig(signature_version="s3v4"),
        )

    def create_upload_url(
        self, storage_key: str, content_type: str, expires_in: int
    ) -> PresignedUpload:
        try:
            upload_url = self.client.generate_presigned_url(
                ClientMethod="put_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": storage_key,
                    "ContentType": content_type,
                },
                ExpiresIn=expires_in,
                HttpMethod="PUT",
            )
        except Exception as e:
            logger.error(f"S3 presign failed for {storage_key}: {e}")
            raise MediaStorageError("Failed to generate upload URL")

        return PresignedUpload(
            upload_url=upload_url,
            file_url=f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{storage_key}",
            storage_key=storage_key,
            expires_in=expires_in,
        )

    def delete_objects(self, storage_keys: List[str]) -> None:
        if not storage_keys:
            return
        try:
            self.client.delete_objects(
                Bucket=self.bucket,
                Delete={"Objects": [{"Key": key} for key in storage_keys]},
            )
        except Exception as e:
            raise MediaStorageError(f"Failed to delete objects: {e}")


class SupabaseMediaStorage(MediaStorage):
    """Supabase Storage backend. Signed upload URLs use the provider's fixed lifetime."""

    def __init__(self, client: Client, bucket: str):
        self.client = client
        self.bucket = bucket

    def create_upload_url(
        self, storage_key: str, content_type: str, expires_in: int
    ) -> PresignedUpload:
        bucket = self.client.storage.from_(self.bucket)
        try:
            response = bucket.create_signed_upload_url(storage_key)
            file_url = bucket.get_public_url(storage_key)
        except Exception as e:
            logger.error(f"Supabase signed upload failed for {storage_key}: {e}")
            raise MediaStorageError("Failed to generate upload URL")

        upload_url = response.get("signed_url") or response.get("signedUrl")
        return PresignedUpload(
            upload_url=upload_url,
            file_url=file_url,
            storage_key=storage_key,
            expires_in=expires_in,
        )

    def delete_objects(self, storage_keys: List[str]) -> None:
        if not storage_keys:
            return
        try:
            self.client.storage.from_(self.bucket).remove(storage_keys)
        except Exception as e:
            raise MediaStorageError(f"Failed to delete objects: {e}")


_media_storage: Optional[MediaStorage] = None
_media_storage_error: Optional[str] = None


def build_media_storage() -> MediaStorage:
    settings = get_settings()

    if settings.MEDIA_STORAGE_BACKEND == "supabase":
        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
            raise MediaStorageError(
                "Missing Supabase configuration: SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY"
            )
        client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
        return SupabaseMediaStorage(client, settings.SUPABASE_BUCKET)

    if settings.MEDIA_STORAGE_BACKEND == "s3":
        return S3MediaStorage(
            bucket=settings.S3_BUCKET_NAME,
            region=settings.AWS_REGION,
            access_key_id=settings.AWS_ACCESS_KEY_ID,
            secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        )

    raise MediaStorageError(
        f"Unknown MEDIA_STORAGE_BACKEND: {settings.MEDIA_STORAGE_BACKEND}"
    )


def get_media_storage() -> MediaStorage:
    """FastAPI dependency returning the configured storage backend"""
    global _media_storage
    if _media_storage is None:
        _media_storage = build_media_storage()
    return _media_storage


def get_optional_media_storage() -> Optional[MediaStorage]:
    """Like get_media_storage, but returns None when storage is not configured.

    A configuration failure is remembered, so it is logged once rather than on
    every request.
    """
    global _media_storage_error
    if _media_storage_error is not None:
        return None
    try:
        return get_media_storage()
    except MediaStorageError as e:
        _media_storage_error = str(e)
        logger.warning(f"Media storage unavailable: {e}")
        return None


def reset_media_storage():
    """Forget the cached backend (or failure) so settings are re-read"""
    global _media_storage, _media_storage_error
    _media_storage = None
    _media_storage_error = None


def remove_stored_media(storage: Optional[MediaStorage], storage_keys: List[str]):
    """Best-effort removal of objects whose database rows are already gone"""
    if not storage_keys:
        return
    if storage is None:
        logger.warning(
            f"Media storage not configured; {len(storage_keys)} object(s) left behind"
        )
        return
    try:
        storage.delete_objects(storage_keys)
    except MediaStorageError as e:
        logger.warning(f"Stored media cleanup failed: {e}")

"""Object-storage access for published images (S3-compatible, e.g. Cloudflare R2).

Public image URLs map back to bucket keys by stripping the configured public
base URL; whatever remains is the object key.
"""

from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from core.errors import StorageError
from infrastructure.settings import JsonSettings


class BucketStorage:
    """Delete objects from a bucket addressed by their public URLs."""

    def __init__(self, client: Any, bucket: str, public_url: str) -> None:
        """Create the storage wrapper.

        Args:
            client: boto3 S3 client (or any object with `delete_object`).
            bucket: Bucket name.
            public_url: Base URL the bucket is published under.
        """
        self._client = client
        self._bucket = bucket
        self._public_url = public_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: JsonSettings) -> BucketStorage | None:
        """Build a storage client from `storage.*` settings; None if unconfigured."""
        bucket = settings.get("storage.bucket")
        public_url = settings.get("storage.public_url")
        if not bucket or not public_url:
            logger.warning("Object storage not configured; photo deletion is disabled")
            return None

        endpoint = settings.get("storage.endpoint_url")
        account_id = settings.get("storage.account_id")
        if not endpoint and account_id:
            endpoint = f"https://{account_id}.r2.cloudflarestorage.com"
        client = boto3.client(
            "s3",
            endpoint_url=endpoint or None,
            aws_access_key_id=settings.get("storage.access_key_id"),
            aws_secret_access_key=settings.get("storage.secret_access_key"),
            region_name=settings.get("storage.region", "auto"),
        )
        return cls(client, bucket, public_url)

    def object_key_for(self, photo_url: str) -> str | None:
        """Return the bucket key behind `photo_url`, or None if it is not ours.

        E.g. `https://cdn.example.com/images/TPE-01/photo.webp` under base
        `https://cdn.example.com` gives `images/TPE-01/photo.webp`.
        """
        if not self._public_url or not photo_url.startswith(self._public_url):
            return None
        key = photo_url[len(self._public_url) :].lstrip("/")
        return key or None

    def delete_object(self, photo_url: str) -> str:
        """Delete the object behind `photo_url` and return its key."""
        key = self.object_key_for(photo_url)
        if key is None:
            raise StorageError(
                f"Could not extract object key from URL {photo_url}; "
                f"check storage.public_url (current: {self._public_url or 'not set'})"
            )
        logger.info("Deleting s3://{}/{}", self._bucket, key)
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as ex:
            logger.error("Bucket delete failed for {}: {}", key, ex)
            raise StorageError(f"Failed to delete object {key}: {ex}") from ex
        return key

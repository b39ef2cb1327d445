"""
Storage Service - Resume and event attachments in S3 (or any S3-compatible store)

Objects are written under generated keys ``{folder}/{epoch-millis}-{32 hex}.{ext}``
so concurrent uploads never collide, whatever the original file name.
Retrieval URLs are presigned on demand and never persisted.
"""

import asyncio
import os
import time
import uuid
from dataclasses import dataclass
from functools import partial
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from cmis_portal.core.config import settings
from cmis_portal.core.exceptions import StorageConfigurationError, UpstreamStorageError
from cmis_portal.core.logging_config import logger


@dataclass
class StoredObject:
    """Result of a successful upload"""
    key: str
    url: str


class StorageService:
    """
    Object Storage Gateway

    - store(): upload bytes under a fresh key, return key + long-lived presigned URL
    - delete(): remove an object (callers decide whether failure matters)
    - presign(): short-lived retrieval URL for a stored key
    - presign_or_fallback(): presign, or serve the last-known value when signing fails
    """

    def __init__(self, bucket_name: Optional[str] = None, client=None):
        self._client = client
        self._bucket_name = bucket_name if bucket_name is not None else settings.AWS_S3_BUCKET_NAME
        # Count of presign failures served from the fallback value (exposed by readiness)
        self.presign_fallback_count = 0
        logger.info(f"StorageService initialized with bucket: {self._bucket_name or '<unset>'}")

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    @property
    def is_configured(self) -> bool:
        return bool(self._bucket_name)

    def _require_bucket(self) -> str:
        if not self._bucket_name:
            logger.error("AWS_S3_BUCKET_NAME is not configured")
            raise StorageConfigurationError()
        return self._bucket_name

    def _get_client(self):
        """Lazy initialization of the S3 client"""
        if self._client is None:
            kwargs = {
                "region_name": settings.AWS_REGION,
                "config": Config(signature_version="s3v4"),
            }
            if settings.S3_ENDPOINT_URL:
                kwargs["endpoint_url"] = settings.S3_ENDPOINT_URL
                kwargs["config"] = Config(signature_version="s3v4", s3={"addressing_style": "path"})

            # Explicit credentials for local dev; otherwise the default chain (IAM role)
            if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
                kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
                kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
            else:
                logger.info("S3 client using default credential chain")

            self._client = boto3.client("s3", **kwargs)
        return self._client

    async def _run(self, func, *args, **kwargs):
        """boto3 is blocking; run it in the default executor"""
        return await asyncio.get_event_loop().run_in_executor(None, partial(func, *args, **kwargs))

    @staticmethod
    def generate_object_key(folder: str, original_name: Optional[str]) -> str:
        """{folder}/{epoch-millis}-{random 128-bit hex}.{original extension, default pdf}"""
        ext = os.path.splitext(original_name or "")[1].lstrip(".").lower() or "pdf"
        timestamp = int(time.time() * 1000)
        return f"{folder.strip('/')}/{timestamp}-{uuid.uuid4().hex}.{ext}"

    async def store(
        self,
        content: bytes,
        original_name: Optional[str],
        folder: Optional[str] = None,
        content_type: str = "application/pdf"
    ) -> StoredObject:
        """
        Upload bytes under a newly generated key.

        Returns:
            StoredObject with the key and a presigned URL valid for
            RESUME_UPLOAD_URL_EXPIRY seconds (for immediate display only)
        """
        bucket = self._require_bucket()
        key = self.generate_object_key(folder or settings.RESUME_FOLDER, original_name)
        client = self._get_client()

        try:
            await self._run(
                client.put_object,
                Bucket=bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
            url = await self._run(
                client.generate_presigned_url,
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=settings.RESUME_UPLOAD_URL_EXPIRY,
            )
        except (ClientError, BotoCoreError) as e:
            logger.log_storage_event("upload", key, success=False, reason=str(e))
            raise UpstreamStorageError(key=key) from e

        logger.log_storage_event("upload", key, size_bytes=len(content), content_type=content_type)
        return StoredObject(key=key, url=url)

    async def delete(self, key: str) -> None:
        """Delete an object. Raises UpstreamStorageError on failure."""
        bucket = self._require_bucket()
        client = self._get_client()
        try:
            await self._run(client.delete_object, Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.log_storage_event("delete", key, success=False, reason=str(e))
            raise UpstreamStorageError("Failed to delete stored object", key=key) from e
        logger.log_storage_event("delete", key)

    async def delete_quietly(self, key: Optional[str], context: str = "cleanup") -> bool:
        """Best-effort delete: failures are logged and swallowed"""
        if not key:
            return False
        try:
            await self.delete(key)
            return True
        except (UpstreamStorageError, StorageConfigurationError) as e:
            logger.warning(
                f"Best-effort delete failed ({context}): {key}: {e.message}",
                extra={"event_type": "storage_cleanup_failed", "storage_key": key, "cleanup_context": context}
            )
            return False

    async def presign(self, key: str, ttl: Optional[int] = None) -> str:
        """Presigned GET URL for a stored key (default PRESIGNED_URL_EXPIRY seconds)"""
        bucket = self._require_bucket()
        client = self._get_client()
        try:
            return await self._run(
                client.generate_presigned_url,
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=ttl or settings.PRESIGNED_URL_EXPIRY,
            )
        except (ClientError, BotoCoreError) as e:
            raise UpstreamStorageError("Failed to generate download URL", key=key) from e

    async def presign_or_fallback(
        self,
        key: Optional[str],
        fallback: Optional[str] = None,
        ttl: Optional[int] = None
    ) -> Optional[str]:
        """
        Presign ``key``; on any failure return ``fallback`` instead.

        A broken preview must never fail the surrounding request, but every
        fallback is logged and counted so credential problems stay visible.
        """
        if not key:
            return fallback
        try:
            return await self.presign(key, ttl)
        except Exception as e:
            self.presign_fallback_count += 1
            logger.log_storage_event(
                "presign_fallback",
                key,
                success=False,
                reason=str(e),
                fallback_count=self.presign_fallback_count,
            )
            return fallback


# Singleton instance
storage_service = StorageService()


def get_storage_service() -> StorageService:
    """FastAPI dependency (overridden in tests)"""
    return storage_service

"""
In-memory stand-in for the S3-backed StorageService.

Records every call so tests can assert that validation failures never reach
object storage.
"""
from typing import Dict, List, Optional, Tuple
from unittest.mock import MagicMock

from cmis_portal.core.config import settings
from cmis_portal.core.exceptions import UpstreamStorageError
from cmis_portal.services.storage_service import StorageService, StoredObject


class FakeStorageService(StorageService):
    """StorageService with the network calls replaced by a dict"""

    def __init__(self, bucket_name: str = "test-bucket"):
        super().__init__(bucket_name=bucket_name, client=MagicMock())
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self.calls: List[Tuple[str, str]] = []
        self.fail_store = False
        self.fail_delete = False
        self.fail_presign = False

    def _url(self, key: str, ttl: int) -> str:
        return f"https://{self.bucket_name}.s3.test/{key}?X-Amz-Expires={ttl}"

    async def store(
        self,
        content: bytes,
        original_name: Optional[str],
        folder: Optional[str] = None,
        content_type: str = "application/pdf"
    ) -> StoredObject:
        self._require_bucket()
        key = self.generate_object_key(folder or settings.RESUME_FOLDER, original_name)
        self.calls.append(("store", key))
        if self.fail_store:
            raise UpstreamStorageError(key=key)
        self.objects[key] = (content, content_type)
        return StoredObject(key=key, url=self._url(key, settings.RESUME_UPLOAD_URL_EXPIRY))

    async def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        if self.fail_delete:
            raise UpstreamStorageError("Failed to delete stored object", key=key)
        self.objects.pop(key, None)

    async def presign(self, key: str, ttl: Optional[int] = None) -> str:
        self.calls.append(("presign", key))
        if self.fail_presign:
            raise UpstreamStorageError("Failed to generate download URL", key=key)
        return self._url(key, ttl or settings.PRESIGNED_URL_EXPIRY)

    def calls_of(self, operation: str) -> List[str]:
        return [key for op, key in self.calls if op == operation]

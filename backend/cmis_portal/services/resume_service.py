"""
Resume attachment rules shared by registration, profile updates and the
standalone upload endpoint.
"""
from dataclasses import dataclass
from typing import Optional, Any, List

from cmis_portal.core.config import settings
from cmis_portal.core.exceptions import InvalidFileTypeError, FileTooLargeError
from cmis_portal.services.storage_service import StorageService, StoredObject


DEFAULT_CONTENT_TYPE = "application/pdf"


@dataclass
class ResumeUpload:
    """A resume file part read fully into memory"""
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


async def read_resume_part(part: Any) -> Optional[ResumeUpload]:
    """
    Read a multipart file part (starlette ``UploadFile``).

    Anything that is not a file, or an empty file, counts as "no resume".
    """
    if part is None or isinstance(part, str) or not hasattr(part, "read"):
        return None
    content = await part.read()
    if not content:
        return None
    return ResumeUpload(
        filename=part.filename or "resume.pdf",
        content_type=(part.content_type or DEFAULT_CONTENT_TYPE).split(";")[0].strip().lower(),
        content=content,
    )


def validate_resume(
    resume: ResumeUpload,
    allowed_types: Optional[List[str]] = None,
    max_size: Optional[int] = None
) -> None:
    """MIME allow-list and size ceiling. Raises before any storage call."""
    allowed = allowed_types if allowed_types is not None else settings.ALLOWED_RESUME_TYPES
    limit = max_size if max_size is not None else settings.MAX_RESUME_SIZE

    if resume.content_type not in allowed:
        raise InvalidFileTypeError(resume.content_type, allowed)
    if resume.size > limit:
        raise FileTooLargeError(resume.size, limit)


async def replace_resume(
    storage: StorageService,
    resume: ResumeUpload,
    previous_key: Optional[str] = None
) -> StoredObject:
    """
    Upload a validated resume, best-effort deleting the previous object first.

    A failed delete never blocks the new upload.
    """
    if previous_key:
        await storage.delete_quietly(previous_key, context="resume_replace")
    return await storage.store(
        resume.content,
        resume.filename,
        settings.RESUME_FOLDER,
        resume.content_type,
    )

"""
Student Service - profile reads, partial updates and resume management
"""

from typing import Optional, Dict, Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from cmis_portal.core.config import settings
from cmis_portal.core.exceptions import StudentNotFoundError, ValidationError
from cmis_portal.core.logging_config import logger
from cmis_portal.core.security import get_password_hash
from cmis_portal.models.student import Student
from cmis_portal.schemas.common import to_validation_error
from cmis_portal.schemas.student import StudentUpdate, StudentResponse
from cmis_portal.services.resume_service import ResumeUpload, validate_resume, replace_resume
from cmis_portal.services.storage_service import StorageService
from cmis_portal.services.student_store import StudentStore
from cmis_portal.utils.pagination import parse_pagination, build_pagination


DEFAULT_STUDENT_PAGE_SIZE = 50
MAX_STUDENT_PAGE_SIZE = 100


class StudentService:
    """Student profile operations"""

    def __init__(self, db: AsyncSession, storage: StorageService):
        self.db = db
        self.store = StudentStore(db)
        self.storage = storage

    async def _resume_url(self, student: Student) -> str:
        """Fresh one-hour URL; falls back to the stored path if signing fails"""
        url = await self.storage.presign_or_fallback(
            student.resume_path_key,
            fallback=student.resume_path,
            ttl=settings.PRESIGNED_URL_EXPIRY,
        )
        return url or ""

    async def serialize(self, student: Student, resume_url: Optional[str] = None) -> Dict[str, Any]:
        if resume_url is None:
            resume_url = await self._resume_url(student)
        return StudentResponse.from_student(student, resume_url).to_json()

    async def get_student(
        self,
        student_id: Optional[int] = None,
        email: Optional[str] = None,
        uin: Optional[str] = None
    ) -> Dict[str, Any]:
        """Single student by id, email (case-insensitive) or uin"""
        if student_id is not None:
            student = await self.store.get_by_id(student_id)
            lookup = student_id
        elif email:
            student = await self.store.get_by_email(email)
            lookup = email
        elif uin:
            student = await self.store.get_by_uin(uin)
            lookup = uin
        else:
            raise ValidationError("One of id, email or uin is required")

        if student is None:
            raise StudentNotFoundError(lookup)

        return {"success": True, "student": await self.serialize(student)}

    async def list_students(self, page: Any = None, limit: Any = None) -> Dict[str, Any]:
        """Newest first. Listing rows carry the stored path, not a fresh URL."""
        params = parse_pagination(
            page, limit,
            default_limit=DEFAULT_STUDENT_PAGE_SIZE,
            max_limit=MAX_STUDENT_PAGE_SIZE,
        )
        rows, total = await self.store.list_page(params)
        students = [
            StudentResponse.from_student(row, row.resume_path or "").to_json()
            for row in rows
        ]
        return {
            "success": True,
            "students": students,
            "pagination": build_pagination(params.page, params.limit, total),
        }

    async def update_student(
        self,
        student_id: int,
        payload: Dict[str, Any],
        resume: Optional[ResumeUpload] = None,
        actor: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Partial update shared by PUT and PATCH.

        Only keys present in ``payload`` change. Empty strings clear optional
        fields; required fields cannot be cleared. ``replaceResume=false``
        keeps the previous object instead of deleting it.
        """
        student = await self.store.get_by_id(student_id)
        if student is None:
            raise StudentNotFoundError(student_id)

        try:
            update = StudentUpdate.model_validate(payload)
        except PydanticValidationError as e:
            raise to_validation_error(e) from e

        fields = update.to_columns()

        # Friendly 409 before the unique constraints get a say
        await self.store.ensure_unique(
            uin=fields.get("uin"),
            email=fields.get("email"),
            exclude_id=student_id,
        )

        if update.password:
            fields["password"] = get_password_hash(update.password)

        if resume is not None:
            validate_resume(resume)

        if not fields and resume is None:
            raise ValidationError("No fields to update")

        stored = None
        if resume is not None:
            previous_key = student.resume_path_key if update.replace_resume else None
            stored = await replace_resume(self.storage, resume, previous_key)
            fields["resume_path"] = stored.key
            fields["resume_path_key"] = stored.key

        try:
            student = await self.store.dynamic_update(student_id, fields, actor=actor or student.email)
        except Exception:
            if stored is not None:
                await self.storage.delete_quietly(stored.key, context="update_rollback")
            raise

        logger.info(
            f"Student {student_id} updated",
            extra={"event_type": "student_update", "columns": sorted(fields), "actor": actor}
        )

        resume_url = stored.url if stored is not None else None
        return {
            "success": True,
            "message": "Student updated successfully",
            "student": await self.serialize(student, resume_url),
        }

    async def upload_resume(self, student: Student, resume: Optional[ResumeUpload]) -> Dict[str, Any]:
        """Attach or replace the student's resume"""
        if resume is None:
            raise ValidationError("No resume file provided", field="resume")
        validate_resume(resume)

        stored = await replace_resume(self.storage, resume, student.resume_path_key)
        try:
            student = await self.store.dynamic_update(
                student.student_id,
                {"resume_path": stored.key, "resume_path_key": stored.key},
                actor=student.email,
            )
        except Exception:
            await self.storage.delete_quietly(stored.key, context="upload_rollback")
            raise

        return {
            "success": True,
            "message": "Resume uploaded successfully",
            "resumeUrl": stored.url,
            "resumePathKey": stored.key,
            "student": await self.serialize(student, stored.url),
        }

    async def remove_resume(self, student: Student) -> Dict[str, Any]:
        """Detach the resume; the object delete is best-effort"""
        if not student.resume_path_key and not student.resume_path:
            raise ValidationError("No resume to delete", field="resume")

        old_key = student.resume_path_key
        student = await self.store.dynamic_update(
            student.student_id,
            {"resume_path": None, "resume_path_key": None},
            actor=student.email,
        )
        await self.storage.delete_quietly(old_key, context="resume_delete")

        return {
            "success": True,
            "message": "Resume deleted successfully",
            "student": await self.serialize(student, ""),
        }

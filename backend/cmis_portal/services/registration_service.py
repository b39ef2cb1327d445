"""
Registration Workflow

One endpoint handles both first-time and returning-but-incomplete students.
Each step is a hard gate; the first failure short-circuits the request.

    1. required fields + typed parsing
    2. lookup by email OR uin, branch on REGISTRATION_MODE
    3. resume validation (before any storage call)
    4. resume upload (old object best-effort deleted)
    5. list normalization
    6. password hashing (optional)
    7. insert / dynamic update with is_registered = true
    8. response shaping
    9. fire-and-forget automation notification

Modes:
    open            NO_RECORD -> insert -> REGISTERED; existing record is 409
    preprovisioned  UNREGISTERED_RECORD -> update -> REGISTERED; missing record is 404,
                    already registered record is 409
"""

from typing import Optional, Dict, Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cmis_portal.core.config import settings
from cmis_portal.core.exceptions import (
    ConflictError,
    InternalError,
    MissingFieldsError,
    NotFoundError,
)
from cmis_portal.core.logging_config import logger, set_student_id
from cmis_portal.core.security import get_password_hash
from cmis_portal.schemas.common import to_validation_error
from cmis_portal.schemas.student import (
    StudentRegistration,
    StudentResponse,
    missing_registration_fields,
)
from cmis_portal.services.resume_service import ResumeUpload, validate_resume, replace_resume
from cmis_portal.services.storage_service import StorageService
from cmis_portal.services.student_store import StudentStore
from cmis_portal.services.webhook_service import AutomationWebhookService, webhook_service


MODE_OPEN = "open"
MODE_PREPROVISIONED = "preprovisioned"


class RegistrationService:
    """Runs the registration workflow for one submission"""

    def __init__(
        self,
        db: AsyncSession,
        storage: StorageService,
        mode: Optional[str] = None,
        webhook: Optional[AutomationWebhookService] = None
    ):
        self.db = db
        self.store = StudentStore(db)
        self.storage = storage
        self.mode = mode or settings.REGISTRATION_MODE
        self.webhook = webhook or webhook_service

    def parse(self, form: Dict[str, Any]) -> StudentRegistration:
        """Step 1: presence check, then typed parsing"""
        missing = missing_registration_fields(form)
        if missing:
            raise MissingFieldsError(missing)
        try:
            return StudentRegistration.model_validate(form)
        except PydanticValidationError as e:
            raise to_validation_error(e) from e

    async def register(self, form: Dict[str, Any], resume: Optional[ResumeUpload] = None) -> Dict[str, Any]:
        data = self.parse(form)

        # Step 2: existence check
        existing = await self.store.find_by_email_or_uin(data.email, data.uin)
        if self.mode == MODE_PREPROVISIONED:
            if existing is None:
                logger.log_auth_event("register", False, data.email, reason="no provisioned record")
                raise NotFoundError(
                    "No student record found for this email or UIN. Please contact the administrator.",
                    code="STUDENT_NOT_PROVISIONED",
                )
            if existing.is_registered:
                logger.log_auth_event("register", False, data.email, reason="already registered")
                raise ConflictError("Student with this email or UIN is already registered")
            # Submitted keys may still collide with a different row
            await self.store.ensure_unique(uin=data.uin, email=data.email, exclude_id=existing.student_id)
        elif existing is not None:
            logger.log_auth_event("register", False, data.email, reason="duplicate email or uin")
            raise ConflictError("Student with this email or UIN already exists")

        # Step 3: validate before touching storage
        if resume is not None:
            validate_resume(resume)

        # Step 4: upload
        stored = None
        if resume is not None:
            previous_key = existing.resume_path_key if existing is not None else None
            stored = await replace_resume(self.storage, resume, previous_key)

        # Step 5: lists were normalized while parsing
        fields = data.to_columns()

        # Step 6
        if data.password:
            fields["password"] = get_password_hash(data.password)

        # Step 7
        fields["is_registered"] = True
        if stored is not None:
            fields["resume_path"] = stored.key
            fields["resume_path_key"] = stored.key

        try:
            if existing is None:
                student = await self.store.insert(fields, actor=data.email)
            else:
                student = await self.store.dynamic_update(existing.student_id, fields, actor=data.email)
        except SQLAlchemyError as e:
            if stored is not None:
                await self.storage.delete_quietly(stored.key, context="registration_rollback")
            logger.log_error_with_context(e, "registration persist")
            raise InternalError("An error occurred during registration. Please try again.") from e
        except Exception:
            if stored is not None:
                await self.storage.delete_quietly(stored.key, context="registration_rollback")
            raise

        set_student_id(str(student.student_id))

        # Step 8
        if stored is not None:
            resume_url = stored.url
        else:
            resume_url = await self.storage.presign_or_fallback(
                student.resume_path_key, fallback=student.resume_path
            )

        # Step 9
        self.webhook.schedule_registration_notice(student.student_id)

        logger.log_auth_event(
            "register", True, student.email,
            student_db_id=student.student_id, registration_mode=self.mode,
        )

        return {
            "success": True,
            "message": "Student registered successfully",
            "student": StudentResponse.from_student(student, resume_url).to_json(),
        }

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile
from typing import Optional, Dict, Any, Tuple
import json

from cmis_portal.core.database import get_db
from cmis_portal.core.exceptions import ValidationError
from cmis_portal.models.student import Student
from cmis_portal.modules.auth.dependencies import get_current_student, ensure_owner
from cmis_portal.services.registration_service import RegistrationService
from cmis_portal.services.resume_service import ResumeUpload, read_resume_part
from cmis_portal.services.storage_service import StorageService, get_storage_service
from cmis_portal.services.student_service import StudentService
from cmis_portal.services.webhook_service import AutomationWebhookService, get_webhook_service

router = APIRouter()

# Multipart parts that may carry the resume file
RESUME_PART_NAMES = ("resume", "file")


async def parse_multipart(request: Request) -> Tuple[Dict[str, Any], Optional[ResumeUpload]]:
    """Split a multipart form into text fields and the (optional) resume part"""
    form = await request.form()
    data: Dict[str, Any] = {}
    resume: Optional[ResumeUpload] = None

    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key in RESUME_PART_NAMES and resume is None:
                resume = await read_resume_part(value)
            continue
        data[key] = value

    return data, resume


async def parse_update_body(request: Request) -> Tuple[Dict[str, Any], Optional[ResumeUpload]]:
    """Multipart (with optional resume) or JSON"""
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" in content_type or "application/x-www-form-urlencoded" in content_type:
        return await parse_multipart(request)

    body = await request.body()
    if not body:
        return {}, None
    try:
        data = json.loads(body)
    except ValueError:
        raise ValidationError("Invalid JSON body")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data, None


def parse_student_id(raw: Any) -> int:
    try:
        student_id = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError("Invalid student ID", field="id")
    if student_id <= 0:
        raise ValidationError("Invalid student ID", field="id")
    return student_id


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_student(
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    webhook: AutomationWebhookService = Depends(get_webhook_service)
):
    """
    Register a student (multipart form).

    Required: name (or fullName), uin, email, degreeType, academicLevel, graduationYear.
    Optional: resume file part, plus profile fields.
    """
    data, resume = await parse_multipart(request)
    service = RegistrationService(db, storage, webhook=webhook)
    return await service.register(data, resume)


@router.get("")
async def get_students(
    id: Optional[str] = None,
    email: Optional[str] = None,
    uin: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service)
):
    """Single student by id/email/uin, or a paginated listing"""
    service = StudentService(db, storage)

    if id:
        return await service.get_student(student_id=parse_student_id(id))
    if email:
        return await service.get_student(email=email)
    if uin:
        return await service.get_student(uin=uin)

    return await service.list_students(page, limit)


@router.post("/resume/upload")
async def upload_resume(
    request: Request,
    current_student: Student = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service)
):
    """Attach or replace the signed-in student's resume"""
    _, resume = await parse_multipart(request)
    return await StudentService(db, storage).upload_resume(current_student, resume)


@router.delete("/resume/delete")
async def delete_resume(
    current_student: Student = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service)
):
    """Remove the signed-in student's resume"""
    return await StudentService(db, storage).remove_resume(current_student)


@router.get("/{student_id}")
async def get_student(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service)
):
    return await StudentService(db, storage).get_student(student_id=parse_student_id(student_id))


async def _update_student(
    request: Request,
    student_id: str,
    current_student: Student,
    db: AsyncSession,
    storage: StorageService
) -> Dict[str, Any]:
    target_id = parse_student_id(student_id)
    ensure_owner(current_student, target_id)
    payload, resume = await parse_update_body(request)
    return await StudentService(db, storage).update_student(
        target_id, payload, resume, actor=current_student.email
    )


@router.put("/{student_id}")
async def put_student(
    request: Request,
    student_id: str,
    current_student: Student = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service)
):
    """Partial update (same semantics as PATCH)"""
    return await _update_student(request, student_id, current_student, db, storage)


@router.patch("/{student_id}")
async def patch_student(
    request: Request,
    student_id: str,
    current_student: Student = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service)
):
    """Partial update"""
    return await _update_student(request, student_id, current_student, db, storage)

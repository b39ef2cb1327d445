from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cmis_portal.core.config import settings
from cmis_portal.core.database import get_db
from cmis_portal.core.exceptions import AccountNotSetUpError, AuthenticationError, ValidationError
from cmis_portal.core.logging_config import logger, set_student_id
from cmis_portal.core.security import verify_password, create_student_token
from cmis_portal.models.student import Student
from cmis_portal.modules.auth.dependencies import get_current_student
from cmis_portal.schemas.auth import LoginRequest, LoginResponse
from cmis_portal.services.storage_service import StorageService, get_storage_service
from cmis_portal.services.student_service import StudentService
from cmis_portal.services.student_store import StudentStore

router = APIRouter()


@router.post("/login")
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service)
):
    """Email + password login. Returns the student profile and a session token."""
    client_ip = request.client.host if request.client else "unknown"

    email = (credentials.email or "").strip()
    if not email or not credentials.password:
        raise ValidationError("Email and password are required")

    student = await StudentStore(db).get_by_email(email)

    if student is None:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Unknown email",
            client_ip=client_ip
        )
        raise AuthenticationError()

    if not student.password:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="No password hash on record",
            client_ip=client_ip
        )
        raise AccountNotSetUpError()

    if not verify_password(credentials.password, student.password):
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Invalid credentials",
            client_ip=client_ip
        )
        raise AuthenticationError()

    set_student_id(str(student.student_id))

    access_token = create_student_token(student.student_id, student.email)

    logger.log_auth_event(
        event="login",
        success=True,
        user_email=student.email,
        client_ip=client_ip
    )

    profile = await StudentService(db, storage).serialize(student)
    response = LoginResponse(
        student=profile,
        access_token=access_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return response.model_dump(by_alias=True)


@router.get("/me")
async def get_current_student_info(
    current_student: Student = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service)
):
    """Student behind the session token, re-read from the store"""
    return {
        "success": True,
        "student": await StudentService(db, storage).serialize(current_student),
    }

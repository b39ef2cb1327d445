from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from cmis_portal.core.database import get_db
from cmis_portal.core.exceptions import AuthorizationError, InvalidTokenError
from cmis_portal.core.logging_config import set_student_id
from cmis_portal.core.security import security, decode_token
from cmis_portal.models.student import Student
from cmis_portal.services.student_store import StudentStore


async def get_current_student(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Student:
    """Resolve the bearer token to a student freshly loaded from the store"""

    if credentials is None or not credentials.credentials:
        raise InvalidTokenError("Not authenticated")

    payload = decode_token(credentials.credentials)

    subject = payload.get("sub")
    try:
        student_id = int(subject)
    except (TypeError, ValueError):
        raise InvalidTokenError("Invalid token payload")

    student = await StudentStore(db).get_by_id(student_id)
    if student is None:
        raise InvalidTokenError("Student not found")

    set_student_id(str(student.student_id))
    return student


def ensure_owner(current_student: Student, student_id: int) -> None:
    """A student may only modify their own record"""
    if current_student.student_id != student_id:
        raise AuthorizationError("You can only modify your own student record")

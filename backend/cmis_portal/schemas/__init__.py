# Pydantic schemas
from cmis_portal.schemas.student import (
    StudentRegistration,
    StudentUpdate,
    StudentResponse,
    REQUIRED_REGISTRATION_FIELDS,
    missing_registration_fields,
)
from cmis_portal.schemas.event import EventResponse
from cmis_portal.schemas.auth import LoginRequest, LoginResponse
from cmis_portal.schemas.common import to_validation_error

__all__ = [
    "StudentRegistration",
    "StudentUpdate",
    "StudentResponse",
    "REQUIRED_REGISTRATION_FIELDS",
    "missing_registration_fields",
    "EventResponse",
    "LoginRequest",
    "LoginResponse",
    "to_validation_error",
]

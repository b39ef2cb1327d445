"""
Custom Exceptions for the CMIS Student Portal
=============================================

Every error the API returns on purpose is one of these. Each carries the HTTP
status it maps to, so the exception handlers in ``main`` stay generic.

Usage:
    from cmis_portal.core.exceptions import ConflictError, StudentNotFoundError

    if existing:
        raise ConflictError("Student with this email or UIN already exists")

    if not student:
        raise StudentNotFoundError(student_id)
"""

from typing import Optional, Any, Dict


class PortalError(Exception):
    """Base exception for all portal errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self, include_details: bool = False) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if include_details and self.details:
            body["details"] = self.details
        return body


# ============================================
# Validation Errors (400)
# ============================================

class ValidationError(PortalError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)
        self.field = field


class MissingFieldsError(ValidationError):
    """One or more required fields were not supplied"""

    def __init__(self, fields: list):
        super().__init__(f"Missing required fields: {', '.join(fields)}")
        self.code = "MISSING_FIELDS"
        self.details = {"fields": list(fields)}


class InvalidFileTypeError(ValidationError):
    """File type not allowed"""

    def __init__(self, file_type: str, allowed_types: list):
        super().__init__("Invalid file type. Only PDF and DOCX files are allowed.")
        self.code = "INVALID_FILE_TYPE"
        self.details = {"file_type": file_type, "allowed_types": allowed_types}


class FileTooLargeError(ValidationError):
    """Uploaded file exceeds the size ceiling"""

    def __init__(self, size_bytes: int, max_bytes: int):
        super().__init__(f"File size exceeds {max_bytes // (1024 * 1024)}MB limit.")
        self.code = "FILE_TOO_LARGE"
        self.details = {"size_bytes": size_bytes, "max_bytes": max_bytes}


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(PortalError):
    """Credentials or session token rejected"""

    status_code = 401

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code="AUTH_FAILED")


class AccountNotSetUpError(AuthenticationError):
    """Account exists but has no password hash yet"""

    def __init__(self):
        super().__init__("Account not properly set up. Please contact administrator.")
        self.code = "ACCOUNT_NOT_SET_UP"


class InvalidTokenError(AuthenticationError):
    """Session token is missing, expired or malformed"""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)
        self.code = "INVALID_TOKEN"


class AuthorizationError(PortalError):
    """Authenticated, but not allowed to touch this resource"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404)
# ============================================

class NotFoundError(PortalError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, message: str, code: str = "NOT_FOUND", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class StudentNotFoundError(NotFoundError):
    """Student not found"""

    def __init__(self, lookup: Any = None):
        super().__init__(
            "Student not found",
            code="STUDENT_NOT_FOUND",
            details={"lookup": str(lookup)} if lookup is not None else None
        )


class EventNotFoundError(NotFoundError):
    """Event not found"""

    def __init__(self, event_id: Any):
        super().__init__(
            "Event not found",
            code="EVENT_NOT_FOUND",
            details={"event_id": str(event_id)}
        )


# ============================================
# Conflict Errors (409)
# ============================================

class ConflictError(PortalError):
    """Uniqueness conflict (email or UIN already in use)"""

    status_code = 409

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            code="CONFLICT",
            details={"field": field} if field else None
        )
        self.field = field


# ============================================
# Storage Errors (500)
# ============================================

class UpstreamStorageError(PortalError):
    """Object storage operation failed"""

    status_code = 500

    def __init__(self, message: str = "Failed to upload resume. Please try again.", key: Optional[str] = None):
        super().__init__(message, code="STORAGE_ERROR")
        if key:
            self.details["s3_key"] = key


class StorageConfigurationError(PortalError):
    """Object storage is not configured (no bucket)"""

    status_code = 500

    def __init__(self, message: str = "AWS_S3_BUCKET_NAME is not configured"):
        super().__init__(message, code="STORAGE_NOT_CONFIGURED")


# ============================================
# Persistence Errors (500)
# ============================================

class PersistenceError(PortalError):
    """Database rejected a write for a reason not otherwise classified"""

    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None, diagnostic: Optional[str] = None):
        details: Dict[str, Any] = {}
        if field:
            details["field"] = field
        if diagnostic:
            details["diagnostic"] = diagnostic
        super().__init__(message, code="PERSISTENCE_ERROR", details=details)
        self.field = field


class InternalError(PortalError):
    """Anything unclassified"""

    status_code = 500

    def __init__(self, message: str = "An unexpected error occurred. Please try again."):
        super().__init__(message, code="INTERNAL_ERROR")


# ============================================
# Downstream Service Errors
# ============================================

class UpstreamServiceError(PortalError):
    """A downstream HTTP service rejected or failed the call"""

    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message, code="UPSTREAM_ERROR")
        if upstream_status is not None:
            self.details["upstream_status"] = upstream_status


class WebhookNotConfiguredError(PortalError):
    """Automation webhook URL missing"""

    status_code = 500

    def __init__(self):
        super().__init__(
            "Webhook service is not configured. Please contact administrator.",
            code="WEBHOOK_NOT_CONFIGURED"
        )


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: PortalError, include_details: bool = False) -> Dict[str, Any]:
    """Convert exception to API error response body"""
    return error.to_dict(include_details=include_details)

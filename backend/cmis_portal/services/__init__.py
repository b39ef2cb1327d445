from cmis_portal.services.storage_service import StorageService, StoredObject, storage_service, get_storage_service
from cmis_portal.services.webhook_service import AutomationWebhookService, webhook_service, get_webhook_service
from cmis_portal.services.student_store import StudentStore, WRITABLE_COLUMNS, translate_integrity_error
from cmis_portal.services.resume_service import ResumeUpload, read_resume_part, validate_resume, replace_resume
from cmis_portal.services.registration_service import RegistrationService
from cmis_portal.services.student_service import StudentService
from cmis_portal.services.event_service import EventService

__all__ = [
    # Object storage
    "StorageService",
    "StoredObject",
    "storage_service",
    "get_storage_service",
    # Automation webhook
    "AutomationWebhookService",
    "webhook_service",
    "get_webhook_service",
    # Students
    "StudentStore",
    "WRITABLE_COLUMNS",
    "translate_integrity_error",
    "ResumeUpload",
    "read_resume_part",
    "validate_resume",
    "replace_resume",
    "RegistrationService",
    "StudentService",
    # Events
    "EventService",
]

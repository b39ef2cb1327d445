# Authentication module

from cmis_portal.modules.auth.dependencies import get_current_student, ensure_owner

__all__ = [
    "get_current_student",
    "ensure_owner",
]

# Re-export all models for convenient imports
from cmis_portal.models.student import Student, DegreeType, AcademicLevel
from cmis_portal.models.event import Event

__all__ = [
    "Student",
    "DegreeType",
    "AcademicLevel",
    "Event",
]

from pydantic import (
    BaseModel, ConfigDict, EmailStr, Field, AliasChoices, field_validator, model_validator
)
from pydantic.alias_generators import to_camel
from typing import Optional, List, Any, Dict
from decimal import Decimal
from datetime import datetime

from cmis_portal.models.student import DegreeType, AcademicLevel, Student
from cmis_portal.utils.field_normalizer import normalize_string_list


# Form keys the registration endpoint requires, in the order they are reported
REQUIRED_REGISTRATION_FIELDS = (
    "name", "uin", "email", "degreeType", "academicLevel", "graduationYear"
)

# Optional text fields where an empty string means "no value"
_OPTIONAL_TEXT_KEYS = (
    "programOfStudy", "program_of_study",
    "profileSummary", "profile_summary",
    "linkedinUrl", "linkedin_url",
    "gpa", "password",
)

_TRUE_VALUES = {"true", "1", "yes", "on"}

# Update payload attribute -> students column
UPDATE_COLUMNS = {
    "name": "name",
    "uin": "uin",
    "email": "email",
    "degree_type": "degree_type",
    "academic_level": "academic_level",
    "graduation_year": "graduation_year",
    "program_of_study": "program_of_study",
    "gpa": "gpa",
    "linkedin_url": "linkedin_url",
    "profile_summary": "profile_summary",
    "domains_of_interest": "domain_interests",
    "target_industries": "target_industries",
    "skills": "skills",
    "needs_mentor": "need_mentorship",
}


def parse_bool(value: Any) -> bool:
    """Form booleans arrive as strings ("true"/"false")"""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    if isinstance(value, (int, float)):
        return value != 0
    return False


def missing_registration_fields(data: Dict[str, Any]) -> List[str]:
    """Required keys that are absent or blank. ``fullName`` stands in for ``name``."""
    missing = []
    for key in REQUIRED_REGISTRATION_FIELDS:
        value = data.get(key)
        if key == "name" and (value is None or str(value).strip() == ""):
            value = data.get("fullName")
        if value is None or str(value).strip() == "":
            missing.append(key)
    return missing


class _StudentFields(BaseModel):
    """Shared field handling for registration and update payloads"""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @model_validator(mode="before")
    @classmethod
    def blank_optionals_to_none(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            for key in _OPTIONAL_TEXT_KEYS:
                if isinstance(data.get(key), str) and not data[key].strip():
                    data[key] = None
        return data

    @field_validator(
        "domains_of_interest", "target_industries", "skills", mode="before", check_fields=False
    )
    @classmethod
    def normalize_lists(cls, v: Any) -> Any:
        if v is None:
            return v
        return normalize_string_list(v)

    @field_validator("needs_mentor", mode="before", check_fields=False)
    @classmethod
    def coerce_needs_mentor(cls, v: Any) -> Any:
        if v is None:
            return v
        return parse_bool(v)

    @field_validator("email", mode="after", check_fields=False)
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else v


class StudentRegistration(_StudentFields):
    """Registration form fields after the required-field check"""

    name: str = Field(..., min_length=1, validation_alias=AliasChoices("name", "fullName"))
    uin: str = Field(..., min_length=1, max_length=20)
    email: EmailStr
    degree_type: DegreeType = Field(..., validation_alias=AliasChoices("degreeType", "degree_type"))
    academic_level: AcademicLevel = Field(
        ..., validation_alias=AliasChoices("academicLevel", "academic_level")
    )
    graduation_year: int = Field(
        ..., ge=1900, le=2200, validation_alias=AliasChoices("graduationYear", "graduation_year")
    )
    program_of_study: Optional[str] = Field(
        None, validation_alias=AliasChoices("programOfStudy", "program_of_study")
    )
    gpa: Optional[Decimal] = Field(None, ge=0, le=4)
    linkedin_url: Optional[str] = Field(None, validation_alias=AliasChoices("linkedinUrl", "linkedin_url"))
    profile_summary: Optional[str] = Field(
        None, validation_alias=AliasChoices("profileSummary", "profile_summary")
    )
    domains_of_interest: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("domainsOfInterest", "domains_of_interest")
    )
    target_industries: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("targetIndustries", "target_industries")
    )
    skills: List[str] = Field(default_factory=list)
    needs_mentor: bool = Field(False, validation_alias=AliasChoices("needsMentor", "needs_mentor"))
    password: Optional[str] = None

    def to_columns(self) -> Dict[str, Any]:
        """Column values for the students table (password excluded)"""
        return {
            "name": self.name,
            "uin": self.uin,
            "email": self.email,
            "degree_type": self.degree_type.value,
            "academic_level": self.academic_level.value,
            "program_of_study": self.program_of_study,
            "graduation_year": self.graduation_year,
            "gpa": self.gpa,
            "linkedin_url": self.linkedin_url,
            "profile_summary": self.profile_summary,
            "domain_interests": self.domains_of_interest,
            "target_industries": self.target_industries,
            "skills": self.skills,
            "need_mentorship": self.needs_mentor,
        }


class StudentUpdate(_StudentFields):
    """
    Partial update. Only the keys present in the payload are applied
    (``model_fields_set``); ``None`` on an optional field clears it.
    """

    name: Optional[str] = Field(None, validation_alias=AliasChoices("name", "fullName"))
    uin: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    degree_type: Optional[DegreeType] = Field(None, validation_alias=AliasChoices("degreeType", "degree_type"))
    academic_level: Optional[AcademicLevel] = Field(
        None, validation_alias=AliasChoices("academicLevel", "academic_level")
    )
    graduation_year: Optional[int] = Field(
        None, ge=1900, le=2200, validation_alias=AliasChoices("graduationYear", "graduation_year")
    )
    program_of_study: Optional[str] = Field(
        None, validation_alias=AliasChoices("programOfStudy", "program_of_study")
    )
    gpa: Optional[Decimal] = Field(None, ge=0, le=4)
    linkedin_url: Optional[str] = Field(None, validation_alias=AliasChoices("linkedinUrl", "linkedin_url"))
    profile_summary: Optional[str] = Field(
        None, validation_alias=AliasChoices("profileSummary", "profile_summary")
    )
    domains_of_interest: Optional[List[str]] = Field(
        None, validation_alias=AliasChoices("domainsOfInterest", "domains_of_interest")
    )
    target_industries: Optional[List[str]] = Field(
        None, validation_alias=AliasChoices("targetIndustries", "target_industries")
    )
    skills: Optional[List[str]] = None
    needs_mentor: Optional[bool] = Field(None, validation_alias=AliasChoices("needsMentor", "needs_mentor"))
    password: Optional[str] = None
    replace_resume: bool = Field(True, validation_alias=AliasChoices("replaceResume", "replace_resume"))

    @field_validator("replace_resume", mode="before")
    @classmethod
    def coerce_replace_resume(cls, v: Any) -> bool:
        if v is None or v == "":
            return True
        return parse_bool(v)

    @model_validator(mode="after")
    def required_fields_not_cleared(self):
        """Required columns can change but never be cleared"""
        for field in ("name", "uin", "email", "degree_type", "academic_level", "graduation_year"):
            if field in self.model_fields_set and getattr(self, field) in (None, ""):
                raise ValueError(f"{field} cannot be empty")
        return self

    def to_columns(self) -> Dict[str, Any]:
        """Column values for the fields the caller actually sent (password excluded)"""
        columns: Dict[str, Any] = {}
        for attr, column in UPDATE_COLUMNS.items():
            if attr not in self.model_fields_set:
                continue
            value = getattr(self, attr)
            if attr in ("domains_of_interest", "target_industries", "skills") and value is None:
                value = []
            if attr == "needs_mentor" and value is None:
                value = False
            if isinstance(value, (DegreeType, AcademicLevel)):
                value = value.value
            columns[column] = value
        return columns


class StudentResponse(BaseModel):
    """Student as returned to the portal. Never carries the password hash."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    uin: str
    name: str
    email: str
    degree_type: Optional[str] = None
    academic_level: Optional[str] = None
    program_of_study: Optional[str] = None
    graduation_year: Optional[int] = None
    needs_mentor: bool = False
    domains_of_interest: List[str] = Field(default_factory=list)
    target_industries: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    resume_url: str = ""
    resume_path_key: str = ""
    profile_summary: str = ""
    linkedin_url: str = ""
    gpa: Optional[float] = None
    is_registered: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    @classmethod
    def from_student(cls, student: Student, resume_url: Optional[str] = None) -> "StudentResponse":
        return cls(
            id=student.student_id,
            uin=student.uin,
            name=student.name,
            email=student.email,
            degree_type=student.degree_type,
            academic_level=student.academic_level,
            program_of_study=student.program_of_study,
            graduation_year=student.graduation_year,
            needs_mentor=bool(student.need_mentorship),
            domains_of_interest=normalize_string_list(student.domain_interests),
            target_industries=normalize_string_list(student.target_industries),
            skills=normalize_string_list(student.skills),
            resume_url=resume_url or "",
            resume_path_key=student.resume_path_key or "",
            profile_summary=student.profile_summary or "",
            linkedin_url=student.linkedin_url or "",
            gpa=float(student.gpa) if student.gpa is not None else None,
            is_registered=bool(student.is_registered),
            created_at=student.created_at,
            updated_at=student.updated_at,
            created_by=student.created_by,
            updated_by=student.updated_by,
        )

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

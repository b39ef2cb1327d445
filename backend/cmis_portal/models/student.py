from sqlalchemy import (
    Column, String, Boolean, DateTime, Integer, Text, Numeric, CheckConstraint
)
from datetime import datetime
import enum

from cmis_portal.core.database import Base
from cmis_portal.core.types import StringArray


class DegreeType(str, enum.Enum):
    """Degree programs a student can be enrolled in"""
    BACHELORS = "Bachelors"
    MASTERS = "Masters"
    PHD = "PhD"


class AcademicLevel(str, enum.Enum):
    """Academic standing"""
    FRESHMAN = "Freshman"
    SOPHOMORE = "Sophomore"
    JUNIOR = "Junior"
    SENIOR = "Senior"
    GRADUATE = "Graduate"


def _in_list(column: str, values) -> str:
    quoted = ", ".join(f"'{v.value}'" for v in values)
    return f"{column} IN ({quoted})"


class Student(Base):
    """One row per student, created by self-registration or administrative provisioning"""
    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint(_in_list("degree_type", DegreeType), name="ck_students_degree_type"),
        CheckConstraint(_in_list("academic_level", AcademicLevel), name="ck_students_academic_level"),
        CheckConstraint("gpa IS NULL OR (gpa >= 0 AND gpa <= 4)", name="ck_students_gpa_range"),
    )

    student_id = Column(Integer, primary_key=True, autoincrement=True)
    uin = Column(String(20), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)  # stored lower-cased
    name = Column(String(255), nullable=False)

    # Profile
    degree_type = Column(String(20), nullable=False)
    academic_level = Column(String(20), nullable=False)
    program_of_study = Column(String(255), nullable=True)
    graduation_year = Column(Integer, nullable=False)
    gpa = Column(Numeric(3, 2), nullable=True)
    need_mentorship = Column(Boolean, default=False, nullable=False)
    profile_summary = Column(Text, nullable=True)
    linkedin_url = Column(String(500), nullable=True)

    # Interests
    domain_interests = Column(StringArray, nullable=True, default=list)
    target_industries = Column(StringArray, nullable=True, default=list)
    skills = Column(StringArray, nullable=True, default=list)

    # Resume attachment: object key path, never a presigned URL
    resume_path = Column(Text, nullable=True)
    resume_path_key = Column(String(500), nullable=True)

    # Credential (nullable for administratively provisioned rows)
    password = Column(String(255), nullable=True)
    is_registered = Column(Boolean, default=False, nullable=False)

    # Audit
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    created_by = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<Student {self.student_id} {self.email}>"

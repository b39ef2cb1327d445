"""
Student Record Store Access

All reads and writes against the ``students`` table. Statements are SQLAlchemy
constructs with bound parameters; column names for partial updates come from
the fixed ``WRITABLE_COLUMNS`` set, never from request input.
"""

import re
import time
from datetime import datetime
from typing import Optional, Dict, Any, Tuple, List

from sqlalchemy import select, update, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cmis_portal.core.exceptions import (
    ConflictError,
    PersistenceError,
    StudentNotFoundError,
    ValidationError,
)
from cmis_portal.core.logging_config import logger
from cmis_portal.models.student import Student
from cmis_portal.utils.pagination import PaginationParams


# Columns a caller may set through insert/dynamic_update
WRITABLE_COLUMNS = frozenset({
    "uin",
    "email",
    "name",
    "degree_type",
    "academic_level",
    "program_of_study",
    "graduation_year",
    "gpa",
    "need_mentorship",
    "domain_interests",
    "target_industries",
    "skills",
    "profile_summary",
    "linkedin_url",
    "resume_path",
    "resume_path_key",
    "password",
    "is_registered",
})

INSERT_REQUIRED_COLUMNS = (
    "name", "uin", "email", "degree_type", "academic_level", "graduation_year"
)

# Human-readable messages for the named CHECK constraints
_CHECK_CONSTRAINT_MESSAGES = {
    "ck_students_degree_type": ("degree_type", "Invalid degree type. Allowed: Bachelors, Masters, PhD."),
    "ck_students_academic_level": (
        "academic_level",
        "Invalid academic level. Allowed: Freshman, Sophomore, Junior, Senior, Graduate.",
    ),
    "ck_students_gpa_range": ("gpa", "GPA must be between 0.0 and 4.0."),
}

_NOT_NULL_PATTERN = re.compile(r"(?:NOT NULL constraint failed: students\.|null value in column \")(\w+)")


def normalize_email(email: Optional[str]) -> Optional[str]:
    return email.strip().lower() if isinstance(email, str) else email


def _constraint_name(exc: IntegrityError) -> Optional[str]:
    """asyncpg exposes the violated constraint on the wrapped driver error"""
    orig = getattr(exc, "orig", None)
    for candidate in (orig, getattr(orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return name
    return None


def translate_integrity_error(exc: IntegrityError) -> Exception:
    """
    Map a driver integrity error to the portal error taxonomy.

    Unique email/uin -> ConflictError; a known constraint -> PersistenceError
    naming the field. The raw driver text is kept as diagnostic detail only.
    """
    raw = str(getattr(exc, "orig", exc))
    constraint = _constraint_name(exc) or ""
    haystack = f"{constraint} {raw}".lower()

    if "unique" in haystack or "duplicate" in haystack:
        if "email" in haystack:
            return ConflictError("Email already exists for another student", field="email")
        if "uin" in haystack:
            return ConflictError("UIN already exists for another student", field="uin")
        return ConflictError("Student with this email or UIN already exists")

    for name, (field, message) in _CHECK_CONSTRAINT_MESSAGES.items():
        if name in haystack:
            return PersistenceError(message, field=field, diagnostic=raw)

    match = _NOT_NULL_PATTERN.search(raw)
    if match:
        column = match.group(1)
        return PersistenceError(f"Missing value for {column}", field=column, diagnostic=raw)

    return PersistenceError("Failed to save student record", diagnostic=raw)


class StudentStore:
    """Parameterized access to the students table"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ========== Reads ==========

    async def get_by_id(self, student_id: int) -> Optional[Student]:
        result = await self.db.execute(
            select(Student).where(Student.student_id == student_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[Student]:
        """Case-insensitive email lookup"""
        result = await self.db.execute(
            select(Student).where(func.lower(Student.email) == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def get_by_uin(self, uin: str) -> Optional[Student]:
        result = await self.db.execute(
            select(Student).where(Student.uin == uin.strip())
        )
        return result.scalar_one_or_none()

    async def find_by_email_or_uin(self, email: Optional[str], uin: Optional[str]) -> Optional[Student]:
        """Zero or one row matching either key (lowest id first if both keys hit different rows)"""
        conditions = []
        if email:
            conditions.append(func.lower(Student.email) == normalize_email(email))
        if uin:
            conditions.append(Student.uin == uin.strip())
        if not conditions:
            return None

        result = await self.db.execute(
            select(Student).where(or_(*conditions)).order_by(Student.student_id).limit(1)
        )
        return result.scalar_one_or_none()

    async def list_page(self, params: PaginationParams) -> Tuple[List[Student], int]:
        """Newest first"""
        start = time.perf_counter()
        total = (await self.db.execute(select(func.count(Student.student_id)))).scalar() or 0
        result = await self.db.execute(
            select(Student)
            .order_by(Student.student_id.desc())
            .offset(params.offset)
            .limit(params.limit)
        )
        rows = list(result.scalars().all())
        logger.log_db_query("SELECT", "students", (time.perf_counter() - start) * 1000, len(rows))
        return rows, total

    # ========== Uniqueness ==========

    async def ensure_unique(
        self,
        uin: Optional[str] = None,
        email: Optional[str] = None,
        exclude_id: Optional[int] = None
    ) -> None:
        """
        Raise ConflictError when another row already holds the uin or email.

        The unique constraints remain the final authority; this check only
        produces a friendlier message.
        """
        if uin:
            stmt = select(Student.student_id).where(Student.uin == uin.strip())
            if exclude_id is not None:
                stmt = stmt.where(Student.student_id != exclude_id)
            if (await self.db.execute(stmt.limit(1))).first():
                raise ConflictError("UIN already exists for another student", field="uin")

        if email:
            stmt = select(Student.student_id).where(func.lower(Student.email) == normalize_email(email))
            if exclude_id is not None:
                stmt = stmt.where(Student.student_id != exclude_id)
            if (await self.db.execute(stmt.limit(1))).first():
                raise ConflictError("Email already exists for another student", field="email")

    # ========== Writes ==========

    def _check_columns(self, fields: Dict[str, Any]) -> None:
        unknown = set(fields) - WRITABLE_COLUMNS
        if unknown:
            raise ValueError(f"Not writable student columns: {', '.join(sorted(unknown))}")

    async def insert(self, fields: Dict[str, Any], actor: Optional[str] = None) -> Student:
        """
        Insert a new student row.

        Required: name, uin, email, degree_type, academic_level, graduation_year.
        Everything else defaults to null / empty.
        """
        self._check_columns(fields)
        missing = [c for c in INSERT_REQUIRED_COLUMNS if fields.get(c) in (None, "")]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        values = dict(fields)
        values["email"] = normalize_email(values["email"])
        values["uin"] = str(values["uin"]).strip()
        now = datetime.utcnow()
        actor = actor or values["email"]

        student = Student(
            **values,
            created_at=now,
            updated_at=now,
            created_by=actor,
            updated_by=actor,
        )
        start = time.perf_counter()
        self.db.add(student)
        try:
            await self.db.flush()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Student insert rejected: {e.orig}")
            raise translate_integrity_error(e) from e

        await self.db.refresh(student)
        logger.log_db_query("INSERT", "students", (time.perf_counter() - start) * 1000, 1)
        return student

    async def dynamic_update(
        self,
        student_id: int,
        fields: Dict[str, Any],
        actor: Optional[str] = None
    ) -> Student:
        """
        Update only the supplied columns, always stamping updated_by/updated_at.

        Raises:
            StudentNotFoundError: no row with this id
            ValidationError: nothing left to update besides the audit stamp
        """
        self._check_columns(fields)

        student = await self.get_by_id(student_id)
        if student is None:
            raise StudentNotFoundError(student_id)

        if not fields:
            raise ValidationError("No fields to update")

        values = dict(fields)
        if "email" in values:
            values["email"] = normalize_email(values["email"])
        if "uin" in values and values["uin"] is not None:
            values["uin"] = str(values["uin"]).strip()
        values["updated_by"] = actor or student.email
        values["updated_at"] = datetime.utcnow()

        start = time.perf_counter()
        stmt = (
            update(Student)
            .where(Student.student_id == student_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                raise StudentNotFoundError(student_id)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Student update rejected: {e.orig}")
            raise translate_integrity_error(e) from e

        await self.db.refresh(student)
        logger.log_db_query(
            "UPDATE", "students", (time.perf_counter() - start) * 1000, 1,
            columns=sorted(fields),
        )
        return student

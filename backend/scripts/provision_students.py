#!/usr/bin/env python3
"""
Pre-provision student records from a CSV file.

Rows are created with is_registered = false and no password; students complete
them through the registration endpoint when REGISTRATION_MODE=preprovisioned.
Rows whose email or UIN already exists are skipped.

CSV columns (header row required):
    name, uin, email, degree_type, academic_level, graduation_year
    optional: program_of_study

Usage:
    python scripts/provision_students.py students.csv
    python scripts/provision_students.py students.csv --dry-run
"""

import asyncio
import csv
import sys
import argparse
from pathlib import Path
from typing import Dict, Any, List, Tuple

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


REQUIRED_COLUMNS = ("name", "uin", "email", "degree_type", "academic_level", "graduation_year")


def read_rows(csv_path: Path) -> Tuple[List[Dict[str, Any]], List[str]]:
    """Parse and validate the CSV. Returns (valid rows, error messages)."""
    from cmis_portal.models.student import DegreeType, AcademicLevel

    degree_types = {d.value for d in DegreeType}
    academic_levels = {a.value for a in AcademicLevel}

    rows: List[Dict[str, Any]] = []
    errors: List[str] = []

    with csv_path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        for line_no, raw in enumerate(reader, start=2):
            record = {k.strip(): (v or "").strip() for k, v in raw.items() if k}
            missing = [c for c in REQUIRED_COLUMNS if not record.get(c)]
            if missing:
                errors.append(f"line {line_no}: missing {', '.join(missing)}")
                continue
            if record["degree_type"] not in degree_types:
                errors.append(f"line {line_no}: invalid degree_type {record['degree_type']!r}")
                continue
            if record["academic_level"] not in academic_levels:
                errors.append(f"line {line_no}: invalid academic_level {record['academic_level']!r}")
                continue
            try:
                graduation_year = int(record["graduation_year"])
            except ValueError:
                errors.append(f"line {line_no}: graduation_year must be an integer")
                continue

            rows.append({
                "name": record["name"],
                "uin": record["uin"],
                "email": record["email"].lower(),
                "degree_type": record["degree_type"],
                "academic_level": record["academic_level"],
                "graduation_year": graduation_year,
                "program_of_study": record.get("program_of_study") or None,
                "is_registered": False,
            })

    return rows, errors


async def provision(rows: List[Dict[str, Any]], actor: str, dry_run: bool) -> Tuple[int, int]:
    """Insert rows that do not exist yet. Returns (created, skipped)."""
    from cmis_portal.core.database import AsyncSessionLocal, close_db
    from cmis_portal.core.exceptions import ConflictError, PersistenceError
    from cmis_portal.services.student_store import StudentStore

    created = skipped = 0
    try:
        async with AsyncSessionLocal() as session:
            store = StudentStore(session)
            for row in rows:
                if await store.find_by_email_or_uin(row["email"], row["uin"]):
                    print(f"[Provision] skip (exists): {row['email']} / {row['uin']}")
                    skipped += 1
                    continue
                if dry_run:
                    print(f"[Provision] would create: {row['email']}")
                    created += 1
                    continue
                try:
                    await store.insert(row, actor=actor)
                except (ConflictError, PersistenceError) as e:
                    print(f"[Provision] skip ({e.message}): {row['email']}")
                    skipped += 1
                    continue
                print(f"[Provision] created: {row['email']}")
                created += 1
    finally:
        await close_db()

    return created, skipped


def main():
    parser = argparse.ArgumentParser(description="Pre-provision CMIS student records from CSV")
    parser.add_argument("csv_file", type=Path, help="CSV file with student rows")
    parser.add_argument("--actor", default="admin", help="Recorded as created_by/updated_by")
    parser.add_argument("--dry-run", action="store_true", help="Validate and report without writing")
    args = parser.parse_args()

    if not args.csv_file.exists():
        print(f"[Provision] ERROR: {args.csv_file} not found")
        sys.exit(1)

    rows, errors = read_rows(args.csv_file)
    for err in errors:
        print(f"[Provision] invalid row, {err}")

    created, skipped = asyncio.run(provision(rows, args.actor, args.dry_run))

    print("=" * 50)
    print(f"  Created: {created}  Skipped: {skipped}  Invalid: {len(errors)}")
    print("=" * 50)


if __name__ == "__main__":
    main()

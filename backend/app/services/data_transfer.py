"""CSV import of student rosters and CSV export of students and interactions."""

import csv
import io
import re
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.exceptions import CSVFormatError
from backend.app.core.logging_config import get_logger
from backend.app.models.interaction import Interaction
from backend.app.models.student import Student

logger = get_logger(__name__)

STUDENT_ID_HEADERS = {"studentnumber", "studentid", "id"}
FIRST_NAME_HEADERS = {"firstname"}
LAST_NAME_HEADERS = {"lastname"}
EMAIL_HEADERS = {"email", "emailaddress"}
COHORT_HEADERS = {"cohort"}

STUDENT_EXPORT_HEADER = ["Student ID", "First Name", "Last Name", "Email", "Cohort", "Program", "Created At"]
INTERACTION_EXPORT_HEADER = [
    "Interaction ID",
    "Student ID",
    "Student Name",
    "Program",
    "Type",
    "Reason",
    "Notes",
    "Date",
    "Time",
    "Staff Member",
    "Status",
    "Created At",
]
EXPORT_TYPES = ("students", "interactions", "all")
INTERACTION_EXPORT_LIMIT = 1000


def _normalize_header(value: str) -> str:
    return re.sub(r"\s+", "", value.strip().lower())


def _find_column(header: List[str], names: set) -> Optional[int]:
    for index, value in enumerate(header):
        if value in names:
            return index
    return None


def _parse_cohort(value: str) -> Optional[int]:
    value = (value or "").strip()
    return int(value) if value.isdigit() else None


def parse_student_csv(text: str) -> List[Dict]:
    """Rows with ``student_id``, ``first_name``, ``last_name``, ``email``, ``cohort``."""
    rows = [row for row in csv.reader(io.StringIO(text.strip())) if any(cell.strip() for cell in row)]
    if len(rows) < 2:
        raise CSVFormatError("CSV must contain at least a header row and one data row")

    header = [_normalize_header(value) for value in rows[0]]
    id_index = _find_column(header, STUDENT_ID_HEADERS)
    first_index = _find_column(header, FIRST_NAME_HEADERS)
    last_index = _find_column(header, LAST_NAME_HEADERS)
    email_index = _find_column(header, EMAIL_HEADERS)
    cohort_index = _find_column(header, COHORT_HEADERS)

    missing = [
        label
        for label, index in (
            ("Student Number", id_index),
            ("First Name", first_index),
            ("Last Name", last_index),
            ("Cohort", cohort_index),
        )
        if index is None
    ]
    if missing:
        raise CSVFormatError(f"Missing required columns: {', '.join(missing)}")

    students = []
    for values in rows[1:]:
        if len(values) < len(header):
            continue
        values = [value.strip() for value in values]
        student = {
            "student_id": values[id_index],
            "first_name": values[first_index],
            "last_name": values[last_index],
            "email": values[email_index] if email_index is not None and values[email_index] else None,
            "cohort": _parse_cohort(values[cohort_index]),
        }
        if student["student_id"] and student["first_name"] and student["last_name"]:
            students.append(student)
    return students


def import_students(db: Session, rows: Iterable[Dict]) -> Dict:
    rows = list(rows)
    details = {"total_processed": len(rows), "successful_imports": 0, "skipped": 0, "errors": []}

    for row in rows:
        label = f"{row['first_name']} {row['last_name']} (ID: {row['student_id']})"
        try:
            if db.query(Student).filter(Student.id == row["student_id"]).first():
                details["skipped"] += 1
                continue
            db.add(
                Student(
                    id=row["student_id"],
                    first_name=row["first_name"],
                    last_name=row["last_name"],
                    email=row["email"],
                    cohort=row["cohort"],
                )
            )
            db.commit()
            details["successful_imports"] += 1
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Failed to import %s: %s", label, exc)
            details["errors"].append(f"Failed to import {label}: {exc}")

    success = True
    if details["errors"]:
        success = len(details["errors"]) < details["total_processed"]
    return {
        "success": success,
        "message": f"Successfully imported {details['successful_imports']} out of {details['total_processed']} students",
        "details": details,
    }


def _write_csv(header: List[str], rows: Iterable[List[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def students_to_csv(students: Iterable[Student]) -> str:
    return _write_csv(
        STUDENT_EXPORT_HEADER,
        (
            [
                student.id,
                student.first_name,
                student.last_name,
                student.email or "",
                "" if student.cohort is None else str(student.cohort),
                student.program or "",
                student.created_at.date().isoformat() if student.created_at else "",
            ]
            for student in students
        ),
    )


def interactions_to_csv(interactions: Iterable[Interaction]) -> str:
    return _write_csv(
        INTERACTION_EXPORT_HEADER,
        (
            [
                str(interaction.id),
                interaction.student_id,
                interaction.student_name,
                interaction.program,
                interaction.type,
                interaction.reason,
                interaction.notes or "",
                interaction.date,
                interaction.time,
                interaction.staff_member,
                interaction.status,
                interaction.created_at.date().isoformat() if interaction.created_at else "",
            ]
            for interaction in interactions
        ),
    )


def export_csv(db: Session, export_type: str) -> tuple[str, str]:
    """Return (csv_text, filename prefix). Raises ValueError for unknown types."""
    if export_type in ("students", "all"):
        students = db.query(Student).order_by(Student.created_at.desc()).all()
        return students_to_csv(students), "students-export" if export_type == "students" else "complete-export"
    if export_type == "interactions":
        interactions = (
            db.query(Interaction)
            .order_by(Interaction.created_at.desc())
            .limit(INTERACTION_EXPORT_LIMIT)
            .all()
        )
        return interactions_to_csv(interactions), "interactions-export"
    raise ValueError(f"Invalid export type: {export_type}")

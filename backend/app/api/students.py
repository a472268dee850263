"""Student endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.dependencies.formula import get_formula_loader
from backend.app.models.student import Student
from backend.app.models.user import User
from backend.app.schemas.student import (
    StudentCreate,
    StudentNeedingInteraction,
    StudentRead,
    StudentUpdate,
)
from backend.app.services.interaction_formula import (
    Program,
    SettingsFormulaLoader,
    get_students_needing_interaction,
)

router = APIRouter(prefix="/students", tags=["students"])


def _get_student(db: Session, student_id: str) -> Student:
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return student


@router.get("", response_model=list[StudentRead])
async def list_students(
    cohort: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Student)
    if cohort is not None:
        query = query.filter(Student.cohort == cohort)
    return query.order_by(Student.first_name.asc(), Student.last_name.asc()).all()


@router.get("/needs-interaction", response_model=list[StudentNeedingInteraction])
async def list_students_needing_interaction(
    cohort: Optional[int] = None,
    program: Optional[str] = None,
    db: Session = Depends(get_db),
    loader: SettingsFormulaLoader = Depends(get_formula_loader),
    current_user: User = Depends(get_current_user),
):
    statuses = get_students_needing_interaction(db, cohort=cohort, program=program, formula=loader.load().formula)
    return [StudentNeedingInteraction.from_status(item) for item in statuses]


@router.post("", response_model=StudentRead, status_code=status.HTTP_201_CREATED)
async def create_student(
    student_in: StudentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if db.query(Student).filter(Student.id == student_in.id).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Student ID already exists")
    student = Student(
        id=student_in.id,
        first_name=student_in.first_name,
        last_name=student_in.last_name,
        email=student_in.email or None,
        cohort=student_in.cohort,
        program=Program.from_name(student_in.program).value,
    )
    db.add(student)
    db.commit()
    db.refresh(student)
    return student


@router.get("/{student_id}", response_model=StudentRead)
async def get_student(student_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _get_student(db, student_id)


@router.put("/{student_id}", response_model=StudentRead)
async def update_student(
    student_id: str,
    student_in: StudentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    student = _get_student(db, student_id)
    student.first_name = student_in.first_name
    student.last_name = student_in.last_name
    student.email = student_in.email or None
    student.cohort = student_in.cohort
    if student_in.program is not None:
        student.program = Program.from_name(student_in.program).value
    db.commit()
    db.refresh(student)
    return student


@router.delete("/{student_id}")
async def delete_student(student_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    student = _get_student(db, student_id)
    db.delete(student)
    db.commit()
    return {"message": "Student deleted successfully"}

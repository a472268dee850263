"""Interaction endpoints.

Reads are decorated with the interaction formula: the student's phase, its
contact frequency, days since the interaction and whether contact is overdue,
plus the follow-up overdue flag.
"""

from datetime import UTC, datetime, time
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.core.time import utc_now
from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.dependencies.formula import get_formula_loader
from backend.app.models.interaction import Interaction
from backend.app.models.student import Student
from backend.app.models.user import User
from backend.app.schemas.interaction import (
    FollowUpIn,
    InteractionArchive,
    InteractionCreate,
    InteractionRead,
    InteractionUpdate,
)
from backend.app.services.interaction_formula import (
    InteractionFormula,
    SettingsFormulaLoader,
    does_student_need_interaction,
    effective_program,
    get_interaction_days_for_program,
    is_follow_up_overdue,
    parse_calendar_date,
)
from backend.app.services.system_settings import load_cohort_phase_map

router = APIRouter(prefix="/interactions", tags=["interactions"])


def _get_interaction(db: Session, interaction_id: int) -> Interaction:
    interaction = db.query(Interaction).filter(Interaction.id == interaction_id).first()
    if not interaction:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Interaction not found")
    return interaction


def _interaction_moment(interaction: Interaction) -> datetime:
    parsed = parse_calendar_date(interaction.date)
    if parsed is None:
        return interaction.created_at
    return datetime.combine(parsed, time.min, tzinfo=UTC)


def _to_read(
    interaction: Interaction,
    formula: InteractionFormula,
    cohort_phase_map: Dict[str, str],
    now: datetime,
) -> InteractionRead:
    cohort = interaction.student.cohort if interaction.student else None
    phase = effective_program(interaction.program, cohort, cohort_phase_map)
    due = does_student_need_interaction(_interaction_moment(interaction), phase, formula, now=now)
    return InteractionRead(
        id=interaction.id,
        student_id=interaction.student_id,
        student_name=interaction.student_name,
        program=interaction.program,
        type=interaction.type,
        reason=interaction.reason,
        notes=interaction.notes or "",
        date=interaction.date,
        time=interaction.time,
        staff_member=interaction.staff_member,
        staff_id=interaction.staff_id,
        status=interaction.status,
        ai_summary=interaction.ai_summary,
        is_archived=interaction.is_archived,
        created_at=interaction.created_at,
        updated_at=interaction.updated_at,
        follow_up={
            "required": interaction.follow_up_required,
            "date": interaction.follow_up_date,
            "sent": interaction.follow_up_sent,
            "student": interaction.follow_up_student,
            "student_email": interaction.follow_up_student_email,
            "staff": interaction.follow_up_staff,
            "staff_email": interaction.follow_up_staff_email,
            "overdue": bool(interaction.follow_up_required)
            and not interaction.follow_up_sent
            and is_follow_up_overdue(interaction.follow_up_date, formula, now=now),
        },
        phase=phase.value,
        frequency=get_interaction_days_for_program(phase, formula),
        days_since_last_interaction=int(due.days_since_last_interaction),
        is_overdue=due.needs_interaction,
    )


def _apply_follow_up(interaction: Interaction, follow_up: FollowUpIn) -> None:
    if follow_up.date != interaction.follow_up_date:
        # A rescheduled follow-up goes out again
        interaction.follow_up_sent = False
    interaction.follow_up_required = follow_up.required
    interaction.follow_up_date = follow_up.date or None
    interaction.follow_up_student = follow_up.student
    interaction.follow_up_student_email = follow_up.student_email or None
    interaction.follow_up_staff = follow_up.staff
    interaction.follow_up_staff_email = follow_up.staff_email or None


def _split_name(full_name: str) -> tuple[str, str]:
    parts = full_name.split()
    return parts[0], " ".join(parts[1:])


@router.get("", response_model=list[InteractionRead])
async def list_interactions(
    cohort: Optional[int] = None,
    follow_up_required: bool = False,
    include_archived: bool = False,
    db: Session = Depends(get_db),
    loader: SettingsFormulaLoader = Depends(get_formula_loader),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Interaction)
    if cohort is not None:
        query = query.join(Student, Interaction.student_id == Student.id).filter(Student.cohort == cohort)
    if follow_up_required:
        query = query.filter(
            Interaction.follow_up_required.is_(True),
            Interaction.follow_up_sent.is_(False),
            Interaction.is_archived.is_(False),
        )
    elif not include_archived:
        query = query.filter(Interaction.is_archived.is_(False))
    interactions = query.order_by(Interaction.created_at.desc(), Interaction.id.desc()).all()

    formula = loader.load().formula
    cohort_phase_map = load_cohort_phase_map(db)
    now = utc_now()
    return [_to_read(interaction, formula, cohort_phase_map, now) for interaction in interactions]


@router.post("", response_model=InteractionRead, status_code=status.HTTP_201_CREATED)
async def create_interaction(
    interaction_in: InteractionCreate,
    db: Session = Depends(get_db),
    loader: SettingsFormulaLoader = Depends(get_formula_loader),
    current_user: User = Depends(get_current_user),
):
    student = db.query(Student).filter(Student.id == interaction_in.student_id).first()
    if not student:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

    cohort_phase_map = load_cohort_phase_map(db)
    first_name, last_name = _split_name(interaction_in.student_name)
    now = utc_now()
    interaction = Interaction(
        student_id=student.id,
        staff_id=current_user.id,
        student_first_name=first_name,
        student_last_name=last_name,
        program=effective_program(student.program, student.cohort, cohort_phase_map).value,
        type=interaction_in.type,
        reason=interaction_in.reason,
        notes=interaction_in.notes,
        date=interaction_in.date or now.date().isoformat(),
        time=interaction_in.time or now.strftime("%H:%M"),
        staff_member=interaction_in.staff_member,
        status=interaction_in.status,
        ai_summary=interaction_in.ai_summary,
    )
    _apply_follow_up(interaction, interaction_in.follow_up)
    db.add(interaction)
    db.commit()
    db.refresh(interaction)
    return _to_read(interaction, loader.load().formula, cohort_phase_map, now)


@router.get("/{interaction_id}", response_model=InteractionRead)
async def get_interaction(
    interaction_id: int,
    db: Session = Depends(get_db),
    loader: SettingsFormulaLoader = Depends(get_formula_loader),
    current_user: User = Depends(get_current_user),
):
    interaction = _get_interaction(db, interaction_id)
    return _to_read(interaction, loader.load().formula, load_cohort_phase_map(db), utc_now())


@router.put("/{interaction_id}", response_model=InteractionRead)
async def update_interaction(
    interaction_id: int,
    update: InteractionUpdate,
    db: Session = Depends(get_db),
    loader: SettingsFormulaLoader = Depends(get_formula_loader),
    current_user: User = Depends(get_current_user),
):
    interaction = _get_interaction(db, interaction_id)
    for field_name in ("type", "reason", "notes", "date", "time", "staff_member", "status", "ai_summary"):
        value = getattr(update, field_name)
        if value is not None:
            setattr(interaction, field_name, value)
    if update.follow_up is not None:
        _apply_follow_up(interaction, update.follow_up)
    db.commit()
    db.refresh(interaction)
    return _to_read(interaction, loader.load().formula, load_cohort_phase_map(db), utc_now())


@router.patch("/{interaction_id}", response_model=InteractionRead)
async def archive_interaction(
    interaction_id: int,
    payload: InteractionArchive,
    db: Session = Depends(get_db),
    loader: SettingsFormulaLoader = Depends(get_formula_loader),
    current_user: User = Depends(get_current_user),
):
    interaction = _get_interaction(db, interaction_id)
    interaction.is_archived = payload.is_archived
    db.commit()
    db.refresh(interaction)
    return _to_read(interaction, loader.load().formula, load_cohort_phase_map(db), utc_now())


@router.delete("/{interaction_id}")
async def delete_interaction(
    interaction_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    interaction = _get_interaction(db, interaction_id)
    db.delete(interaction)
    db.commit()
    return {"message": "Interaction deleted successfully"}

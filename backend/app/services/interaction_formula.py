"""Interaction frequency formula.

Decides when a student is due for an interaction, when that need escalates to
priority, and when a scheduled follow-up has lapsed past its grace period. The
thresholds come from the single ``system_settings`` row; every field falls back
to a default when the row, the column value, or the database is unavailable.

The evaluators are pure functions of their inputs and ``now``. Only the loader
and the batch query touch the database.
"""

import math
from dataclasses import dataclass, field, fields
from datetime import UTC, date, datetime, time, timedelta
from enum import Enum
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.logging_config import get_logger
from backend.app.core.time import ensure_utc, utc_now
from backend.app.models.interaction import Interaction
from backend.app.models.student import Student
from backend.app.models.system_settings import SYSTEM_SETTINGS_ID, SystemSettings
from backend.app.services.system_settings import load_cohort_phase_map

logger = get_logger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24


class Program(str, Enum):
    FOUNDATIONS = "foundations"
    LIFTOFF = "liftoff"
    LIGHTSPEED = "lightspeed"
    PROGRAM_101 = "101"
    DEFAULT = "default"

    @classmethod
    def from_name(cls, name: Optional[str]) -> "Program":
        """Case-insensitive lookup; anything unrecognized is the default program."""
        if isinstance(name, Program):
            return name
        normalized = str(name or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            return cls.DEFAULT


@dataclass(frozen=True)
class InteractionFormula:
    default_interaction_days: int = 30
    foundations_interaction_days: int = 14
    liftoff_interaction_days: int = 21
    lightspeed_interaction_days: int = 7
    program101_interaction_days: int = 30
    priority_escalation_days: int = 7
    enable_priority_escalation: bool = True
    follow_up_grace_period_days: int = 3
    auto_follow_up_enabled: bool = True


DEFAULT_FORMULA = InteractionFormula()

_PROGRAM_DAYS_FIELD = {
    Program.FOUNDATIONS: "foundations_interaction_days",
    Program.LIFTOFF: "liftoff_interaction_days",
    Program.LIGHTSPEED: "lightspeed_interaction_days",
    Program.PROGRAM_101: "program101_interaction_days",
    Program.DEFAULT: "default_interaction_days",
}


class FormulaSource(str, Enum):
    CONFIGURED = "configured"
    DEFAULTS = "defaults"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class FormulaLoadResult:
    formula: InteractionFormula
    source: FormulaSource
    reason: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.source is FormulaSource.FALLBACK


@dataclass(frozen=True)
class InteractionDue:
    needs_interaction: bool
    is_priority: bool
    days_since_last_interaction: float


@dataclass
class StudentInteractionStatus:
    student: Student
    program: Program
    last_interaction_date: Optional[datetime]
    needs_interaction: bool
    is_priority: bool
    days_since_last_interaction: float = field(default=math.inf)

    @property
    def never_contacted(self) -> bool:
        return self.last_interaction_date is None


def formula_from_settings(settings: SystemSettings) -> InteractionFormula:
    values = {}
    for formula_field in fields(InteractionFormula):
        value = getattr(settings, formula_field.name, None)
        values[formula_field.name] = formula_field.default if value is None else value
    return InteractionFormula(**values)


class SettingsFormulaLoader:
    """Reads the formula from the system settings row."""

    def __init__(self, db: Session):
        self.db = db

    def load(self) -> FormulaLoadResult:
        try:
            settings = self.db.query(SystemSettings).filter(SystemSettings.id == SYSTEM_SETTINGS_ID).first()
        except SQLAlchemyError as exc:
            logger.error("Error fetching interaction formula settings, using defaults: %s", exc, exc_info=True)
            self.db.rollback()
            return FormulaLoadResult(DEFAULT_FORMULA, FormulaSource.FALLBACK, reason=str(exc))
        if settings is None:
            return FormulaLoadResult(DEFAULT_FORMULA, FormulaSource.DEFAULTS)
        return FormulaLoadResult(formula_from_settings(settings), FormulaSource.CONFIGURED)


def get_interaction_formula(db: Session) -> InteractionFormula:
    return SettingsFormulaLoader(db).load().formula


def get_interaction_days_for_program(program: str, formula: InteractionFormula) -> int:
    return getattr(formula, _PROGRAM_DAYS_FIELD[Program.from_name(program)])


def resolve_program_for_cohort(cohort: Optional[int], cohort_phase_map: Dict[str, str]) -> Program:
    if cohort is None:
        return Program.DEFAULT
    return Program.from_name(cohort_phase_map.get(str(cohort)))


def effective_program(program: Optional[str], cohort: Optional[int], cohort_phase_map: Dict[str, str]) -> Program:
    """The student's own program, or their cohort's phase when the program is unset."""
    resolved = Program.from_name(program)
    if resolved is Program.DEFAULT:
        return resolve_program_for_cohort(cohort, cohort_phase_map)
    return resolved


def does_student_need_interaction(
    last_interaction_date: Optional[datetime],
    program: str,
    formula: InteractionFormula,
    now: Optional[datetime] = None,
) -> InteractionDue:
    if last_interaction_date is None:
        # Never contacted: due and urgent regardless of program or formula
        return InteractionDue(needs_interaction=True, is_priority=True, days_since_last_interaction=math.inf)

    now = ensure_utc(now or utc_now())
    interaction_days = get_interaction_days_for_program(program, formula)
    elapsed = now - ensure_utc(last_interaction_date)
    days_since = math.floor(elapsed.total_seconds() / SECONDS_PER_DAY)

    needs_interaction = days_since >= interaction_days
    is_priority = bool(formula.enable_priority_escalation) and days_since >= (
        interaction_days + formula.priority_escalation_days
    )
    return InteractionDue(
        needs_interaction=needs_interaction,
        is_priority=is_priority,
        days_since_last_interaction=days_since,
    )


def _coerce_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def get_students_needing_interaction(
    db: Session,
    *,
    cohort: Optional[int] = None,
    program: Optional[str] = None,
    formula: Optional[InteractionFormula] = None,
    now: Optional[datetime] = None,
) -> List[StudentInteractionStatus]:
    """Students due for an interaction, priority first, then longest gap first.

    Storage errors are logged and produce an empty list.
    """
    now = now or utc_now()
    try:
        if formula is None:
            formula = SettingsFormulaLoader(db).load().formula
        cohort_phase_map = load_cohort_phase_map(db)

        latest = (
            db.query(
                Interaction.student_id.label("student_id"),
                func.max(Interaction.created_at).label("last_at"),
            )
            .filter(Interaction.is_archived.is_(False))
            .group_by(Interaction.student_id)
            .subquery()
        )
        query = db.query(Student, latest.c.last_at).outerjoin(latest, latest.c.student_id == Student.id)
        if cohort is not None:
            query = query.filter(Student.cohort == cohort)
        if program:
            query = query.filter(func.lower(Student.program) == program.strip().lower())
        rows = query.all()
    except SQLAlchemyError as exc:
        logger.error("Error getting students needing interaction: %s", exc, exc_info=True)
        db.rollback()
        return []

    results: List[StudentInteractionStatus] = []
    for student, last_at in rows:
        last_interaction_date = _coerce_datetime(last_at)
        student_program = effective_program(student.program, student.cohort, cohort_phase_map)
        due = does_student_need_interaction(last_interaction_date, student_program, formula, now=now)
        if not due.needs_interaction:
            continue
        results.append(
            StudentInteractionStatus(
                student=student,
                program=student_program,
                last_interaction_date=last_interaction_date,
                needs_interaction=due.needs_interaction,
                is_priority=due.is_priority,
                days_since_last_interaction=due.days_since_last_interaction,
            )
        )

    results.sort(key=lambda item: (not item.is_priority, -item.days_since_last_interaction))
    return results


def parse_calendar_date(value: Optional[str]) -> Optional[date]:
    """Parse YYYY-MM-DD, an ISO datetime, or M/D/YYYY. Returns None otherwise."""
    value = (value or "").strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        pass
    try:
        return datetime.strptime(value, "%m/%d/%Y").date()
    except ValueError:
        return None


def is_follow_up_overdue(follow_up_date: Optional[str], formula: InteractionFormula, now: Optional[datetime] = None) -> bool:
    if not formula.auto_follow_up_enabled or not follow_up_date:
        return False

    parsed = parse_calendar_date(follow_up_date)
    if parsed is None:
        logger.debug("Unparseable follow-up date %r treated as not overdue", follow_up_date)
        return False

    overdue_after = datetime.combine(parsed, time.min, tzinfo=UTC) + timedelta(days=formula.follow_up_grace_period_days)
    return ensure_utc(now or utc_now()) > overdue_after

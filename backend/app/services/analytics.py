"""Program analytics: headline counts, breakdowns and monthly trends."""

from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.app.core.time import ensure_utc, utc_now
from backend.app.models.interaction import Interaction
from backend.app.models.student import Student
from backend.app.services.interaction_formula import (
    FormulaLoadResult,
    SettingsFormulaLoader,
    get_students_needing_interaction,
    is_follow_up_overdue,
)

TREND_MONTHS = 6
STAFF_PERFORMANCE_LIMIT = 10


def _months_back(moment: datetime, months: int) -> datetime:
    year = moment.year
    month = moment.month - months
    while month <= 0:
        month += 12
        year -= 1
    return moment.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)


def get_analytics(
    db: Session,
    *,
    cohort: Optional[int] = None,
    date_range_days: int = 30,
    now: Optional[datetime] = None,
    formula_result: Optional[FormulaLoadResult] = None,
) -> Dict:
    now = ensure_utc(now or utc_now())
    formula_result = formula_result or SettingsFormulaLoader(db).load()
    formula = formula_result.formula

    student_query = db.query(Student)
    interaction_query = db.query(Interaction).filter(Interaction.is_archived.is_(False))
    if cohort is not None:
        student_query = student_query.filter(Student.cohort == cohort)
        interaction_query = interaction_query.join(Student, Interaction.student_id == Student.id).filter(
            Student.cohort == cohort
        )

    total_students = student_query.count()
    interactions = interaction_query.all()
    total_interactions = len(interactions)

    pending = [i for i in interactions if i.follow_up_required and not i.follow_up_sent]
    overdue_follow_ups = sum(1 for i in pending if is_follow_up_overdue(i.follow_up_date, formula, now=now))

    range_start = now - timedelta(days=date_range_days)
    recent_interactions = sum(1 for i in interactions if ensure_utc(i.created_at) >= range_start)

    needing = get_students_needing_interaction(db, cohort=cohort, formula=formula, now=now)

    cohort_rows = (
        db.query(Student.cohort, func.count(Student.id))
        .group_by(Student.cohort)
        .order_by(Student.cohort.asc())
        .all()
    )
    students_by_cohort = [
        {"cohort": cohort_value if cohort_value is not None else "Unassigned", "count": count}
        for cohort_value, count in cohort_rows
    ]

    type_counts: Dict[str, int] = {}
    staff_counts: Dict[str, int] = {}
    for interaction in interactions:
        type_counts[interaction.type] = type_counts.get(interaction.type, 0) + 1
        staff_counts[interaction.staff_member] = staff_counts.get(interaction.staff_member, 0) + 1

    interaction_types = [
        {
            "type": type_name,
            "count": count,
            "percentage": round(count / total_interactions * 100) if total_interactions else 0,
        }
        for type_name, count in sorted(type_counts.items(), key=lambda item: (-item[1], item[0]))
    ]
    staff_performance = [
        {"staff_member": staff_member, "interactions": count}
        for staff_member, count in sorted(staff_counts.items(), key=lambda item: (-item[1], item[0]))
    ][:STAFF_PERFORMANCE_LIMIT]

    trend_start = _months_back(now, TREND_MONTHS)
    trends_by_month: Dict[str, Dict[str, int]] = {}
    for interaction in interactions:
        created = ensure_utc(interaction.created_at)
        if created < trend_start:
            continue
        entry = trends_by_month.setdefault(created.strftime("%Y-%m"), {"interactions": 0, "follow_ups": 0})
        entry["interactions"] += 1
        if interaction.follow_up_required:
            entry["follow_ups"] += 1
    trends = [{"month": month, **counts} for month, counts in sorted(trends_by_month.items())]

    return {
        "overview": {
            "total_students": total_students,
            "total_interactions": total_interactions,
            "students_needing_interaction": len(needing),
            "priority_students": sum(1 for item in needing if item.is_priority),
            "follow_ups_required": len(pending),
            "overdue_follow_ups": overdue_follow_ups,
            "recent_interactions": recent_interactions,
        },
        "breakdown": {
            "students_by_cohort": students_by_cohort,
            "interaction_types": interaction_types,
            "staff_performance": staff_performance,
        },
        "trends": trends,
        "filters": {"cohort": cohort if cohort is not None else "all", "date_range": date_range_days},
        "formula_source": formula_result.source.value,
    }

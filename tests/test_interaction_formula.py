import math
from dataclasses import replace
from datetime import UTC, date, datetime, timedelta

from backend.app.services.interaction_formula import (
    DEFAULT_FORMULA,
    InteractionFormula,
    Program,
    does_student_need_interaction,
    effective_program,
    get_interaction_days_for_program,
    is_follow_up_overdue,
    parse_calendar_date,
    resolve_program_for_cohort,
)

NOW = datetime(2024, 6, 30, 12, 0, tzinfo=UTC)


def test_program_lookup_is_case_insensitive_and_defaults():
    assert Program.from_name("  LiftOff ") is Program.LIFTOFF
    assert Program.from_name("101") is Program.PROGRAM_101
    assert Program.from_name("unknown") is Program.DEFAULT
    assert Program.from_name(None) is Program.DEFAULT
    assert Program.from_name("") is Program.DEFAULT


def test_interaction_days_per_program():
    assert get_interaction_days_for_program("foundations", DEFAULT_FORMULA) == 14
    assert get_interaction_days_for_program("LIFTOFF", DEFAULT_FORMULA) == 21
    assert get_interaction_days_for_program("lightspeed", DEFAULT_FORMULA) == 7
    assert get_interaction_days_for_program("101", DEFAULT_FORMULA) == 30
    assert get_interaction_days_for_program("mystery", DEFAULT_FORMULA) == 30


def test_never_contacted_is_due_and_priority():
    due = does_student_need_interaction(None, "foundations", DEFAULT_FORMULA, now=NOW)
    assert due.needs_interaction is True
    assert due.is_priority is True
    assert math.isinf(due.days_since_last_interaction)


def test_never_contacted_is_priority_even_when_escalation_disabled():
    formula = replace(DEFAULT_FORMULA, enable_priority_escalation=False)
    due = does_student_need_interaction(None, "default", formula, now=NOW)
    assert due.is_priority is True


def test_due_exactly_at_threshold():
    due = does_student_need_interaction(NOW - timedelta(days=14), "foundations", DEFAULT_FORMULA, now=NOW)
    assert due.needs_interaction is True
    assert due.is_priority is False
    assert due.days_since_last_interaction == 14


def test_partial_days_are_floored():
    due = does_student_need_interaction(
        NOW - timedelta(days=13, hours=23, minutes=59), "foundations", DEFAULT_FORMULA, now=NOW
    )
    assert due.days_since_last_interaction == 13
    assert due.needs_interaction is False


def test_priority_at_threshold_plus_escalation():
    due = does_student_need_interaction(NOW - timedelta(days=21), "foundations", DEFAULT_FORMULA, now=NOW)
    assert due.needs_interaction is True
    assert due.is_priority is True

    not_yet = does_student_need_interaction(NOW - timedelta(days=20), "foundations", DEFAULT_FORMULA, now=NOW)
    assert not_yet.needs_interaction is True
    assert not_yet.is_priority is False


def test_priority_disabled_never_escalates_contacted_students():
    formula = replace(DEFAULT_FORMULA, enable_priority_escalation=False)
    due = does_student_need_interaction(NOW - timedelta(days=365), "lightspeed", formula, now=NOW)
    assert due.needs_interaction is True
    assert due.is_priority is False


def test_priority_implies_needs_interaction():
    formula = InteractionFormula(default_interaction_days=10, priority_escalation_days=1)
    for days in range(0, 20):
        due = does_student_need_interaction(NOW - timedelta(days=days), "default", formula, now=NOW)
        if due.is_priority:
            assert due.needs_interaction


def test_unknown_program_uses_default_days():
    due = does_student_need_interaction(NOW - timedelta(days=29), "Mystery", DEFAULT_FORMULA, now=NOW)
    assert due.needs_interaction is False
    due = does_student_need_interaction(NOW - timedelta(days=30), "Mystery", DEFAULT_FORMULA, now=NOW)
    assert due.needs_interaction is True


def test_naive_datetimes_are_treated_as_utc():
    naive = (NOW - timedelta(days=7)).replace(tzinfo=None)
    due = does_student_need_interaction(naive, "lightspeed", DEFAULT_FORMULA, now=NOW)
    assert due.days_since_last_interaction == 7
    assert due.needs_interaction is True


def test_parse_calendar_date_formats():
    assert parse_calendar_date("2024-06-01") == date(2024, 6, 1)
    assert parse_calendar_date("2024-06-01T15:30:00") == date(2024, 6, 1)
    assert parse_calendar_date("6/1/2024") == date(2024, 6, 1)
    assert parse_calendar_date("not a date") is None
    assert parse_calendar_date("") is None
    assert parse_calendar_date(None) is None


def test_follow_up_overdue_only_after_grace_period():
    at_boundary = datetime(2024, 6, 4, 0, 0, tzinfo=UTC)
    assert is_follow_up_overdue("2024-06-01", DEFAULT_FORMULA, now=at_boundary) is False
    assert is_follow_up_overdue("2024-06-01", DEFAULT_FORMULA, now=at_boundary + timedelta(seconds=1)) is True
    assert is_follow_up_overdue("6/1/2024", DEFAULT_FORMULA, now=at_boundary + timedelta(seconds=1)) is True


def test_follow_up_never_overdue_when_disabled_or_blank():
    formula = replace(DEFAULT_FORMULA, auto_follow_up_enabled=False)
    later = datetime(2030, 1, 1, tzinfo=UTC)
    assert is_follow_up_overdue("2024-06-01", formula, now=later) is False
    assert is_follow_up_overdue("", DEFAULT_FORMULA, now=later) is False
    assert is_follow_up_overdue(None, DEFAULT_FORMULA, now=later) is False
    assert is_follow_up_overdue("garbage", DEFAULT_FORMULA, now=later) is False


def test_cohort_phase_resolution():
    mapping = {"3": "lightspeed", "4": "Foundations"}
    assert resolve_program_for_cohort(3, mapping) is Program.LIGHTSPEED
    assert resolve_program_for_cohort(4, mapping) is Program.FOUNDATIONS
    assert resolve_program_for_cohort(5, mapping) is Program.DEFAULT
    assert resolve_program_for_cohort(None, mapping) is Program.DEFAULT


def test_effective_program_prefers_explicit_program():
    mapping = {"3": "lightspeed"}
    assert effective_program("liftoff", 3, mapping) is Program.LIFTOFF
    assert effective_program("default", 3, mapping) is Program.LIGHTSPEED
    assert effective_program(None, None, mapping) is Program.DEFAULT


def test_follow_up_grace_period_example():
    four_days_ago = (NOW - timedelta(days=4)).date().isoformat()
    two_days_ago = (NOW - timedelta(days=2)).date().isoformat()
    assert is_follow_up_overdue(four_days_ago, DEFAULT_FORMULA, now=NOW) is True
    assert is_follow_up_overdue(two_days_ago, DEFAULT_FORMULA, now=NOW) is False


def test_threshold_lookup_ignores_casing_for_every_program():
    expected = {"foundations": 14, "liftoff": 21, "lightspeed": 7, "101": 30, "default": 30}
    for name, days in expected.items():
        for variant in (name, name.upper(), name.capitalize()):
            assert get_interaction_days_for_program(variant, DEFAULT_FORMULA) == days

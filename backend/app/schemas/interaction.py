"""Interaction schemas. Follow-up settings travel as a nested object."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.app.services.interaction_formula import parse_calendar_date


class FollowUpBase(BaseModel):
    required: bool = False
    date: Optional[str] = None
    student: bool = False
    student_email: Optional[str] = None
    staff: bool = False
    staff_email: Optional[str] = None


class FollowUpIn(FollowUpBase):
    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: Optional[str]) -> Optional[str]:
        # Stored as YYYY-MM-DD so the scheduler can compare dates as strings
        if value is None or not value.strip():
            return None
        parsed = parse_calendar_date(value)
        if parsed is None:
            raise ValueError(f"Unrecognized follow-up date: {value}")
        return parsed.isoformat()


class FollowUpRead(FollowUpBase):
    sent: bool = False
    overdue: bool = False


class InteractionCreate(BaseModel):
    student_id: str = Field(min_length=1)
    student_name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    reason: str = Field(min_length=1)
    notes: str = ""
    date: Optional[str] = None
    time: Optional[str] = None
    staff_member: str = Field(min_length=1)
    status: str = "completed"
    ai_summary: Optional[str] = None
    follow_up: FollowUpIn = FollowUpIn()

    model_config = ConfigDict(str_strip_whitespace=True)


class InteractionUpdate(BaseModel):
    type: Optional[str] = None
    reason: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    staff_member: Optional[str] = None
    status: Optional[str] = None
    ai_summary: Optional[str] = None
    follow_up: Optional[FollowUpIn] = None


class InteractionArchive(BaseModel):
    is_archived: bool


class InteractionRead(BaseModel):
    id: int
    student_id: str
    student_name: str
    program: str
    type: str
    reason: str
    notes: str
    date: str
    time: str
    staff_member: str
    staff_id: Optional[int] = None
    status: str
    ai_summary: Optional[str] = None
    is_archived: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    follow_up: FollowUpRead

    # Derived from the interaction formula at read time
    phase: str
    frequency: int
    days_since_last_interaction: int
    is_overdue: bool


class InteractionType(BaseModel):
    value: str
    label: str

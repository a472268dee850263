"""Follow-up cron schemas."""

from typing import List, Optional

from pydantic import BaseModel


class FollowUpFailureRead(BaseModel):
    interaction_id: int
    recipient: Optional[str] = None
    error: str


class FollowUpRunRead(BaseModel):
    success: bool
    processed: int
    sent_count: int
    marked_sent: List[int]
    failures: List[FollowUpFailureRead]
    triggered_by: str


class DueFollowUp(BaseModel):
    id: int
    follow_up_date: Optional[str] = None
    follow_up_student: bool
    follow_up_student_email: Optional[str] = None
    follow_up_staff: bool
    follow_up_staff_email: Optional[str] = None


class CronHealthRead(BaseModel):
    ok: bool
    count: int
    interactions: List[DueFollowUp]

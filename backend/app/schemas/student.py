"""Student schemas."""

import math
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StudentBase(BaseModel):
    email: Optional[str] = None
    cohort: Optional[int] = None
    program: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True)


class StudentCreate(StudentBase):
    id: str = Field(min_length=1, max_length=64)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)


class StudentUpdate(StudentBase):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)


class StudentRead(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    program: str
    cohort: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class StudentNeedingInteraction(BaseModel):
    student: StudentRead
    program: str
    last_interaction_date: Optional[datetime] = None
    needs_interaction: bool
    is_priority: bool
    # None when the student has never been contacted
    days_since_last_interaction: Optional[int] = None
    never_contacted: bool

    @classmethod
    def from_status(cls, status) -> "StudentNeedingInteraction":
        days = status.days_since_last_interaction
        return cls(
            student=StudentRead.model_validate(status.student),
            program=status.program.value,
            last_interaction_date=status.last_interaction_date,
            needs_interaction=status.needs_interaction,
            is_priority=status.is_priority,
            days_since_last_interaction=None if math.isinf(days) else int(days),
            never_contacted=status.never_contacted,
        )

"""System settings schemas: interaction formula, cohort phases and email."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from backend.app.services.interaction_formula import Program


class SystemSettingsRead(BaseModel):
    default_interaction_days: int
    foundations_interaction_days: int
    liftoff_interaction_days: int
    lightspeed_interaction_days: int
    program101_interaction_days: int
    priority_escalation_days: int
    enable_priority_escalation: bool
    follow_up_grace_period_days: int
    auto_follow_up_enabled: bool
    cohort_phase_map: Dict[str, str] = {}
    formula_source: str
    updated_at: Optional[datetime] = None


class SystemSettingsUpdate(BaseModel):
    default_interaction_days: Optional[int] = Field(default=None, ge=1)
    foundations_interaction_days: Optional[int] = Field(default=None, ge=1)
    liftoff_interaction_days: Optional[int] = Field(default=None, ge=1)
    lightspeed_interaction_days: Optional[int] = Field(default=None, ge=1)
    program101_interaction_days: Optional[int] = Field(default=None, ge=1)
    priority_escalation_days: Optional[int] = Field(default=None, ge=1)
    enable_priority_escalation: Optional[bool] = None
    follow_up_grace_period_days: Optional[int] = Field(default=None, ge=1)
    auto_follow_up_enabled: Optional[bool] = None
    cohort_phase_map: Optional[Dict[str, str]] = None

    @field_validator("cohort_phase_map")
    @classmethod
    def validate_phases(cls, value: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        if value is None:
            return value
        known = {program.value for program in Program}
        cleaned = {}
        for cohort, phase in value.items():
            if not str(cohort).strip().isdigit():
                raise ValueError(f"Cohort must be a number: {cohort}")
            if not phase:
                continue
            normalized = phase.strip().lower()
            if normalized not in known:
                raise ValueError(f"Unknown program phase: {phase}")
            cleaned[str(cohort).strip()] = normalized
        return cleaned


class EmailTemplate(BaseModel):
    name: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    body: str = Field(min_length=1)

    model_config = ConfigDict(str_strip_whitespace=True)


class EmailSettingsRead(BaseModel):
    from_email: Optional[str] = None
    admin_email: Optional[str] = None
    bcc_admin: bool = False
    templates: List[EmailTemplate] = []


class EmailSettingsUpdate(BaseModel):
    from_email: Optional[EmailStr] = None
    admin_email: Optional[EmailStr] = None
    bcc_admin: bool = False
    templates: List[EmailTemplate] = []

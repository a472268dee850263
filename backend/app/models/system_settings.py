"""Single-row system settings: interaction formula, cohort phases, email."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now

SYSTEM_SETTINGS_ID = 1


class SystemSettings(Base):
    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True, default=SYSTEM_SETTINGS_ID)

    # Formula columns stay nullable; readers fall back per field.
    default_interaction_days = Column(Integer, nullable=True, default=30)
    foundations_interaction_days = Column(Integer, nullable=True, default=14)
    liftoff_interaction_days = Column(Integer, nullable=True, default=21)
    lightspeed_interaction_days = Column(Integer, nullable=True, default=7)
    program101_interaction_days = Column(Integer, nullable=True, default=30)
    priority_escalation_days = Column(Integer, nullable=True, default=7)
    enable_priority_escalation = Column(Boolean, nullable=True, default=True)
    follow_up_grace_period_days = Column(Integer, nullable=True, default=3)
    auto_follow_up_enabled = Column(Boolean, nullable=True, default=True)

    cohort_phase_map = Column(JSON, nullable=True, default=dict)

    from_email = Column(String, nullable=True)
    admin_email = Column(String, nullable=True)
    bcc_admin = Column(Boolean, nullable=False, default=False)
    templates = Column(JSON, nullable=True, default=list)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

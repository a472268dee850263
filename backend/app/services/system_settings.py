"""Access helpers for the single system settings row."""

from typing import Dict

from sqlalchemy.orm import Session

from backend.app.models.system_settings import SYSTEM_SETTINGS_ID, SystemSettings


def get_system_settings(db: Session) -> SystemSettings | None:
    return db.query(SystemSettings).filter(SystemSettings.id == SYSTEM_SETTINGS_ID).first()


def get_or_create_system_settings(db: Session) -> SystemSettings:
    settings = get_system_settings(db)
    if settings:
        return settings
    settings = SystemSettings(id=SYSTEM_SETTINGS_ID, cohort_phase_map={}, templates=[])
    db.add(settings)
    db.commit()
    db.refresh(settings)
    return settings


def load_cohort_phase_map(db: Session) -> Dict[str, str]:
    """Cohort number (as string) -> program phase. Empty when unset or malformed."""
    settings = get_system_settings(db)
    mapping = getattr(settings, "cohort_phase_map", None) if settings else None
    if not isinstance(mapping, dict):
        return {}
    return {str(key): str(value) for key, value in mapping.items() if value}

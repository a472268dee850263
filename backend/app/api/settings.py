"""System and email settings endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_admin, get_current_user
from backend.app.dependencies.formula import get_formula_loader
from backend.app.models.user import User
from backend.app.schemas.system_settings import (
    EmailSettingsRead,
    EmailSettingsUpdate,
    SystemSettingsRead,
    SystemSettingsUpdate,
)
from backend.app.services.interaction_formula import SettingsFormulaLoader
from backend.app.services.system_settings import (
    get_or_create_system_settings,
    get_system_settings,
    load_cohort_phase_map,
)

router = APIRouter(prefix="/settings", tags=["settings"])


def _system_settings_response(db: Session, loader: SettingsFormulaLoader) -> SystemSettingsRead:
    result = loader.load()
    row = None if result.is_fallback else get_system_settings(db)
    return SystemSettingsRead(
        **asdict(result.formula),
        cohort_phase_map={} if result.is_fallback else load_cohort_phase_map(db),
        formula_source=result.source.value,
        updated_at=row.updated_at if row else None,
    )


@router.get("/system", response_model=SystemSettingsRead)
async def get_settings_system(
    db: Session = Depends(get_db),
    loader: SettingsFormulaLoader = Depends(get_formula_loader),
    current_user: User = Depends(get_current_user),
):
    return _system_settings_response(db, loader)


@router.put("/system", response_model=SystemSettingsRead)
async def update_settings_system(
    payload: SystemSettingsUpdate,
    db: Session = Depends(get_db),
    loader: SettingsFormulaLoader = Depends(get_formula_loader),
    current_admin: User = Depends(get_current_admin),
):
    settings = get_or_create_system_settings(db)
    for field_name, value in payload.model_dump(exclude_none=True).items():
        setattr(settings, field_name, value)
    db.commit()
    return _system_settings_response(db, loader)


@router.get("/email", response_model=EmailSettingsRead)
async def get_settings_email(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    settings = get_system_settings(db)
    if settings is None:
        return EmailSettingsRead()
    return EmailSettingsRead(
        from_email=settings.from_email,
        admin_email=settings.admin_email,
        bcc_admin=bool(settings.bcc_admin),
        templates=settings.templates or [],
    )


@router.put("/email", response_model=EmailSettingsRead)
async def update_settings_email(
    payload: EmailSettingsUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    settings = get_or_create_system_settings(db)
    settings.from_email = payload.from_email
    settings.admin_email = payload.admin_email
    settings.bcc_admin = payload.bcc_admin
    settings.templates = [template.model_dump() for template in payload.templates]
    db.commit()
    db.refresh(settings)
    return EmailSettingsRead(
        from_email=settings.from_email,
        admin_email=settings.admin_email,
        bcc_admin=settings.bcc_admin,
        templates=settings.templates or [],
    )

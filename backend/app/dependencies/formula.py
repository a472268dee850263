"""Interaction formula loader dependency; override in tests to simulate storage states."""

from fastapi import Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.services.interaction_formula import SettingsFormulaLoader


def get_formula_loader(db: Session = Depends(get_db)) -> SettingsFormulaLoader:
    return SettingsFormulaLoader(db)

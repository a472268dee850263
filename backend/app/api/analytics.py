"""Program analytics endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.dependencies.formula import get_formula_loader
from backend.app.models.user import User
from backend.app.schemas.analytics import AnalyticsResponse
from backend.app.services.analytics import get_analytics
from backend.app.services.interaction_formula import SettingsFormulaLoader

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("", response_model=AnalyticsResponse)
async def read_analytics(
    cohort: str = "all",
    date_range: int = Query(default=30, ge=1),
    db: Session = Depends(get_db),
    loader: SettingsFormulaLoader = Depends(get_formula_loader),
    current_user: User = Depends(get_current_user),
):
    cohort = cohort.strip().lower()
    if cohort == "all":
        cohort_filter = None
    elif cohort.isdigit():
        cohort_filter = int(cohort)
    else:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cohort must be 'all' or a number")
    return get_analytics(db, cohort=cohort_filter, date_range_days=date_range, formula_result=loader.load())

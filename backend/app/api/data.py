"""Student CSV import and CSV export endpoints."""

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from sqlalchemy.orm import Session

from backend.app.core.exceptions import CSVFormatError
from backend.app.core.logging_config import get_logger
from backend.app.core.time import utc_today
from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_admin, get_current_user
from backend.app.models.user import User
from backend.app.services.data_transfer import export_csv, import_students, parse_student_csv

logger = get_logger(__name__)

router = APIRouter(prefix="/data", tags=["data"])


@router.post("/import")
async def import_student_csv(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File must be a CSV")
    raw = await file.read()
    try:
        rows = parse_student_csv(raw.decode("utf-8-sig"))
    except UnicodeDecodeError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File must be UTF-8 encoded")
    except CSVFormatError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    if not rows:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid student records found in CSV")

    result = import_students(db, rows)
    logger.info("CSV import by %s: %s", current_admin.email, result["message"])
    return result


@router.get("/export")
async def export_data(
    type: str = "students",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        content, prefix = export_csv(db, type)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    filename = f"{prefix}-{utc_today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

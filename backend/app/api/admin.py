"""Administrative maintenance endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.core.logging_config import get_logger
from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_admin
from backend.app.models.interaction import Interaction
from backend.app.models.student import Student
from backend.app.models.user import User

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/flush-db")
async def flush_database(db: Session = Depends(get_db), current_admin: User = Depends(get_current_admin)):
    admin_email = current_admin.email
    interactions = db.query(Interaction).delete(synchronize_session=False)
    students = db.query(Student).delete(synchronize_session=False)
    users = db.query(User).delete(synchronize_session=False)
    db.commit()
    logger.warning(
        "Database flushed by %s: %d interactions, %d students, %d users removed",
        admin_email,
        interactions,
        students,
        users,
    )
    return {
        "success": True,
        "message": "Database flushed",
        "deleted": {"interactions": interactions, "students": students, "users": users},
    }

"""Staff management endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.core.exceptions import EmailDeliveryError
from backend.app.core.logging_config import get_logger
from backend.app.core.security import generate_temporary_password, get_password_hash
from backend.app.core.settings import get_settings
from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_admin, get_current_user
from backend.app.models.user import User
from backend.app.schemas.user import StaffCreate, StaffUpdate, UserRead
from backend.app.services.email import Mailer, build_staff_notification, get_mailer

logger = get_logger(__name__)

router = APIRouter(prefix="/staff", tags=["staff"])


def _get_staff(db: Session, staff_id: int) -> User:
    user = db.query(User).filter(User.id == staff_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Staff member not found")
    return user


async def _notify(mailer: Mailer, kind: str, user: User, **kwargs) -> None:
    notification = build_staff_notification(kind, to=user.email, staff_name=user.full_name or user.email, **kwargs)
    try:
        await mailer.send(user.email, notification["subject"], notification["text"], notification["html"])
    except EmailDeliveryError as exc:
        logger.warning("%s email for %s not sent: %s", kind, user.email, exc.message)


@router.get("", response_model=list[UserRead])
async def list_staff(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return db.query(User).filter(User.is_active.is_(True)).order_by(User.first_name.asc()).all()


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_staff(
    staff_in: StaffCreate,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    current_admin: User = Depends(get_current_admin),
):
    email = staff_in.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists")

    password = staff_in.password or generate_temporary_password()
    user = User(
        email=email,
        first_name=staff_in.first_name,
        last_name=staff_in.last_name,
        role=staff_in.role,
        is_admin=staff_in.is_admin,
        is_active=True,
        hashed_password=get_password_hash(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Staff member %s created by %s", user.email, current_admin.email)

    await _notify(mailer, "account-created", user, temporary_password=password)
    return user


@router.put("/{staff_id}", response_model=UserRead)
async def update_staff(
    staff_id: int,
    update: StaffUpdate,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    current_admin: User = Depends(get_current_admin),
):
    user = _get_staff(db, staff_id)

    if update.email and update.email.lower() != user.email:
        if db.query(User).filter(User.email == update.email.lower()).first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists")
        user.email = update.email.lower()
    if update.first_name:
        user.first_name = update.first_name
    if update.last_name:
        user.last_name = update.last_name
    if update.role is not None:
        user.role = update.role
    if update.is_admin is not None:
        if user.id == current_admin.id and not update.is_admin:
            raise HTTPException(status_code=400, detail="Cannot change your own admin flag")
        user.is_admin = update.is_admin

    new_password = None
    if update.password or update.reset_password:
        new_password = update.password or get_settings().default_reset_password
        user.hashed_password = get_password_hash(new_password)

    db.commit()
    db.refresh(user)

    if new_password:
        await _notify(
            mailer,
            "password-reset",
            user,
            temporary_password=new_password,
            reset_by_name=current_admin.full_name or current_admin.email,
        )
    return user


@router.delete("/{staff_id}")
async def deactivate_staff(
    staff_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = _get_staff(db, staff_id)
    if user.id == current_admin.id:
        raise HTTPException(status_code=400, detail="Cannot deactivate your own account")
    user.is_active = False
    db.commit()
    return {"message": "Staff member deactivated successfully"}

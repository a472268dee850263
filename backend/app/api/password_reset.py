"""Self-service password reset by emailed token."""

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.core.exceptions import EmailDeliveryError
from backend.app.core.logging_config import get_logger
from backend.app.core.security import generate_reset_token, get_password_hash
from backend.app.core.time import ensure_utc, utc_now
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.user import ForgotPasswordRequest, ResetPasswordRequest
from backend.app.services.email import Mailer, build_staff_notification, get_mailer

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

RESET_TOKEN_TTL = timedelta(hours=24)
FORGOT_PASSWORD_MESSAGE = "If an account exists for that email, a reset code has been sent."


@router.post("/forgot-password")
async def forgot_password(
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    user = db.query(User).filter(User.email == payload.email.lower()).first()
    if user and user.is_active:
        user.reset_token = generate_reset_token()
        user.reset_token_expires_at = utc_now() + RESET_TOKEN_TTL
        db.commit()

        notification = build_staff_notification(
            "forgot-password",
            to=user.email,
            staff_name=user.full_name or user.email,
            reset_token=user.reset_token,
        )
        try:
            await mailer.send(user.email, notification["subject"], notification["text"], notification["html"])
        except EmailDeliveryError as exc:
            logger.warning("Password reset email for %s not sent: %s", user.email, exc.message)

    return {"success": True, "message": FORGOT_PASSWORD_MESSAGE}


@router.post("/reset-password")
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.reset_token == payload.token).first()
    if (
        not user
        or not user.reset_token_expires_at
        or ensure_utc(user.reset_token_expires_at) < utc_now()
    ):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")

    user.hashed_password = get_password_hash(payload.new_password)
    user.reset_token = None
    user.reset_token_expires_at = None
    db.commit()
    return {"success": True, "message": "Password has been reset"}

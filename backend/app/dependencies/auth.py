"""Authentication dependencies for retrieving the current user.

A token is read from ``Authorization: Bearer <token>`` first and from the
``auth-token`` cookie otherwise.
"""

import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from backend.app.core.security import decode_access_token
from backend.app.core.settings import get_settings
from backend.app.db.session import get_db
from backend.app.models.user import User


def _token_from_request(request: Request, authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1]
    return request.cookies.get(get_settings().auth_cookie_name)


def _resolve_user(db: Session, token: Optional[str]) -> Optional[User]:
    if not token:
        return None
    try:
        payload = decode_access_token(token)
    except ValueError:
        return None
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        return None
    return user


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None),
) -> User:
    user = _resolve_user(db, _token_from_request(request, authorization))
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None),
) -> Optional[User]:
    return _resolve_user(db, _token_from_request(request, authorization))


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


def require_cron_caller(
    current_user: Optional[User] = Depends(get_optional_user),
    x_cron_secret: str | None = Header(default=None),
) -> str:
    """Admin users or callers presenting the configured cron secret. Returns the caller label."""
    cron_secret = get_settings().cron_secret
    if cron_secret and x_cron_secret and secrets.compare_digest(x_cron_secret, cron_secret):
        return "cron"
    if current_user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user.email

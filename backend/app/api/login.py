"""Login, logout and session endpoints for staff."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from backend.app.core.security import create_access_token, verify_password
from backend.app.core.settings import get_settings
from backend.app.core.time import utc_now
from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user, get_optional_user
from backend.app.models.user import User
from backend.app.schemas.login import LoginRequest, LoginResponse, SessionResponse
from backend.app.schemas.user import UserRead

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(credentials: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == credentials.email.lower()).first()
    if not user or not user.hashed_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User is inactive")
    if not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")

    user.last_login = utc_now()
    db.commit()
    db.refresh(user)

    settings = get_settings()
    token = create_access_token(user_id=user.id)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        max_age=settings.access_token_expire_minutes * 60,
    )
    return {"access_token": token, "token_type": "bearer", "user": user}


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(get_settings().auth_cookie_name)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/session", response_model=SessionResponse)
def read_session(current_user: User | None = Depends(get_optional_user)):
    return {"authenticated": current_user is not None, "user": current_user}


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user

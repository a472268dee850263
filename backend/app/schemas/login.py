"""Login request and session schemas."""

from typing import Optional

from pydantic import BaseModel, EmailStr

from backend.app.schemas.user import UserRead


class LoginRequest(BaseModel):
    """Payload for login attempts."""

    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class SessionResponse(BaseModel):
    authenticated: bool
    user: Optional[UserRead] = None

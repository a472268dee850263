"""User schemas used for registration, staff management and responses."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)
    first_name: str = ""
    last_name: str = ""


class UserRead(BaseModel):
    id: int
    email: EmailStr
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    role: Optional[str] = None
    is_admin: bool = False
    is_active: bool = True
    permissions: List[str] = []
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class StaffCreate(BaseModel):
    email: EmailStr
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    role: Optional[str] = None
    is_admin: bool = False
    # When omitted a temporary password is generated and emailed
    password: Optional[str] = None


class StaffUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    is_admin: Optional[bool] = None
    reset_password: bool = False
    password: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=8)

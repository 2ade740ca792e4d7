"""Pydantic models for the auth domain."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(BaseModel):
    """A registered account. The password hash never leaves AuthDatabase."""

    id: UUID
    email: EmailStr
    role: UserRole = UserRole.USER
    is_active: bool = True
    created_at: datetime
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}


class Session(BaseModel):
    token: str = Field(..., description="Opaque session token")
    user_id: UUID
    role: UserRole = UserRole.USER
    created_at: datetime
    expires_at: datetime
    last_activity_at: datetime


class Credentials(BaseModel):
    """Body of register and login requests."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=256)


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1, max_length=256)


class AuthenticatedUser(BaseModel):
    """User and fresh session returned by login and register."""

    user: User
    session: Session

"""User-related Pydantic schemas."""

import re
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    """Schema for user registration."""

    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    phone: str | None = Field(None, min_length=5, max_length=30)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not re.search(r"[A-Za-z]", v) or not re.search(r"\d", v):
            raise ValueError("Password must contain at least one letter and one digit")
        return v


class UserLogin(BaseModel):
    """Schema for user login."""

    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    """Schema for exchanging a refresh token."""

    refresh_token: str


class TokenResponse(BaseModel):
    """Schema for issued tokens."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserRoleUpdate(BaseModel):
    """Schema for changing a user's role."""

    role: Literal["user", "admin"]


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    phone: str | None
    role: str
    is_active: bool
    created_at: datetime
    last_login_at: datetime | None


class UserListResponse(BaseModel):
    """Schema for paginated user list."""

    users: list[UserResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_prev: bool


class UserStats(BaseModel):
    """Account counts for the admin dashboard."""

    total_users: int
    total_admins: int
    regular_users: int
    new_today: int

"""API dependencies for authentication and common operations."""

from datetime import datetime
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import token_subject
from app.database import get_db
from app.domain.stay_policy import utc_now
from app.models.user import User
from app.services.booking_service import BookingLifecycleService, booking_service

__all__ = [
    "get_booking_service",
    "get_current_admin",
    "get_current_user",
    "get_db",
    "get_now",
]

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    if not credentials:
        raise AuthenticationError("Access denied. Please login.")

    user_id = token_subject(credentials.credentials, token_type="access")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    return user


async def get_current_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user and verify they are an admin."""
    if not current_user.is_admin:
        raise AuthorizationError("Access denied. Admin only.")
    return current_user


def get_booking_service() -> BookingLifecycleService:
    """Lifecycle service used by the booking endpoints."""
    return booking_service


def get_now() -> datetime:
    """Current instant; overridable in tests."""
    return utc_now()

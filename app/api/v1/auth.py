"""Authentication endpoints."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.core.exceptions import AuthenticationError, ValidationError
from app.core.middleware import login_limiter, register_limiter
from app.core.security import (
    create_tokens,
    get_password_hash,
    token_subject,
    verify_password,
)
from app.models.user import User
from app.schemas.user import (
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)

router = APIRouter()


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(register_limiter)],
)
async def register(
    user_data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Register a new user account."""
    email = str(user_data.email).lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise ValidationError("Email already registered")

    user = User(
        email=email,
        name=user_data.name.strip(),
        phone=user_data.phone.strip() if user_data.phone else None,
        password_hash=get_password_hash(user_data.password),
        role="user",
    )
    db.add(user)
    await db.flush()

    tokens = create_tokens(str(user.id), user.email, user.role)
    return TokenResponse(**tokens)


@router.post("/login", response_model=TokenResponse, dependencies=[Depends(login_limiter)])
async def login(
    credentials: UserLogin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Login with email and password."""
    result = await db.execute(
        select(User).where(User.email == str(credentials.email).lower())
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    user.last_login_at = datetime.now(UTC)

    tokens = create_tokens(str(user.id), user.email, user.role)
    return TokenResponse(**tokens)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    request: RefreshTokenRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Refresh access token using refresh token."""
    user_id = token_subject(request.refresh_token, token_type="refresh")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    tokens = create_tokens(str(user.id), user.email, user.role)
    return TokenResponse(**tokens)


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get the authenticated user's profile."""
    return current_user

"""Admin user management endpoints."""

from datetime import datetime
from math import ceil
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin, get_db, get_now
from app.core.exceptions import NotFoundError, ValidationError
from app.domain.stay_policy import local_day_bounds
from app.models.user import User
from app.schemas.user import UserListResponse, UserResponse, UserRoleUpdate, UserStats

router = APIRouter()


async def _get_user(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User", str(user_id))
    return user


@router.get("/stats", response_model=UserStats)
async def get_user_stats(
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> UserStats:
    """Account counts for the dashboard."""
    day_start, day_end = local_day_bounds(now)

    result = await db.execute(select(User.role, func.count()).group_by(User.role))
    by_role = {role: count for role, count in result.all()}

    today_result = await db.execute(
        select(func.count()).where(User.created_at >= day_start, User.created_at < day_end)
    )

    total = sum(by_role.values())
    admins = by_role.get("admin", 0)
    return UserStats(
        total_users=total,
        total_admins=admins,
        regular_users=total - admins,
        new_today=today_result.scalar() or 0,
    )


@router.get("/users", response_model=UserListResponse)
async def get_users(
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    search: str | None = Query(default=None, max_length=100),
    role: str | None = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
) -> UserListResponse:
    """List users, newest first.

    ``search`` matches name, email or phone, case-insensitively.
    """
    query = select(User)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(
            or_(
                User.name.ilike(pattern),
                User.email.ilike(pattern),
                User.phone.ilike(pattern),
            )
        )
    if role:
        query = query.where(User.role == role)

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    offset = (page - 1) * page_size
    result = await db.execute(
        query.order_by(User.created_at.desc()).offset(offset).limit(page_size)
    )

    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=ceil(total / page_size),
        has_next=page * page_size < total,
        has_prev=page > 1,
    )


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: UUID,
    request: UserRoleUpdate,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Promote or demote a user."""
    if user_id == admin.id and request.role != "admin":
        raise ValidationError("You cannot remove your own admin role")

    user = await _get_user(db, user_id)
    user.role = request.role
    await db.flush()
    return user


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: UUID,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Delete a user account."""
    if user_id == admin.id:
        raise ValidationError("You cannot delete your own account")

    user = await _get_user(db, user_id)
    await db.delete(user)
    await db.flush()
    return {"message": "User deleted successfully"}

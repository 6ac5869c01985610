#!/usr/bin/env python3
"""Create an admin user, or promote an existing account to admin."""

import argparse
import asyncio

from sqlalchemy import select

from app.core.security import get_password_hash
from app.database import close_db, get_db_context
from app.models.user import User


async def create_admin(
    email: str = "admin@hotelortus.com",
    password: str = "Admin@123",
    name: str = "Hotel Admin",
    reset_password: bool = False,
) -> None:
    """Create an admin user if it doesn't exist."""
    email = email.lower()
    async with get_db_context() as session:
        result = await session.execute(select(User).where(User.email == email))
        existing = result.scalar_one_or_none()

        if existing:
            existing.role = "admin"
            existing.is_active = True
            if reset_password:
                existing.password_hash = get_password_hash(password)
            print(f"Promoted existing user to admin: {email}")
        else:
            session.add(
                User(
                    email=email,
                    name=name,
                    password_hash=get_password_hash(password),
                    role="admin",
                    is_active=True,
                )
            )
            print(f"Created admin user: {email}")

    await close_db()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", default="admin@hotelortus.com", help="Admin email")
    parser.add_argument("--password", default="Admin@123", help="Admin password")
    parser.add_argument("--name", default="Hotel Admin", help="Display name")
    parser.add_argument(
        "--reset-password",
        action="store_true",
        help="Overwrite the password when the account already exists",
    )

    args = parser.parse_args()

    asyncio.run(
        create_admin(
            email=args.email,
            password=args.password,
            name=args.name,
            reset_password=args.reset_password,
        )
    )

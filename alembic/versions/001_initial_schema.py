"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-05-20

Creates the tables for the Hotel Ortus back-office:
- Users and authentication
- Bookings (status, payment, presence, extension, archive)
"""

from typing import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== USERS ====================
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("phone", sa.String(30)),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, index=True),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("room_type", sa.String(30), nullable=False),
        sa.Column("check_in", sa.Date, nullable=False, index=True),
        sa.Column("check_out", sa.Date, nullable=False, index=True),
        sa.Column("guests", sa.Integer, nullable=False, server_default="2"),
        sa.Column("special_requests", sa.Text, nullable=False, server_default=""),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("admin_notes", sa.Text, nullable=False, server_default=""),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="unpaid"),
        sa.Column("payment_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("paid_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("paid_at", sa.DateTime(timezone=True)),
        sa.Column("actual_check_in", sa.DateTime(timezone=True)),
        sa.Column("actual_check_out", sa.DateTime(timezone=True)),
        sa.Column("original_check_out", sa.Date),
        sa.Column("extended_by", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_archived", sa.Boolean, nullable=False, server_default=sa.false(), index=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("check_out > check_in", name="ck_bookings_stay_dates"),
    )

    # Auto-checkout sweep scans in-house stays
    op.create_index(
        "ix_bookings_in_house",
        "bookings",
        ["status"],
        postgresql_where=sa.text("actual_check_in IS NOT NULL AND actual_check_out IS NULL"),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("ix_bookings_in_house", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("users")

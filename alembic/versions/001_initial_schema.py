"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates all initial tables for the chauffeur booking backend:
- Active and completed job stores
- Driver accounts
- Notification outbox
"""

from typing import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _job_columns() -> list[sa.Column]:
    """Columns shared by ``pending_jobs`` and ``completed_jobs``."""
    return [
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("checkout_session_id", sa.String(255), unique=True, index=True),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("customer_email", sa.String(255), nullable=False, index=True),
        sa.Column("customer_phone", sa.String(50)),
        sa.Column("pickup", sa.Text, nullable=False),
        sa.Column("dropoff", sa.Text, nullable=False),
        sa.Column("pickup_time", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("vehicle_type", sa.String(50), nullable=False),
        sa.Column("notes", sa.Text, server_default=""),
        sa.Column("fare", sa.Numeric(10, 2), nullable=False),
        sa.Column("distance_km", sa.Numeric(10, 2)),
        sa.Column("duration_min", sa.Numeric(10, 2)),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("assigned_driver", sa.String(255), index=True),
        sa.Column("driver_payout", sa.Numeric(10, 2)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True)),
        sa.Column("responded_at", sa.DateTime(timezone=True)),
    ]


def upgrade() -> None:
    """Create all database tables."""

    # ==================== JOBS ====================
    op.create_table(
        "pending_jobs",
        *_job_columns(),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
    )

    op.create_table(
        "completed_jobs",
        *_job_columns(),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False, index=True),
    )

    # ==================== DRIVERS ====================
    op.create_table(
        "drivers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50)),
        sa.Column("password_hash", sa.String(255)),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
    )

    # ==================== NOTIFICATIONS ====================
    op.create_table(
        "outbox_messages",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("topic", sa.String(50), nullable=False, index=True),
        sa.Column("recipient", sa.String(255), nullable=False),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("text_body", sa.Text, nullable=False),
        sa.Column("html_body", sa.Text),
        sa.Column("booking_id", sa.String(32), index=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("max_attempts", sa.Integer, nullable=False, server_default="5"),
        sa.Column("next_attempt_at", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("last_error", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True)),
    )


def downgrade() -> None:
    """Drop all database tables in reverse order."""
    op.drop_table("outbox_messages")
    op.drop_table("drivers")
    op.drop_table("completed_jobs")
    op.drop_table("pending_jobs")

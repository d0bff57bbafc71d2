"""Job store database models.

A booking lives in exactly one of two tables: ``pending_jobs`` while it is
pending, assigned or confirmed, and ``completed_jobs`` once the trip is done.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class JobColumnsMixin:
    """Columns shared by the active and completed stores."""

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    checkout_session_id: Mapped[str | None] = mapped_column(
        String(255), unique=True, index=True
    )

    # Customer
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    customer_phone: Mapped[str | None] = mapped_column(String(50))

    # Trip
    pickup: Mapped[str] = mapped_column(Text, nullable=False)
    dropoff: Mapped[str] = mapped_column(Text, nullable=False)
    pickup_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    vehicle_type: Mapped[str] = mapped_column(String(50), nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="")

    # Pricing (dollars, client-facing total incl. taxes and margin)
    fare: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    distance_km: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    duration_min: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    # Lifecycle
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True
    )  # pending, assigned, confirmed, completed
    assigned_driver: Mapped[str | None] = mapped_column(String(255), index=True)
    driver_payout: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    assigned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class ActiveJob(JobColumnsMixin, Base):
    """Booking that has not been completed yet."""

    __tablename__ = "pending_jobs"

    # Compare-and-swap token, bumped on every write
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class CompletedJob(JobColumnsMixin, Base):
    """Booking whose trip is done. Never mutated after insert."""

    __tablename__ = "completed_jobs"

    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )


JOB_COLUMNS = (
    "id",
    "checkout_session_id",
    "customer_name",
    "customer_email",
    "customer_phone",
    "pickup",
    "dropoff",
    "pickup_time",
    "vehicle_type",
    "notes",
    "fare",
    "distance_km",
    "duration_min",
    "status",
    "assigned_driver",
    "driver_payout",
    "created_at",
    "assigned_at",
    "responded_at",
)

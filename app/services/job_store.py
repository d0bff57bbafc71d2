"""Job store: keyed storage for bookings split into active and completed tables.

The store performs no lifecycle validation. Callers check transitions with
``app.domain.booking_state`` and pass ``expected_version`` to make the write a
compare-and-swap.
"""

import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateKey, NotFoundError, StateConflict
from app.models.booking import JOB_COLUMNS, ActiveJob, CompletedJob

logger = logging.getLogger(__name__)


class JobStore:
    """Data access for the active (``pending_jobs``) and completed stores."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def exists(self, job_id: str) -> bool:
        """Check whether the id is present in either store."""
        for model in (ActiveJob, CompletedJob):
            result = await self.db.execute(select(model.id).where(model.id == job_id))
            if result.scalar_one_or_none() is not None:
                return True
        return False

    async def find_by_checkout_session(self, session_id: str) -> ActiveJob | CompletedJob | None:
        """Find the booking created from a payment-provider checkout session."""
        for model in (ActiveJob, CompletedJob):
            result = await self.db.execute(
                select(model).where(model.checkout_session_id == session_id)
            )
            job = result.scalar_one_or_none()
            if job is not None:
                return job
        return None

    async def insert(self, job: ActiveJob) -> ActiveJob:
        """Insert a new booking into the active store.

        Raises:
            DuplicateKey: If the id (or checkout session) is already stored
        """
        if await self.exists(job.id):
            raise DuplicateKey("Booking", job.id)
        if job.checkout_session_id and await self.find_by_checkout_session(job.checkout_session_id):
            raise DuplicateKey("Booking for checkout session", job.checkout_session_id)

        self.db.add(job)
        await self.db.flush()
        return job

    async def get(self, job_id: str) -> ActiveJob:
        """Get an active booking.

        Raises:
            NotFoundError: If the id is not in the active store
        """
        result = await self.db.execute(
            select(ActiveJob)
            .where(ActiveJob.id == job_id)
            .execution_options(populate_existing=True)
        )
        job = result.scalar_one_or_none()
        if not job:
            raise NotFoundError("Job", job_id)
        return job

    async def get_completed(self, job_id: str) -> CompletedJob:
        """Get a completed booking.

        Raises:
            NotFoundError: If the id is not in the completed store
        """
        result = await self.db.execute(select(CompletedJob).where(CompletedJob.id == job_id))
        job = result.scalar_one_or_none()
        if not job:
            raise NotFoundError("Completed job", job_id)
        return job

    async def update_status(
        self,
        job_id: str,
        new_status: str,
        fields: dict[str, Any] | None = None,
        expected_version: int | None = None,
    ) -> ActiveJob:
        """Write a new status (and any extra fields) to an active booking.

        Args:
            job_id: Booking id
            new_status: Status to write
            fields: Extra columns to set in the same statement
            expected_version: When given, only update if the row still has this version

        Raises:
            NotFoundError: If the id is not in the active store
            StateConflict: If the row changed since ``expected_version`` was read
        """
        job = await self.get(job_id)
        version = expected_version if expected_version is not None else job.version

        values = dict(fields or {})
        values["status"] = new_status
        values["version"] = version + 1

        result = await self.db.execute(
            update(ActiveJob)
            .where(ActiveJob.id == job_id, ActiveJob.version == version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.warning(f"Concurrent update lost for job {job_id} (expected version {version})")
            raise StateConflict(f"Job {job_id} was modified by another request")

        return await self.get(job_id)

    async def list_by_status(self, status: str) -> Sequence[ActiveJob]:
        """Active bookings with the given status, earliest pickup first."""
        result = await self.db.execute(
            select(ActiveJob)
            .where(ActiveJob.status == status)
            .order_by(ActiveJob.pickup_time.asc(), ActiveJob.id.asc())
        )
        return result.scalars().all()

    async def list_completed(self) -> Sequence[CompletedJob]:
        """Completed bookings, most recently completed first."""
        result = await self.db.execute(
            select(CompletedJob).order_by(CompletedJob.completed_at.desc(), CompletedJob.id.desc())
        )
        return result.scalars().all()

    async def list_by_driver(
        self, driver_email: str
    ) -> tuple[Sequence[ActiveJob], Sequence[CompletedJob]]:
        """Jobs attached to a driver as ``(active, completed)``.

        Active jobs are ordered by pickup time ascending, completed jobs by
        completion time descending.
        """
        active = await self.db.execute(
            select(ActiveJob)
            .where(ActiveJob.assigned_driver == driver_email)
            .order_by(ActiveJob.pickup_time.asc(), ActiveJob.id.asc())
        )
        completed = await self.db.execute(
            select(CompletedJob)
            .where(CompletedJob.assigned_driver == driver_email)
            .order_by(CompletedJob.completed_at.desc(), CompletedJob.id.desc())
        )
        return active.scalars().all(), completed.scalars().all()

    async def move_to_completed(
        self,
        job_id: str,
        driver_email: str,
        payout: Decimal,
        completed_at: datetime,
        expected_version: int | None = None,
    ) -> CompletedJob:
        """Copy an active booking into the completed store and delete the original.

        Both statements run in the caller's transaction, so either the booking
        ends up in exactly one store or the whole unit of work rolls back.

        Raises:
            NotFoundError: If the id is not in the active store
            StateConflict: If the row changed since ``expected_version`` was read
        """
        job = await self.get(job_id)
        version = expected_version if expected_version is not None else job.version

        values = {column: getattr(job, column) for column in JOB_COLUMNS}
        values.update(
            status="completed",
            assigned_driver=driver_email,
            driver_payout=payout,
        )

        removed = await self.db.execute(
            delete(ActiveJob)
            .where(ActiveJob.id == job_id, ActiveJob.version == version)
            .execution_options(synchronize_session=False)
        )
        if removed.rowcount == 0:
            raise StateConflict(f"Job {job_id} was modified by another request")
        self.db.expunge(job)

        completed = CompletedJob(**values, completed_at=completed_at)
        self.db.add(completed)
        await self.db.flush()
        return completed

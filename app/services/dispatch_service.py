"""Job dispatch: assignment, driver responses and completion.

Every transition goes through ``assert_booking_transition`` and is written as
a compare-and-swap on the job's version, so two requests racing on the same
job cannot both succeed.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.domain.booking_state import BookingStatus, assert_booking_transition
from app.models.booking import ActiveJob, CompletedJob
from app.services.job_store import JobStore
from app.services.notification_service import notification_service
from app.services.payout_service import calculate_driver_payout
from app.utils import email_content

logger = logging.getLogger(__name__)


def normalize_email(email: str | None) -> str:
    """Trim and lowercase a driver email.

    Raises:
        ValidationError: If the email is empty
    """
    normalized = (email or "").strip().lower()
    if not normalized:
        raise ValidationError("Driver email is required")
    return normalized


def _assert_driver(job: ActiveJob, driver_email: str) -> None:
    if job.assigned_driver != driver_email:
        raise AuthorizationError(f"Job {job.id} is not assigned to {driver_email}")


class DispatchService:
    """Moves jobs through the driver side of the lifecycle."""

    async def assign(self, db: AsyncSession, booking_id: str, driver_email: str) -> ActiveJob:
        """Assign a pending booking to a driver and fix the driver's payout.

        Raises:
            ValidationError: If the driver email is empty
            NotFoundError: If the booking is not in the active store
            StateConflict: If the booking is not pending or changed concurrently
        """
        driver_email = normalize_email(driver_email)
        store = JobStore(db)

        job = await store.get(booking_id)
        assert_booking_transition(job.status, BookingStatus.ASSIGNED)

        payout = calculate_driver_payout(job.fare)
        job = await store.update_status(
            booking_id,
            BookingStatus.ASSIGNED.value,
            {
                "assigned_driver": driver_email,
                "driver_payout": payout,
                "assigned_at": datetime.now(UTC),
                "responded_at": None,
            },
            expected_version=job.version,
        )
        logger.info(f"Job {booking_id} assigned to {driver_email} (payout ${payout})")

        subject, text, html = email_content.job_assigned(job)
        await notification_service.enqueue_email(
            db,
            topic=notification_service.JOB_ASSIGNED,
            recipient=driver_email,
            subject=subject,
            text_body=text,
            html_body=html,
            booking_id=job.id,
        )
        return job

    async def respond(
        self, db: AsyncSession, booking_id: str, driver_email: str, confirmed: bool
    ) -> ActiveJob:
        """Record a driver's acceptance or refusal of an assigned job.

        A refusal returns the job to pending with the driver fields cleared.

        Raises:
            NotFoundError: If the booking is not in the active store
            AuthorizationError: If the job is assigned to someone else
            StateConflict: If the job is not awaiting a response or changed concurrently
        """
        driver_email = normalize_email(driver_email)
        store = JobStore(db)

        job = await store.get(booking_id)
        _assert_driver(job, driver_email)

        if confirmed:
            assert_booking_transition(job.status, BookingStatus.CONFIRMED)
            job = await store.update_status(
                booking_id,
                BookingStatus.CONFIRMED.value,
                {"responded_at": datetime.now(UTC)},
                expected_version=job.version,
            )
            logger.info(f"Job {booking_id} confirmed by {driver_email}")
        else:
            assert_booking_transition(job.status, BookingStatus.PENDING)
            job = await store.update_status(
                booking_id,
                BookingStatus.PENDING.value,
                {
                    "assigned_driver": None,
                    "driver_payout": None,
                    "assigned_at": None,
                    "responded_at": None,
                },
                expected_version=job.version,
            )
            logger.info(f"Job {booking_id} refused by {driver_email}, back to pending")

        subject, text, html = email_content.driver_response(job, driver_email, confirmed)
        await notification_service.enqueue_email(
            db,
            topic=notification_service.DRIVER_RESPONSE,
            recipient=settings.operations_email,
            subject=subject,
            text_body=text,
            html_body=html,
            booking_id=job.id,
        )
        return job

    async def complete(self, db: AsyncSession, booking_id: str, driver_email: str) -> CompletedJob:
        """Mark a job done and move it to the completed store.

        Raises:
            NotFoundError: If the booking is unknown, already completed or has no driver yet
            AuthorizationError: If the job is assigned to someone else
            StateConflict: If the job changed concurrently
        """
        driver_email = normalize_email(driver_email)
        store = JobStore(db)

        job = await store.get(booking_id)
        if job.status == BookingStatus.PENDING.value or job.assigned_driver is None:
            raise NotFoundError("Job", booking_id)
        _assert_driver(job, driver_email)
        assert_booking_transition(job.status, BookingStatus.COMPLETED)

        # Payout was fixed at assignment
        completed = await store.move_to_completed(
            booking_id,
            driver_email,
            job.driver_payout,
            completed_at=datetime.now(UTC),
            expected_version=job.version,
        )
        logger.info(f"Job {booking_id} completed by {driver_email}")

        subject, text, html = email_content.job_completed(completed)
        await notification_service.enqueue_email(
            db,
            topic=notification_service.JOB_COMPLETED,
            recipient=settings.operations_email,
            subject=subject,
            text_body=text,
            html_body=html,
            booking_id=completed.id,
        )
        return completed


dispatch_service = DispatchService()

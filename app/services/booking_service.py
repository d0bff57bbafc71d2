"""Booking intake: turns a completed checkout session into a pending job."""

import logging
from datetime import UTC, datetime
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import ValidationError
from app.domain.booking_state import BookingStatus
from app.models.booking import ActiveJob
from app.schemas.booking import CheckoutMetadata
from app.services.job_store import JobStore
from app.services.notification_service import notification_service
from app.utils import email_content
from app.utils.booking_number import generate_booking_id

logger = logging.getLogger(__name__)


def parse_checkout_metadata(metadata: dict[str, Any] | None) -> CheckoutMetadata:
    """Validate booking fields from checkout metadata.

    Raises:
        ValidationError: On missing email, unparsable fields, or a fare below the minimum
    """
    try:
        data = CheckoutMetadata.model_validate(metadata or {})
    except PydanticValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ValidationError(f"Invalid booking data: {fields}", errors=e.errors())

    if not data.email:
        raise ValidationError("Customer email is required")
    if data.total_fare is None:
        raise ValidationError("Total fare is required")
    if data.total_fare < settings.minimum_fare:
        raise ValidationError(f"Total fare must be at least ${settings.minimum_fare}")

    if data.pickup_time.tzinfo is None:
        data.pickup_time = data.pickup_time.replace(tzinfo=ZoneInfo(settings.service_timezone))
    return data


class BookingIntakeService:
    """Creates bookings from payment notifications."""

    async def create_from_checkout(self, db: AsyncSession, session: dict[str, Any]) -> ActiveJob | None:
        """Create a pending booking from a paid checkout session.

        Args:
            db: Database session
            session: Checkout session object from the payment event

        Returns:
            ActiveJob: The new booking, or None if this session was already processed

        Raises:
            ValidationError: If the session metadata does not describe a valid booking
        """
        session_id = session.get("id")
        store = JobStore(db)

        if session_id:
            existing = await store.find_by_checkout_session(session_id)
            if existing is not None:
                logger.info(f"Checkout session {session_id} already produced booking {existing.id}")
                return None

        data = parse_checkout_metadata(session.get("metadata"))

        job = ActiveJob(
            id=await generate_booking_id(db),
            checkout_session_id=session_id,
            customer_name=data.name,
            customer_email=data.email,
            customer_phone=data.phone,
            pickup=data.pickup,
            dropoff=data.dropoff,
            pickup_time=data.pickup_time,
            vehicle_type=data.vehicle_type,
            notes=data.notes,
            fare=data.total_fare,
            distance_km=data.distance_km,
            duration_min=data.duration_min,
            status=BookingStatus.PENDING.value,
            assigned_driver=None,
            driver_payout=None,
            created_at=datetime.now(UTC),
            version=1,
        )
        await store.insert(job)
        logger.info(f"Booking {job.id} created from checkout session {session_id} (fare ${job.fare})")

        subject, text, html = email_content.booking_received(job)
        await notification_service.enqueue_email(
            db,
            topic=notification_service.BOOKING_RECEIVED,
            recipient=settings.operations_email,
            subject=subject,
            text_body=text,
            html_body=html,
            booking_id=job.id,
        )

        subject, text, html = email_content.booking_confirmation(job)
        await notification_service.enqueue_email(
            db,
            topic=notification_service.BOOKING_CONFIRMATION,
            recipient=job.customer_email,
            subject=subject,
            text_body=text,
            html_body=html,
            booking_id=job.id,
        )

        return job


booking_intake_service = BookingIntakeService()

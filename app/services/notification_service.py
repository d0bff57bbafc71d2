"""Notification Service for outbound email.

Emails are never sent inline by request handlers. Handlers enqueue an
``OutboxMessage`` in the same transaction as the state change, and the
dispatcher delivers due messages through SendGrid:
- Each message is claimed before sending, so concurrent dispatchers never send it twice
- Success marks the message ``sent``
- Failure records the error and reschedules with exponential backoff
- After ``max_attempts`` failures the message is ``failed`` until retried
"""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import ExternalServiceError, NotFoundError, StateConflict
from app.models.outbox import OutboxMessage

logger = logging.getLogger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


class NotificationService:
    """Service for queueing and delivering notification emails."""

    # Outbox topics
    BOOKING_RECEIVED = "booking_received"
    BOOKING_CONFIRMATION = "booking_confirmation"
    JOB_ASSIGNED = "job_assigned"
    DRIVER_RESPONSE = "driver_response"
    JOB_COMPLETED = "job_completed"

    def __init__(self) -> None:
        """Initialize notification service."""
        self._http_client: httpx.AsyncClient | None = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-load HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    # ==================== OUTBOX ====================

    async def enqueue_email(
        self,
        db: AsyncSession,
        topic: str,
        recipient: str,
        subject: str,
        text_body: str,
        html_body: str | None = None,
        booking_id: str | None = None,
    ) -> OutboxMessage:
        """Queue an email for delivery.

        Args:
            db: Database session (the caller's transaction)
            topic: Outbox topic
            recipient: Recipient email
            subject: Email subject
            text_body: Plain text body
            html_body: Optional HTML body
            booking_id: Related booking id

        Returns:
            OutboxMessage: Queued message
        """
        now = datetime.now(UTC)
        message = OutboxMessage(
            topic=topic,
            recipient=recipient,
            subject=subject,
            text_body=text_body,
            html_body=html_body,
            booking_id=booking_id,
            status="pending",
            attempts=0,
            max_attempts=settings.outbox_max_attempts,
            next_attempt_at=now,
            last_error=None,
            sent_at=None,
            created_at=now,
        )
        db.add(message)
        await db.flush()
        return message

    async def _claim(self, db: AsyncSession, message_id: str) -> OutboxMessage | None:
        """Take a due message for this dispatcher.

        The claim pushes ``next_attempt_at`` past the send window in a
        committed compare-and-swap, so concurrent dispatchers skip the row.
        If the claimer dies the message becomes due again after the window.
        """
        now = datetime.now(UTC)
        claimed = await db.execute(
            update(OutboxMessage)
            .where(
                OutboxMessage.id == message_id,
                OutboxMessage.status == "pending",
                OutboxMessage.next_attempt_at <= now,
            )
            .values(next_attempt_at=now + timedelta(seconds=settings.outbox_claim_seconds))
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        if claimed.rowcount == 0:
            return None

        result = await db.execute(
            select(OutboxMessage)
            .where(OutboxMessage.id == message_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def dispatch_pending(self, db: AsyncSession, limit: int | None = None) -> dict[str, int]:
        """Deliver due outbox messages.

        Each message is claimed and its outcome committed on its own, so a
        crash mid-batch never resends what already went out.

        Args:
            db: Database session (committed per message)
            limit: Maximum messages to process (defaults to settings)

        Returns:
            dict: Counts of sent, retried and failed messages
        """
        result = await db.execute(
            select(OutboxMessage.id)
            .where(
                OutboxMessage.status == "pending",
                OutboxMessage.next_attempt_at <= datetime.now(UTC),
            )
            .order_by(OutboxMessage.created_at.asc())
            .limit(limit or settings.outbox_batch_size)
        )
        message_ids = result.scalars().all()

        counts = {"sent": 0, "retried": 0, "failed": 0}
        for message_id in message_ids:
            message = await self._claim(db, message_id)
            if message is None:
                logger.debug(f"Outbox message {message_id} claimed by another dispatcher")
                continue

            try:
                await self.send_email(
                    to_email=message.recipient,
                    subject=message.subject,
                    text_content=message.text_body,
                    html_content=message.html_body,
                )
            except ExternalServiceError as e:
                message.attempts += 1
                message.last_error = e.detail
                if message.attempts >= message.max_attempts:
                    message.status = "failed"
                    counts["failed"] += 1
                    logger.error(
                        f"Outbox message {message.id} ({message.topic}) failed after "
                        f"{message.attempts} attempts: {e.detail}"
                    )
                else:
                    delay = settings.outbox_backoff_seconds * 2 ** (message.attempts - 1)
                    message.next_attempt_at = datetime.now(UTC) + timedelta(seconds=delay)
                    counts["retried"] += 1
                    logger.warning(
                        f"Outbox message {message.id} ({message.topic}) attempt "
                        f"{message.attempts} failed, retrying in {delay}s: {e.detail}"
                    )
                await db.commit()
                continue

            message.attempts += 1
            message.status = "sent"
            message.sent_at = datetime.now(UTC)
            message.last_error = None
            await db.commit()
            counts["sent"] += 1
            logger.info(f"Outbox message {message.id} ({message.topic}) sent to {message.recipient}")

        return counts

    async def list_messages(self, db: AsyncSession, status: str | None = None) -> Sequence[OutboxMessage]:
        """List outbox messages, newest first."""
        query = select(OutboxMessage).order_by(OutboxMessage.created_at.desc())
        if status:
            query = query.where(OutboxMessage.status == status)
        result = await db.execute(query)
        return result.scalars().all()

    async def retry(self, db: AsyncSession, message_id: str) -> OutboxMessage:
        """Put a failed message back in the queue with a fresh attempt budget."""
        result = await db.execute(select(OutboxMessage).where(OutboxMessage.id == message_id))
        message = result.scalar_one_or_none()
        if not message:
            raise NotFoundError("Outbox message", message_id)
        if message.status != "failed":
            raise StateConflict(f"Only failed messages can be retried (status is {message.status})")

        message.status = "pending"
        message.attempts = 0
        message.next_attempt_at = datetime.now(UTC)
        await db.flush()
        logger.info(f"Outbox message {message.id} re-queued")
        return message

    # ==================== EMAIL (SENDGRID) ====================

    async def send_email(
        self,
        to_email: str,
        subject: str,
        text_content: str,
        html_content: str | None = None,
    ) -> None:
        """Send an email via SendGrid.

        Args:
            to_email: Recipient email
            subject: Email subject
            text_content: Plain text body
            html_content: HTML body

        Raises:
            ExternalServiceError: If SendGrid is not configured or rejects the request
        """
        if not settings.sendgrid_api_key:
            raise ExternalServiceError("sendgrid", "API key not configured")

        headers = {
            "Authorization": f"Bearer {settings.sendgrid_api_key}",
            "Content-Type": "application/json",
        }

        content = [{"type": "text/plain", "value": text_content}]
        if html_content:
            content.append({"type": "text/html", "value": html_content})

        payload: dict[str, Any] = {
            "personalizations": [{"to": [{"email": to_email}]}],
            "from": {
                "email": settings.email_from_address,
                "name": settings.email_from_name,
            },
            "subject": subject,
            "content": content,
        }

        try:
            response = await self.http_client.post(SENDGRID_URL, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise ExternalServiceError("sendgrid", str(e))

        if response.status_code not in (200, 202):
            raise ExternalServiceError("sendgrid", f"HTTP {response.status_code}: {response.text[:200]}")


# Singleton instance
notification_service = NotificationService()

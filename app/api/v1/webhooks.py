"""Webhook endpoints for the payment provider."""

import json
import logging
from typing import Annotated, Any

import stripe
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.config import settings
from app.core.exceptions import DownstreamFailure, DuplicateKey, ValidationError
from app.services.booking_service import booking_intake_service

logger = logging.getLogger(__name__)

router = APIRouter()

BOOKING_EVENTS = ("checkout.session.completed", "checkout.session.async_payment_succeeded")
PAID_STATUSES = ("paid", "no_payment_required")


def construct_event(payload: bytes, signature: str | None) -> dict[str, Any]:
    """Verify the Stripe signature and return the event as a plain dict."""
    if not settings.stripe_webhook_secret:
        raise DownstreamFailure("Stripe webhook secret is not configured")

    try:
        stripe.Webhook.construct_event(payload, signature, settings.stripe_webhook_secret)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload")
    except stripe.SignatureVerificationError as e:
        logger.warning(f"Webhook signature verification failed: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature")

    return json.loads(payload)


@router.post("/stripe", status_code=status.HTTP_200_OK)
async def stripe_webhook(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    stripe_signature: str | None = Header(None, alias="Stripe-Signature"),
) -> dict:
    """Handle Stripe webhook events.

    Paid checkout sessions become pending bookings. Bad booking data is logged
    and acknowledged (a redelivery cannot fix it); database failures return 500
    so Stripe redelivers, and redeliveries of a stored session are ignored.
    """
    payload = await request.body()
    event = construct_event(payload, stripe_signature)

    event_type = event.get("type")
    logger.info(f"Webhook received: {event_type} ({event.get('id')})")

    if event_type in BOOKING_EVENTS:
        await _handle_checkout_session(db, event["data"]["object"])

    return {"received": True}


async def _handle_checkout_session(db: AsyncSession, session: dict[str, Any]) -> None:
    session_id = session.get("id")
    payment_status = session.get("payment_status")
    if payment_status and payment_status not in PAID_STATUSES:
        logger.info(f"Checkout session {session_id} not paid yet ({payment_status}), skipping")
        return

    try:
        await booking_intake_service.create_from_checkout(db, session)
        # Commit before acknowledging so a lost write is redelivered
        await db.commit()
    except ValidationError as e:
        logger.error(
            f"Rejected booking from checkout session {session_id}: {e.detail}; "
            f"metadata={session.get('metadata')}"
        )
    except DuplicateKey as e:
        logger.info(f"Ignoring duplicate checkout session {session_id}: {e.detail}")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception(f"Failed to store booking for checkout session {session_id}")
        raise DownstreamFailure("Failed to store booking") from e

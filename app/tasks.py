"""Celery background tasks for notification delivery."""

import asyncio
import logging

from celery import shared_task

from app.database import get_db_context
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)


# One loop per worker process, reused by every task
_loop = asyncio.new_event_loop()
asyncio.set_event_loop(_loop)


def run_async(coro):
    """Run async function in sync context."""
    return _loop.run_until_complete(coro)


@shared_task(bind=True, max_retries=3)
def dispatch_outbox(self):
    """Deliver due outbox messages.

    Delivery failures are recorded on the messages themselves; only
    infrastructure errors (database down) retry the task.
    """
    try:
        counts = run_async(_dispatch_outbox())
        return {"status": "success", **counts}
    except Exception as exc:
        self.retry(exc=exc, countdown=60)


async def _dispatch_outbox() -> dict[str, int]:
    async with get_db_context() as db:
        return await notification_service.dispatch_pending(db)


@shared_task
def report_failed_notifications():
    """Log outbox messages that ran out of attempts."""
    failed = run_async(_failed_messages())
    for message in failed:
        logger.warning(
            f"Notification {message['id']} ({message['topic']}) to {message['recipient']} "
            f"failed after {message['attempts']} attempts: {message['last_error']}"
        )
    return {"status": "success", "failed": len(failed)}


async def _failed_messages() -> list[dict]:
    async with get_db_context() as db:
        messages = await notification_service.list_messages(db, status="failed")
        return [
            {
                "id": m.id,
                "topic": m.topic,
                "recipient": m.recipient,
                "attempts": m.attempts,
                "last_error": m.last_error,
            }
            for m in messages
        ]

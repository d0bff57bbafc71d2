"""In-process background loop that drains the notification outbox."""

import asyncio
import logging

from app.config import settings
from app.database import get_db_context
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)

# Flag to stop the background task
_stop_outbox_dispatcher = False


async def run_outbox_dispatch() -> dict[str, int] | None:
    """Deliver one batch of due outbox messages."""
    try:
        async with get_db_context() as db:
            counts = await notification_service.dispatch_pending(db)
    except Exception as e:
        logger.error(f"Outbox dispatch failed: {e}")
        return None

    if any(counts.values()):
        logger.info(
            f"Outbox dispatch: sent={counts['sent']}, retried={counts['retried']}, "
            f"failed={counts['failed']}"
        )
    return counts


async def start_outbox_dispatcher() -> None:
    """Background task that drains the outbox every ``outbox_dispatch_interval_seconds``."""
    global _stop_outbox_dispatcher
    _stop_outbox_dispatcher = False

    interval = settings.outbox_dispatch_interval_seconds
    logger.info(f"Outbox dispatcher started (interval {interval}s)")

    while not _stop_outbox_dispatcher:
        await run_outbox_dispatch()
        await asyncio.sleep(interval)

    logger.info("Outbox dispatcher stopped")


def stop_outbox_dispatcher() -> None:
    """Signal the outbox dispatcher to stop."""
    global _stop_outbox_dispatcher
    _stop_outbox_dispatcher = True

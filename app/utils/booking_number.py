"""Booking id generation."""

import time

from sqlalchemy import select, union_all
from sqlalchemy.ext.asyncio import AsyncSession


async def generate_booking_id(db: AsyncSession) -> str:
    """Generate a unique booking id from the current time in milliseconds.

    Ids are checked against both stores; on a collision the next
    millisecond value is tried.

    Args:
        db: Database session for uniqueness check

    Returns:
        str: Unique id like '1718000000123'
    """
    from app.models.booking import ActiveJob, CompletedJob

    candidate = int(time.time() * 1000)
    while True:
        booking_id = str(candidate)
        result = await db.execute(
            union_all(
                select(ActiveJob.id).where(ActiveJob.id == booking_id),
                select(CompletedJob.id).where(CompletedJob.id == booking_id),
            )
        )
        if result.first() is None:
            return booking_id
        candidate += 1

"""Notification outbox schemas."""

from datetime import datetime

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from app.schemas.booking import CamelModel


class OutboxMessageResponse(CamelModel):
    """Queued email and its delivery state."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    topic: str
    recipient: str
    subject: str
    booking_id: str | None
    status: str
    attempts: int
    max_attempts: int
    next_attempt_at: datetime
    last_error: str | None
    created_at: datetime
    sent_at: datetime | None


class DispatchResult(CamelModel):
    sent: int
    retried: int
    failed: int

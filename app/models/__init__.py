"""Database models."""

from app.models.booking import ActiveJob, CompletedJob
from app.models.driver import Driver
from app.models.outbox import OutboxMessage

__all__ = [
    # Jobs
    "ActiveJob",
    "CompletedJob",
    # Drivers
    "Driver",
    # Notifications
    "OutboxMessage",
]

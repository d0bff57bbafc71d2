"""Celery worker configuration.

The worker drains the notification outbox on a beat schedule. Run it next to
the API when ``OUTBOX_DISPATCH_INTERVAL_SECONDS=0`` disables the in-process
dispatcher.
"""

from celery import Celery
from celery.schedules import crontab

from app.config import settings

# Create Celery app
celery_app = Celery(
    "chauffeur_tasks",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.tasks"],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.service_timezone,
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=300,  # 5 minutes max
    task_soft_time_limit=240,

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=2,

    result_expires=3600,

    # Retry settings
    task_default_retry_delay=60,
    task_max_retries=3,

    beat_schedule={
        "dispatch-notification-outbox": {
            "task": "app.tasks.dispatch_outbox",
            "schedule": crontab(minute="*"),
        },
        "report-failed-notifications": {
            "task": "app.tasks.report_failed_notifications",
            "schedule": crontab(hour=8, minute=0),
        },
    },
)


if __name__ == "__main__":
    celery_app.start()

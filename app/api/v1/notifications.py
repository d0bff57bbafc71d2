"""Notification outbox endpoints for operations staff."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.database import commit_or_fail
from app.schemas.notification import DispatchResult, OutboxMessageResponse
from app.services.notification_service import notification_service

router = APIRouter()


@router.get("/outbox", response_model=list[OutboxMessageResponse])
async def list_outbox(
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: str | None = Query(default=None, alias="status", pattern="^(pending|sent|failed)$"),
) -> list[OutboxMessageResponse]:
    """Queued, sent and failed emails."""
    messages = await notification_service.list_messages(db, status_filter)
    return [OutboxMessageResponse.model_validate(m) for m in messages]


@router.post("/outbox/{message_id}/retry", response_model=OutboxMessageResponse)
async def retry_message(
    message_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> OutboxMessageResponse:
    """Re-queue a message that exhausted its attempts."""
    message = await notification_service.retry(db, message_id)
    await commit_or_fail(db)
    return OutboxMessageResponse.model_validate(message)


@router.post("/outbox/dispatch", response_model=DispatchResult)
async def dispatch_outbox(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DispatchResult:
    """Deliver due messages now instead of waiting for the dispatcher."""
    counts = await notification_service.dispatch_pending(db)
    return DispatchResult(**counts)

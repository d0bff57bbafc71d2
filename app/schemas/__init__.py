"""Pydantic schemas for API validation."""

from app.schemas.booking import (
    AssignJobRequest,
    AssignJobResponse,
    BookingResponse,
    CheckoutMetadata,
    CompletedBookingResponse,
    CompleteJobRequest,
    DriverJobsRequest,
    DriverJobsResponse,
    DriverResponseRequest,
    JobActionResponse,
    RefuseJobRequest,
    UpdateJobRequest,
)
from app.schemas.driver import (
    DriverCheckRequest,
    DriverCheckResponse,
    DriverCreate,
    DriverLoginRequest,
    DriverLoginResponse,
    DriverResponse,
    DriverSetPasswordRequest,
    MessageResponse,
)
from app.schemas.notification import DispatchResult, OutboxMessageResponse

__all__ = [
    # Booking
    "CheckoutMetadata",
    "BookingResponse",
    "CompletedBookingResponse",
    "DriverJobsRequest",
    "DriverJobsResponse",
    "AssignJobRequest",
    "AssignJobResponse",
    "DriverResponseRequest",
    "RefuseJobRequest",
    "CompleteJobRequest",
    "UpdateJobRequest",
    "JobActionResponse",
    # Driver
    "DriverCreate",
    "DriverResponse",
    "DriverCheckRequest",
    "DriverCheckResponse",
    "DriverSetPasswordRequest",
    "DriverLoginRequest",
    "DriverLoginResponse",
    "MessageResponse",
    # Notification
    "OutboxMessageResponse",
    "DispatchResult",
]

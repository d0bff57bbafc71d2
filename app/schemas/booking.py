"""Booking-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema with camelCase JSON keys; snake_case is accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckoutMetadata(BaseModel):
    """Booking fields carried in the checkout session metadata."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = ""
    email: str = ""
    phone: str | None = None
    pickup: str = Field(..., min_length=1)
    dropoff: str = Field(..., min_length=1)
    pickup_time: datetime = Field(..., alias="datetime")
    vehicle_type: str = Field(..., alias="vehicleType", min_length=1)
    total_fare: Decimal | None = Field(None, alias="totalFare")
    distance_km: Decimal | None = Field(None, alias="distanceKm")
    duration_min: Decimal | None = Field(None, alias="durationMin")
    notes: str = ""

    @field_validator("total_fare", "distance_km", "duration_min", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        if isinstance(v, str) and v.strip().upper() in ("", "N/A", "NAN", "NULL", "UNDEFINED"):
            return None
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class BookingResponse(CamelModel):
    """Active booking as returned by the query endpoints."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    customer_name: str
    customer_email: str
    customer_phone: str | None
    pickup: str
    dropoff: str
    pickup_time: datetime
    vehicle_type: str
    notes: str
    fare: Decimal
    distance_km: Decimal | None
    duration_min: Decimal | None
    status: str
    assigned_driver: str | None
    driver_payout: Decimal | None
    created_at: datetime
    assigned_at: datetime | None
    responded_at: datetime | None


class CompletedBookingResponse(BookingResponse):
    """Completed booking."""

    completed_at: datetime


class DriverJobsResponse(CamelModel):
    """Jobs attached to one driver."""

    assigned_jobs: list[BookingResponse]
    completed_jobs: list[CompletedBookingResponse]


class DriverJobsRequest(CamelModel):
    """Body for looking up a driver's jobs."""

    email: str = Field(..., min_length=1)


class AssignJobRequest(CamelModel):
    """Body for assigning a pending booking to a driver."""

    booking_id: str = Field(..., min_length=1, validation_alias=AliasChoices("bookingId", "booking_id", "jobId", "job_id"))
    driver_email: str = Field(..., min_length=1)


class AssignJobResponse(CamelModel):
    success: bool = True
    job_id: str
    driver_email: str
    driver_payout: Decimal
    message: str


class DriverResponseRequest(CamelModel):
    """Body for a driver accepting or refusing an assigned job."""

    job_id: str = Field(..., min_length=1)
    driver_email: str = Field(..., min_length=1)
    confirmed: bool


class RefuseJobRequest(CamelModel):
    job_id: str = Field(..., min_length=1)
    driver_email: str = Field(..., min_length=1)


class CompleteJobRequest(CamelModel):
    job_id: str = Field(..., min_length=1)
    driver_email: str = Field(..., min_length=1)


class UpdateJobRequest(CamelModel):
    """Driver portal's single update endpoint."""

    job_id: str = Field(..., min_length=1)
    driver_email: str = Field(..., min_length=1)
    status: str = Field(..., pattern="^(confirmed|refused|completed)$")


class JobActionResponse(CamelModel):
    """Acknowledgement for a job state change."""

    success: bool = True
    job_id: str
    status: str
    message: str
    completed_at: datetime | None = None

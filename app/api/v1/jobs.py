"""Job endpoints for operations staff and the driver portal."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import DriverClaims, assert_token_matches, get_db
from app.database import commit_or_fail
from app.domain.booking_state import BookingStatus
from app.schemas.booking import (
    AssignJobRequest,
    AssignJobResponse,
    BookingResponse,
    CompletedBookingResponse,
    CompleteJobRequest,
    DriverJobsRequest,
    DriverJobsResponse,
    DriverResponseRequest,
    JobActionResponse,
    RefuseJobRequest,
    UpdateJobRequest,
)
from app.services.dispatch_service import dispatch_service, normalize_email
from app.services.job_store import JobStore

router = APIRouter()


# ==================== QUERIES ====================


@router.get("/pending", response_model=list[BookingResponse])
async def get_pending_jobs(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[BookingResponse]:
    """All bookings waiting for a driver."""
    jobs = await JobStore(db).list_by_status(BookingStatus.PENDING.value)
    return [BookingResponse.model_validate(job) for job in jobs]


@router.get("/completed", response_model=list[CompletedBookingResponse])
async def get_completed_jobs(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[CompletedBookingResponse]:
    """All completed bookings, most recent first."""
    jobs = await JobStore(db).list_completed()
    return [CompletedBookingResponse.model_validate(job) for job in jobs]


async def _driver_jobs(db: AsyncSession, email: str) -> DriverJobsResponse:
    active, completed = await JobStore(db).list_by_driver(normalize_email(email))
    return DriverJobsResponse(
        assigned_jobs=[BookingResponse.model_validate(job) for job in active],
        completed_jobs=[CompletedBookingResponse.model_validate(job) for job in completed],
    )


@router.get("/driver", response_model=DriverJobsResponse)
async def get_driver_jobs(
    db: Annotated[AsyncSession, Depends(get_db)],
    claims: DriverClaims,
    email: str = Query(..., min_length=1),
) -> DriverJobsResponse:
    """Active and completed jobs for one driver."""
    assert_token_matches(claims, email)
    return await _driver_jobs(db, email)


@router.post("/driver", response_model=DriverJobsResponse)
async def post_driver_jobs(
    request: DriverJobsRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    claims: DriverClaims,
) -> DriverJobsResponse:
    """Same as ``GET /driver`` with the email in the body."""
    assert_token_matches(claims, request.email)
    return await _driver_jobs(db, request.email)


# ==================== TRANSITIONS ====================


@router.post("/assign", response_model=AssignJobResponse)
async def assign_job(
    request: AssignJobRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AssignJobResponse:
    """Assign a pending booking to a driver."""
    job = await dispatch_service.assign(db, request.booking_id, request.driver_email)
    await commit_or_fail(db)
    return AssignJobResponse(
        job_id=job.id,
        driver_email=job.assigned_driver,
        driver_payout=job.driver_payout,
        message=f"Job assigned to {job.assigned_driver}",
    )


@router.post("/driver-response", response_model=JobActionResponse)
async def driver_response(
    request: DriverResponseRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    claims: DriverClaims,
) -> JobActionResponse:
    """Driver accepts or refuses an assigned job."""
    assert_token_matches(claims, request.driver_email)
    job = await dispatch_service.respond(db, request.job_id, request.driver_email, request.confirmed)
    await commit_or_fail(db)
    message = "Job confirmed" if request.confirmed else "Job refused, back to pending"
    return JobActionResponse(job_id=job.id, status=job.status, message=message)


@router.post("/refuse", response_model=JobActionResponse)
async def refuse_job(
    request: RefuseJobRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    claims: DriverClaims,
) -> JobActionResponse:
    """Driver refuses an assigned job."""
    assert_token_matches(claims, request.driver_email)
    job = await dispatch_service.respond(db, request.job_id, request.driver_email, confirmed=False)
    await commit_or_fail(db)
    return JobActionResponse(job_id=job.id, status=job.status, message="Job refused, back to pending")


@router.post("/complete", response_model=JobActionResponse)
async def complete_job(
    request: CompleteJobRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    claims: DriverClaims,
) -> JobActionResponse:
    """Driver marks a job as done."""
    assert_token_matches(claims, request.driver_email)
    job = await dispatch_service.complete(db, request.job_id, request.driver_email)
    await commit_or_fail(db)
    return JobActionResponse(
        job_id=job.id,
        status=job.status,
        message="Job completed",
        completed_at=job.completed_at,
    )


@router.post("/update", response_model=JobActionResponse)
async def update_job(
    request: UpdateJobRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    claims: DriverClaims,
) -> JobActionResponse:
    """Driver portal's combined confirm / refuse / complete endpoint."""
    assert_token_matches(claims, request.driver_email)

    if request.status == "completed":
        completed = await dispatch_service.complete(db, request.job_id, request.driver_email)
        await commit_or_fail(db)
        return JobActionResponse(
            job_id=completed.id,
            status=completed.status,
            message="Job completed",
            completed_at=completed.completed_at,
        )

    confirmed = request.status == "confirmed"
    job = await dispatch_service.respond(db, request.job_id, request.driver_email, confirmed)
    await commit_or_fail(db)
    message = "Job confirmed" if confirmed else "Job refused, back to pending"
    return JobActionResponse(job_id=job.id, status=job.status, message=message)

"""Driver account endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.core.security import create_driver_token
from app.database import commit_or_fail
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
from app.services.driver_service import driver_service

router = APIRouter()


@router.post("", response_model=DriverResponse, status_code=status.HTTP_201_CREATED)
async def register_driver(
    driver_data: DriverCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DriverResponse:
    """Register a driver who can then set a password and log in."""
    driver = await driver_service.register(db, driver_data.email, driver_data.name, driver_data.phone)
    await commit_or_fail(db)
    return DriverResponse.model_validate(driver)


@router.get("", response_model=list[DriverResponse])
async def list_drivers(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[DriverResponse]:
    """All registered drivers."""
    drivers = await driver_service.list_drivers(db)
    return [DriverResponse.model_validate(d) for d in drivers]


@router.post("/check", response_model=DriverCheckResponse)
async def check_driver(
    request: DriverCheckRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DriverCheckResponse:
    """Tell the portal whether this driver still has to set a password."""
    return DriverCheckResponse(needs_password=await driver_service.needs_password(db, request.email))


@router.post("/set-password", response_model=MessageResponse)
async def set_password(
    request: DriverSetPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Set (or reset) a driver's portal password."""
    await driver_service.set_password(db, request.email, request.new_password)
    await commit_or_fail(db)
    return MessageResponse(message="Password set successfully")


@router.post("/login", response_model=DriverLoginResponse)
async def login(
    request: DriverLoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DriverLoginResponse:
    """Log a driver in and issue a portal token."""
    driver = await driver_service.authenticate(db, request.email, request.password)
    await commit_or_fail(db)
    return DriverLoginResponse(
        driver=DriverResponse.model_validate(driver),
        access_token=create_driver_token(driver.id, driver.email),
    )

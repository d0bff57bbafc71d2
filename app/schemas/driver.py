"""Driver account Pydantic schemas."""

from datetime import datetime

from pydantic import ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.booking import CamelModel


class DriverCreate(CamelModel):
    """Schema for registering a driver."""

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=50)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()


class DriverResponse(CamelModel):
    """Driver as returned by the API (never includes the password hash)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    email: str
    name: str
    phone: str | None = None
    is_active: bool
    needs_password: bool
    created_at: datetime | None = None
    last_login_at: datetime | None = None


class DriverCheckRequest(CamelModel):
    email: str = Field(..., min_length=1)


class DriverCheckResponse(CamelModel):
    needs_password: bool


class DriverSetPasswordRequest(CamelModel):
    email: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


class DriverLoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class DriverLoginResponse(CamelModel):
    success: bool = True
    driver: DriverResponse
    access_token: str
    token_type: str = "bearer"


class MessageResponse(CamelModel):
    success: bool = True
    message: str

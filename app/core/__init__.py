"""Core utilities and security modules."""

from app.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    DownstreamFailure,
    DuplicateKey,
    ExternalServiceError,
    NotFoundError,
    StateConflict,
    ValidationError,
)
from app.core.security import (
    create_access_token,
    create_driver_token,
    get_password_hash,
    verify_password,
    verify_token,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "DownstreamFailure",
    "DuplicateKey",
    "ExternalServiceError",
    "NotFoundError",
    "StateConflict",
    "ValidationError",
    "create_access_token",
    "create_driver_token",
    "get_password_hash",
    "verify_password",
    "verify_token",
]

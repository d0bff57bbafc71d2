"""API dependencies for sessions and driver portal tokens."""

from typing import Annotated, Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import AuthorizationError
from app.core.security import verify_token
from app.database import get_db

__all__ = ["get_db", "get_driver_claims", "DriverClaims", "assert_token_matches"]


async def get_driver_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(HTTPBearer(auto_error=False))],
) -> dict[str, Any] | None:
    """Decode the driver's bearer token if one was sent.

    Driver endpoints still identify the driver by the email in the body;
    a token, when present, must belong to that email.
    """
    if not credentials:
        return None
    return verify_token(credentials.credentials, token_type="access")


DriverClaims = Annotated[dict[str, Any] | None, Depends(get_driver_claims)]


def assert_token_matches(claims: dict[str, Any] | None, driver_email: str) -> None:
    """Reject requests whose token belongs to a different driver."""
    if claims is None:
        return
    token_email = str(claims.get("email", "")).strip().lower()
    if token_email != driver_email.strip().lower():
        raise AuthorizationError("Token does not belong to this driver")

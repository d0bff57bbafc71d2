"""Driver accounts for the driver portal."""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthenticationError, DuplicateKey, NotFoundError
from app.core.security import get_password_hash, verify_password
from app.models.driver import Driver

logger = logging.getLogger(__name__)


class DriverService:
    """Registration, password setup and login for drivers."""

    async def get_by_email(self, db: AsyncSession, email: str) -> Driver | None:
        result = await db.execute(select(Driver).where(Driver.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def register(
        self, db: AsyncSession, email: str, name: str, phone: str | None = None
    ) -> Driver:
        """Add a driver. The driver sets a password on first portal visit."""
        email = email.strip().lower()
        if await self.get_by_email(db, email):
            raise DuplicateKey("Driver", email)

        driver = Driver(
            email=email,
            name=name,
            phone=phone,
            password_hash=None,
            is_active=True,
            created_at=datetime.now(UTC),
            last_login_at=None,
        )
        db.add(driver)
        await db.flush()
        logger.info(f"Driver {email} registered")
        return driver

    async def list_drivers(self, db: AsyncSession) -> Sequence[Driver]:
        result = await db.execute(select(Driver).order_by(Driver.name.asc()))
        return result.scalars().all()

    async def needs_password(self, db: AsyncSession, email: str) -> bool:
        """True when a known driver has not set a password yet."""
        driver = await self.get_by_email(db, email)
        if not driver:
            return False
        return driver.needs_password

    async def set_password(self, db: AsyncSession, email: str, new_password: str) -> Driver:
        driver = await self.get_by_email(db, email)
        if not driver:
            raise NotFoundError("Driver email")

        driver.password_hash = get_password_hash(new_password)
        await db.flush()
        logger.info(f"Password set for driver {driver.email}")
        return driver

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> Driver:
        """Check credentials and stamp the login time.

        Raises:
            AuthenticationError: On unknown email, missing/incorrect password or inactive account
        """
        driver = await self.get_by_email(db, email)
        if not driver or not driver.password_hash or not verify_password(password, driver.password_hash):
            raise AuthenticationError("Invalid email or password")
        if not driver.is_active:
            raise AuthenticationError("Driver account is deactivated")

        driver.last_login_at = datetime.now(UTC)
        await db.flush()
        return driver


driver_service = DriverService()

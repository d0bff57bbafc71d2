"""
Pytest configuration and fixtures.

Tests run against an in-memory SQLite database; the app's ``get_db``
dependency is overridden to hand out sessions bound to it.
"""
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.database import Base, get_db
from app.main import app
from app.models.booking import ActiveJob
from app.services.notification_service import notification_service


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], Any]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, Any]:
    """Session for service-level tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, Any]:
    """HTTP client with the database dependency pointed at the test engine."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def sent_emails(monkeypatch) -> list[dict[str, Any]]:
    """Capture outgoing emails instead of calling SendGrid."""
    sent: list[dict[str, Any]] = []

    async def fake_send_email(to_email, subject, text_content, html_content=None):
        sent.append({"to": to_email, "subject": subject, "text": text_content})

    monkeypatch.setattr(notification_service, "send_email", fake_send_email)
    return sent


def build_job(
    job_id: str = "1760000000000",
    fare: str = "100.00",
    status: str = "pending",
    pickup_in_hours: int = 24,
    **overrides: Any,
) -> ActiveJob:
    """Build an unsaved active job with sensible defaults."""
    now = datetime.now(UTC)
    values: dict[str, Any] = {
        "id": job_id,
        "checkout_session_id": f"cs_test_{job_id}",
        "customer_name": "Jane Citizen",
        "customer_email": "jane@example.com",
        "customer_phone": "+61400000000",
        "pickup": "Sydney Airport T1",
        "dropoff": "Four Seasons Sydney",
        "pickup_time": now + timedelta(hours=pickup_in_hours),
        "vehicle_type": "sedan",
        "notes": "",
        "fare": Decimal(fare),
        "distance_km": Decimal("12.40"),
        "duration_min": Decimal("25"),
        "status": status,
        "assigned_driver": None,
        "driver_payout": None,
        "created_at": now,
        "assigned_at": None,
        "responded_at": None,
        "version": 1,
    }
    values.update(overrides)
    return ActiveJob(**values)


@pytest_asyncio.fixture
async def pending_job(session_factory) -> ActiveJob:
    """A committed pending job with a $100 fare."""
    job = build_job()
    async with session_factory() as session:
        session.add(job)
        await session.commit()
    return job

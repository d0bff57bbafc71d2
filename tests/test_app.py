"""
Tests for application wiring: health, error bodies, headers and the
background outbox dispatcher.
"""
from contextlib import asynccontextmanager

from app.core import background_tasks
from app.services.notification_service import notification_service


class TestApplication:
    async def test_health(self, client) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_unknown_route_uses_error_body(self, client) -> None:
        response = await client.get("/api/v1/nowhere")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}

    async def test_response_headers(self, client) -> None:
        response = await client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Request-ID" in response.headers
        assert response.headers["X-Response-Time"].endswith("s")


class TestOutboxDispatcher:
    async def test_run_outbox_dispatch(self, session_factory, monkeypatch, sent_emails) -> None:
        @asynccontextmanager
        async def test_db_context():
            async with session_factory() as session:
                yield session
                await session.commit()

        monkeypatch.setattr(background_tasks, "get_db_context", test_db_context)

        async with session_factory() as session:
            await notification_service.enqueue_email(
                session,
                topic=notification_service.JOB_COMPLETED,
                recipient="ops@example.com",
                subject="Job completed",
                text_body="Done",
            )
            await session.commit()

        counts = await background_tasks.run_outbox_dispatch()
        assert counts == {"sent": 1, "retried": 0, "failed": 0}
        assert sent_emails[0]["subject"] == "Job completed"

    async def test_run_outbox_dispatch_swallows_errors(self, monkeypatch) -> None:
        @asynccontextmanager
        async def broken_db_context():
            raise RuntimeError("database unavailable")
            yield

        monkeypatch.setattr(background_tasks, "get_db_context", broken_db_context)
        assert await background_tasks.run_outbox_dispatch() is None

"""
Tests for the job endpoints.
"""
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_driver_token
from app.services.job_store import JobStore

DRIVER = "driver@example.com"


async def assign(client, job_id: str = "1760000000000", driver: str = DRIVER):
    return await client.post("/api/v1/jobs/assign", json={"bookingId": job_id, "driverEmail": driver})


class TestQueries:
    async def test_pending(self, client, pending_job) -> None:
        response = await client.get("/api/v1/jobs/pending")

        assert response.status_code == 200
        jobs = response.json()
        assert [job["id"] for job in jobs] == [pending_job.id]
        assert jobs[0]["customerName"] == "Jane Citizen"
        assert jobs[0]["assignedDriver"] is None

    async def test_completed_empty(self, client) -> None:
        response = await client.get("/api/v1/jobs/completed")
        assert response.status_code == 200
        assert response.json() == []

    async def test_driver_jobs_requires_email(self, client) -> None:
        response = await client.get("/api/v1/jobs/driver")
        assert response.status_code == 400
        assert "error" in response.json()


class TestAssign:
    async def test_assign(self, client, pending_job) -> None:
        response = await assign(client, driver="Driver@Example.com")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["jobId"] == pending_job.id
        assert body["driverEmail"] == DRIVER
        assert body["driverPayout"] == "68.97"

        assert (await client.get("/api/v1/jobs/pending")).json() == []

    async def test_snake_case_body(self, client, pending_job) -> None:
        response = await client.post(
            "/api/v1/jobs/assign", json={"booking_id": pending_job.id, "driver_email": DRIVER}
        )
        assert response.status_code == 200

    async def test_unknown_job(self, client) -> None:
        response = await assign(client, job_id="missing")
        assert response.status_code == 404
        assert response.json() == {"error": "Job with ID 'missing' not found"}

    async def test_missing_fields(self, client) -> None:
        response = await client.post("/api/v1/jobs/assign", json={"bookingId": "1"})
        assert response.status_code == 400
        assert "driverEmail" in response.json()["error"]

    async def test_already_assigned(self, client, pending_job) -> None:
        await assign(client)
        response = await assign(client, driver="other@example.com")
        assert response.status_code == 400
        assert "error" in response.json()


class TestDriverFlow:
    async def test_confirm_then_complete(self, client, pending_job) -> None:
        await assign(client)

        response = await client.post(
            "/api/v1/jobs/driver-response",
            json={"jobId": pending_job.id, "driverEmail": DRIVER, "confirmed": True},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"

        response = await client.post(
            "/api/v1/jobs/complete", json={"jobId": pending_job.id, "driverEmail": DRIVER}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "completed"
        assert body["completedAt"] is not None

        completed = (await client.get("/api/v1/jobs/completed")).json()
        assert [job["id"] for job in completed] == [pending_job.id]
        assert completed[0]["driverPayout"] == "68.97"

        mine = (await client.get("/api/v1/jobs/driver", params={"email": DRIVER})).json()
        assert mine["assignedJobs"] == []
        assert [job["id"] for job in mine["completedJobs"]] == [pending_job.id]

    async def test_refuse(self, client, pending_job) -> None:
        await assign(client)

        response = await client.post(
            "/api/v1/jobs/refuse", json={"jobId": pending_job.id, "driverEmail": DRIVER}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "pending"

        pending = (await client.get("/api/v1/jobs/pending")).json()
        assert pending[0]["assignedDriver"] is None
        assert pending[0]["driverPayout"] is None

    @pytest.mark.parametrize("status,expected", [("confirmed", "confirmed"), ("refused", "pending")])
    async def test_update_endpoint(self, client, pending_job, status, expected) -> None:
        await assign(client)

        response = await client.post(
            "/api/v1/jobs/update",
            json={"jobId": pending_job.id, "driverEmail": DRIVER, "status": status},
        )
        assert response.status_code == 200
        assert response.json()["status"] == expected

    async def test_update_rejects_unknown_status(self, client, pending_job) -> None:
        response = await client.post(
            "/api/v1/jobs/update",
            json={"jobId": pending_job.id, "driverEmail": DRIVER, "status": "cancelled"},
        )
        assert response.status_code == 400

    async def test_wrong_driver(self, client, pending_job) -> None:
        await assign(client)

        response = await client.post(
            "/api/v1/jobs/complete",
            json={"jobId": pending_job.id, "driverEmail": "intruder@example.com"},
        )
        assert response.status_code == 403
        assert "error" in response.json()

    async def test_complete_unknown(self, client) -> None:
        response = await client.post(
            "/api/v1/jobs/complete", json={"jobId": "missing", "driverEmail": DRIVER}
        )
        assert response.status_code == 404

    async def test_complete_unassigned_job(self, client, pending_job) -> None:
        response = await client.post(
            "/api/v1/jobs/complete", json={"jobId": pending_job.id, "driverEmail": DRIVER}
        )
        assert response.status_code == 404
        assert (await client.get("/api/v1/jobs/pending")).json()[0]["id"] == pending_job.id

    async def test_post_driver_jobs(self, client, pending_job) -> None:
        await assign(client)

        response = await client.post("/api/v1/jobs/driver", json={"email": DRIVER})
        assert response.status_code == 200
        assert [job["id"] for job in response.json()["assignedJobs"]] == [pending_job.id]


class TestDriverToken:
    async def test_matching_token_accepted(self, client, pending_job) -> None:
        await assign(client)
        token = create_driver_token("driver-1", DRIVER)

        response = await client.get(
            "/api/v1/jobs/driver",
            params={"email": DRIVER},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 200

    async def test_token_for_other_driver_rejected(self, client, pending_job) -> None:
        await assign(client)
        token = create_driver_token("driver-2", "other@example.com")

        response = await client.post(
            "/api/v1/jobs/driver-response",
            json={"jobId": pending_job.id, "driverEmail": DRIVER, "confirmed": True},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 403

    async def test_garbage_token_rejected(self, client) -> None:
        response = await client.get(
            "/api/v1/jobs/driver",
            params={"email": DRIVER},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401


class TestCommitFailure:
    async def test_assign_not_acknowledged_when_commit_fails(
        self, client, session_factory, pending_job, monkeypatch
    ) -> None:
        async def failing_commit(self):
            raise OperationalError("COMMIT", {}, Exception("database is unavailable"))

        monkeypatch.setattr(AsyncSession, "commit", failing_commit)
        response = await assign(client)
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to save changes"}

        async with session_factory() as session:
            job = await JobStore(session).get(pending_job.id)
            assert job.status == "pending"
            assert job.assigned_driver is None

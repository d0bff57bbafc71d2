"""
Tests for the two-table job store.
"""
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from app.core.exceptions import DuplicateKey, NotFoundError, StateConflict
from app.services.job_store import JobStore
from tests.conftest import build_job


class TestInsertAndGet:
    async def test_insert_then_get(self, db) -> None:
        store = JobStore(db)
        await store.insert(build_job("1001"))

        job = await store.get("1001")
        assert job.status == "pending"
        assert job.fare == Decimal("100.00")
        assert await store.exists("1001")

    async def test_duplicate_id_rejected(self, db) -> None:
        store = JobStore(db)
        await store.insert(build_job("1001"))

        with pytest.raises(DuplicateKey):
            await store.insert(build_job("1001", checkout_session_id="cs_other"))

    async def test_duplicate_checkout_session_rejected(self, db) -> None:
        store = JobStore(db)
        await store.insert(build_job("1001", checkout_session_id="cs_same"))

        with pytest.raises(DuplicateKey):
            await store.insert(build_job("1002", checkout_session_id="cs_same"))

    async def test_get_unknown(self, db) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await JobStore(db).get("missing")
        assert exc_info.value.status_code == 404


class TestUpdateStatus:
    async def test_update_bumps_version(self, db) -> None:
        store = JobStore(db)
        await store.insert(build_job("1001"))

        job = await store.update_status(
            "1001", "assigned", {"assigned_driver": "d@example.com"}, expected_version=1
        )
        assert job.status == "assigned"
        assert job.assigned_driver == "d@example.com"
        assert job.version == 2

    async def test_stale_version_conflicts(self, db) -> None:
        """Second writer holding the old version loses."""
        store = JobStore(db)
        await store.insert(build_job("1001"))

        await store.update_status("1001", "assigned", {"assigned_driver": "a@example.com"}, expected_version=1)
        with pytest.raises(StateConflict):
            await store.update_status("1001", "assigned", {"assigned_driver": "b@example.com"}, expected_version=1)

        job = await store.get("1001")
        assert job.assigned_driver == "a@example.com"


class TestListing:
    async def test_list_by_status_orders_by_pickup(self, db) -> None:
        store = JobStore(db)
        await store.insert(build_job("1001", pickup_in_hours=48))
        await store.insert(build_job("1002", pickup_in_hours=2))
        await store.insert(build_job("1003", status="assigned", assigned_driver="d@example.com"))

        pending = await store.list_by_status("pending")
        assert [job.id for job in pending] == ["1002", "1001"]

    async def test_list_by_driver(self, db) -> None:
        store = JobStore(db)
        await store.insert(build_job("1001", status="assigned", assigned_driver="d@example.com"))
        await store.insert(build_job("1002", status="assigned", assigned_driver="other@example.com"))
        await store.insert(build_job("1003", status="confirmed", assigned_driver="d@example.com"))
        await store.move_to_completed("1003", "d@example.com", Decimal("68.97"), datetime.now(UTC))

        active, completed = await store.list_by_driver("d@example.com")
        assert [job.id for job in active] == ["1001"]
        assert [job.id for job in completed] == ["1003"]


class TestMoveToCompleted:
    async def test_record_lives_in_one_store(self, db) -> None:
        store = JobStore(db)
        await store.insert(build_job("1001", status="confirmed", assigned_driver="d@example.com"))

        completed = await store.move_to_completed(
            "1001", "d@example.com", Decimal("68.97"), datetime.now(UTC), expected_version=1
        )
        assert completed.status == "completed"
        assert completed.driver_payout == Decimal("68.97")

        with pytest.raises(NotFoundError):
            await store.get("1001")
        assert (await store.get_completed("1001")).customer_name == "Jane Citizen"
        assert await store.exists("1001")

    async def test_stale_version_keeps_active_row(self, db) -> None:
        store = JobStore(db)
        await store.insert(build_job("1001", status="confirmed", assigned_driver="d@example.com"))

        with pytest.raises(StateConflict):
            await store.move_to_completed(
                "1001", "d@example.com", Decimal("68.97"), datetime.now(UTC), expected_version=7
            )
        assert (await store.get("1001")).status == "confirmed"

    async def test_completed_ordering(self, db) -> None:
        store = JobStore(db)
        now = datetime.now(UTC)
        for job_id in ("1001", "1002"):
            await store.insert(build_job(job_id, status="confirmed", assigned_driver="d@example.com"))
        await store.move_to_completed("1001", "d@example.com", Decimal("1"), now - timedelta(hours=1))
        await store.move_to_completed("1002", "d@example.com", Decimal("1"), now)

        assert [job.id for job in await store.list_completed()] == ["1002", "1001"]

"""
Tests for the Celery task helpers.
"""
import asyncio

from app.tasks import run_async


async def _answer(value: int) -> int:
    await asyncio.sleep(0)
    return value


def test_run_async_reuses_worker_loop() -> None:
    """Tasks run back to back on the worker's own loop."""
    assert run_async(_answer(1)) == 1
    assert run_async(_answer(2)) == 2

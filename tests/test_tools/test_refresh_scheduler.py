"""
Tests for Refresh Scheduler
Tests recurring jobs, early triggering, failure tolerance and cancellation
"""

import asyncio
import pytest
import pytest_asyncio

from exceptions import NotFoundError
from tools.refresh_scheduler import RefreshScheduler


async def wait_until(predicate, timeout: float = 2.0):
    """Poll predicate until it holds or the timeout elapses"""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


@pytest_asyncio.fixture
async def scheduler():
    scheduler = RefreshScheduler()
    yield scheduler
    await scheduler.shutdown()


class TestRefreshScheduler:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_runs_immediately_and_repeats(self, scheduler):
        calls = []

        async def job():
            calls.append(1)

        assert scheduler.start("patient:1", job, interval=0.05)
        await wait_until(lambda: len(calls) >= 3)

        assert scheduler.is_running("patient:1")
        assert scheduler.stats("patient:1")["runs"] >= 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_start_is_idempotent_per_key(self, scheduler):
        async def job():
            pass

        assert scheduler.start("patient:1", job, interval=60)
        assert not scheduler.start("patient:1", job, interval=60)
        assert scheduler.keys() == ["patient:1"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_trigger_runs_before_interval(self, scheduler):
        calls = []

        async def job():
            calls.append(1)

        scheduler.start("patient:1", job, interval=60)
        await wait_until(lambda: len(calls) == 1)

        assert scheduler.trigger("patient:1")
        await wait_until(lambda: len(calls) == 2)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_trigger_unknown_key(self, scheduler):
        assert not scheduler.trigger("nobody")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failing_run_is_retried(self, scheduler):
        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("database unavailable")

        scheduler.start("monitor", flaky, interval=0.02)
        await wait_until(lambda: len(calls) >= 2)

        stats = scheduler.stats("monitor")
        assert stats["failures"] == 1
        assert scheduler.is_running("monitor")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cancel_stops_task(self, scheduler):
        calls = []

        async def job():
            calls.append(1)

        scheduler.start("patient:1", job, interval=0.02)
        await wait_until(lambda: len(calls) >= 1)

        assert await scheduler.cancel("patient:1")
        count = len(calls)
        await asyncio.sleep(0.1)

        assert len(calls) == count
        assert not scheduler.is_running("patient:1")
        assert not await scheduler.cancel("patient:1")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stop_on_error_ends_task(self, scheduler):
        calls = []

        async def job():
            calls.append(1)
            raise NotFoundError("Patient 1 not found")

        scheduler.start("patient:1", job, interval=0.02, stop_on=(NotFoundError,))
        await wait_until(lambda: not scheduler.is_running("patient:1"))
        await asyncio.sleep(0.1)

        assert len(calls) == 1
        assert "patient:1" not in scheduler.keys()
        assert scheduler.stats("patient:1") == {"runs": 0, "failures": 0}
        assert not scheduler.trigger("patient:1")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_other_errors_still_retried_with_stop_on(self, scheduler):
        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("database unavailable")

        scheduler.start("patient:1", flaky, interval=0.02, stop_on=(NotFoundError,))
        await wait_until(lambda: len(calls) >= 2)

        assert scheduler.stats("patient:1")["failures"] == 1
        assert scheduler.is_running("patient:1")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_restart_after_stop(self, scheduler):
        calls = []

        async def gone():
            calls.append(1)
            raise NotFoundError("Patient 1 not found")

        async def job():
            calls.append(2)

        scheduler.start("patient:1", gone, interval=0.02, stop_on=(NotFoundError,))
        await wait_until(lambda: not scheduler.is_running("patient:1"))

        assert scheduler.start("patient:1", job, interval=60)
        await wait_until(lambda: 2 in calls)
        assert scheduler.is_running("patient:1")

"""
Test suite for AnalysisTrigger and AsyncioScheduler.

System role: Verification of the trailing-debounce analysis trigger
"""

import asyncio
import uuid
from unittest.mock import AsyncMock

import pytest

from casevault.core.ingestion.analysis_trigger import AnalysisTrigger
from casevault.core.scheduling import AsyncioScheduler


@pytest.fixture
def job() -> AsyncMock:
    """Provide mock analysis job."""
    return AsyncMock(return_value=None)


@pytest.fixture
def trigger(manual_scheduler, job) -> AnalysisTrigger:
    return AnalysisTrigger(scheduler=manual_scheduler, job=job, delay=5.0)


class TestAnalysisTrigger:
    """Test suite for AnalysisTrigger."""

    @pytest.mark.asyncio
    async def test_notify_should_run_job_after_delay(self, trigger, manual_scheduler, job) -> None:
        case_id = uuid.uuid4()

        trigger.notify(case_id)
        await manual_scheduler.advance(4.9)
        job.assert_not_awaited()
        await manual_scheduler.advance(0.1)

        job.assert_awaited_once_with(case_id)
        assert not trigger.is_pending(case_id)

    @pytest.mark.asyncio
    async def test_burst_of_notifies_should_run_once_after_last(
        self, trigger, manual_scheduler, manual_clock, job
    ) -> None:
        """Test K notifies less than 5s apart collapse into one run 5s after the last."""
        # Arrange
        case_id = uuid.uuid4()

        # Act
        for _ in range(4):
            trigger.notify(case_id)
            await manual_scheduler.advance(3)
        last_notify_at = manual_clock.now() - 3
        job.assert_not_awaited()
        await manual_scheduler.advance(2)

        # Assert
        job.assert_awaited_once_with(case_id)
        assert manual_clock.now() == last_notify_at + 5
        assert len(manual_scheduler.pending) == 0

    @pytest.mark.asyncio
    async def test_cases_should_be_debounced_independently(self, trigger, manual_scheduler, job) -> None:
        first, second = uuid.uuid4(), uuid.uuid4()

        trigger.notify(first)
        trigger.notify(second)
        await manual_scheduler.advance(5)

        assert job.await_count == 2
        assert {c.args[0] for c in job.await_args_list} == {first, second}

    @pytest.mark.asyncio
    async def test_job_failure_should_be_logged_not_retried(self, manual_scheduler) -> None:
        job = AsyncMock(side_effect=RuntimeError("llm down"))
        trigger = AnalysisTrigger(scheduler=manual_scheduler, job=job, delay=5.0)

        trigger.notify(uuid.uuid4())
        await manual_scheduler.advance(5)
        await manual_scheduler.advance(60)

        job.assert_awaited_once()
        assert trigger.pending_count == 0

    @pytest.mark.asyncio
    async def test_notify_during_job_should_schedule_new_run(self, manual_scheduler) -> None:
        """Test the handle is cleared before the job runs."""
        case_id = uuid.uuid4()
        trigger: AnalysisTrigger

        async def job(cid):
            trigger.notify(cid)

        trigger = AnalysisTrigger(scheduler=manual_scheduler, job=job, delay=5.0)
        trigger.notify(case_id)

        await manual_scheduler.advance(5)

        assert trigger.is_pending(case_id)

    @pytest.mark.asyncio
    async def test_shutdown_should_cancel_pending(self, trigger, manual_scheduler, job) -> None:
        trigger.notify(uuid.uuid4())

        trigger.shutdown()
        await manual_scheduler.advance(10)

        job.assert_not_awaited()
        assert trigger.pending_count == 0


class TestAsyncioScheduler:
    """Test suite for AsyncioScheduler."""

    @pytest.mark.asyncio
    async def test_call_later_should_run_callback(self) -> None:
        scheduler = AsyncioScheduler()
        done = asyncio.Event()

        async def callback():
            done.set()

        scheduler.call_later(0.01, callback)
        await asyncio.wait_for(done.wait(), timeout=1)

        assert done.is_set()

    @pytest.mark.asyncio
    async def test_cancel_should_prevent_callback(self) -> None:
        scheduler = AsyncioScheduler()
        callback = AsyncMock()

        handle = scheduler.call_later(0.05, callback)
        handle.cancel()
        await asyncio.sleep(0.1)

        callback.assert_not_awaited()
        assert scheduler.pending_count == 0

    @pytest.mark.asyncio
    async def test_shutdown_should_cancel_outstanding(self) -> None:
        scheduler = AsyncioScheduler()
        callback = AsyncMock()
        scheduler.call_later(10, callback)

        await scheduler.shutdown()

        callback.assert_not_awaited()
        assert scheduler.pending_count == 0

    @pytest.mark.asyncio
    async def test_debounced_trigger_on_real_scheduler(self) -> None:
        """Scenario: three completions in one pass → one analysis run."""
        scheduler = AsyncioScheduler()
        job = AsyncMock()
        trigger = AnalysisTrigger(scheduler=scheduler, job=job, delay=0.05)
        case_id = uuid.uuid4()

        for _ in range(3):
            trigger.notify(case_id)
        await asyncio.sleep(0.2)

        job.assert_awaited_once_with(case_id)
        await scheduler.shutdown()

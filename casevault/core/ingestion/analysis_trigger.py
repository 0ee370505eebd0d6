"""
Debounced downstream analysis trigger.

Completions tend to arrive in bursts when a batch finishes OCR. Each
notification pushes the case's timer back, so the analysis job runs
once after the burst has been quiet for the debounce period.

Dependencies: casevault.core.scheduling
System role: Trailing-debounce scheduler for case analysis
"""

import logging
from typing import Awaitable, Callable
from uuid import UUID

from casevault.core.scheduling import ScheduledHandle, Scheduler

logger = logging.getLogger(__name__)

AnalysisJob = Callable[[UUID], Awaitable[object]]


class AnalysisTrigger:
    """
    Trailing-debounce trigger keyed by case.

    At most one timer is outstanding per case. When a timer fires, its
    handle is cleared before the job runs so a notification arriving
    during the job schedules a fresh run.

    Args:
        scheduler: Runs the delayed callback
        job: Coroutine function executed with the case id; opens its own session
        delay: Quiet period in seconds
    """

    def __init__(self, scheduler: Scheduler, job: AnalysisJob, delay: float = 5.0) -> None:
        self.scheduler = scheduler
        self.job = job
        self.delay = delay
        self._pending: dict[UUID, ScheduledHandle] = {}

    def notify(self, case_id: UUID) -> None:
        """Schedule (or re-schedule) analysis for ``case_id``."""
        existing = self._pending.pop(case_id, None)
        if existing is not None:
            existing.cancel()

        self._pending[case_id] = self.scheduler.call_later(
            self.delay,
            lambda: self._fire(case_id),
        )
        logger.debug("Analysis scheduled", extra={"case_id": str(case_id), "delay": self.delay})

    async def _fire(self, case_id: UUID) -> None:
        self._pending.pop(case_id, None)
        try:
            await self.job(case_id)
            logger.info("Case analysis finished", extra={"case_id": str(case_id)})
        except Exception as e:
            logger.error(
                "Case analysis failed",
                exc_info=True,
                extra={"case_id": str(case_id), "error_type": type(e).__name__},
            )

    def is_pending(self, case_id: UUID) -> bool:
        return case_id in self._pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def shutdown(self) -> None:
        """Cancel every outstanding timer."""
        for handle in self._pending.values():
            handle.cancel()
        self._pending.clear()

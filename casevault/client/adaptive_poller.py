"""
Adaptive document status poller.

Re-fetches a case's documents while any of them is still pending or
processing. The interval drops to the floor whenever the list changes
and backs off geometrically to the ceiling while it stays the same.

Dependencies: casevault.core.exceptions
System role: Client-side status refresh loop
"""

import asyncio
import contextlib
import hashlib
import logging
from typing import Awaitable, Callable, Sequence

from casevault.configs.client import ClientSettings
from casevault.core.exceptions import CaseVaultException, NotFoundError
from casevault.core.status_priority import IngestionStatus
from casevault.models.document import DocumentResponse

logger = logging.getLogger(__name__)

POLLED_STATUSES = frozenset({IngestionStatus.PENDING, IngestionStatus.PROCESSING})


def documents_signature(documents: Sequence[DocumentResponse]) -> str:
    """SHA-1 over ``id:status`` pairs; changes whenever any status does."""
    joined = "|".join(f"{d.id}:{IngestionStatus(d.ingestion_status).value}" for d in documents)
    return hashlib.sha1(joined.encode("utf-8")).hexdigest()


def needs_polling(documents: Sequence[DocumentResponse]) -> bool:
    return any(d.ingestion_status in POLLED_STATUSES for d in documents)


class AdaptivePoller:
    """
    Polls ``fetch`` with adaptive backoff.

    Args:
        fetch: Coroutine function returning the current document list
        on_update: Receives each freshly fetched list
        floor_ms: Interval after a change, and the starting interval
        ceiling_ms: Longest interval, also used after a failed fetch
        factor: Growth per unchanged poll
        sleep: Awaitable sleep taking seconds (tests inject a fake)
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[list[DocumentResponse]]],
        on_update: Callable[[list[DocumentResponse]], None] | None = None,
        floor_ms: int = 2000,
        ceiling_ms: int = 15000,
        factor: float = 1.5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.fetch = fetch
        self.on_update = on_update
        self.floor_ms = floor_ms
        self.ceiling_ms = ceiling_ms
        self.factor = factor
        self._sleep = sleep
        self.interval_ms: float = floor_ms
        self._signature: str | None = None
        self._task: asyncio.Task | None = None

    @classmethod
    def from_settings(
        cls,
        fetch: Callable[[], Awaitable[list[DocumentResponse]]],
        settings: ClientSettings | None = None,
        on_update: Callable[[list[DocumentResponse]], None] | None = None,
    ) -> "AdaptivePoller":
        """Build a poller with the interval bounds from ``CLIENT_*`` settings."""
        settings = settings or ClientSettings()
        return cls(
            fetch,
            on_update=on_update,
            floor_ms=settings.poll_floor_ms,
            ceiling_ms=settings.poll_ceiling_ms,
            factor=settings.poll_backoff_factor,
        )

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, documents: Sequence[DocumentResponse]) -> None:
        """Begin polling if any document is unsettled and no loop is running."""
        if self.running or not needs_polling(documents):
            return
        self._signature = documents_signature(documents)
        self._task = asyncio.create_task(self._loop())

    def trigger(self) -> None:
        """Restart immediately at the floor interval, e.g. after new uploads."""
        self.stop()
        self.interval_ms = self.floor_ms
        self._signature = None
        self._task = asyncio.create_task(self._loop())

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the current loop to exit on its own or be cancelled."""
        task = self._task
        if task is None:
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _loop(self) -> None:
        while True:
            await self._sleep(self.interval_ms / 1000)

            try:
                documents = await self.fetch()
            except NotFoundError:
                logger.info("Case no longer exists, stopping poller")
                return
            except CaseVaultException as e:
                logger.warning("Status poll failed", extra={"error": str(e)})
                self.interval_ms = self.ceiling_ms
                continue
            except Exception as e:
                logger.warning(
                    "Status poll failed unexpectedly",
                    extra={"error": str(e), "error_type": type(e).__name__},
                    exc_info=True,
                )
                self.interval_ms = self.ceiling_ms
                continue

            if self.on_update is not None:
                self.on_update(documents)

            signature = documents_signature(documents)
            if signature != self._signature:
                self.interval_ms = self.floor_ms
            else:
                self.interval_ms = min(self.interval_ms * self.factor, self.ceiling_ms)
            self._signature = signature

            if not needs_polling(documents):
                self.interval_ms = self.floor_ms
                return

"""
Client-side batch upload orchestrator.

Moves selected files from "queued" to "handed off for processing" in
fixed-size sub-batches: acquire presigned targets, PUT the bytes to
storage in parallel, then confirm the finished transfers so the server
triggers OCR. "completed" here means handed off, not searchable; the
AdaptivePoller follows the rest.

Dependencies: casevault.client.api_client, casevault.core.file_types
System role: Upload pipeline driven from the client
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Iterable, Sequence
from uuid import UUID

from casevault.client.api_client import CaseApiClient
from casevault.client.upload_task import UploadStep, UploadSummary, UploadTask
from casevault.configs.client import ClientSettings
from casevault.core.exceptions import CaseVaultException
from casevault.core.file_types import get_mime_type, validate_supported
from casevault.models.document import ConfirmResult, UploadIntent

logger = logging.getLogger(__name__)

PREPARE_FAILED = "Failed to prepare upload"
HANDED_OFF = "Upload complete! OCR processing in background."
HANDOFF_DELAYED = "Uploaded. Processing may be delayed."


def build_tasks(case_id: UUID, files: Iterable[tuple[str, bytes]]) -> list[UploadTask]:
    """
    Create queued tasks for (filename, content) pairs.

    Raises:
        ValidationError: If any file has an unsupported extension; nothing is queued
    """
    files = list(files)
    validate_supported([name for name, _ in files])
    return _queue(case_id, files)


def _queue(case_id: UUID, files: list[tuple[str, bytes]]) -> list[UploadTask]:
    return [
        UploadTask(
            case_id=case_id,
            filename=name,
            content=content,
            content_type=get_mime_type(name),
        )
        for name, content in files
    ]


def load_tasks(case_id: UUID, paths: Sequence[Path]) -> list[UploadTask]:
    """Read files from disk into queued tasks; extensions are checked before any read."""
    validate_supported([p.name for p in paths])
    tasks = _queue(case_id, [(p.name, p.read_bytes()) for p in paths])
    for task, path in zip(tasks, paths):
        task.path = path
    return tasks


class UploadOrchestrator:
    """
    Drives UploadTasks through acquire → transfer → confirm.

    Sub-batches run one after another; inside a sub-batch each phase
    fans out across its files.

    Args:
        api: CaseVault API client
        batch_size: Files per sub-batch (server accepts at most 20)
        on_progress: Called with a task every time its state or progress changes
    """

    def __init__(
        self,
        api: CaseApiClient,
        batch_size: int = 6,
        on_progress: Callable[[UploadTask], None] | None = None,
    ) -> None:
        if not 1 <= batch_size <= 20:
            raise ValueError("batch_size must be between 1 and 20")
        self.api = api
        self.batch_size = batch_size
        self.on_progress = on_progress

    @classmethod
    def from_settings(
        cls,
        api: CaseApiClient,
        settings: ClientSettings | None = None,
        on_progress: Callable[[UploadTask], None] | None = None,
    ) -> "UploadOrchestrator":
        settings = settings or ClientSettings()
        return cls(api, batch_size=settings.upload_batch_size, on_progress=on_progress)

    def _update(
        self,
        task: UploadTask,
        state: UploadStep,
        progress: int,
        message: str | None = None,
    ) -> None:
        task.advance(state, progress, message)
        self._emit(task)

    def _fail(self, task: UploadTask, error: str) -> None:
        task.fail(error)
        self._emit(task)

    def _emit(self, task: UploadTask) -> None:
        if self.on_progress is not None:
            self.on_progress(task)

    async def run(self, tasks: Sequence[UploadTask]) -> UploadSummary:
        """
        Upload every task.

        Args:
            tasks: Queued tasks, all for the same case

        Returns:
            UploadSummary: Counts and the ids of documents handed off
        """
        for start in range(0, len(tasks), self.batch_size):
            batch = list(tasks[start : start + self.batch_size])
            logger.info(
                "Processing upload batch",
                extra={"offset": start, "size": len(batch), "total": len(tasks)},
            )
            await self._process_batch(batch)

        completed = [t for t in tasks if t.state == UploadStep.COMPLETED]
        return UploadSummary(
            total=len(tasks),
            completed=len(completed),
            failed=sum(1 for t in tasks if t.state == UploadStep.ERROR),
            document_ids=[t.document_id for t in completed if t.document_id is not None],
        )

    async def _process_batch(self, batch: list[UploadTask]) -> None:
        await self._acquire(batch)
        acquired = [t for t in batch if t.state != UploadStep.ERROR]
        await self._transfer(acquired)
        uploaded = [t for t in acquired if t.state == UploadStep.UPLOADED]
        if uploaded:
            await self._confirm(uploaded)

    async def _acquire(self, batch: list[UploadTask]) -> None:
        """Get a document record and upload URL for every task."""
        for task in batch:
            self._update(task, UploadStep.UPLOADING, 5, "Preparing upload...")

        case_id = batch[0].case_id
        intents = [
            UploadIntent(filename=t.filename, content_type=t.content_type, size_bytes=t.size_bytes)
            for t in batch
        ]

        try:
            response = await self.api.register_batch(case_id, intents)
        except CaseVaultException as e:
            logger.warning(
                "Batch registration failed, registering files one by one",
                extra={"case_id": str(case_id), "size": len(batch), "error": str(e)},
            )
            await self._acquire_sequential(batch, intents)
            return

        # Results come back in request order
        for task, result in zip(batch, response.results):
            if result.success and result.document_id and result.upload_url:
                self._acquired(task, result.document_id, result.upload_url)
            else:
                logger.warning(
                    "Registration rejected",
                    extra={"filename": task.filename, "error": result.error},
                )
                self._fail(task, PREPARE_FAILED)
        for task in batch[len(response.results) :]:
            self._fail(task, PREPARE_FAILED)

    async def _acquire_sequential(self, batch: list[UploadTask], intents: list[UploadIntent]) -> None:
        for task, intent in zip(batch, intents):
            try:
                target = await self.api.register_upload(task.case_id, intent)
            except CaseVaultException as e:
                logger.warning(
                    "Registration failed",
                    extra={"filename": task.filename, "error": str(e)},
                )
                self._fail(task, PREPARE_FAILED)
                continue
            self._acquired(task, target.document_id, target.upload_url)

    def _acquired(self, task: UploadTask, document_id: UUID, upload_url: str) -> None:
        task.document_id = document_id
        task.upload_url = upload_url
        self._update(task, UploadStep.UPLOADING, 15, "Uploading to cloud storage...")

    async def _transfer(self, tasks: list[UploadTask]) -> None:
        outcomes = await asyncio.gather(
            *(self.api.put_file(t.upload_url, t.content, t.content_type) for t in tasks),
            return_exceptions=True,
        )
        for task, outcome in zip(tasks, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Transfer failed",
                    extra={"filename": task.filename, "error": str(outcome)},
                )
                self._fail(task, str(outcome) or "Upload failed")
            else:
                self._update(task, UploadStep.UPLOADED, 70, "Upload complete. Starting processing...")

    async def _confirm(self, tasks: list[UploadTask]) -> None:
        """
        Hand finished transfers to the server.

        A failed confirm does not fail the tasks: the files are stored and
        the sync engine or a retry will pick them up.
        """
        for task in tasks:
            self._update(task, UploadStep.PROCESSING, 70, "Starting processing...")

        results: dict[UUID, ConfirmResult] = {}
        try:
            response = await self.api.confirm_batch(
                tasks[0].case_id, [t.document_id for t in tasks]
            )
            results = {r.document_id: r for r in response.results}
        except CaseVaultException as e:
            logger.warning(
                "Confirm failed",
                extra={"case_id": str(tasks[0].case_id), "size": len(tasks), "error": str(e)},
            )

        for task in tasks:
            result = results.get(task.document_id)
            message = HANDED_OFF if result is not None and result.success else HANDOFF_DELAYED
            self._update(task, UploadStep.COMPLETED, 100, message)

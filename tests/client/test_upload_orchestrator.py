"""
Test suite for UploadOrchestrator.

Drives the orchestrator against a mocked CaseApiClient and checks
sub-batching, the sequential registration fallback, per-file failure
isolation and progress reporting.

System role: Verification of the client upload pipeline
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from casevault.client.upload_orchestrator import (
    HANDED_OFF,
    HANDOFF_DELAYED,
    PREPARE_FAILED,
    UploadOrchestrator,
    build_tasks,
    load_tasks,
)
from casevault.client.upload_task import UploadStep
from casevault.configs.client import ClientSettings
from casevault.core.exceptions import ExternalServiceError, ValidationError
from casevault.models.common import BatchResponse
from casevault.models.document import BatchUploadResult, ConfirmResult, UploadTargetResponse


@pytest.fixture
def case_id() -> uuid.UUID:
    return uuid.uuid4()


def _register_ok(case_id, intents):
    return BatchResponse[BatchUploadResult].from_results(
        [
            BatchUploadResult(
                filename=i.filename,
                success=True,
                document_id=uuid.uuid4(),
                object_id=f"obj-{i.filename}",
                upload_url=f"https://storage.test/{i.filename}",
                expires_in=3600,
            )
            for i in intents
        ]
    )


def _confirm_ok(case_id, document_ids):
    return BatchResponse[ConfirmResult].from_results(
        [ConfirmResult(document_id=d, filename="f", success=True) for d in document_ids]
    )


@pytest.fixture
def mock_api() -> AsyncMock:
    """
    Create mock CaseApiClient for testing.

    Returns:
        AsyncMock: Client whose registration, transfer and confirm succeed
    """
    api = AsyncMock()
    api.register_batch = AsyncMock(side_effect=_register_ok)
    api.register_upload = AsyncMock(
        side_effect=lambda case_id, intent: UploadTargetResponse(
            document_id=uuid.uuid4(),
            object_id=f"obj-{intent.filename}",
            upload_url=f"https://storage.test/{intent.filename}",
            expires_in=3600,
        )
    )
    api.put_file = AsyncMock(return_value=None)
    api.confirm_batch = AsyncMock(side_effect=_confirm_ok)
    return api


def _files(count: int) -> list[tuple[str, bytes]]:
    return [(f"exhibit-{i}.pdf", b"%PDF-1.4 " + bytes([i])) for i in range(count)]


class TestBuildTasks:
    def test_build_tasks_should_derive_mime_type(self, case_id) -> None:
        tasks = build_tasks(case_id, [("a.pdf", b"x"), ("b.png", b"yy")])

        assert [t.content_type for t in tasks] == ["application/pdf", "image/png"]
        assert all(t.state == UploadStep.QUEUED for t in tasks)
        assert tasks[1].size_bytes == 2

    def test_build_tasks_should_reject_unsupported_files(self, case_id) -> None:
        with pytest.raises(ValidationError):
            build_tasks(case_id, [("a.pdf", b"x"), ("malware.exe", b"x")])

    def test_load_tasks_should_read_files(self, case_id, temp_pdf_file) -> None:
        tasks = load_tasks(case_id, [temp_pdf_file])

        assert tasks[0].filename == temp_pdf_file.name
        assert tasks[0].content.startswith(b"%PDF")
        assert tasks[0].path == temp_pdf_file

    def test_load_tasks_should_reject_before_reading(self, case_id, tmp_path) -> None:
        """Test an unsupported path fails validation without touching the disk."""
        missing = tmp_path / "never-written.exe"

        with pytest.raises(ValidationError):
            load_tasks(case_id, [missing])

    def test_load_tasks_should_validate_once(self, case_id, temp_pdf_file) -> None:
        with patch(
            "casevault.client.upload_orchestrator.validate_supported"
        ) as validate:
            load_tasks(case_id, [temp_pdf_file])

        validate.assert_called_once_with([temp_pdf_file.name])


class TestUploadOrchestrator:
    """Test suite for UploadOrchestrator.run()."""

    @pytest.mark.asyncio
    async def test_eight_files_should_run_as_six_then_two(self, mock_api, case_id) -> None:
        """Scenario: 8 files with batch size 6 flow through two sub-batches."""
        # Arrange
        tasks = build_tasks(case_id, _files(8))
        orchestrator = UploadOrchestrator(mock_api, batch_size=6)

        # Act
        summary = await orchestrator.run(tasks)

        # Assert
        batch_sizes = [len(c.args[1]) for c in mock_api.register_batch.await_args_list]
        confirm_sizes = [len(c.args[1]) for c in mock_api.confirm_batch.await_args_list]
        assert batch_sizes == [6, 2]
        assert confirm_sizes == [6, 2]
        assert mock_api.put_file.await_count == 8
        assert summary.total == 8
        assert summary.completed == 8
        assert summary.failed == 0
        assert len(summary.document_ids) == 8
        assert all(t.progress == 100 and t.step_message == HANDED_OFF for t in tasks)

    @pytest.mark.asyncio
    async def test_results_should_match_tasks_by_position(self, mock_api, case_id) -> None:
        tasks = build_tasks(case_id, _files(3))

        await UploadOrchestrator(mock_api).run(tasks)

        urls = [c.args[0] for c in mock_api.put_file.await_args_list]
        assert sorted(urls) == sorted(f"https://storage.test/{t.filename}" for t in tasks)
        for task in tasks:
            assert task.upload_url == f"https://storage.test/{task.filename}"

    @pytest.mark.asyncio
    async def test_batch_failure_should_fall_back_to_single_registration(
        self, mock_api, case_id
    ) -> None:
        """Test a failed batch call degrades to one call per file."""
        # Arrange
        mock_api.register_batch.side_effect = ExternalServiceError("batch endpoint down")
        tasks = build_tasks(case_id, _files(4))

        # Act
        summary = await UploadOrchestrator(mock_api, batch_size=6).run(tasks)

        # Assert
        assert mock_api.register_upload.await_count == 4
        assert summary.completed == 4
        assert mock_api.confirm_batch.await_count == 1

    @pytest.mark.asyncio
    async def test_single_registration_failure_should_fail_only_that_file(
        self, mock_api, case_id
    ) -> None:
        # Arrange
        mock_api.register_batch.side_effect = ExternalServiceError("batch endpoint down")
        calls = {"n": 0}

        def register(case_id, intent):
            calls["n"] += 1
            if calls["n"] == 2:
                raise ExternalServiceError("quota")
            return UploadTargetResponse(
                document_id=uuid.uuid4(),
                object_id="o",
                upload_url="https://storage.test/x",
                expires_in=60,
            )

        mock_api.register_upload.side_effect = register
        tasks = build_tasks(case_id, _files(3))

        # Act
        summary = await UploadOrchestrator(mock_api).run(tasks)

        # Assert
        assert tasks[1].state == UploadStep.ERROR
        assert tasks[1].error == PREPARE_FAILED
        assert summary.completed == 2
        assert summary.failed == 1

    @pytest.mark.asyncio
    async def test_rejected_batch_entry_should_fail_that_file(self, mock_api, case_id) -> None:
        def register(case_id, intents):
            response = _register_ok(case_id, intents)
            response.results[0] = BatchUploadResult(
                filename=intents[0].filename, success=False, error="Failed to get upload URL"
            )
            return response

        mock_api.register_batch.side_effect = register
        tasks = build_tasks(case_id, _files(2))

        summary = await UploadOrchestrator(mock_api).run(tasks)

        assert tasks[0].state == UploadStep.ERROR
        assert tasks[0].error == PREPARE_FAILED
        assert mock_api.put_file.await_count == 1
        assert summary.completed == 1

    @pytest.mark.asyncio
    async def test_transfer_failure_should_skip_confirm_for_that_file(
        self, mock_api, case_id
    ) -> None:
        # Arrange
        tasks = build_tasks(case_id, _files(3))

        async def put(url, content, content_type):
            if url.endswith(tasks[2].filename):
                raise ExternalServiceError("Upload failed: 403")

        mock_api.put_file.side_effect = put

        # Act
        summary = await UploadOrchestrator(mock_api).run(tasks)

        # Assert
        confirmed = mock_api.confirm_batch.await_args.args[1]
        assert len(confirmed) == 2
        assert tasks[2].document_id not in confirmed
        assert tasks[2].state == UploadStep.ERROR
        assert summary.failed == 1

    @pytest.mark.asyncio
    async def test_confirm_failure_should_still_complete_tasks(self, mock_api, case_id) -> None:
        """Test stored files are handed off even if the confirm call fails."""
        mock_api.confirm_batch.side_effect = ExternalServiceError("confirm down")
        tasks = build_tasks(case_id, _files(2))

        summary = await UploadOrchestrator(mock_api).run(tasks)

        assert summary.completed == 2
        assert all(t.step_message == HANDOFF_DELAYED for t in tasks)

    @pytest.mark.asyncio
    async def test_progress_should_report_each_step(self, mock_api, case_id) -> None:
        # Arrange
        updates: list[tuple[UploadStep, int]] = []
        tasks = build_tasks(case_id, _files(1))
        orchestrator = UploadOrchestrator(
            mock_api,
            on_progress=lambda t: updates.append((t.state, t.progress)),
        )

        # Act
        await orchestrator.run(tasks)

        # Assert
        assert updates == [
            (UploadStep.UPLOADING, 5),
            (UploadStep.UPLOADING, 15),
            (UploadStep.UPLOADED, 70),
            (UploadStep.PROCESSING, 70),
            (UploadStep.COMPLETED, 100),
        ]

    def test_batch_size_should_be_bounded(self, mock_api) -> None:
        with pytest.raises(ValueError):
            UploadOrchestrator(mock_api, batch_size=21)

    def test_from_settings_should_use_configured_batch_size(self, mock_api) -> None:
        orchestrator = UploadOrchestrator.from_settings(mock_api, ClientSettings(upload_batch_size=3))

        assert orchestrator.batch_size == 3

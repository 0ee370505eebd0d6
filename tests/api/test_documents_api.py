"""
Test suite for the document endpoints.

System role: Verification of the document HTTP API
"""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from casevault.api.deps import get_document_service, get_service_cache
from casevault.api.deps.dependencies import ServiceCache
from casevault.api.main import create_app
from casevault.configs import Settings
from casevault.core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from casevault.core.status_priority import IngestionStatus
from casevault.models.document import (
    BatchUploadResult,
    ConfirmResult,
    DocumentProcessingResponse,
    DocumentTextResponse,
    RetryAllResponse,
    UploadTargetResponse,
)

CASE_ID = uuid.uuid4()
BASE = f"/api/v1/cases/{CASE_ID}/documents"


def _document_row(filename: str = "exhibit.pdf", status: IngestionStatus = IngestionStatus.PENDING):
    return SimpleNamespace(
        id=uuid.uuid4(),
        case_id=CASE_ID,
        object_id=f"obj-{filename}",
        filename=filename,
        content_type="application/pdf",
        size_bytes=1024,
        page_count=None,
        ingestion_status=status,
        summary=None,
        uploaded_at=datetime(2026, 1, 5, tzinfo=timezone.utc),
    )


@pytest.fixture
def document_service() -> MagicMock:
    service = MagicMock()
    for name in (
        "list_documents",
        "get_document",
        "register_upload",
        "register_batch",
        "confirm_upload",
        "confirm_batch",
        "retry_document",
        "retry_stuck",
        "get_text",
        "delete_document",
    ):
        setattr(service, name, AsyncMock())
    return service


@pytest.fixture
def client(document_service) -> TestClient:
    app = create_app()
    cache = ServiceCache(settings=Settings())
    app.dependency_overrides[get_service_cache] = lambda: cache
    app.dependency_overrides[get_document_service] = lambda: document_service
    return TestClient(app)


class TestListAndGet:
    """Test suite for document listing and lookup."""

    def test_list_documents_should_return_rows(self, client, document_service) -> None:
        document_service.list_documents.return_value = [
            _document_row("a.pdf", IngestionStatus.PROCESSING),
            _document_row("b.pdf", IngestionStatus.COMPLETED),
        ]

        response = client.get(BASE)

        body = response.json()
        assert response.status_code == 200
        assert body["total"] == 2
        assert [d["ingestion_status"] for d in body["documents"]] == ["processing", "completed"]

    def test_get_document_should_pass_sync_flag(self, client, document_service) -> None:
        row = _document_row()
        document_service.get_document.return_value = row

        response = client.get(f"{BASE}/{row.id}?sync=true")

        assert response.status_code == 200
        document_service.get_document.assert_awaited_once_with(CASE_ID, row.id, sync=True)

    def test_get_document_of_other_case_should_return_404(self, client, document_service) -> None:
        document_id = uuid.uuid4()
        document_service.get_document.side_effect = NotFoundError("Document", str(document_id))

        response = client.get(f"{BASE}/{document_id}")

        assert response.status_code == 404


class TestUploadRegistration:
    """Test suite for single and batch upload registration."""

    def test_register_upload_should_return_target(self, client, document_service) -> None:
        document_id = uuid.uuid4()
        document_service.register_upload.return_value = UploadTargetResponse(
            document_id=document_id,
            object_id="obj-1",
            upload_url="https://storage.test/obj-1",
            expires_in=3600,
        )

        response = client.post(BASE, json={"filename": "a.pdf", "content_type": "application/pdf"})

        assert response.status_code == 200
        assert response.json()["upload_url"] == "https://storage.test/obj-1"

    def test_register_batch_should_report_summary(self, client, document_service) -> None:
        """Test per-file results are returned with a success/failed summary."""
        # Arrange
        document_service.register_batch.return_value = [
            BatchUploadResult(filename="a.pdf", success=True, document_id=uuid.uuid4(),
                              object_id="obj-a", upload_url="https://storage.test/a", expires_in=3600),
            BatchUploadResult(filename="b.pdf", success=False, error="Failed to get upload URL"),
        ]

        # Act
        response = client.post(
            f"{BASE}/batch",
            json={"files": [
                {"filename": "a.pdf", "content_type": "application/pdf"},
                {"filename": "b.pdf", "content_type": "application/pdf"},
            ]},
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["summary"] == {"total": 2, "success": 1, "failed": 1}

    def test_oversize_batch_should_return_400(self, client, document_service) -> None:
        document_service.register_batch.side_effect = ValidationError("Maximum batch size is 20", field="files")
        files = [{"filename": f"{i}.pdf", "content_type": "application/pdf"} for i in range(21)]

        response = client.post(f"{BASE}/batch", json={"files": files})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Maximum batch size is 20"


class TestConfirmAndRetry:
    """Test suite for confirmation and retry endpoints."""

    def test_confirm_batch_should_return_results(self, client, document_service) -> None:
        ids = [uuid.uuid4(), uuid.uuid4()]
        document_service.confirm_batch.return_value = [
            ConfirmResult(document_id=ids[0], filename="a.pdf", success=True, workflow_id="wf-a"),
            ConfirmResult(document_id=ids[1], filename="b.pdf", success=True, skipped=True,
                          message="Already processing or completed"),
        ]

        response = client.post(f"{BASE}/confirm", json={"document_ids": [str(i) for i in ids]})

        assert response.status_code == 200
        assert response.json()["summary"]["success"] == 2
        document_service.confirm_batch.assert_awaited_once_with(CASE_ID, ids)

    def test_confirm_trigger_failure_should_return_502(self, client, document_service) -> None:
        document_service.confirm_upload.side_effect = ExternalServiceError(
            "ingestion rejected", operation="trigger_ingestion", status_code=500
        )

        response = client.post(f"{BASE}/{uuid.uuid4()}/confirm")

        assert response.status_code == 502
        assert response.json()["detail"]["details"]["operation"] == "trigger_ingestion"

    def test_retry_stuck_should_return_counts(self, client, document_service) -> None:
        document_service.retry_stuck.return_value = RetryAllResponse(
            message="Retried 2 of 3 stuck documents",
            retried_count=2,
            total_pending=3,
            errors=["c.pdf: remote failure"],
        )

        response = client.post(f"{BASE}/retry")

        assert response.status_code == 200
        assert response.json()["retried_count"] == 2


class TestTextAndDelete:
    """Test suite for text retrieval and deletion."""

    def test_text_of_unfinished_document_should_return_202(self, client, document_service) -> None:
        document_service.get_text.return_value = DocumentProcessingResponse(status="processing")

        response = client.get(f"{BASE}/{uuid.uuid4()}/text")

        assert response.status_code == 202
        assert response.json() == {"error": "Document is still processing", "status": "processing"}

    def test_text_of_completed_document_should_return_200(self, client, document_service) -> None:
        document_service.get_text.return_value = DocumentTextResponse(
            object_id="obj-a", filename="a.pdf", text="WITNESS STATEMENT", text_length=17, page_count=1
        )

        response = client.get(f"{BASE}/{uuid.uuid4()}/text")

        assert response.status_code == 200
        assert response.json()["text"] == "WITNESS STATEMENT"

    def test_delete_document_should_name_file(self, client, document_service) -> None:
        document_service.delete_document.return_value = "a.pdf"

        response = client.delete(f"{BASE}/{uuid.uuid4()}")

        assert response.status_code == 200
        assert response.json()["message"] == 'Document "a.pdf" deleted successfully'

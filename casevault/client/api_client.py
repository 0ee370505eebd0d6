"""
CaseVault HTTP API client.

Thin httpx wrapper over the document endpoints used by the upload
orchestrator and the status poller, plus the raw PUT to a presigned
storage URL.

Dependencies: httpx, casevault.models, casevault.core.exceptions
System role: Client-side boundary to the CaseVault API
"""

import logging
from typing import Any
from uuid import UUID

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from casevault.configs.client import ClientSettings
from casevault.core.exceptions import (
    ExternalServiceError,
    NotFoundError,
    RateLimitedError,
    ValidationError,
)
from casevault.models.common import BatchResponse
from casevault.models.document import (
    BatchUploadResult,
    ConfirmResult,
    DocumentListResponse,
    DocumentResponse,
    UploadIntent,
    UploadTargetResponse,
)

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"Request failed: {response.status_code}"

    detail = body.get("detail", body) if isinstance(body, dict) else body
    if isinstance(detail, dict) and detail.get("error"):
        return str(detail["error"])
    if isinstance(detail, str):
        return detail
    return f"Request failed: {response.status_code}"


class CaseApiClient:
    """
    Async client for the CaseVault API.

    Args:
        base_url: API root, e.g. ``http://localhost:8000/api/v1``
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests pass a MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )
        # Presigned URLs are absolute and must not carry API headers
        self._storage = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "CaseApiClient":
        settings = settings or ClientSettings()
        return cls(settings.api_base_url, timeout=settings.timeout_seconds, transport=transport)

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                f"Request to {path} failed: {e}",
                operation=f"{method} {path}",
            ) from e

        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                raise ExternalServiceError(
                    f"Malformed response from {path}: {e}",
                    operation=f"{method} {path}",
                    status_code=response.status_code,
                ) from e

        message = _error_message(response)
        if response.status_code == 404:
            raise NotFoundError("Resource", path, details={"error": message})
        if response.status_code in (400, 422):
            raise ValidationError(message, details={"status_code": response.status_code})
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitedError(
                message,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        raise ExternalServiceError(
            message,
            operation=f"{method} {path}",
            status_code=response.status_code,
        )

    def _parse(self, model: type[BaseModel], data: Any, operation: str) -> Any:
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise ExternalServiceError(
                f"Unexpected response shape for {operation}: {e.error_count()} error(s)",
                operation=operation,
            ) from e

    async def list_documents(self, case_id: UUID) -> list[DocumentResponse]:
        data = await self._request("GET", f"/cases/{case_id}/documents")
        return self._parse(DocumentListResponse, data, "list_documents").documents

    async def register_upload(self, case_id: UUID, intent: UploadIntent) -> UploadTargetResponse:
        data = await self._request(
            "POST",
            f"/cases/{case_id}/documents",
            json=intent.model_dump(mode="json"),
        )
        return self._parse(UploadTargetResponse, data, "register_upload")

    async def register_batch(
        self, case_id: UUID, intents: list[UploadIntent]
    ) -> BatchResponse[BatchUploadResult]:
        data = await self._request(
            "POST",
            f"/cases/{case_id}/documents/batch",
            json={"files": [i.model_dump(mode="json") for i in intents]},
        )
        return self._parse(BatchResponse[BatchUploadResult], data, "register_batch")

    async def confirm_batch(
        self, case_id: UUID, document_ids: list[UUID]
    ) -> BatchResponse[ConfirmResult]:
        data = await self._request(
            "POST",
            f"/cases/{case_id}/documents/confirm",
            json={"document_ids": [str(d) for d in document_ids]},
        )
        return self._parse(BatchResponse[ConfirmResult], data, "confirm_batch")

    async def put_file(self, upload_url: str, content: bytes, content_type: str) -> None:
        """
        Transfer file bytes straight to storage.

        Raises:
            ExternalServiceError: On transport failure or non-2xx response
        """
        try:
            response = await self._storage.put(
                upload_url,
                content=content,
                headers={"Content-Type": content_type},
            )
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Upload failed: {e}", operation="put_file") from e
        if not response.is_success:
            raise ExternalServiceError(
                f"Upload failed: {response.status_code}",
                operation="put_file",
                status_code=response.status_code,
            )

    async def aclose(self) -> None:
        await self._client.aclose()
        await self._storage.aclose()

"""
Remote vault API client.

Async httpx client for the external OCR / chunking / search provider.
Every transport failure and non-2xx response is turned into the
application exception hierarchy so callers never see httpx errors.

Dependencies: httpx, casevault.boundary.vault.schemas, casevault.core.exceptions
System role: Boundary adapter for the remote processing service
"""

import logging
from typing import Any

import httpx

from casevault.boundary.vault.schemas import (
    IngestionJob,
    ObjectText,
    StorageTarget,
    Vault,
    VaultObject,
    VaultSearchResult,
)
from casevault.core.exceptions import (
    AlreadyInProgressError,
    ExternalServiceError,
    RateLimitedError,
)

logger = logging.getLogger(__name__)

IN_PROGRESS_MARKERS = ("already", "processing")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
        if message:
            return str(message)
    return f"API request failed: {response.status_code}"


def _retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class VaultClient:
    """
    Client for the remote vault API.

    Args:
        base_url: API root, e.g. "https://api.case.dev"
        api_key: Bearer token
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.error(
                "Vault request failed",
                extra={"operation": operation, "error_type": type(e).__name__},
            )
            raise ExternalServiceError(
                f"Vault request failed: {e}",
                operation=operation,
            ) from e

        if response.status_code == 429:
            raise RateLimitedError(
                _error_message(response),
                retry_after=_retry_after(response),
                details={"operation": operation},
            )
        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "Vault returned an error",
                extra={
                    "operation": operation,
                    "status_code": response.status_code,
                    "error": message,
                },
            )
            raise ExternalServiceError(
                message,
                operation=operation,
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        return response.json()

    async def create_vault(self, name: str, description: str | None = None) -> Vault:
        data = await self._request(
            "POST",
            "/vault",
            "create_vault",
            json={"name": name, "description": description},
        )
        return Vault.model_validate(data)

    async def delete_vault(self, vault_id: str) -> None:
        await self._request("DELETE", f"/vault/{vault_id}", "delete_vault")

    async def create_storage_target(
        self,
        vault_id: str,
        filename: str,
        content_type: str,
    ) -> StorageTarget:
        """
        Obtain a presigned upload URL for a new object.

        Automatic indexing is disabled: ingestion starts only when the
        upload is confirmed.
        """
        data = await self._request(
            "POST",
            f"/vault/{vault_id}/upload",
            "create_storage_target",
            json={"filename": filename, "contentType": content_type, "auto_index": False},
        )
        return StorageTarget.model_validate(data)

    async def list_objects(self, vault_id: str) -> list[VaultObject]:
        data = await self._request("GET", f"/vault/{vault_id}/objects", "list_objects")
        return [VaultObject.model_validate(obj) for obj in data.get("objects", [])]

    async def get_object(self, vault_id: str, object_id: str) -> VaultObject:
        data = await self._request(
            "GET",
            f"/vault/{vault_id}/objects/{object_id}",
            "get_object",
        )
        return VaultObject.model_validate(data)

    async def trigger_ingestion(self, vault_id: str, object_id: str) -> IngestionJob:
        """
        Start OCR / indexing of an uploaded object.

        Raises:
            AlreadyInProgressError: The service reports the object is already
                being ingested. Callers treat this as success.
            ExternalServiceError: Any other failure
        """
        try:
            data = await self._request(
                "POST",
                f"/vault/{vault_id}/ingest/{object_id}",
                "trigger_ingestion",
            )
        except ExternalServiceError as e:
            lowered = e.message.lower()
            if any(marker in lowered for marker in IN_PROGRESS_MARKERS):
                raise AlreadyInProgressError(
                    e.message,
                    details={"object_id": object_id},
                ) from e
            raise
        return IngestionJob.model_validate(data)

    async def get_text(self, vault_id: str, object_id: str) -> ObjectText:
        data = await self._request(
            "GET",
            f"/vault/{vault_id}/objects/{object_id}/text",
            "get_text",
        )
        return ObjectText.model_validate(data)

    async def search(
        self,
        vault_id: str,
        query: str,
        method: str = "hybrid",
        top_k: int = 50,
    ) -> VaultSearchResult:
        data = await self._request(
            "POST",
            f"/vault/{vault_id}/search",
            "search",
            json={"query": query, "method": method, "topK": top_k},
        )
        return VaultSearchResult.model_validate(data)

    async def delete_object(self, vault_id: str, object_id: str) -> None:
        await self._request(
            "DELETE",
            f"/vault/{vault_id}/objects/{object_id}",
            "delete_object",
        )

"""
Ingestion status synchronisation.

Reconciles local document status against the remote processing service.
Listing requests are debounced per case so polling clients cannot
translate their own request rate into remote API traffic: a short window
applies while any document is unsettled, a longer one otherwise.

Dependencies: sqlalchemy, casevault.boundary.db, casevault.core.stores
System role: Server-side status reconciliation for the documents API
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Protocol, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from casevault.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from casevault.boundary.db.models.document_model import DocumentModel
from casevault.core.exceptions import ExternalServiceError, RateLimitedError
from casevault.core.scheduling import Clock, SystemClock
from casevault.core.status_priority import IngestionStatus, is_unsettled, should_advance
from casevault.core.stores import KeyValueStore

logger = logging.getLogger(__name__)


class RemoteObject(Protocol):
    id: str
    ingestion_status: str | None
    page_count: int | None
    size_bytes: int | None


class ObjectSource(Protocol):
    """The part of the vault client the sync engine needs."""

    async def list_objects(self, vault_id: str) -> Sequence[RemoteObject]: ...

    async def get_object(self, vault_id: str, object_id: str) -> RemoteObject: ...


class CompletionListener(Protocol):
    def notify(self, case_id: UUID) -> None: ...


@dataclass
class SyncCacheEntry:
    """Bookkeeping for the last remote sync of a case."""

    last_sync: float
    had_processing: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncCacheEntry":
        return cls(
            last_sync=float(data["last_sync"]),
            had_processing=bool(data.get("had_processing", False)),
        )


def merge_remote(document: DocumentModel, remote: RemoteObject) -> dict[str, Any]:
    """
    Compute the column updates a remote observation implies for a document.

    Status only advances in priority order; a remote object with no status
    counts as pending. Page count and size are backfilled whenever the
    remote side knows them and the local side does not.

    Returns:
        dict: Columns to write; empty when nothing changes
    """
    updates: dict[str, Any] = {}
    remote_status = remote.ingestion_status or IngestionStatus.PENDING.value

    if should_advance(document.ingestion_status, remote_status):
        updates["ingestion_status"] = IngestionStatus(remote_status)
    if remote.page_count and not document.page_count:
        updates["page_count"] = remote.page_count
    if remote.size_bytes and not document.size_bytes:
        updates["size_bytes"] = remote.size_bytes
    return updates


class IngestionSyncEngine:
    """
    Debounced reconciliation of local document state with the vault.

    One engine is built per application and shared by every request; its
    debounce state lives in the injected KeyValueStore.

    Args:
        vault_client: Remote object source (list_objects / get_object)
        store: Key-value store holding SyncCacheEntry per case
        analysis_trigger: Notified once per pass that completes a document
        clock: Time source for debounce decisions
        active_window: Seconds between syncs while any document is unsettled
        idle_window: Seconds between syncs otherwise
        cache_ttl: Seconds of inactivity before a case's entry is dropped
        documents: Document CRUD used for reads and versioned writes
    """

    def __init__(
        self,
        vault_client: ObjectSource,
        store: KeyValueStore,
        analysis_trigger: CompletionListener | None = None,
        clock: Clock | None = None,
        active_window: float = 2.0,
        idle_window: float = 10.0,
        cache_ttl: int = 60,
        documents: DocumentCRUD = document_crud,
    ) -> None:
        self.vault_client = vault_client
        self.store = store
        self.analysis_trigger = analysis_trigger
        self.clock = clock or SystemClock()
        self.active_window = active_window
        self.idle_window = idle_window
        self.cache_ttl = cache_ttl
        self.documents = documents

    @staticmethod
    def _cache_key(case_id: UUID) -> str:
        return f"sync:{case_id}"

    async def should_sync(self, case_id: UUID, has_processing: bool) -> bool:
        """
        Decide whether a remote sync may run now and claim the slot if so.

        The entry is written before the caller talks to the remote service,
        so concurrent requests arriving inside the window are skipped.
        """
        now = self.clock.now()
        window = self.active_window if has_processing else self.idle_window

        raw = await self.store.get(self._cache_key(case_id))
        if raw is not None:
            entry = SyncCacheEntry.from_dict(raw)
            if now - entry.last_sync <= window:
                return False

        entry = SyncCacheEntry(last_sync=now, had_processing=has_processing)
        await self.store.set(self._cache_key(case_id), entry.to_dict(), self.cache_ttl)
        return True

    async def invalidate(self, case_id: UUID) -> None:
        """Forget the last sync so the next listing reconciles immediately."""
        await self.store.delete(self._cache_key(case_id))

    async def sync_case(
        self,
        session: AsyncSession,
        case_id: UUID,
        vault_id: str,
        documents: Sequence[DocumentModel],
    ) -> Sequence[DocumentModel]:
        """
        Reconcile a case's unsettled documents with the vault.

        Args:
            session: Async database session
            case_id: Case UUID
            vault_id: Remote vault of the case
            documents: Local documents as just read from the database

        Returns:
            The document list to present: re-read after any write, otherwise
            the input list unchanged. Remote failures never propagate.
        """
        unsettled = [d for d in documents if is_unsettled(d.ingestion_status)]
        if not unsettled:
            return documents

        # Any unsettled document puts the case on the active window
        if not await self.should_sync(case_id, has_processing=bool(unsettled)):
            return documents

        try:
            remote_objects = await self.vault_client.list_objects(vault_id)
        except (ExternalServiceError, RateLimitedError) as e:
            await self.invalidate(case_id)
            logger.warning(
                "Remote sync failed, serving local status",
                extra={"case_id": str(case_id), "error": str(e)},
            )
            return documents

        remote_by_id = {obj.id: obj for obj in remote_objects}
        changed = False
        completed_any = False

        for document in unsettled:
            remote = remote_by_id.get(document.object_id)
            if remote is None:
                continue

            updates = merge_remote(document, remote)
            if not updates:
                continue

            applied = await self.documents.apply_sync_update(
                session,
                document.id,
                expected_version=document.status_version,
                **updates,
            )
            if not applied:
                logger.info(
                    "Skipping sync update, document changed concurrently",
                    extra={"document_id": str(document.id)},
                )
                continue

            changed = True
            new_status = updates.get("ingestion_status")
            if new_status is not None:
                logger.info(
                    "Document status advanced",
                    extra={
                        "document_id": str(document.id),
                        "filename": document.filename,
                        "from_status": str(document.ingestion_status.value),
                        "to_status": new_status.value,
                    },
                )
                if new_status == IngestionStatus.COMPLETED:
                    completed_any = True

        if not changed:
            return documents

        await session.commit()

        if completed_any and self.analysis_trigger is not None:
            self.analysis_trigger.notify(case_id)

        return await self.documents.get_by_case_id(session, case_id)

    async def sync_document(
        self,
        session: AsyncSession,
        vault_id: str,
        document: DocumentModel,
    ) -> DocumentModel:
        """
        Reconcile one document against ``get_object`` without debouncing.

        Terminal documents are returned as-is. Remote failures are logged
        and the local record is returned.
        """
        if not is_unsettled(document.ingestion_status):
            return document

        try:
            remote = await self.vault_client.get_object(vault_id, document.object_id)
        except (ExternalServiceError, RateLimitedError) as e:
            logger.warning(
                "Single document sync failed",
                extra={"document_id": str(document.id), "error": str(e)},
            )
            return document

        updates = merge_remote(document, remote)
        if not updates:
            return document

        applied = await self.documents.apply_sync_update(
            session,
            document.id,
            expected_version=document.status_version,
            **updates,
        )
        if applied:
            await session.commit()
            if updates.get("ingestion_status") == IngestionStatus.COMPLETED and self.analysis_trigger:
                self.analysis_trigger.notify(document.case_id)

        refreshed = await self.documents.get_for_case(session, document.case_id, document.id)
        return refreshed or document

"""
Document service orchestrator.

Coordinates the server half of the upload protocol: registering upload
intents (one presigned target per file), confirming finished transfers
by triggering remote ingestion, retrying stuck documents, status listing
with background reconciliation, OCR text access and deletion.

Dependencies: casevault.boundary.db, casevault.boundary.vault, casevault.core.ingestion
System role: Document ingestion orchestration
"""

import asyncio
import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from casevault.boundary.db.CRUD.document_crud import document_crud
from casevault.boundary.db.models.document_model import DocumentModel
from casevault.boundary.vault.client import VaultClient
from casevault.boundary.vault.schemas import IngestionJob, StorageTarget
from casevault.application.services.case_service import load_case
from casevault.core.exceptions import (
    AlreadyInProgressError,
    CaseVaultException,
    ExternalServiceError,
    NotFoundError,
    RateLimitedError,
    ValidationError,
)
from casevault.core.ingestion.sync_engine import IngestionSyncEngine
from casevault.core.status_priority import IngestionStatus
from casevault.models.document import (
    BatchUploadResult,
    ConfirmResult,
    DocumentProcessingResponse,
    DocumentTextResponse,
    RetryAllResponse,
    RetryResult,
    UploadIntent,
    UploadTargetResponse,
)

logger = logging.getLogger(__name__)

SKIP_CONFIRM_STATUSES = (IngestionStatus.PROCESSING, IngestionStatus.COMPLETED)
STUCK_STATUSES = (IngestionStatus.PENDING, IngestionStatus.PROCESSING)


class DocumentService:
    """
    Document ingestion orchestrator.

    Args:
        db: AsyncSession for document records
        vault_client: Remote vault API client
        sync_engine: Shared status reconciliation engine
        max_batch_size: Upper bound on batch registration / confirmation size
    """

    def __init__(
        self,
        db: AsyncSession,
        vault_client: VaultClient,
        sync_engine: IngestionSyncEngine,
        max_batch_size: int = 20,
    ) -> None:
        self.db = db
        self.vault_client = vault_client
        self.sync_engine = sync_engine
        self.max_batch_size = max_batch_size

    def _check_batch(self, size: int, field: str) -> None:
        if size == 0:
            raise ValidationError(f"{field} must not be empty", field=field)
        if size > self.max_batch_size:
            raise ValidationError(
                f"Maximum batch size is {self.max_batch_size}",
                field=field,
                details={"received": size},
            )

    async def _get_document(self, case_id: UUID, document_id: UUID) -> DocumentModel:
        document = await document_crud.get_for_case(self.db, case_id, document_id)
        if document is None:
            raise NotFoundError("Document", str(document_id))
        return document

    async def list_documents(self, case_id: UUID) -> Sequence[DocumentModel]:
        """
        List a case's documents, reconciling unsettled ones with the vault.

        Reconciliation is debounced and never fails the listing.

        Raises:
            NotFoundError: If the case does not exist
        """
        case = await load_case(self.db, case_id)
        documents = await document_crud.get_by_case_id(self.db, case_id)
        return await self.sync_engine.sync_case(self.db, case_id, case.vault_id, documents)

    async def get_document(
        self,
        case_id: UUID,
        document_id: UUID,
        sync: bool = False,
    ) -> DocumentModel:
        """
        Fetch one document, optionally reconciling it with the vault first.

        Raises:
            NotFoundError: If the case or document does not exist
        """
        document = await self._get_document(case_id, document_id)
        if not sync:
            return document
        case = await load_case(self.db, case_id)
        return await self.sync_engine.sync_document(self.db, case.vault_id, document)

    async def _insert_pending(
        self,
        case_id: UUID,
        intent: UploadIntent,
        target: StorageTarget,
    ) -> DocumentModel:
        return await document_crud.create(
            self.db,
            case_id=case_id,
            object_id=target.object_id,
            filename=intent.filename,
            content_type=intent.content_type,
            size_bytes=intent.size_bytes,
            ingestion_status=IngestionStatus.PENDING,
        )

    async def register_upload(self, case_id: UUID, intent: UploadIntent) -> UploadTargetResponse:
        """
        Register one upload intent and return its presigned target.

        Raises:
            NotFoundError: If the case does not exist
            ExternalServiceError: If the vault refuses the upload
        """
        case = await load_case(self.db, case_id)
        target = await self.vault_client.create_storage_target(
            case.vault_id, intent.filename, intent.content_type
        )
        document = await self._insert_pending(case_id, intent, target)
        await self.db.commit()
        await self.sync_engine.invalidate(case_id)

        logger.info(
            "Upload registered",
            extra={"case_id": str(case_id), "document_id": str(document.id), "filename": intent.filename},
        )
        return UploadTargetResponse(
            document_id=document.id,
            object_id=target.object_id,
            upload_url=target.upload_url,
            expires_in=target.expires_in,
        )

    async def register_batch(
        self,
        case_id: UUID,
        intents: list[UploadIntent],
    ) -> list[BatchUploadResult]:
        """
        Register several upload intents at once.

        Presigned targets are requested concurrently; per-file failures are
        reported in the matching result entry instead of failing the batch.

        Args:
            case_id: Case UUID
            intents: Files to register, in client order

        Returns:
            list[BatchUploadResult]: One entry per intent, same order

        Raises:
            ValidationError: If the batch is empty or over the size limit
            NotFoundError: If the case does not exist
        """
        self._check_batch(len(intents), "files")
        case = await load_case(self.db, case_id)

        targets = await asyncio.gather(
            *(
                self.vault_client.create_storage_target(
                    case.vault_id, intent.filename, intent.content_type
                )
                for intent in intents
            ),
            return_exceptions=True,
        )

        results: list[BatchUploadResult] = []
        for intent, target in zip(intents, targets):
            if isinstance(target, BaseException):
                if not isinstance(target, CaseVaultException):
                    raise target
                logger.warning(
                    "Upload registration failed",
                    extra={"case_id": str(case_id), "filename": intent.filename, "error": str(target)},
                )
                results.append(
                    BatchUploadResult(
                        filename=intent.filename,
                        success=False,
                        error=target.message or "Failed to get upload URL",
                    )
                )
                continue

            document = await self._insert_pending(case_id, intent, target)
            results.append(
                BatchUploadResult(
                    filename=intent.filename,
                    success=True,
                    document_id=document.id,
                    object_id=target.object_id,
                    upload_url=target.upload_url,
                    expires_in=target.expires_in,
                )
            )

        await self.db.commit()
        await self.sync_engine.invalidate(case_id)
        return results

    async def _trigger(self, vault_id: str, document: DocumentModel) -> IngestionJob | None:
        """Trigger ingestion; returns None when the vault reports it already running."""
        try:
            return await self.vault_client.trigger_ingestion(vault_id, document.object_id)
        except AlreadyInProgressError:
            logger.info(
                "Ingestion already in progress",
                extra={"document_id": str(document.id), "filename": document.filename},
            )
            return None

    async def _confirm_outcome(
        self,
        document: DocumentModel,
        outcome: IngestionJob | None | BaseException,
    ) -> ConfirmResult:
        """Write the status implied by a trigger outcome and describe it."""
        if isinstance(outcome, BaseException):
            await document_crud.set_status(self.db, document.id, IngestionStatus.FAILED)
            logger.error(
                "Ingestion trigger failed",
                extra={"document_id": str(document.id), "filename": document.filename, "error": str(outcome)},
            )
            return ConfirmResult(
                document_id=document.id,
                filename=document.filename,
                success=False,
                error=str(getattr(outcome, "message", outcome)),
            )

        await document_crud.set_status(self.db, document.id, IngestionStatus.PROCESSING)
        if outcome is None:
            return ConfirmResult(
                document_id=document.id,
                filename=document.filename,
                success=True,
                message="Already processing",
            )
        return ConfirmResult(
            document_id=document.id,
            filename=document.filename,
            success=True,
            workflow_id=outcome.workflow_id,
            message=f"Processing started for {document.filename}",
        )

    @staticmethod
    def _skipped(document: DocumentModel) -> ConfirmResult:
        status = IngestionStatus(document.ingestion_status).value
        return ConfirmResult(
            document_id=document.id,
            filename=document.filename,
            success=True,
            skipped=True,
            message=f"Document already {status}",
        )

    async def confirm_upload(self, case_id: UUID, document_id: UUID) -> ConfirmResult:
        """
        Confirm one finished transfer and start remote ingestion.

        Idempotent: a document already processing or completed is skipped.

        Raises:
            NotFoundError: If the case or document does not exist
            ExternalServiceError: If the trigger fails; the document is marked failed
        """
        document = await self._get_document(case_id, document_id)
        if document.ingestion_status in SKIP_CONFIRM_STATUSES:
            logger.info(
                "Skipping confirm",
                extra={"document_id": str(document_id), "status": str(document.ingestion_status.value)},
            )
            return self._skipped(document)

        case = await load_case(self.db, case_id)
        try:
            outcome: IngestionJob | None | BaseException = await self._trigger(case.vault_id, document)
        except (ExternalServiceError, RateLimitedError) as e:
            outcome = e

        result = await self._confirm_outcome(document, outcome)
        await self.db.commit()

        if isinstance(outcome, BaseException):
            raise ExternalServiceError(
                "Failed to start document processing",
                operation="trigger_ingestion",
                details={"document_id": str(document_id), "reason": result.error},
            )
        return result

    async def confirm_batch(self, case_id: UUID, document_ids: list[UUID]) -> list[ConfirmResult]:
        """
        Confirm several transfers; ingestion triggers run concurrently.

        Args:
            case_id: Case UUID
            document_ids: Documents whose transfer finished

        Returns:
            list[ConfirmResult]: One entry per found document, request order

        Raises:
            ValidationError: If the batch is empty or over the size limit
            NotFoundError: If the case or all of the documents do not exist
        """
        self._check_batch(len(document_ids), "document_ids")
        case = await load_case(self.db, case_id)

        found = {d.id: d for d in await document_crud.get_many_for_case(self.db, case_id, document_ids)}
        if not found:
            raise NotFoundError("Documents", ",".join(str(i) for i in document_ids))

        ordered = [found[i] for i in dict.fromkeys(document_ids) if i in found]
        to_trigger = [d for d in ordered if d.ingestion_status not in SKIP_CONFIRM_STATUSES]

        outcomes = await asyncio.gather(
            *(self._trigger(case.vault_id, d) for d in to_trigger),
            return_exceptions=True,
        )
        by_id: dict[UUID, IngestionJob | None | BaseException] = {
            d.id: outcome for d, outcome in zip(to_trigger, outcomes)
        }
        for outcome in outcomes:
            if isinstance(outcome, BaseException) and not isinstance(outcome, CaseVaultException):
                raise outcome

        results: list[ConfirmResult] = []
        for document in ordered:
            if document.id not in by_id:
                results.append(self._skipped(document))
            else:
                results.append(await self._confirm_outcome(document, by_id[document.id]))

        await self.db.commit()
        return results

    async def retry_document(self, case_id: UUID, document_id: UUID) -> RetryResult:
        """
        Re-trigger ingestion for one document and reset it to processing.

        This is the only path that moves a terminal document back.

        Raises:
            NotFoundError: If the case or document does not exist
            ExternalServiceError: If the trigger fails
        """
        document = await self._get_document(case_id, document_id)
        case = await load_case(self.db, case_id)

        job = await self._trigger(case.vault_id, document)
        await document_crud.set_status(self.db, document.id, IngestionStatus.PROCESSING)
        await self.db.commit()
        await self.sync_engine.invalidate(case_id)

        logger.info("Ingestion retried", extra={"document_id": str(document_id)})
        return RetryResult(
            document_id=document.id,
            filename=document.filename,
            success=True,
            workflow_id=job.workflow_id if job else None,
            status=job.status if job else IngestionStatus.PROCESSING.value,
            message=f'Ingestion retry triggered for "{document.filename}"',
        )

    async def retry_stuck(self, case_id: UUID) -> RetryAllResponse:
        """
        Re-trigger every pending or processing document of a case, one at a time.

        Per-document failures are collected as "<filename>: <error>".
        """
        case = await load_case(self.db, case_id)
        stuck = await document_crud.get_by_statuses(self.db, case_id, STUCK_STATUSES)
        if not stuck:
            return RetryAllResponse(message="No stuck documents found", retried_count=0, total_pending=0)

        retried = 0
        errors: list[str] = []
        for document in stuck:
            try:
                await self._trigger(case.vault_id, document)
            except (ExternalServiceError, RateLimitedError) as e:
                errors.append(f"{document.filename}: {e.message}")
                logger.warning(
                    "Retry failed",
                    extra={"document_id": str(document.id), "error": e.message},
                )
                continue
            await document_crud.set_status(self.db, document.id, IngestionStatus.PROCESSING)
            retried += 1

        await self.db.commit()
        await self.sync_engine.invalidate(case_id)
        return RetryAllResponse(
            message=f"Retried ingestion for {retried} document(s)",
            retried_count=retried,
            total_pending=len(stuck),
            errors=errors or None,
        )

    async def get_text(
        self,
        case_id: UUID,
        document_id: UUID,
    ) -> DocumentTextResponse | DocumentProcessingResponse:
        """
        OCR text of a completed document.

        Returns:
            DocumentTextResponse, or DocumentProcessingResponse while the
            document has not completed
        """
        document = await self._get_document(case_id, document_id)
        if document.ingestion_status != IngestionStatus.COMPLETED:
            return DocumentProcessingResponse(status=IngestionStatus(document.ingestion_status).value)

        case = await load_case(self.db, case_id)
        text = await self.vault_client.get_text(case.vault_id, document.object_id)
        return DocumentTextResponse(
            object_id=text.object_id or document.object_id,
            filename=text.filename or document.filename,
            text=text.text,
            text_length=text.text_length or len(text.text),
            page_count=text.page_count if text.page_count is not None else document.page_count,
        )

    async def delete_document(self, case_id: UUID, document_id: UUID) -> str:
        """
        Delete a document locally; remote deletion is best-effort.

        Returns:
            str: Filename of the deleted document
        """
        document = await self._get_document(case_id, document_id)
        case = await load_case(self.db, case_id)

        try:
            await self.vault_client.delete_object(case.vault_id, document.object_id)
        except (ExternalServiceError, RateLimitedError) as e:
            logger.warning(
                "Vault object delete failed, removing locally",
                extra={"document_id": str(document_id), "error": str(e)},
            )

        await document_crud.delete_by_id(self.db, document.id)
        await self.db.commit()
        logger.info("Document deleted", extra={"document_id": str(document_id)})
        return document.filename

"""
Case service.

Creates a case together with its remote vault, and removes both on
delete. Vault deletion is best-effort: a case whose vault is already gone
must still be deletable.

Dependencies: casevault.boundary.db, casevault.boundary.vault
System role: Case lifecycle orchestration
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from casevault.boundary.db.CRUD.case_crud import case_crud
from casevault.boundary.db.models.case_model import CaseModel
from casevault.boundary.vault.client import VaultClient
from casevault.core.exceptions import ExternalServiceError, NotFoundError, RateLimitedError

logger = logging.getLogger(__name__)


async def load_case(db: AsyncSession, case_id: UUID) -> CaseModel:
    """
    Fetch a case or raise.

    Raises:
        NotFoundError: If the case does not exist
    """
    case = await case_crud.get_by_id(db, case_id)
    if case is None:
        raise NotFoundError("Case", str(case_id))
    return case


class CaseService:
    """Case lifecycle operations."""

    def __init__(self, db: AsyncSession, vault_client: VaultClient) -> None:
        self.db = db
        self.vault_client = vault_client

    async def create_case(self, name: str, description: str | None = None) -> CaseModel:
        """
        Create the remote vault, then the local case pointing at it.

        Args:
            name: Case display name
            description: Optional description

        Returns:
            CaseModel: Newly created case

        Raises:
            ExternalServiceError: If the vault cannot be created
        """
        vault = await self.vault_client.create_vault(name, description)
        case = await case_crud.create(
            self.db,
            name=name,
            description=description,
            vault_id=vault.id,
            tags=[],
        )
        await self.db.commit()
        logger.info("Case created", extra={"case_id": str(case.id), "vault_id": vault.id})
        return case

    async def get_case(self, case_id: UUID) -> CaseModel:
        return await load_case(self.db, case_id)

    async def list_cases(self, limit: int | None = None, offset: int = 0) -> Sequence[CaseModel]:
        return await case_crud.list_recent(self.db, limit=limit, offset=offset)

    async def delete_case(self, case_id: UUID) -> None:
        """
        Delete a case, its documents and its search history.

        Raises:
            NotFoundError: If the case does not exist
        """
        case = await load_case(self.db, case_id)

        try:
            await self.vault_client.delete_vault(case.vault_id)
        except (ExternalServiceError, RateLimitedError) as e:
            logger.warning(
                "Vault delete failed, removing case locally",
                extra={"case_id": str(case_id), "vault_id": case.vault_id, "error": str(e)},
            )

        await self.db.delete(case)
        await self.db.commit()
        logger.info("Case deleted", extra={"case_id": str(case_id)})

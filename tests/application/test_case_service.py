"""
Test suite for CaseService.

System role: Verification of case lifecycle orchestration
"""

import uuid

import pytest

from casevault.application.services.case_service import CaseService
from casevault.boundary.db.CRUD.document_crud import document_crud
from casevault.boundary.db.CRUD.search_crud import search_crud
from casevault.core.exceptions import ExternalServiceError, NotFoundError


@pytest.fixture
def case_service(test_async_db, mock_vault_client) -> CaseService:
    return CaseService(test_async_db, mock_vault_client)


class TestCaseService:
    """Test suite for CaseService."""

    @pytest.mark.asyncio
    async def test_create_case_should_create_vault_first(self, case_service, mock_vault_client) -> None:
        case = await case_service.create_case("Smith v. Jones", "Contract dispute")

        mock_vault_client.create_vault.assert_awaited_once_with("Smith v. Jones", "Contract dispute")
        assert case.vault_id == "vault-1"
        assert case.tags == []

    @pytest.mark.asyncio
    async def test_create_case_should_not_persist_when_vault_fails(
        self, case_service, mock_vault_client
    ) -> None:
        mock_vault_client.create_vault.side_effect = ExternalServiceError("vault down")

        with pytest.raises(ExternalServiceError):
            await case_service.create_case("Smith v. Jones")

        assert await case_service.list_cases() == []

    @pytest.mark.asyncio
    async def test_get_missing_case_should_raise(self, case_service) -> None:
        with pytest.raises(NotFoundError):
            await case_service.get_case(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_delete_case_should_cascade(
        self, case_service, test_async_db, make_case, make_document
    ) -> None:
        """Test documents and search history go with the case."""
        # Arrange
        case = await make_case()
        await make_document(case.id, "a.pdf")
        await search_crud.create(
            test_async_db, case_id=case.id, query="q", result_count=0,
            total_result_count=0, relevance_threshold=75,
        )
        await test_async_db.commit()

        # Act
        await case_service.delete_case(case.id)

        # Assert
        assert await document_crud.get_by_case_id(test_async_db, case.id) == []
        assert await search_crud.list_recent(test_async_db, case.id) == []

    @pytest.mark.asyncio
    async def test_delete_case_should_tolerate_vault_failure(
        self, case_service, mock_vault_client, make_case
    ) -> None:
        case = await make_case()
        mock_vault_client.delete_vault.side_effect = ExternalServiceError("already gone", status_code=404)

        await case_service.delete_case(case.id)

        with pytest.raises(NotFoundError):
            await case_service.get_case(case.id)

"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from casevault.boundary.db.CRUD import case_crud, document_crud

    case = await case_crud.get_by_id(db, case_id)
    docs = await document_crud.get_by_case_id(db, case_id)
"""

from casevault.boundary.db.CRUD.base_crud import BaseCRUD
from casevault.boundary.db.CRUD.case_crud import CaseCRUD, case_crud
from casevault.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from casevault.boundary.db.CRUD.search_crud import SearchCRUD, search_crud

__all__ = [
    "BaseCRUD",
    "CaseCRUD",
    "case_crud",
    "DocumentCRUD",
    "document_crud",
    "SearchCRUD",
    "search_crud",
]

"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - create_tables(), dispose_engine(): Schema bootstrap and shutdown
  - CaseModel, DocumentModel, SearchModel: Core domain entities
  - case_crud, document_crud, search_crud: CRUD operation singletons

Dependencies: sqlalchemy, casevault.configs
System role: Database adapter for cases, documents and search history
"""

from casevault.boundary.db.base import Base, TimestampMixin, UUIDMixin
from casevault.boundary.db.connection import (
    create_session_factory,
    create_tables,
    dispose_engine,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from casevault.boundary.db.models import CaseModel, DocumentModel, SearchModel
from casevault.boundary.db.CRUD import (
    BaseCRUD,
    CaseCRUD,
    DocumentCRUD,
    SearchCRUD,
    case_crud,
    document_crud,
    search_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "create_session_factory",
    "create_tables",
    "dispose_engine",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "CaseModel",
    "DocumentModel",
    "SearchModel",
    # CRUD classes
    "BaseCRUD",
    "CaseCRUD",
    "DocumentCRUD",
    "SearchCRUD",
    # CRUD singletons
    "case_crud",
    "document_crud",
    "search_crud",
]

"""
Database models package.

Exports:
  - CaseModel: Case ORM model
  - DocumentModel: Document ORM model (status enum lives in casevault.core.status_priority)
  - SearchModel: Search history ORM model

Dependencies: sqlalchemy, casevault.boundary.db.base
System role: Database model definitions for domain entities
"""

from casevault.boundary.db.models.case_model import CaseModel
from casevault.boundary.db.models.document_model import DocumentModel
from casevault.boundary.db.models.search_model import SearchModel

__all__ = [
    "CaseModel",
    "DocumentModel",
    "SearchModel",
]

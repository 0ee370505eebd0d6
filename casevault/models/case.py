"""
Case request/response schemas.

Dependencies: pydantic
System role: Case API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CreateCaseRequest(BaseModel):
    """Request schema for creating a case (and its remote vault)."""

    name: str = Field(min_length=1, max_length=255, description="Case display name")
    description: str | None = Field(default=None, description="Optional case description")


class CaseResponse(BaseModel):
    """Response schema for case operations."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None = None
    vault_id: str
    tags: list[str] = Field(default_factory=list)
    ai_summary: str | None = None
    created_at: datetime
    updated_at: datetime


class CaseListResponse(BaseModel):
    cases: list[CaseResponse]
    total: int


class CaseAnalysisResponse(BaseModel):
    """Tags and summary generated from a case's documents."""

    case_id: uuid.UUID
    tags: list[str] = Field(default_factory=list)
    summary: str | None = None
    message: str | None = None

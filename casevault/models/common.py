"""
Common response models and utilities.

Error schema and the result envelope shared by batch operations.

Dependencies: pydantic
System role: Common API response structures
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorResponse(BaseModel):
    """Error response schema."""

    success: bool = False
    error: str = Field(description="Error message")
    details: dict | None = Field(default=None, description="Additional error context")


class BatchSummary(BaseModel):
    """Counts for a batch operation."""

    total: int
    success: int
    failed: int


class BatchResponse(BaseModel, Generic[T]):
    """Per-item results plus aggregate counts."""

    results: list[T]
    summary: BatchSummary

    @classmethod
    def from_results(cls, results: list[T]) -> "BatchResponse[T]":
        succeeded = sum(1 for r in results if getattr(r, "success", False))
        return cls(
            results=results,
            summary=BatchSummary(
                total=len(results),
                success=succeeded,
                failed=len(results) - succeeded,
            ),
        )


class MessageResponse(BaseModel):
    success: bool = True
    message: str

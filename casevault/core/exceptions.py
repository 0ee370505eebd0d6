"""
Exception hierarchy for the CaseVault application.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class CaseVaultException(Exception):
    """Base exception for all CaseVault application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class NotFoundError(CaseVaultException):
    """Raised when a case, document, or search record does not exist."""

    def __init__(
        self,
        resource: str,
        resource_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize not found error.

        Args:
            resource: Kind of resource ("Case", "Document", "Search")
            resource_id: Identifier that was looked up
            details: Additional context
        """
        details = details or {}
        details["resource_id"] = resource_id
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found", details)


class ValidationError(CaseVaultException):
    """Raised when input validation fails (malformed or oversize batch, unsupported file type)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ExternalServiceError(CaseVaultException):
    """Raised when the remote processing or storage service fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize external service error.

        Args:
            message: Error message (remote error text when available)
            operation: Remote operation that failed (list_objects, trigger_ingestion, ...)
            status_code: HTTP status returned by the remote service, if any
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        if status_code is not None:
            details["status_code"] = status_code
        self.operation = operation
        self.status_code = status_code
        super().__init__(message, details)


class AlreadyInProgressError(CaseVaultException):
    """Raised when the remote service reports ingestion is already running.

    Callers treat this as success.
    """


class RateLimitedError(CaseVaultException):
    """Raised when a caller or the remote service exceeds its request budget."""

    def __init__(
        self,
        message: str = "Too many requests. Please try again later.",
        retry_after: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize rate limit error.

        Args:
            message: Error message
            retry_after: Seconds until the caller may retry
            details: Additional context
        """
        details = details or {}
        if retry_after is not None:
            details["retry_after"] = retry_after
        self.retry_after = retry_after
        super().__init__(message, details)

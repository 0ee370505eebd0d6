"""
API error handling.

Maps the application exception hierarchy onto HTTP responses in one
place so every router reports failures the same way.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from casevault.core.exceptions import (
    CaseVaultException,
    ExternalServiceError,
    NotFoundError,
    RateLimitedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _detail(e: CaseVaultException) -> dict[str, Any]:
    return {"error": e.message, "details": e.details or None}


def to_http_exception(e: CaseVaultException) -> HTTPException:
    """Translate an application exception into an HTTPException."""
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_detail(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_detail(e))
    if isinstance(e, RateLimitedError):
        headers = {"Retry-After": str(e.retry_after)} if e.retry_after is not None else None
        return HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=_detail(e),
            headers=headers,
        )
    if isinstance(e, ExternalServiceError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=_detail(e))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=_detail(e))


def handle_api_errors(func: F) -> F:
    """
    Decorator translating application errors into HTTPExceptions.

    NotFoundError → 404, ValidationError → 400, RateLimitedError → 429
    (with Retry-After), ExternalServiceError → 502, anything else → 500
    with the traceback logged.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except NotFoundError as e:
            logger.warning("Resource not found", extra={"error": str(e)})
            raise to_http_exception(e)

        except (ValidationError, RateLimitedError) as e:
            logger.warning("Rejected request", extra={"error": str(e)})
            raise to_http_exception(e)

        except ExternalServiceError as e:
            logger.error("Remote service failure", extra={"error": str(e)})
            raise to_http_exception(e)

        except CaseVaultException as e:
            logger.exception("Unhandled application error", extra={"error": str(e)})
            raise to_http_exception(e)

        except Exception as e:
            logger.exception("Unexpected failure", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"error": "An internal error occurred"},
            )

    return wrapper  # type: ignore

"""FastAPI dependency factories."""

from casevault.api.deps.dependencies import (
    ServiceCache,
    get_analysis_service,
    get_case_service,
    get_document_service,
    get_search_service,
    get_service_cache,
)
from casevault.api.deps.rate_limit import rate_limited

__all__ = [
    "ServiceCache",
    "get_analysis_service",
    "get_case_service",
    "get_document_service",
    "get_search_service",
    "get_service_cache",
    "rate_limited",
]

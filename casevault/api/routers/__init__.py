"""API routers."""

from .cases import router as cases_router
from .documents import router as documents_router
from .health import router as health_router
from .searches import router as searches_router

__all__ = [
    "cases_router",
    "documents_router",
    "health_router",
    "searches_router",
]

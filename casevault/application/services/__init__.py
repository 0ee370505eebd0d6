"""Service orchestrators."""

from .analysis_service import AnalysisService, run_case_analysis
from .case_service import CaseService
from .document_service import DocumentService
from .search_service import SearchCacheManager

__all__ = [
    "AnalysisService",
    "CaseService",
    "DocumentService",
    "SearchCacheManager",
    "run_case_analysis",
]

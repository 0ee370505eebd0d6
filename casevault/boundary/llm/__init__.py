"""
LLM boundary: LangChain chat model wrapper for summaries and case analysis.
"""

from casevault.boundary.llm.summarizer import (
    CaseAnalysis,
    LLMSummarizer,
    build_chat_model,
    parse_case_analysis,
)

__all__ = [
    "CaseAnalysis",
    "LLMSummarizer",
    "build_chat_model",
    "parse_case_analysis",
]

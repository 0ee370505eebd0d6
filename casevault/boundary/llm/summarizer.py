"""
LLM-backed summaries.

Wraps a LangChain chat model to produce the overall and per-chunk
summaries attached to search results, and the tags + summary stored on
a case after its documents finish processing.

Dependencies: langchain_core, langchain_google_genai, casevault.configs
System role: Boundary adapter for the chat model
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from casevault.boundary.llm.prompts import (
    CASE_ANALYSIS_SYSTEM_PROMPT,
    CASE_ANALYSIS_USER_PROMPT,
    CHUNK_RELEVANCE_PROMPT,
    SEARCH_OVERVIEW_PROMPT,
)
from casevault.configs.llm import LLMSettings

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


@dataclass
class CaseAnalysis:
    """Tags and summary generated for a case."""

    tags: list[str] = field(default_factory=list)
    summary: str | None = None


def build_chat_model(settings: LLMSettings) -> BaseChatModel:
    """Create the configured Gemini chat model."""
    kwargs: dict[str, Any] = {
        "model": settings.model_id,
        "temperature": settings.temperature,
    }
    if settings.google_api_key:
        kwargs["google_api_key"] = settings.google_api_key
    return ChatGoogleGenerativeAI(**kwargs)


def _content_text(content: Any) -> str:
    """Flatten message content (plain string or list of parts) to text."""
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts).strip()
    return str(content or "").strip()


def parse_case_analysis(content: str) -> CaseAnalysis:
    """
    Extract ``{"tags": [...], "summary": "..."}`` from a model reply.

    Markdown fences and surrounding prose are tolerated. If no JSON can be
    parsed, the first 500 characters of the reply become the summary.
    """
    match = _JSON_OBJECT.search(content)
    if match:
        try:
            parsed = json.loads(match.group(0))
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            tags = parsed.get("tags")
            summary = parsed.get("summary")
            return CaseAnalysis(
                tags=[str(t) for t in tags] if isinstance(tags, list) else [],
                summary=summary if isinstance(summary, str) else None,
            )

    logger.warning("Case analysis reply was not valid JSON", extra={"length": len(content)})
    return CaseAnalysis(tags=[], summary=content[:500] or None)


class LLMSummarizer:
    """
    Summary generation over a LangChain chat model.

    Args:
        model: Any LangChain chat model; tests pass a fake
    """

    def __init__(self, model: BaseChatModel) -> None:
        self.model = model

    async def _ask(self, messages: list) -> str:
        response = await self.model.ainvoke(messages)
        return _content_text(response.content)

    async def summarize_search(
        self,
        query: str,
        case_name: str,
        source_names: Sequence[str],
        excerpts: Sequence[str],
    ) -> str:
        """
        Two to three sentence overview of what a search turned up.

        Args:
            query: Search text
            case_name: Name of the case searched
            source_names: Filenames with at least one kept chunk
            excerpts: Leading text of the top chunks

        Returns:
            str: Overview text
        """
        prompt = SEARCH_OVERVIEW_PROMPT.format(
            query=query,
            case_name=case_name,
            source_names=", ".join(source_names),
            excerpts="\n---\n".join(excerpts),
        )
        return await self._ask([HumanMessage(content=prompt)])

    async def summarize_chunk(self, query: str, source_name: str, chunk_text: str) -> str:
        """One or two sentences on why a chunk matches the query."""
        prompt = CHUNK_RELEVANCE_PROMPT.format(
            query=query,
            source_name=source_name,
            chunk_text=chunk_text[:500],
        )
        return await self._ask([HumanMessage(content=prompt)])

    async def analyze_case(
        self,
        case_name: str,
        description: str | None,
        document_names: Sequence[str],
        samples: Sequence[str],
    ) -> CaseAnalysis:
        """
        Generate tags and a summary from text samples of a case's documents.

        Args:
            case_name: Case display name
            description: Optional case description
            document_names: Filenames of every completed document
            samples: "[filename]:\\n<text>" samples of the analyzed documents

        Returns:
            CaseAnalysis: Parsed tags and summary
        """
        user_prompt = CASE_ANALYSIS_USER_PROMPT.format(
            case_name=case_name,
            description_line=f"Description: {description}\n" if description else "",
            document_count=len(document_names),
            document_names=", ".join(document_names),
            samples="\n\n---\n\n".join(samples),
        )
        content = await self._ask(
            [SystemMessage(content=CASE_ANALYSIS_SYSTEM_PROMPT), HumanMessage(content=user_prompt)]
        )
        return parse_case_analysis(content)

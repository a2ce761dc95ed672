"""LangChain tools exposing site search and FAQ search to an orchestrating agent.

The tools only retrieve and rank; deciding when to call them and composing
the final reply is left to the agent.
"""

import json
import logging
from typing import TYPE_CHECKING

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, Field

from .errors import QAServerError

if TYPE_CHECKING:
    from .faq.service import FaqSearchService
    from .rag.retriever import VectorRetriever

logger = logging.getLogger(__name__)


class SiteSearchInput(BaseModel):
    """Input schema for the site search tool."""

    query: str = Field(description="Natural-language question about the website's content")
    k: int = Field(default=8, ge=1, le=20, description="Number of passages to return (1-20). Default is 8.")


class FaqSearchInput(BaseModel):
    """Input schema for the FAQ search tool."""

    question: str = Field(description="The user's question, as asked")
    sheet_url: str = Field(default="", description="Optional spreadsheet URL overriding the configured FAQ sheet")
    gid: str = Field(default="", description="Optional spreadsheet tab id")


def create_site_search_tool(retriever: "VectorRetriever") -> StructuredTool:
    """Create a tool that searches the prebuilt site index.

    Args:
        retriever: VectorRetriever over the persisted index

    Returns:
        LangChain StructuredTool returning a JSON object with ``context``, ``sources``,
        ``chunks``, ``indexedAt``, and ``empty``

    Example:
        >>> store = IndexStore(data_dir="data")
        >>> site_search = create_site_search_tool(VectorRetriever(store, EmbeddingClient.from_config(config)))
    """

    def _site_search(query: str, k: int = 8) -> str:
        try:
            result = retriever.retrieve(query, k=k)
        except QAServerError as e:
            logger.error(f"[RAG] site_search failed: {e}")
            return f"Error: {e}"
        return json.dumps(result.to_dict(), ensure_ascii=False)

    return StructuredTool.from_function(
        name="site_search",
        description=(
            "Search the website's prebuilt content index. Returns the most relevant passages with their "
            "source URLs. Use this for questions about the organization, its team, portfolio, or content."
        ),
        func=_site_search,
        args_schema=SiteSearchInput,
    )


def create_faq_search_tool(service: "FaqSearchService") -> StructuredTool:
    """Create a tool that answers questions from the FAQ spreadsheet.

    Args:
        service: FaqSearchService wired to the sheet

    Returns:
        LangChain StructuredTool returning a JSON object with ``answer``, ``matches``,
        ``source``, ``usedEntries``, and ``confident``
    """

    def _faq_search(question: str, sheet_url: str = "", gid: str = "") -> str:
        try:
            answer = service.search(question, sheet_url=sheet_url or None, gid=gid or None)
        except QAServerError as e:
            logger.error(f"[FAQ] faq_search failed: {e}")
            return f"Error: {e}"
        return json.dumps(answer.to_dict(), ensure_ascii=False)

    return StructuredTool.from_function(
        name="faq_search",
        description=(
            "Answer a question from the curated FAQ spreadsheet. Returns the best answer when a close match "
            "exists, otherwise says no close match was found, along with the ranked candidates."
        ),
        func=_faq_search,
        args_schema=FaqSearchInput,
    )

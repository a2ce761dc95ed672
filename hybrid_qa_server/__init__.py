"""Hybrid QA Server - site vector search and spreadsheet FAQ ranking for an orchestrating agent."""

from .config import ServerConfig
from .errors import (
    ConfigurationError,
    EmbeddingError,
    LockTimeoutError,
    NetworkError,
    NotFoundError,
    ParseError,
    QAServerError,
)
from .faq import FaqSearchService, RankingConfig, SheetIngestor, build_faq_index, rank
from .rag import EmbeddingClient, IndexStore, RAGConfig, VectorRetriever, ensure_index
from .server import QAServer
from .tools import create_faq_search_tool, create_site_search_tool

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "EmbeddingClient",
    "EmbeddingError",
    "FaqSearchService",
    "IndexStore",
    "LockTimeoutError",
    "NetworkError",
    "NotFoundError",
    "ParseError",
    "QAServer",
    "QAServerError",
    "RAGConfig",
    "RankingConfig",
    "ServerConfig",
    "SheetIngestor",
    "VectorRetriever",
    "build_faq_index",
    "create_faq_search_tool",
    "create_site_search_tool",
    "ensure_index",
    "rank",
]

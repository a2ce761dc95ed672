"""Site crawling, chunking, embedding, and vector retrieval."""

from .chunker import chunk_text
from .config import DEFAULT_SEED_PATHS, RAGConfig
from .crawler import SiteCrawler, crawl, load_pages, normalize_url, same_origin, save_pages
from .embeddings import EmbeddingClient, cosine_similarity
from .extract import extract_description, extract_links, html_to_text
from .indexer import VectorIndexBuilder, build_site_index, ensure_index, load_index, needs_rebuild, save_index
from .models import Chunk, IndexItem, Page, RankedChunk, RetrievalResult, SourceScore, VectorIndex
from .retriever import IndexStore, VectorRetriever

__all__ = [
    "DEFAULT_SEED_PATHS",
    "Chunk",
    "EmbeddingClient",
    "IndexItem",
    "IndexStore",
    "Page",
    "RAGConfig",
    "RankedChunk",
    "RetrievalResult",
    "SiteCrawler",
    "SourceScore",
    "VectorIndex",
    "VectorIndexBuilder",
    "VectorRetriever",
    "build_site_index",
    "chunk_text",
    "cosine_similarity",
    "crawl",
    "ensure_index",
    "extract_description",
    "extract_links",
    "html_to_text",
    "load_index",
    "load_pages",
    "needs_rebuild",
    "normalize_url",
    "same_origin",
    "save_index",
    "save_pages",
]

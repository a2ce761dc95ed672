"""Vector index building, persistence, and TTL-based refresh.

Pipeline:
- Crawl the site into a page set (see crawler.py)
- Chunk each page's text
- Embed all chunks through the embedding client
- Persist ``{model, createdAt, items}`` atomically

The index is always rebuilt wholesale; there is no incremental update path.
"""

import json
import logging
import sys
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path

from tqdm import tqdm

from ..errors import ConfigurationError, NotFoundError, ParseError
from ..storage import atomic_write_json
from .chunker import chunk_text
from .config import RAGConfig
from .crawler import SiteCrawler, save_pages
from .embeddings import EmbeddingClient, text_hash
from .models import Chunk, IndexItem, Page, VectorIndex

logger = logging.getLogger(__name__)


def chunk_pages(pages: list[Page], max_chars: int = 1000) -> list[Chunk]:
    """Chunk every page; chunk ids are ``<sha1(url)>_<seq>`` and stable across rebuilds."""
    chunks: list[Chunk] = []
    for page in pages:
        url_hash = text_hash(page.url)
        for seq, text in enumerate(chunk_text(page.text, max_chars)):
            chunks.append(Chunk(id=f"{url_hash}_{seq}", source_url=page.url, text=text))
    return chunks


class VectorIndexBuilder:
    """Turns a page set into a VectorIndex."""

    def __init__(
        self,
        embedder: EmbeddingClient,
        chunk_max_chars: int = 1000,
        batch_size: int = 100,
        show_progress: bool = True,
        model: str | None = None,
    ):
        """Initialize the builder.

        Args:
            embedder: Embedding client
            chunk_max_chars: Maximum characters per chunk
            batch_size: Number of chunks per embedding request
            show_progress: Show a progress bar while embedding
            model: Embedding model to request and record in the index (defaults to the client's model)
        """
        self.embedder = embedder
        self.model = model or embedder.model
        self.chunk_max_chars = chunk_max_chars
        self.batch_size = max(1, batch_size)
        self.show_progress = show_progress

    def build(self, pages: list[Page]) -> VectorIndex:
        """Chunk and embed ``pages`` into a new index.

        Raises:
            EmbeddingError: If the embedding service fails
        """
        start = time.time()
        chunks = chunk_pages(pages, self.chunk_max_chars)
        logger.info(f"[RAG] Created {len(chunks)} chunks from {len(pages)} pages")

        embeddings: list[list[float]] = []
        with tqdm(
            total=len(chunks),
            desc="Embedding chunks",
            unit="chunks",
            disable=not self.show_progress,
            file=sys.stderr,
        ) as pbar:
            for i in range(0, len(chunks), self.batch_size):
                batch = chunks[i : i + self.batch_size]
                embeddings.extend(self.embedder.embed([chunk.text for chunk in batch], model=self.model))
                pbar.update(len(batch))

        items = [
            IndexItem(id=chunk.id, url=chunk.source_url, text=chunk.text, embedding=vector)
            for chunk, vector in zip(chunks, embeddings)
        ]
        index = VectorIndex(
            model_id=self.model,
            created_at=datetime.now(timezone.utc).isoformat(),
            items=items,
        )
        logger.info(f"[RAG] ✓ Index built with {len(items)} items in {time.time() - start:.1f}s")
        return index


def save_index(index: VectorIndex, path: Path) -> None:
    """Write the index atomically so readers never see a partial file."""
    atomic_write_json(Path(path), index.to_dict())
    logger.info(f"[RAG] Saved index with {len(index.items)} items to {path}")


def load_index(path: Path) -> VectorIndex:
    """Read a persisted index.

    Raises:
        NotFoundError: If the file does not exist
        ParseError: If the file is not a valid index
    """
    path = Path(path)
    if not path.exists():
        raise NotFoundError("Prebuilt index not found.", attempted=[str(path)])
    try:
        return VectorIndex.from_dict(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise ParseError(f"Invalid index file {path}: {e}") from e


def needs_rebuild(config: RAGConfig, now: datetime | None = None) -> bool:
    """Check whether the persisted index is missing or older than the TTL.

    Returns:
        True if the index (or the page set it was built from) needs rebuilding
    """
    index_file = config.index_file
    if not index_file.exists() or not config.pages_file.exists():
        logger.info("[RAG] No previous index found, needs initial build")
        return True

    now = now or datetime.now(timezone.utc)
    modified = datetime.fromtimestamp(index_file.stat().st_mtime, tz=timezone.utc)
    age = now - modified
    ttl = timedelta(hours=config.index_ttl_hours)

    if age >= ttl:
        logger.info(f"[RAG] Index age {age} exceeds TTL {ttl}, needs rebuild")
        return True

    logger.info(f"[RAG] Recent index found ({age} old)")
    return False


def build_site_index(
    config: RAGConfig,
    embedder: EmbeddingClient,
    crawler: SiteCrawler | None = None,
) -> VectorIndex:
    """Crawl the site, persist the pages, then build and persist the index.

    Raises:
        ConfigurationError: If no root URL is configured
    """
    if not config.root_url:
        raise ConfigurationError("Site root URL is not configured (set SITE_ROOT_URL)")
    crawler = crawler or SiteCrawler(
        request_timeout=config.request_timeout,
        user_agent=config.user_agent,
        show_progress=config.show_progress,
    )

    logger.info("[RAG] Phase 1/2: Crawling site")
    pages = crawler.crawl(config.root_url, config.seed_paths, config.max_crawl_depth, config.max_pages)
    save_pages(pages, config.pages_file)

    logger.info(f"[RAG] Phase 2/2: Indexing {len(pages)} pages")
    builder = VectorIndexBuilder(
        embedder,
        chunk_max_chars=config.chunk_max_chars,
        batch_size=config.embedding_batch_size,
        show_progress=config.show_progress,
        model=config.embedding_model,
    )
    index = builder.build(pages)
    save_index(index, config.index_file)
    return index


def ensure_index(
    config: RAGConfig,
    embedder: EmbeddingClient,
    crawler: SiteCrawler | None = None,
    force: bool = False,
) -> bool:
    """Rebuild pages and index when missing or stale.

    Args:
        config: RAG configuration
        embedder: Embedding client used for a rebuild
        crawler: Optional crawler (defaults to one built from config)
        force: Rebuild regardless of TTL

    Returns:
        True if a rebuild happened, False if the existing index was kept
    """
    if not force and not needs_rebuild(config):
        logger.info(f"[RAG] Using existing index at {config.index_file}")
        return False

    logger.info(f"[RAG] Building index (TTL {config.index_ttl_hours}h)...")
    build_site_index(config, embedder, crawler=crawler)
    return True

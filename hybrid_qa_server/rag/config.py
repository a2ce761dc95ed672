"""RAG configuration dataclass."""

from dataclasses import dataclass, field
from pathlib import Path

# Likely content paths on a portfolio-style site, crawled before discovered links
DEFAULT_SEED_PATHS = ["/portfolio", "/investments", "/companies", "/team", "/about"]


@dataclass
class RAGConfig:
    """Configuration for site crawling, indexing, and vector search.

    Attributes:
        root_url: Starting URL for crawling (e.g., "https://run.vc")
        data_dir: Directory holding the crawled pages and the persisted index
        index_path: Optional explicit index file; overrides the conventional locations
        seed_paths: Paths (relative to the root's origin) enqueued alongside the root

        # Crawling settings
        max_crawl_depth: Links are only expanded from pages shallower than this (default: 2)
        max_pages: Maximum total pages to collect (default: 50)
        request_timeout: HTTP request timeout in seconds
        user_agent: User agent sent with every crawl request

        # Chunking settings
        chunk_max_chars: Maximum characters per chunk before sentence-level splitting (default: 1000)

        # Embedding settings
        embedding_model: Embedding model identifier recorded in the index
        embedding_batch_size: Number of chunks sent per embedding request

        # Search settings
        search_top_k: Default number of passages to return (default: 8, clamped to 1-20)

        # Index settings
        index_ttl_hours: Age after which ensure_index() rebuilds the index (default: 24)
    """

    root_url: str
    data_dir: str | Path = "data"
    index_path: str | Path | None = None
    seed_paths: list[str] = field(default_factory=lambda: list(DEFAULT_SEED_PATHS))

    # Crawling settings
    max_crawl_depth: int = 2
    max_pages: int = 50
    request_timeout: float = 15.0
    user_agent: str = "Mozilla/5.0 (compatible; HybridQACrawler/1.0)"

    # Chunking settings
    chunk_max_chars: int = 1000

    # Embedding settings
    embedding_model: str = "text-embedding-3-small"
    embedding_batch_size: int = 100

    # Search settings
    search_top_k: int = 8

    # Index settings
    index_ttl_hours: float = 24.0
    show_progress: bool = True

    def __post_init__(self):
        """Convert paths and validate limits."""
        self.data_dir = Path(self.data_dir)
        if self.index_path is not None:
            self.index_path = Path(self.index_path)

        if self.max_pages < 1:
            raise ValueError(f"max_pages must be at least 1, got {self.max_pages}")
        if self.max_crawl_depth < 0:
            raise ValueError(f"max_crawl_depth must be >= 0, got {self.max_crawl_depth}")
        if self.chunk_max_chars < 1:
            raise ValueError(f"chunk_max_chars must be positive, got {self.chunk_max_chars}")

    @property
    def pages_file(self) -> Path:
        """Location of the crawled page set."""
        return self.data_dir / "site_pages.json"

    @property
    def index_file(self) -> Path:
        """Location the index builder writes to."""
        return Path(self.index_path) if self.index_path else self.data_dir / "site_index.json"

    @classmethod
    def from_server_config(cls, server_config, **overrides) -> "RAGConfig":
        """Build a RAGConfig from a ServerConfig, with keyword overrides."""
        values = {
            "root_url": server_config.SITE_ROOT_URL,
            "data_dir": server_config.DATA_DIR,
            "index_path": server_config.INDEX_PATH,
            "request_timeout": server_config.REQUEST_TIMEOUT,
            "embedding_model": server_config.EMBEDDING_MODEL,
            "index_ttl_hours": server_config.INDEX_TTL_HOURS,
            "search_top_k": server_config.SEARCH_TOP_K,
        }
        values.update(overrides)
        return cls(**values)

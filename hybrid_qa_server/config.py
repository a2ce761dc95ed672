"""Base configuration for the hybrid QA server."""

from typing import Optional


class ServerConfig:
    """Base configuration class for the hybrid QA server.

    Projects should subclass this and override as needed.
    """

    # Embedding service
    OPENAI_API_KEY: str = ""
    EMBEDDING_ENDPOINT: str = "https://api.openai.com/v1"
    EMBEDDING_MODEL: str = "text-embedding-3-small"

    # Site index
    SITE_ROOT_URL: str = ""
    DATA_DIR: str = "data"
    INDEX_PATH: Optional[str] = None  # Explicit override for the persisted vector index
    INDEX_TTL_HOURS: float = 24.0
    SEARCH_TOP_K: int = 8  # Default passages per site search (1-20)

    # FAQ spreadsheet
    FAQ_SHEET_URL: str = ""
    FAQ_TTL_MINUTES: float = 10.0
    FAQ_SYNONYMS_JSON: str = ""

    # FAQ ranking (BM25 + boosts)
    FAQ_BM25_K1: float = 1.2
    FAQ_BM25_BQ: float = 0.75  # BM25 b for the question field
    FAQ_BM25_BA: float = 0.75  # BM25 b for the answer field
    FAQ_BOOST_Q: float = 2.0
    FAQ_BOOST_A: float = 1.0
    FAQ_PHRASE_BOOST: float = 1.5
    FAQ_CATEGORY_BOOST: float = 1.25
    FAQ_TYPO_EDITS: int = 1
    FAQ_TOPK: int = 5
    FAQ_MIN_SCORE: float = 0.05

    # Optional semantic re-rank of the FAQ head
    FAQ_SEMANTIC: bool = False
    FAQ_SEM_TOPK: int = 3
    FAQ_SEM_WEIGHT: float = 0.35

    # Server configuration
    DEFAULT_HOST: str = "127.0.0.1"  # Default to localhost for security (use 0.0.0.0 for all interfaces)
    DEFAULT_PORT: int = 8000
    REQUEST_TIMEOUT: float = 15.0  # Timeout for outbound HTTP requests (seconds)

    # Debug settings
    DEBUG_LOG: bool = False
    DEBUG_LOG_FILE: str = "hybrid_qa_debug.log"
    DEBUG_LOG_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB default
    DEBUG_LOG_BACKUP_COUNT: int = 5  # Keep 5 backup files

    @classmethod
    def from_env(cls, env_prefix: str = ""):
        """Create config from environment variables with optional prefix.

        Args:
            env_prefix: Prefix for environment variables (e.g., "RUNVC_")

        Returns:
            ServerConfig instance populated from environment
        """
        import os

        from dotenv import load_dotenv

        load_dotenv()

        config = cls()

        # Helper to get env var with prefix
        def get_env(name: str, default):
            # Try with prefix first, then without
            prefixed = os.getenv(f"{env_prefix}{name}", None)
            if prefixed is not None:
                return prefixed
            return os.getenv(name, default)

        def get_flag(name: str, default: bool) -> bool:
            value = get_env(name, None)
            if value is None or not value.strip():
                return default
            return value.strip().lower() in ("true", "1", "yes")

        config.OPENAI_API_KEY = get_env("OPENAI_API_KEY", cls.OPENAI_API_KEY)
        config.EMBEDDING_ENDPOINT = get_env("EMBEDDING_ENDPOINT", cls.EMBEDDING_ENDPOINT)
        config.EMBEDDING_MODEL = get_env("EMBEDDING_MODEL", cls.EMBEDDING_MODEL)

        config.SITE_ROOT_URL = get_env("SITE_ROOT_URL", cls.SITE_ROOT_URL)
        config.DATA_DIR = get_env("DATA_DIR", cls.DATA_DIR)
        config.INDEX_PATH = get_env("INDEX_PATH", cls.INDEX_PATH) or None
        config.INDEX_TTL_HOURS = float(get_env("INDEX_TTL_HOURS", str(cls.INDEX_TTL_HOURS)))
        config.SEARCH_TOP_K = int(get_env("SEARCH_TOP_K", str(cls.SEARCH_TOP_K)))

        config.FAQ_SHEET_URL = get_env("FAQ_SHEET_URL", cls.FAQ_SHEET_URL)
        config.FAQ_TTL_MINUTES = float(get_env("FAQ_TTL_MINUTES", str(cls.FAQ_TTL_MINUTES)))
        config.FAQ_SYNONYMS_JSON = get_env("FAQ_SYNONYMS_JSON", cls.FAQ_SYNONYMS_JSON)

        config.FAQ_BM25_K1 = float(get_env("FAQ_BM25_K1", str(cls.FAQ_BM25_K1)))
        config.FAQ_BM25_BQ = float(get_env("FAQ_BM25_BQ", str(cls.FAQ_BM25_BQ)))
        config.FAQ_BM25_BA = float(get_env("FAQ_BM25_BA", str(cls.FAQ_BM25_BA)))
        config.FAQ_BOOST_Q = float(get_env("FAQ_BOOST_Q", str(cls.FAQ_BOOST_Q)))
        config.FAQ_BOOST_A = float(get_env("FAQ_BOOST_A", str(cls.FAQ_BOOST_A)))
        config.FAQ_PHRASE_BOOST = float(get_env("FAQ_PHRASE_BOOST", str(cls.FAQ_PHRASE_BOOST)))
        config.FAQ_CATEGORY_BOOST = float(get_env("FAQ_CATEGORY_BOOST", str(cls.FAQ_CATEGORY_BOOST)))
        config.FAQ_TYPO_EDITS = int(get_env("FAQ_TYPO_EDITS", str(cls.FAQ_TYPO_EDITS)))
        config.FAQ_TOPK = int(get_env("FAQ_TOPK", str(cls.FAQ_TOPK)))
        config.FAQ_MIN_SCORE = float(get_env("FAQ_MIN_SCORE", str(cls.FAQ_MIN_SCORE)))

        config.FAQ_SEMANTIC = get_flag("FAQ_SEMANTIC", cls.FAQ_SEMANTIC)
        config.FAQ_SEM_TOPK = int(get_env("FAQ_SEM_TOPK", str(cls.FAQ_SEM_TOPK)))
        config.FAQ_SEM_WEIGHT = float(get_env("FAQ_SEM_WEIGHT", str(cls.FAQ_SEM_WEIGHT)))

        config.DEFAULT_HOST = get_env("HOST", cls.DEFAULT_HOST)
        config.DEFAULT_PORT = int(get_env("PORT", str(cls.DEFAULT_PORT)))
        config.REQUEST_TIMEOUT = float(get_env("REQUEST_TIMEOUT", str(cls.REQUEST_TIMEOUT)))

        config.DEBUG_LOG = get_flag("DEBUG_LOG", cls.DEBUG_LOG)
        config.DEBUG_LOG_FILE = get_env("DEBUG_LOG_FILE", cls.DEBUG_LOG_FILE)
        config.DEBUG_LOG_MAX_BYTES = int(get_env("DEBUG_LOG_MAX_BYTES", str(cls.DEBUG_LOG_MAX_BYTES)))
        config.DEBUG_LOG_BACKUP_COUNT = int(get_env("DEBUG_LOG_BACKUP_COUNT", str(cls.DEBUG_LOG_BACKUP_COUNT)))

        return config

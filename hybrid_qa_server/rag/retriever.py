"""Cosine-similarity retrieval over the persisted vector index."""

import logging
import threading
from pathlib import Path

from ..errors import NotFoundError
from .embeddings import EmbeddingClient, cosine_similarity
from .indexer import load_index
from .models import EMPTY_CONTEXT, RankedChunk, RetrievalResult, SourceScore, VectorIndex

logger = logging.getLogger(__name__)

INDEX_FILE_NAME = "site_index.json"
MAX_K = 20


def candidate_index_paths(override: str | Path | None = None, data_dir: str | Path | None = None) -> list[Path]:
    """Locations checked for the persisted index, in priority order, without duplicates."""
    candidates: list[Path] = []
    if override:
        candidates.append(Path(override).resolve())
    if data_dir:
        candidates.append((Path(data_dir) / INDEX_FILE_NAME).resolve())
    candidates.append((Path.cwd() / "data" / INDEX_FILE_NAME).resolve())
    # When running from a build output directory two levels below the repo root
    candidates.append((Path.cwd() / ".." / ".." / "data" / INDEX_FILE_NAME).resolve())

    unique: list[Path] = []
    for path in candidates:
        if path not in unique:
            unique.append(path)
    return unique


class IndexStore:
    """Lazily loaded, read-through cache of the persisted vector index.

    One store is created per process (or per test) and handed to the
    retriever; ``invalidate()`` drops the cached copy so the next ``get()``
    rereads the file.
    """

    def __init__(
        self,
        override: str | Path | None = None,
        data_dir: str | Path | None = None,
        expected_model: str | None = None,
    ):
        self.override = override
        self.data_dir = data_dir
        self.expected_model = expected_model
        self._index: VectorIndex | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_index(cls, index: VectorIndex) -> "IndexStore":
        """Store pre-populated with an in-memory index."""
        store = cls()
        store._index = index
        return store

    def resolve_path(self) -> Path:
        """Return the first existing candidate location.

        Raises:
            NotFoundError: Listing every location tried
        """
        candidates = candidate_index_paths(self.override, self.data_dir)
        for path in candidates:
            if path.exists():
                return path
        raise NotFoundError(
            "Prebuilt index not found. Set INDEX_PATH or build the index first.",
            attempted=[str(p) for p in candidates],
        )

    def get(self) -> VectorIndex:
        """Return the cached index, loading it on first use."""
        with self._lock:
            if self._index is None:
                path = self.resolve_path()
                index = load_index(path)
                logger.info(f"[RAG] Loaded index from {path} ({len(index.items)} items, built {index.created_at})")
                if self.expected_model and index.model_id != self.expected_model:
                    logger.warning(
                        f"[RAG] Index was built with {index.model_id} but {self.expected_model} is configured; "
                        f"queries will be embedded with {index.model_id}"
                    )
                self._index = index
            return self._index

    def invalidate(self) -> None:
        """Drop the cached index so the next get() reloads it."""
        with self._lock:
            self._index = None
        logger.info("[RAG] Index cache invalidated")


class VectorRetriever:
    """Ranks index items against a query embedding."""

    def __init__(self, store: IndexStore, embedder: EmbeddingClient):
        self.store = store
        self.embedder = embedder

    def retrieve(self, query: str, k: int = 8) -> RetrievalResult:
        """Return the top ``k`` passages for ``query`` with per-source aggregation.

        Passages scoring zero or below are dropped from the top ``k``, so fewer
        than ``k`` passages may come back even when others scored above zero.

        Args:
            query: Natural-language question
            k: Number of passages (clamped to 1..20)

        Returns:
            RetrievalResult; ``empty`` is True when the index has no items or
            no passage scores above zero
        """
        k = max(1, min(MAX_K, k))
        index = self.store.get()

        if not index.items:
            logger.info("[RAG] Index has no items")
            return RetrievalResult(chunks=[], sources=[], context=EMPTY_CONTEXT, indexed_at=index.created_at, empty=True)

        # Same model as the index so the vectors are comparable
        query_vector = self.embedder.embed_one(query, model=index.model_id)

        scored = [
            RankedChunk(url=item.url, text=item.text, score=cosine_similarity(query_vector, item.embedding))
            for item in index.items
        ]
        scored.sort(key=lambda c: c.score, reverse=True)
        top = [chunk for chunk in scored[:k] if chunk.score > 0]

        if not top:
            logger.info(f"[RAG] No passage scored above zero for: {query}")
            return RetrievalResult(chunks=[], sources=[], context=EMPTY_CONTEXT, indexed_at=index.created_at, empty=True)

        best_by_url: dict[str, float] = {}
        for chunk in top:
            best_by_url[chunk.url] = max(best_by_url.get(chunk.url, chunk.score), chunk.score)

        context = "\n\n".join(f"({i}) {chunk.text}\nSource: {chunk.url}" for i, chunk in enumerate(top, 1))
        logger.debug(f"[RAG] Retrieved {len(top)} passages from {len(best_by_url)} sources")

        return RetrievalResult(
            chunks=top,
            sources=[SourceScore(url=url, max_score=score) for url, score in best_by_url.items()],
            context=context,
            indexed_at=index.created_at,
        )

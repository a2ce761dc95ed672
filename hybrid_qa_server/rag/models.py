"""Data types shared by the crawler, indexer, and retriever."""

from dataclasses import dataclass, field
from typing import Any

EMPTY_CONTEXT = "No relevant content found in the prebuilt index."


@dataclass(frozen=True)
class Page:
    """A crawled page: normalized URL, extracted text, and fetch time (ISO 8601)."""

    url: str
    text: str
    fetched_at: str

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "text": self.text, "fetchedAt": self.fetched_at}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Page":
        return cls(url=data["url"], text=data.get("text", ""), fetched_at=data.get("fetchedAt", ""))


@dataclass(frozen=True)
class Chunk:
    """A bounded span of a page's text; the unit of embedding and retrieval."""

    id: str
    source_url: str
    text: str


@dataclass
class IndexItem:
    """A chunk together with its embedding vector."""

    id: str
    url: str
    text: str
    embedding: list[float]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "url": self.url, "text": self.text, "embedding": self.embedding}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IndexItem":
        return cls(
            id=data["id"],
            url=data["url"],
            text=data["text"],
            embedding=[float(x) for x in data["embedding"]],
        )


@dataclass
class VectorIndex:
    """Persisted vector index. Rebuilt wholesale, never patched in place."""

    model_id: str
    created_at: str
    items: list[IndexItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model_id,
            "createdAt": self.created_at,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VectorIndex":
        return cls(
            model_id=data["model"],
            created_at=data.get("createdAt", ""),
            items=[IndexItem.from_dict(item) for item in data.get("items", [])],
        )


@dataclass(frozen=True)
class RankedChunk:
    url: str
    text: str
    score: float


@dataclass(frozen=True)
class SourceScore:
    url: str
    max_score: float


@dataclass
class RetrievalResult:
    """Ranked passages for a query.

    Attributes:
        chunks: Top passages, best first
        sources: One entry per source URL with that URL's best passage score
        context: Human-readable passages with inline source citations
        indexed_at: Build time of the index that served the query
        empty: True when nothing relevant was found (context holds the empty marker)
    """

    chunks: list[RankedChunk]
    sources: list[SourceScore]
    context: str
    indexed_at: str
    empty: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "context": self.context,
            "sources": [{"url": s.url, "score": round(s.max_score, 4)} for s in self.sources],
            "chunks": [{"url": c.url, "text": c.text, "score": round(c.score, 4)} for c in self.chunks],
            "indexedAt": self.indexed_at,
            "empty": self.empty,
        }

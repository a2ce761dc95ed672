"""FAQ data types: entries, the inverted index, ranking output, and cache metadata."""

from dataclasses import dataclass, field
from typing import Any, NamedTuple


@dataclass(frozen=True)
class FaqEntry:
    """One spreadsheet row with a non-empty question and answer.

    ``id`` is the 1-based data-row number (the header row is not counted).
    ``raw_columns`` keeps every column of the row under its header name.
    """

    id: int
    question: str
    answer: str
    category: str | None = None
    raw_columns: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "answer": self.answer,
            "category": self.category,
            "raw": dict(self.raw_columns),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FaqEntry":
        return cls(
            id=int(data["id"]),
            question=data["question"],
            answer=data["answer"],
            category=data.get("category"),
            raw_columns=dict(data.get("raw") or {}),
        )


class Posting(NamedTuple):
    entry_id: int
    tf_question: int
    tf_answer: int


@dataclass
class FaqIndex:
    """Dual-field inverted index over FAQ entries, built once per ingestion."""

    df: dict[str, int]
    postings: dict[str, list[Posting]]
    doc_len_question: dict[int, int]
    doc_len_answer: dict[int, int]
    avg_len_question: float
    avg_len_answer: float
    questions_folded: dict[int, str]
    answers_folded: dict[int, str]
    categories_folded: dict[int, str | None]
    entries: list[FaqEntry]
    synonyms: dict[str, list[str]]
    built_at: str
    source: str

    def __post_init__(self):
        self._by_id = {e.id: e for e in self.entries}

    @property
    def n(self) -> int:
        """Number of entries in the corpus."""
        return len(self.entries)

    @property
    def vocab_size(self) -> int:
        return len(self.df)

    def entry(self, entry_id: int) -> FaqEntry:
        """Look up an entry by id."""
        return self._by_id[entry_id]

    def to_dict(self) -> dict[str, Any]:
        return {
            "df": self.df,
            "postings": {term: [list(p) for p in plist] for term, plist in self.postings.items()},
            "docLenQ": {str(k): v for k, v in self.doc_len_question.items()},
            "docLenA": {str(k): v for k, v in self.doc_len_answer.items()},
            "avgLenQ": self.avg_len_question,
            "avgLenA": self.avg_len_answer,
            "N": self.n,
            "vocabSize": self.vocab_size,
            "questionsLC": {str(k): v for k, v in self.questions_folded.items()},
            "answersLC": {str(k): v for k, v in self.answers_folded.items()},
            "categories": {str(k): v for k, v in self.categories_folded.items()},
            "entries": [e.to_dict() for e in self.entries],
            "synonyms": self.synonyms,
            "builtAt": self.built_at,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FaqIndex":
        def int_keys(mapping: dict[str, Any]) -> dict[int, Any]:
            return {int(k): v for k, v in mapping.items()}

        return cls(
            df={term: int(count) for term, count in data["df"].items()},
            postings={term: [Posting(*map(int, p)) for p in plist] for term, plist in data["postings"].items()},
            doc_len_question=int_keys(data["docLenQ"]),
            doc_len_answer=int_keys(data["docLenA"]),
            avg_len_question=float(data["avgLenQ"]),
            avg_len_answer=float(data["avgLenA"]),
            questions_folded=int_keys(data["questionsLC"]),
            answers_folded=int_keys(data["answersLC"]),
            categories_folded=int_keys(data["categories"]),
            entries=[FaqEntry.from_dict(e) for e in data["entries"]],
            synonyms={k: list(v) for k, v in data.get("synonyms", {}).items()},
            built_at=data.get("builtAt", ""),
            source=data.get("source", ""),
        )


@dataclass(frozen=True)
class RankedEntry:
    entry: FaqEntry
    score: float


@dataclass
class RankingOutcome:
    """Ranked FAQ matches for one query.

    ``confident`` is False when there are no matches or the top score falls
    below the configured minimum; the matches are still returned so callers
    can show or log them, but they must not be presented as an answer.
    """

    matches: list[RankedEntry]
    confident: bool
    min_score: float

    @property
    def best(self) -> RankedEntry | None:
        return self.matches[0] if self.matches else None


@dataclass
class CacheRecord:
    """Validators saved alongside a cached sheet body."""

    saved_at: float
    etag: str | None = None
    last_modified: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"etag": self.etag, "lastModified": self.last_modified, "savedAt": self.saved_at}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheRecord":
        return cls(
            saved_at=float(data.get("savedAt") or 0.0),
            etag=data.get("etag") or None,
            last_modified=data.get("lastModified") or None,
        )


@dataclass
class IngestResult:
    """Parsed FAQ entries and where their body came from.

    ``origin`` is one of ``network``, ``cache``, ``cache-validated``, or
    ``stale(<reason>)``.
    """

    entries: list[FaqEntry]
    source: str
    origin: str


@dataclass
class FaqAnswer:
    """Caller-facing FAQ search result."""

    answer: str
    matches: list[RankedEntry]
    source: str
    used_entries: int
    confident: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "matches": [
                {"question": m.entry.question, "answer": m.entry.answer, "score": round(m.score, 4)}
                for m in self.matches
            ],
            "source": self.source,
            "usedEntries": self.used_entries,
            "confident": self.confident,
        }

"""Build and persist the dual-field (question/answer) FAQ inverted index."""

import json
import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

from ..errors import NotFoundError, ParseError
from ..storage import atomic_write_json
from .models import FaqEntry, FaqIndex, Posting
from .text import expand_synonyms, fold, tokenize

logger = logging.getLogger(__name__)

# Average field length used for an empty corpus
EMPTY_CORPUS_AVG_LEN = 0.0001


def build_faq_index(
    entries: list[FaqEntry],
    synonyms: dict[str, list[str]] | None = None,
    source: str = "",
) -> FaqIndex:
    """Index FAQ entries for BM25 scoring.

    Question and answer are tokenized independently and expanded with
    synonyms (added as extra occurrences). Each distinct term of an entry gets
    one posting carrying its per-field term frequencies, and its document
    frequency is incremented once for that entry. Field lengths are the
    token counts before synonym expansion.

    Args:
        entries: Parsed FAQ entries
        synonyms: Optional term -> extra terms mapping
        source: Identifier of the data source (the resolved export URL)

    Returns:
        A new FaqIndex
    """
    synonyms = {fold(k): [fold(s) for s in v if fold(s)] for k, v in (synonyms or {}).items()}

    df: dict[str, int] = {}
    postings: dict[str, list[Posting]] = {}
    doc_len_question: dict[int, int] = {}
    doc_len_answer: dict[int, int] = {}
    questions_folded: dict[int, str] = {}
    answers_folded: dict[int, str] = {}
    categories_folded: dict[int, str | None] = {}
    total_question = 0
    total_answer = 0

    for entry in entries:
        question_tokens = tokenize(entry.question)
        answer_tokens = tokenize(entry.answer)

        tf_question = Counter(expand_synonyms(question_tokens, synonyms))
        tf_answer = Counter(expand_synonyms(answer_tokens, synonyms))

        # dict.fromkeys keeps first-seen order so postings are deterministic
        for term in dict.fromkeys([*tf_question, *tf_answer]):
            postings.setdefault(term, []).append(Posting(entry.id, tf_question[term], tf_answer[term]))
            df[term] = df.get(term, 0) + 1

        doc_len_question[entry.id] = len(question_tokens)
        doc_len_answer[entry.id] = len(answer_tokens)
        total_question += len(question_tokens)
        total_answer += len(answer_tokens)

        questions_folded[entry.id] = fold(entry.question)
        answers_folded[entry.id] = fold(entry.answer)
        categories_folded[entry.id] = fold(entry.category) if entry.category else None

    count = len(entries)
    index = FaqIndex(
        df=df,
        postings=postings,
        doc_len_question=doc_len_question,
        doc_len_answer=doc_len_answer,
        avg_len_question=total_question / count if count else EMPTY_CORPUS_AVG_LEN,
        avg_len_answer=total_answer / count if count else EMPTY_CORPUS_AVG_LEN,
        questions_folded=questions_folded,
        answers_folded=answers_folded,
        categories_folded=categories_folded,
        entries=list(entries),
        synonyms=synonyms,
        built_at=datetime.now(timezone.utc).isoformat(),
        source=source,
    )
    logger.debug(f"[FAQ] Indexed {count} entries, vocabulary {index.vocab_size} terms")
    return index


def save_faq_index(index: FaqIndex, path: Path) -> None:
    """Persist the index atomically (used as a last-resort fallback)."""
    atomic_write_json(Path(path), index.to_dict())


def load_faq_index(path: Path) -> FaqIndex:
    """Load an index written by save_faq_index.

    Raises:
        NotFoundError: If the file does not exist
        ParseError: If the file is not a valid index
    """
    path = Path(path)
    if not path.exists():
        raise NotFoundError("FAQ index not found.", attempted=[str(path)])
    try:
        return FaqIndex.from_dict(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise ParseError(f"Invalid FAQ index {path}: {e}") from e


def load_synonyms(path: str | Path | None) -> dict[str, list[str]]:
    """Load a ``{"term": ["synonym", ...]}`` JSON file.

    A missing or unreadable file yields an empty table (logged, not raised).
    """
    if not path:
        return {}
    path = Path(path)
    if not path.exists():
        logger.warning(f"[FAQ] Synonyms file not found: {path}")
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"[FAQ] Failed to load synonyms from {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"[FAQ] Synonyms file {path} must contain a JSON object, ignoring")
        return {}
    return {str(k): [str(s) for s in v] for k, v in data.items() if isinstance(v, list)}

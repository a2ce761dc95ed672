"""Dual-field BM25 ranking with phrase, category, typo, and optional semantic signals."""

import logging
import math
import re
from collections.abc import Callable

from ..rag.embeddings import cosine_similarity
from .config import RankingConfig
from .models import FaqIndex, RankedEntry, RankingOutcome
from .text import damerau_levenshtein, fold, tokenize

logger = logging.getLogger(__name__)

EmbedFn = Callable[[list[str]], list[list[float]]]

# Typo fallback only applies to query terms at least this long
TYPO_MIN_TERM_LEN = 5
PHRASE_MAX_TOKENS = 6
PHRASE_MIN_CHARS = 3

_CATEGORY_MARKER = re.compile(r"\[cat(?:egory)?:\s*([^\]]+)\]")
_CATEGORY_TRAILING = re.compile(r"\bin\s+([a-z0-9 ]{3,})$")


def idf(n: int, df: int) -> float:
    """BM25 inverse document frequency, always positive."""
    return math.log(1 + (n - df + 0.5) / (df + 0.5))


def field_score(tf: int, doc_len: int, avg_len: float, k1: float, b: float, boost: float, term_idf: float) -> float:
    """BM25 contribution of one term in one field."""
    if tf <= 0:
        return 0.0
    denom = tf + k1 * (1 - b + b * (doc_len / avg_len))
    return term_idf * (tf * (k1 + 1)) / denom * boost


def typo_neighbours(term: str, index: FaqIndex, max_edits: int) -> list[str]:
    """Vocabulary terms sharing the first character within ``max_edits`` edits."""
    if max_edits <= 0 or len(term) < TYPO_MIN_TERM_LEN:
        return []
    return [
        near
        for near in index.df
        if near[0] == term[0] and damerau_levenshtein(term, near, max_edits) <= max_edits
    ]


def resolve_terms(tokens: list[str], index: FaqIndex, config: RankingConfig) -> list[str]:
    """Map query tokens to vocabulary terms.

    Known tokens stand for themselves. An unknown token is replaced by its
    typo neighbours, or dropped when it has none.
    """
    terms = []
    for token in tokens:
        if index.postings.get(token):
            terms.append(token)
            continue
        neighbours = typo_neighbours(token, index, config.typo_max_edits)
        if neighbours:
            logger.debug(f"[FAQ] Typo match {token!r} -> {neighbours}")
        terms.extend(neighbours)
    return terms


def bm25(terms: list[str], index: FaqIndex, entry_id: int, config: RankingConfig) -> float:
    """Sum of question and answer field scores over ``terms`` for one entry."""
    score = 0.0
    for term in terms:
        df = index.df.get(term)
        if not df:
            continue
        posting = next((p for p in index.postings[term] if p.entry_id == entry_id), None)
        if posting is None:
            continue
        term_idf = idf(index.n, df)
        score += field_score(
            posting.tf_question,
            index.doc_len_question[entry_id],
            index.avg_len_question,
            config.k1,
            config.b_question,
            config.boost_question,
            term_idf,
        )
        score += field_score(
            posting.tf_answer,
            index.doc_len_answer[entry_id],
            index.avg_len_answer,
            config.k1,
            config.b_answer,
            config.boost_answer,
            term_idf,
        )
    return score


def leading_phrase(query: str) -> str | None:
    """The first few folded query words, when long enough to be a phrase."""
    phrase = " ".join(fold(query).split(" ")[:PHRASE_MAX_TOKENS])
    return phrase if len(phrase) > PHRASE_MIN_CHARS else None


def category_hint(query: str) -> str | None:
    """Category named by a ``[category: x]`` marker or a trailing ``in <x>``."""
    match = _CATEGORY_MARKER.search(query.lower())
    if match:
        return fold(match.group(1)) or None
    match = _CATEGORY_TRAILING.search(fold(query))
    if match:
        return match.group(1).strip() or None
    return None


def boost_multiplier(
    phrase: str | None, category: str | None, index: FaqIndex, entry_id: int, config: RankingConfig
) -> float:
    """Product of the phrase and category boosts that apply to an entry."""
    multiplier = 1.0
    if phrase and (phrase in index.questions_folded[entry_id] or phrase in index.answers_folded[entry_id]):
        multiplier *= config.phrase_boost
    entry_category = index.categories_folded.get(entry_id)
    if category and entry_category and category in entry_category:
        multiplier *= config.category_boost
    return multiplier


def semantic_rerank(
    query: str,
    ranked: list[RankedEntry],
    config: RankingConfig,
    embed_fn: EmbedFn | None,
) -> list[RankedEntry]:
    """Blend cosine similarity into the leading candidates and re-sort.

    Only the first ``semantic_top_k`` entries are re-scored; the tail keeps
    its lexical score. A no-op when disabled or when no embedder is wired.
    """
    if not config.semantic_enabled or embed_fn is None or not ranked:
        return ranked

    head = ranked[: config.semantic_top_k]
    tail = ranked[config.semantic_top_k :]
    texts = [query] + [f"{r.entry.question}\n{r.entry.answer}" for r in head]
    vectors = embed_fn(texts)
    query_vector, entry_vectors = vectors[0], vectors[1:]

    weight = config.semantic_weight
    rescored = [
        RankedEntry(r.entry, r.score * (1 - weight) + cosine_similarity(query_vector, v) * weight)
        for r, v in zip(head, entry_vectors)
    ]
    return sorted(rescored + tail, key=lambda r: r.score, reverse=True)


def rank(
    query: str,
    index: FaqIndex,
    config: RankingConfig | None = None,
    embed_fn: EmbedFn | None = None,
) -> RankingOutcome:
    """Rank FAQ entries for ``query``.

    Candidates are the entries whose postings contain a query term (or a typo
    neighbour of one); when there are none, every entry is scored. Entries
    scoring zero are dropped.

    Args:
        query: User question
        index: FAQ index to search
        config: Ranking parameters (defaults when None)
        embed_fn: Batch embedder used by the optional semantic re-rank

    Returns:
        RankingOutcome with at most ``top_k`` matches, best first
    """
    config = config or RankingConfig()
    if index.n == 0:
        return RankingOutcome(matches=[], confident=False, min_score=config.min_score)

    terms = resolve_terms(tokenize(query), index, config)

    candidates: dict[int, None] = {}
    for term in terms:
        for posting in index.postings.get(term, ()):
            candidates[posting.entry_id] = None
    if not candidates:
        candidates = dict.fromkeys(e.id for e in index.entries)

    phrase = leading_phrase(query)
    category = category_hint(query)

    ranked = []
    for entry_id in sorted(candidates):
        score = bm25(terms, index, entry_id, config)
        score *= boost_multiplier(phrase, category, index, entry_id, config)
        if score > 0:
            ranked.append(RankedEntry(index.entry(entry_id), score))

    # Stable sort keeps row order among ties
    ranked.sort(key=lambda r: r.score, reverse=True)
    ranked = ranked[: config.top_k]
    ranked = semantic_rerank(query, ranked, config, embed_fn)[: config.top_k]

    confident = bool(ranked) and ranked[0].score >= config.min_score
    logger.debug(
        f"[FAQ] Query {query!r}: {len(candidates)} candidates, "
        f"top score {ranked[0].score if ranked else 0:.4f}, confident={confident}"
    )
    return RankingOutcome(matches=ranked, confident=confident, min_score=config.min_score)

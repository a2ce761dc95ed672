"""Text folding, tokenization, and bounded edit distance for FAQ matching."""

import re
import unicodedata

STOPWORDS = frozenset(
    [
        "the", "is", "are", "am", "a", "an", "of", "on", "in", "to", "for", "and", "or", "with",
        "by", "at", "as", "be", "this", "that", "it", "from", "we", "you", "your", "our", "us",
        "can", "will", "do", "does", "how", "what", "when", "where", "why",
    ]
)  # fmt: skip

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def fold(text: str) -> str:
    """Lowercase, strip diacritics and punctuation, and collapse whitespace."""
    text = unicodedata.normalize("NFKD", text.lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = _NON_ALNUM.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def tokenize(text: str) -> list[str]:
    """Folded tokens longer than one character that are not stopwords."""
    return [t for t in fold(text).split(" ") if len(t) > 1 and t not in STOPWORDS]


def expand_synonyms(tokens: list[str], synonyms: dict[str, list[str]]) -> list[str]:
    """Append configured synonyms after the original tokens; nothing is replaced."""
    expanded = list(tokens)
    for token in tokens:
        expanded.extend(synonyms.get(token, ()))
    return expanded


def damerau_levenshtein(a: str, b: str, max_edits: int = 1) -> int:
    """Optimal-string-alignment distance between ``a`` and ``b``, bounded by ``max_edits``.

    Counts insertions, deletions, substitutions, and adjacent transpositions.
    Any distance above ``max_edits`` is reported as ``max_edits + 1``.
    """
    if a == b:
        return 0
    over = max_edits + 1
    if abs(len(a) - len(b)) > max_edits:
        return over

    n, m = len(a), len(b)
    prev_prev: list[int] = []
    prev = list(range(m + 1))
    for i in range(1, n + 1):
        row = [i] + [0] * m
        for j in range(1, m + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            row[j] = min(
                prev[j] + 1,  # deletion
                row[j - 1] + 1,  # insertion
                prev[j - 1] + cost,  # substitution
            )
            if i > 1 and j > 1 and a[i - 1] == b[j - 2] and a[i - 2] == b[j - 1]:
                row[j] = min(row[j], prev_prev[j - 2] + 1)  # transposition
        # Every path through this row already exceeds the bound
        if min(row) > max_edits:
            return over
        prev_prev, prev = prev, row
    return min(prev[m], over)

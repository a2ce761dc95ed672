"""FAQ ranking configuration dataclass."""

from dataclasses import dataclass


@dataclass
class RankingConfig:
    """Knobs for FAQ scoring.

    Attributes:
        k1: BM25 term-frequency saturation, shared by both fields
        b_question: BM25 length normalization for the question field
        b_answer: BM25 length normalization for the answer field
        boost_question: Multiplier on the question field's contribution
        boost_answer: Multiplier on the answer field's contribution
        phrase_boost: Multiplier when the leading query phrase appears verbatim in an entry
        category_boost: Multiplier when the query's category hint matches the entry's category
        typo_max_edits: Maximum Damerau-Levenshtein distance for typo fallback (0 disables it)
        top_k: Number of ranked entries to return
        min_score: Top score below which the outcome is "no confident match"
        semantic_enabled: Blend embedding similarity into the leading candidates
        semantic_top_k: Number of leading candidates re-scored semantically
        semantic_weight: Weight of the semantic score in the blend
    """

    k1: float = 1.2
    b_question: float = 0.75
    b_answer: float = 0.75
    boost_question: float = 2.0
    boost_answer: float = 1.0
    phrase_boost: float = 1.5
    category_boost: float = 1.25
    typo_max_edits: int = 1
    top_k: int = 5
    min_score: float = 0.05
    semantic_enabled: bool = False
    semantic_top_k: int = 3
    semantic_weight: float = 0.35

    def __post_init__(self):
        """Validate parameter ranges."""
        if self.k1 < 0:
            raise ValueError(f"k1 must be non-negative, got {self.k1}")
        for name in ("b_question", "b_answer", "semantic_weight"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.typo_max_edits < 0:
            raise ValueError(f"typo_max_edits must be >= 0, got {self.typo_max_edits}")
        self.top_k = max(1, self.top_k)

    @classmethod
    def from_server_config(cls, config) -> "RankingConfig":
        """Build ranking settings from a ServerConfig."""
        return cls(
            k1=config.FAQ_BM25_K1,
            b_question=config.FAQ_BM25_BQ,
            b_answer=config.FAQ_BM25_BA,
            boost_question=config.FAQ_BOOST_Q,
            boost_answer=config.FAQ_BOOST_A,
            phrase_boost=config.FAQ_PHRASE_BOOST,
            category_boost=config.FAQ_CATEGORY_BOOST,
            typo_max_edits=config.FAQ_TYPO_EDITS,
            top_k=config.FAQ_TOPK,
            min_score=config.FAQ_MIN_SCORE,
            semantic_enabled=config.FAQ_SEMANTIC,
            semantic_top_k=config.FAQ_SEM_TOPK,
            semantic_weight=config.FAQ_SEM_WEIGHT,
        )

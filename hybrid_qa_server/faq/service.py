"""FAQ search facade: ingest the sheet, index it, rank, and phrase the answer."""

import logging
from pathlib import Path

from ..errors import QAServerError
from .config import RankingConfig
from .index import build_faq_index, load_faq_index, load_synonyms, save_faq_index
from .ingest import DEFAULT_TTL_MINUTES, SheetIngestor
from .models import FaqAnswer, FaqIndex
from .ranking import EmbedFn, rank

logger = logging.getLogger(__name__)

NO_ENTRIES_ANSWER = "No FAQs found in the sheet."
NO_MATCH_ANSWER = "No close FAQ match found."


class FaqSearchService:
    """Answers questions from a spreadsheet of FAQs."""

    def __init__(
        self,
        sheet_url: str,
        ingestor: SheetIngestor,
        ranking: RankingConfig | None = None,
        ttl_minutes: float = DEFAULT_TTL_MINUTES,
        synonyms: dict[str, list[str]] | None = None,
        embed_fn: EmbedFn | None = None,
    ):
        self.sheet_url = sheet_url
        self.ingestor = ingestor
        self.ranking = ranking or RankingConfig()
        self.ttl_minutes = ttl_minutes
        self.synonyms = synonyms or {}
        self.embed_fn = embed_fn

    @classmethod
    def from_config(cls, config, session=None, embed_fn: EmbedFn | None = None) -> "FaqSearchService":
        """Wire a service from a ServerConfig."""
        ingestor = SheetIngestor(config.DATA_DIR, session=session, timeout=config.REQUEST_TIMEOUT)
        return cls(
            sheet_url=config.FAQ_SHEET_URL,
            ingestor=ingestor,
            ranking=RankingConfig.from_server_config(config),
            ttl_minutes=config.FAQ_TTL_MINUTES,
            synonyms=load_synonyms(config.FAQ_SYNONYMS_JSON),
            embed_fn=embed_fn,
        )

    def load_index(self, sheet_url: str | None = None, gid: str | None = None) -> FaqIndex:
        """Ingest the sheet and build its index, persisting it for fallback.

        When ingestion fails and a previously persisted index exists, that
        index is returned instead of raising.
        """
        sheet_url = sheet_url or self.sheet_url
        cache, _ = self.ingestor.cache_for(sheet_url, gid)
        try:
            result = self.ingestor.ingest(sheet_url, self.ttl_minutes, gid=gid)
            index = build_faq_index(result.entries, self.synonyms, source=result.source)
            save_faq_index(index, cache.index_path)
            return index
        except QAServerError as e:
            if Path(cache.index_path).exists():
                logger.warning(f"[FAQ] {e}; using persisted index {cache.index_path}")
                return load_faq_index(cache.index_path)
            raise

    def search(self, question: str, sheet_url: str | None = None, gid: str | None = None) -> FaqAnswer:
        """Answer ``question`` with the best matching entry, if confident."""
        index = self.load_index(sheet_url, gid)
        if not index.entries:
            return FaqAnswer(answer=NO_ENTRIES_ANSWER, matches=[], source=index.source, used_entries=0, confident=False)

        outcome = rank(question, index, self.ranking, self.embed_fn)
        answer = outcome.best.entry.answer if outcome.confident else NO_MATCH_ANSWER
        return FaqAnswer(
            answer=answer,
            matches=outcome.matches,
            source=index.source,
            used_entries=index.n,
            confident=outcome.confident,
        )

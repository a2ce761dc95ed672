"""Spreadsheet FAQ ingestion, indexing, and BM25 ranking."""

from .cache import SheetCache
from .config import RankingConfig
from .index import build_faq_index, load_faq_index, load_synonyms, save_faq_index
from .ingest import SheetIngestor
from .models import CacheRecord, FaqAnswer, FaqEntry, FaqIndex, IngestResult, Posting, RankedEntry, RankingOutcome
from .ranking import rank
from .service import FaqSearchService
from .sheets import build_entries, export_csv_url, map_columns, parse_csv, parse_sheet_url, read_csv
from .text import fold, tokenize

__all__ = [
    "CacheRecord",
    "FaqAnswer",
    "FaqEntry",
    "FaqIndex",
    "FaqSearchService",
    "IngestResult",
    "Posting",
    "RankedEntry",
    "RankingConfig",
    "RankingOutcome",
    "SheetCache",
    "SheetIngestor",
    "build_entries",
    "build_faq_index",
    "export_csv_url",
    "fold",
    "load_faq_index",
    "load_synonyms",
    "map_columns",
    "parse_csv",
    "parse_sheet_url",
    "read_csv",
    "rank",
    "save_faq_index",
    "tokenize",
]

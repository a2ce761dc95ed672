"""Spreadsheet URL handling and CSV-to-entry conversion."""

import csv
import io
import logging
import re

from ..errors import ConfigurationError, ParseError
from .models import FaqEntry

logger = logging.getLogger(__name__)

_DOC_ID_RE = re.compile(r"/spreadsheets/d/([a-zA-Z0-9_-]+)")
_GID_RE = re.compile(r"[?&#]gid=(\d+)")

EXPORT_URL_TEMPLATE = "https://docs.google.com/spreadsheets/d/{doc_id}/export?format=csv"

QUESTION_HEADERS = frozenset(["question", "q", "prompt", "faq question", "title"])
ANSWER_HEADERS = frozenset(["answer", "a", "response", "reply", "faq answer", "content", "text", "body"])
CATEGORY_HEADERS = frozenset(["category", "section", "tag", "topic"])


def parse_sheet_url(url: str | None) -> tuple[str, str | None]:
    """Extract ``(doc_id, gid)`` from a spreadsheet sharing or export URL.

    Raises:
        ConfigurationError: If no URL is configured
        ParseError: If the URL does not contain a document id
    """
    if not url or not url.strip():
        raise ConfigurationError("FAQ sheet URL is not configured (set FAQ_SHEET_URL)")
    match = _DOC_ID_RE.search(url)
    if not match:
        raise ParseError(f"Not a spreadsheet URL: {url}")
    gid = _GID_RE.search(url)
    return match.group(1), gid.group(1) if gid else None


def export_csv_url(doc_id: str, gid: str | None = None) -> str:
    """Canonical CSV export URL for a document (and optional tab)."""
    url = EXPORT_URL_TEMPLATE.format(doc_id=doc_id)
    if gid:
        url += f"&gid={gid}"
    return url


def read_csv(text: str) -> list[list[str]]:
    """Parse a CSV body into rows, keeping blank rows in place.

    Quoted fields may contain commas, newlines, and doubled quotes.

    Raises:
        ParseError: If the body is malformed (for example an unterminated quote)
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    try:
        return list(reader)
    except csv.Error as e:
        raise ParseError(f"Malformed CSV at line {reader.line_num}: {e}") from e


def is_blank(row: list[str]) -> bool:
    return not any(cell.strip() for cell in row)


def parse_csv(text: str) -> list[list[str]]:
    """Parse a CSV body into rows, dropping rows whose cells are all blank."""
    return [row for row in read_csv(text) if not is_blank(row)]


def normalize_header(name: str) -> str:
    return " ".join(name.strip().lower().split())


def map_columns(header: list[str]) -> tuple[int, int, int | None]:
    """Locate the question, answer, and optional category columns.

    The first header matching each synonym set wins.

    Raises:
        ParseError: If no question or no answer column is present
    """
    question_col = answer_col = category_col = None
    for i, name in enumerate(header):
        key = normalize_header(name)
        if question_col is None and key in QUESTION_HEADERS:
            question_col = i
        elif answer_col is None and key in ANSWER_HEADERS:
            answer_col = i
        elif category_col is None and key in CATEGORY_HEADERS:
            category_col = i

    if question_col is None or answer_col is None:
        raise ParseError(f"Sheet must have a question and an answer column, found headers: {header}")
    return question_col, answer_col, category_col


def build_entries(rows: list[list[str]]) -> list[FaqEntry]:
    """Turn parsed rows (header first) into FAQ entries.

    The header is the first non-blank row. Entry ids are the 1-based
    positions of rows after the header, blank rows included, so rows that
    are blank or miss a question or an answer leave gaps.
    """
    start = next((i for i, row in enumerate(rows) if not is_blank(row)), None)
    if start is None:
        return []
    header, data = rows[start], rows[start + 1 :]
    question_col, answer_col, category_col = map_columns(header)
    names = [name.strip() or f"column_{i + 1}" for i, name in enumerate(header)]

    def cell(row: list[str], col: int | None) -> str:
        if col is None or col >= len(row):
            return ""
        return row[col].strip()

    entries = []
    for row_number, row in enumerate(data, start=1):
        question = cell(row, question_col)
        answer = cell(row, answer_col)
        if not question or not answer:
            continue
        raw = {names[i]: row[i] if i < len(row) else "" for i in range(len(names))}
        entries.append(
            FaqEntry(
                id=row_number,
                question=question,
                answer=answer,
                category=cell(row, category_col) or None,
                raw_columns=raw,
            )
        )

    skipped = sum(1 for row in data if not is_blank(row)) - len(entries)
    if skipped:
        logger.debug(f"[SHEETS] Skipped {skipped} rows without question or answer")
    return entries


def entries_from_csv(text: str) -> list[FaqEntry]:
    """Parse a CSV body straight into FAQ entries."""
    return build_entries(read_csv(text))

"""Tests for spreadsheet URL parsing and CSV conversion."""

import csv
import io

import pytest

from hybrid_qa_server.errors import ConfigurationError, ParseError
from hybrid_qa_server.faq.sheets import (
    build_entries,
    entries_from_csv,
    export_csv_url,
    map_columns,
    normalize_header,
    parse_csv,
    parse_sheet_url,
    read_csv,
)


@pytest.mark.unit
class TestSheetUrls:
    """Test sheet URL handling."""

    def test_parse_sharing_url_with_fragment_gid(self):
        url = "https://docs.google.com/spreadsheets/d/1AbC-d_9/edit#gid=42"

        assert parse_sheet_url(url) == ("1AbC-d_9", "42")

    def test_parse_query_gid(self):
        url = "https://docs.google.com/spreadsheets/d/xyz/export?format=csv&gid=0"

        assert parse_sheet_url(url) == ("xyz", "0")

    def test_parse_without_gid(self):
        assert parse_sheet_url("https://docs.google.com/spreadsheets/d/xyz/edit") == ("xyz", None)

    def test_missing_url(self):
        with pytest.raises(ConfigurationError):
            parse_sheet_url("")
        with pytest.raises(ConfigurationError):
            parse_sheet_url(None)

    def test_malformed_url(self):
        with pytest.raises(ParseError):
            parse_sheet_url("https://example.com/not-a-sheet")

    def test_export_url(self):
        assert export_csv_url("xyz") == "https://docs.google.com/spreadsheets/d/xyz/export?format=csv"
        assert export_csv_url("xyz", "7") == "https://docs.google.com/spreadsheets/d/xyz/export?format=csv&gid=7"


@pytest.mark.unit
class TestParseCsv:
    """Test CSV parsing."""

    def test_quoted_fields(self):
        text = 'q,a\n"Hello, world","Line one\nLine two"\n"Say ""hi""",ok\n'

        assert parse_csv(text) == [["q", "a"], ["Hello, world", "Line one\nLine two"], ['Say "hi"', "ok"]]

    def test_blank_rows_dropped(self):
        assert parse_csv("q,a\n\n,\nx,y\n") == [["q", "a"], ["x", "y"]]

    def test_read_csv_keeps_blank_rows(self):
        assert read_csv("q,a\n\n,\nx,y\n") == [["q", "a"], [], ["", ""], ["x", "y"]]

    def test_crlf_and_bom(self):
        assert parse_csv("\ufeffq,a\r\nx,y\r\n") == [["q", "a"], ["x", "y"]]

    def test_round_trip_of_awkward_values(self):
        rows = [["question", "answer"], ['Comma, "quote"', "multi\nline"], ["plain", ""]]
        buffer = io.StringIO()
        csv.writer(buffer).writerows(rows)

        assert parse_csv(buffer.getvalue()) == rows

    def test_unterminated_quote(self):
        with pytest.raises(ParseError):
            parse_csv('q,a\n"unterminated,x\n')


@pytest.mark.unit
class TestColumnMapping:
    """Test header synonym mapping."""

    def test_normalize_header(self):
        assert normalize_header("  FAQ   Question ") == "faq question"

    def test_synonyms(self):
        assert map_columns(["Topic", "Prompt", "Response"]) == (1, 2, 0)
        assert map_columns(["Q", "A"]) == (0, 1, None)
        assert map_columns(["Title", "Body", "Section"]) == (0, 1, 2)

    def test_first_match_wins(self):
        assert map_columns(["Question", "Answer", "Text"]) == (0, 1, None)

    def test_missing_answer_column(self):
        with pytest.raises(ParseError):
            map_columns(["Question", "Notes"])


@pytest.mark.unit
class TestBuildEntries:
    """Test row to entry conversion."""

    def test_entries_from_fixture(self, faq_csv, faq_entries):
        entries = entries_from_csv(faq_csv)

        assert [(e.id, e.question, e.answer, e.category) for e in entries] == [
            (e.id, e.question, e.answer, e.category) for e in faq_entries
        ]

    def test_rows_without_question_or_answer_skipped(self):
        rows = [["Question", "Answer"], ["Q1", "A1"], ["", "orphan answer"], ["Q3", "  "], ["Q4", "A4"]]

        entries = build_entries(rows)

        assert [e.id for e in entries] == [1, 4]

    def test_raw_columns_kept(self):
        rows = [["Question", "Answer", "Owner", ""], ["Q", "A", "ops", "extra"]]

        entry = build_entries(rows)[0]

        assert entry.raw_columns == {"Question": "Q", "Answer": "A", "Owner": "ops", "column_4": "extra"}
        assert entry.category is None

    def test_short_rows_padded(self):
        rows = [["Question", "Answer", "Category"], ["Q", "A"]]

        entry = build_entries(rows)[0]

        assert entry.category is None
        assert entry.raw_columns["Category"] == ""

    def test_empty_sheet(self):
        assert build_entries([]) == []
        assert build_entries([["Question", "Answer"]]) == []

    def test_ids_count_blank_lines(self):
        entries = entries_from_csv("question,answer\n\nWhat stage?,Seed.\n,\nDo you lead?,Often.\n")

        assert [e.id for e in entries] == [2, 4]

    def test_header_after_leading_blank_lines(self):
        entries = entries_from_csv("\n\nQuestion,Answer\nQ1,A1\n")

        assert [(e.id, e.question) for e in entries] == [(1, "Q1")]

"""Tests for FAQ text normalization and the inverted index."""

import json

import pytest

from hybrid_qa_server.errors import NotFoundError, ParseError
from hybrid_qa_server.faq.index import build_faq_index, load_faq_index, load_synonyms, save_faq_index
from hybrid_qa_server.faq.models import FaqEntry
from hybrid_qa_server.faq.text import damerau_levenshtein, expand_synonyms, fold, tokenize


@pytest.mark.unit
class TestText:
    """Test folding, tokenizing, and edit distance."""

    def test_fold(self):
        assert fold("  Café / Pré-Seed!  ") == "cafe pre seed"

    def test_tokenize_drops_stopwords_and_single_chars(self):
        assert tokenize("What is the best way to pitch a VC?") == ["best", "way", "pitch", "vc"]

    def test_expand_synonyms_is_additive(self):
        assert expand_synonyms(["vc", "fund"], {"vc": ["venture", "investor"]}) == ["vc", "fund", "venture", "investor"]

    @pytest.mark.parametrize(
        "a,b,expected",
        [
            ("invest", "invest", 0),
            ("invest", "invets", 1),
            ("invest", "invast", 1),
            ("invest", "invst", 1),
            ("invest", "investx", 1),
            ("invest", "nivest", 1),
            ("invest", "vinest", 2),
            ("invest", "portfolio", 2),
        ],
    )
    def test_damerau_levenshtein_bounded(self, a, b, expected):
        assert damerau_levenshtein(a, b, max_edits=1) == expected

    def test_damerau_levenshtein_larger_bound(self):
        assert damerau_levenshtein("kitten", "sitting", max_edits=3) == 3


@pytest.mark.unit
class TestBuildFaqIndex:
    """Test index construction."""

    def test_document_frequency_counts_entries(self, faq_entries):
        index = build_faq_index(faq_entries)

        for term, postings in index.postings.items():
            ids = [p.entry_id for p in postings]
            assert index.df[term] == len(postings) == len(set(ids))

    def test_term_frequencies_per_field(self, faq_entries):
        index = build_faq_index(faq_entries)

        posting = next(p for p in index.postings["seed"] if p.entry_id == 1)
        assert (posting.tf_question, posting.tf_answer) == (0, 2)
        stages = next(p for p in index.postings["stages"] if p.entry_id == 1)
        assert (stages.tf_question, stages.tf_answer) == (1, 1)

    def test_lengths_and_averages(self, faq_entries):
        index = build_faq_index(faq_entries)

        assert index.doc_len_question[1] == 2  # stages, invest
        assert index.avg_len_question == pytest.approx(sum(index.doc_len_question.values()) / 4)
        assert index.n == 4
        assert index.vocab_size == len(index.df)

    def test_folded_fields(self, faq_entries):
        index = build_faq_index(faq_entries, source="csv-url")

        assert index.questions_folded[2] == "how do i submit a pitch"
        assert index.categories_folded[3] == "team"
        assert index.source == "csv-url"

    def test_synonyms_add_postings_without_changing_lengths(self):
        entries = [FaqEntry(1, "Do you fund SaaS?", "Yes.")]

        plain = build_faq_index(entries)
        expanded = build_faq_index(entries, synonyms={"SaaS": ["software"]})

        assert "software" not in plain.df
        assert expanded.df["software"] == 1
        assert expanded.doc_len_question == plain.doc_len_question

    def test_empty_corpus(self):
        index = build_faq_index([])

        assert index.n == 0
        assert index.avg_len_question == pytest.approx(1e-4)
        assert index.df == {}


@pytest.mark.unit
class TestFaqIndexPersistence:
    """Test index files and synonym tables."""

    def test_round_trip(self, tmp_path, faq_entries):
        index = build_faq_index(faq_entries, synonyms={"vc": ["venture"]}, source="src")
        path = tmp_path / "faq.index.json"

        save_faq_index(index, path)
        loaded = load_faq_index(path)

        assert loaded == index
        assert loaded.entry(3).question == "Where is the team based?"

    def test_missing_and_invalid(self, tmp_path):
        with pytest.raises(NotFoundError):
            load_faq_index(tmp_path / "missing.json")

        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"df": {}}))
        with pytest.raises(ParseError):
            load_faq_index(bad)

    def test_load_synonyms(self, tmp_path):
        path = tmp_path / "synonyms.json"
        path.write_text(json.dumps({"vc": ["venture", "investor"], "ignored": "not a list"}))

        assert load_synonyms(path) == {"vc": ["venture", "investor"]}

    def test_load_synonyms_tolerates_bad_files(self, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{nope")
        listing = tmp_path / "list.json"
        listing.write_text("[]")

        assert load_synonyms(None) == {}
        assert load_synonyms(tmp_path / "missing.json") == {}
        assert load_synonyms(broken) == {}
        assert load_synonyms(listing) == {}

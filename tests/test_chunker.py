"""Tests for text chunking."""

import pytest

from hybrid_qa_server.rag.chunker import chunk_text, pack_sentences, split_blocks


@pytest.mark.unit
class TestChunker:
    """Test block splitting and sentence packing."""

    def test_splits_on_headings_and_paragraphs(self):
        text = "# Title\nIntro line.\n## Section\nBody one.\n\nBody two."

        assert split_blocks(text) == ["# Title\nIntro line.", "## Section\nBody one.", "Body two."]

    def test_short_blocks_kept_whole(self):
        assert chunk_text("One.\n\nTwo.", max_chars=100) == ["One.", "Two."]

    def test_long_block_packed_by_sentence(self):
        block = "Alpha beta. Gamma delta. Epsilon zeta."

        assert pack_sentences(block, max_chars=25) == ["Alpha beta. Gamma delta.", "Epsilon zeta."]

    def test_chunks_respect_limit_when_sentences_fit(self):
        text = " ".join(f"Sentence number {i} is here." for i in range(50))
        chunks = chunk_text(text, max_chars=120)

        assert len(chunks) > 1
        assert all(len(c) <= 120 for c in chunks)
        assert " ".join(chunks) == text

    def test_oversize_sentence_is_its_own_chunk(self):
        long_sentence = "x" * 50 + "."
        chunks = chunk_text(f"Short one. {long_sentence} Short two.", max_chars=20)

        assert chunks == ["Short one.", long_sentence, "Short two."]

    def test_deterministic(self):
        text = "# A\n\n" + "Some text here. " * 200
        assert chunk_text(text, 300) == chunk_text(text, 300)

    def test_empty_text(self):
        assert chunk_text("") == []
        assert chunk_text("\n\n\n") == []

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            chunk_text("text", max_chars=0)

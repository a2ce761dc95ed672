"""Tests for the LangChain tool wrappers."""

import json

import pytest

from hybrid_qa_server.faq.cache import SheetCache
from hybrid_qa_server.faq.ingest import SheetIngestor
from hybrid_qa_server.faq.service import FaqSearchService
from hybrid_qa_server.rag.models import IndexItem, VectorIndex
from hybrid_qa_server.rag.retriever import IndexStore, VectorRetriever
from hybrid_qa_server.tools import create_faq_search_tool, create_site_search_tool

SHEET_URL = "https://docs.google.com/spreadsheets/d/abc123/edit"
EXPORT_URL = "https://docs.google.com/spreadsheets/d/abc123/export?format=csv"


@pytest.mark.unit
class TestSiteSearchTool:
    """Test the site_search tool."""

    def test_returns_json_result(self, fake_embedder):
        index = VectorIndex("embed-v1", "2025-01-01", [IndexItem("a_0", "https://example.com/", "Home", [1.0, 0.0])])
        retriever = VectorRetriever(IndexStore.from_index(index), fake_embedder(vectors={"home": [1.0, 0.0]}))
        tool = create_site_search_tool(retriever)

        data = json.loads(tool.run({"query": "home", "k": 3}))

        assert tool.name == "site_search"
        assert data["sources"] == [{"url": "https://example.com/", "score": 1.0}]
        assert data["indexedAt"] == "2025-01-01"

    def test_errors_become_text(self, tmp_path, monkeypatch, fake_embedder):
        monkeypatch.chdir(tmp_path)
        retriever = VectorRetriever(IndexStore(override=tmp_path / "none.json"), fake_embedder())
        tool = create_site_search_tool(retriever)

        result = tool.run({"query": "home"})

        assert result.startswith("Error: Prebuilt index not found.")


@pytest.mark.unit
class TestFaqSearchTool:
    """Test the faq_search tool."""

    def test_returns_answer(self, tmp_path, fake_session, fake_response, faq_csv):
        session = fake_session({EXPORT_URL: fake_response(200, faq_csv)})
        tool = create_faq_search_tool(FaqSearchService(SHEET_URL, SheetIngestor(tmp_path, session=session)))

        data = json.loads(tool.run({"question": "what stages do you guys invest"}))

        assert tool.name == "faq_search"
        assert data["answer"] == "We invest at pre-seed and seed stages."
        assert data["confident"] is True

    def test_errors_become_text(self, tmp_path, fake_session):
        tool = create_faq_search_tool(FaqSearchService("", SheetIngestor(tmp_path, session=fake_session())))

        result = tool.run({"question": "anything"})

        assert result.startswith("Error: FAQ sheet URL is not configured")

    def test_busy_cache_lock_becomes_text(self, tmp_path, fake_session, fake_response, faq_csv):
        session = fake_session({EXPORT_URL: fake_response(200, faq_csv)})
        ingestor = SheetIngestor(tmp_path, session=session, lock_timeout=0.05)
        tool = create_faq_search_tool(FaqSearchService(SHEET_URL, ingestor))

        with SheetCache(tmp_path, "abc123", None).lock():
            result = tool.run({"question": "anything"})

        assert result.startswith("Error: Could not acquire lock")

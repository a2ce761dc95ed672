"""Tests for the site crawler."""

import pytest
import requests

from hybrid_qa_server.errors import NotFoundError, ParseError
from hybrid_qa_server.rag.crawler import SiteCrawler, load_pages, normalize_url, same_origin, save_pages
from hybrid_qa_server.rag.models import Page

HTML = {"content-type": "text/html; charset=utf-8"}


def page(fake_response, body, **kwargs):
    return fake_response(200, f"<html><body>{body}</body></html>", headers=HTML, **kwargs)


@pytest.mark.unit
class TestUrlHelpers:
    """Test URL normalization and origin checks."""

    def test_normalize_url(self):
        assert normalize_url("HTTPS://Example.COM/Team/#bio") == "https://example.com/Team"
        assert normalize_url("https://example.com") == "https://example.com/"
        assert normalize_url("https://example.com/") == "https://example.com/"
        assert normalize_url("https://example.com/a/?x=1") == "https://example.com/a?x=1"

    def test_same_origin(self):
        assert same_origin("https://example.com/a", "https://EXAMPLE.com:443/b")
        assert not same_origin("https://example.com/", "http://example.com/")
        assert not same_origin("https://example.com/", "https://blog.example.com/")
        assert not same_origin("https://example.com/", "https://example.com:8443/")


@pytest.mark.unit
class TestSiteCrawler:
    """Test breadth-first crawling."""

    def test_follows_same_origin_links_only(self, fake_session, fake_response):
        """Three same-origin links are fetched, two off-origin links are never requested."""
        root_body = (
            '<a href="/a">A</a><a href="/b">B</a><a href="https://example.com/c">C</a>'
            '<a href="https://other.org/x">X</a><a href="http://example.com/insecure">Y</a>'
        )
        session = fake_session(
            {
                "https://example.com/": page(fake_response, root_body),
                "https://example.com/a": page(fake_response, "<p>Page A</p>"),
                "https://example.com/b": page(fake_response, "<p>Page B</p>"),
                "https://example.com/c": page(fake_response, "<p>Page C</p>"),
            }
        )
        crawler = SiteCrawler(session=session, show_progress=False)

        pages = crawler.crawl("https://example.com", seed_paths=[], max_depth=2, max_pages=50)

        assert [p.url for p in pages] == [
            "https://example.com/",
            "https://example.com/a",
            "https://example.com/b",
            "https://example.com/c",
        ]
        requested = [call["url"] for call in session.calls]
        assert "https://other.org/x" not in requested
        assert "http://example.com/insecure" not in requested
        assert pages[1].text == "Page A"
        assert pages[0].fetched_at

    def test_seed_paths_queued_at_depth_zero(self, fake_session, fake_response):
        session = fake_session(
            {
                "https://example.com/": page(fake_response, "<p>Home</p>"),
                "https://example.com/team": page(fake_response, "<p>Team</p>"),
            }
        )
        crawler = SiteCrawler(session=session, show_progress=False)

        pages = crawler.crawl("https://example.com/", seed_paths=["/team", "/missing"], max_depth=0, max_pages=10)

        assert [p.url for p in pages] == ["https://example.com/", "https://example.com/team"]
        assert [c["url"] for c in session.calls] == [
            "https://example.com/",
            "https://example.com/team",
            "https://example.com/missing",
        ]

    def test_depth_limit(self, fake_session, fake_response):
        session = fake_session(
            {
                "https://example.com/": page(fake_response, '<a href="/one">1</a>'),
                "https://example.com/one": page(fake_response, '<a href="/two">2</a>'),
                "https://example.com/two": page(fake_response, "<p>deep</p>"),
            }
        )
        crawler = SiteCrawler(session=session, show_progress=False)

        pages = crawler.crawl("https://example.com/", seed_paths=[], max_depth=1, max_pages=10)

        assert [p.url for p in pages] == ["https://example.com/", "https://example.com/one"]

    def test_page_budget(self, fake_session, fake_response):
        links = "".join(f'<a href="/p{i}">{i}</a>' for i in range(10))
        session = fake_session(
            {"https://example.com/": page(fake_response, links)},
            default=page(fake_response, "<p>leaf</p>"),
        )
        crawler = SiteCrawler(session=session, show_progress=False)

        pages = crawler.crawl("https://example.com/", seed_paths=[], max_depth=2, max_pages=3)

        assert len(pages) == 3

    def test_failures_are_skipped(self, fake_session, fake_response):
        session = fake_session(
            {
                "https://example.com/": page(fake_response, '<a href="/down">d</a><a href="/ok">o</a>'),
                "https://example.com/down": requests.ConnectionError("connection refused"),
                "https://example.com/ok": page(fake_response, "<p>fine</p>"),
            }
        )
        crawler = SiteCrawler(session=session, show_progress=False)

        pages = crawler.crawl("https://example.com/", seed_paths=[], max_depth=1, max_pages=10)

        assert [p.url for p in pages] == ["https://example.com/", "https://example.com/ok"]

    def test_non_html_and_external_redirects_skipped(self, fake_session, fake_response):
        session = fake_session(
            {
                "https://example.com/": page(fake_response, '<a href="/deck.pdf">pdf</a><a href="/moved">m</a>'),
                "https://example.com/deck.pdf": fake_response(200, "%PDF", headers={"content-type": "application/pdf"}),
                "https://example.com/moved": page(fake_response, "<p>elsewhere</p>", url="https://other.org/landing"),
            }
        )
        crawler = SiteCrawler(session=session, show_progress=False)

        pages = crawler.crawl("https://example.com/", seed_paths=[], max_depth=1, max_pages=10)

        assert [p.url for p in pages] == ["https://example.com/"]

    def test_sends_user_agent_and_timeout(self, fake_session, fake_response):
        session = fake_session({"https://example.com/": page(fake_response, "<p>x</p>")})
        crawler = SiteCrawler(request_timeout=3.0, user_agent="TestBot/1.0", session=session, show_progress=False)

        crawler.crawl("https://example.com/", seed_paths=[], max_depth=0, max_pages=1)

        assert session.calls[0]["headers"] == {"User-Agent": "TestBot/1.0"}
        assert session.calls[0]["timeout"] == 3.0


@pytest.mark.unit
class TestPagePersistence:
    """Test saving and loading page sets."""

    def test_save_and_load(self, tmp_path):
        pages = [Page("https://example.com/", "Home", "2025-01-01T00:00:00+00:00")]
        path = tmp_path / "pages.json"

        save_pages(pages, path)

        assert load_pages(path) == pages

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError) as exc_info:
            load_pages(tmp_path / "nope.json")
        assert exc_info.value.attempted == [str(tmp_path / "nope.json")]

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(ParseError):
            load_pages(path)

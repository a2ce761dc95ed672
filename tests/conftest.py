"""Shared pytest fixtures for Hybrid QA Server tests."""

import json

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from hybrid_qa_server.config import ServerConfig
from hybrid_qa_server.faq.models import FaqEntry


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no network access")


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, text="", headers=None, url=None, reason="OK"):
        self.status_code = status_code
        self.text = text
        self.headers = CaseInsensitiveDict(headers or {})
        self.url = url
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return json.loads(self.text)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}")


class FakeSession:
    """Routes requests by URL to canned responses and records every call.

    A route value may be a FakeResponse, an exception instance (raised), or a
    list of either (consumed in order, the last one repeating).
    """

    def __init__(self, routes=None, default=None):
        self.routes = dict(routes or {})
        self.default = default
        self.calls = []

    def _respond(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        route = self.routes.get(url, self.default)
        if isinstance(route, list):
            route = route.pop(0) if len(route) > 1 else route[0]
        if route is None:
            return FakeResponse(404, "not found", url=url, reason="Not Found")
        if isinstance(route, Exception):
            raise route
        if route.url is None:
            route.url = url
        return route

    def get(self, url, **kwargs):
        return self._respond("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._respond("POST", url, **kwargs)


class FakeEmbedder:
    """Deterministic embedder mapping each text to a bag-of-letters vector."""

    def __init__(self, model="fake-embed", vectors=None):
        self.model = model
        self.vectors = dict(vectors or {})
        self.calls = []

    def _vector(self, text):
        if text in self.vectors:
            return list(self.vectors[text])
        vector = [0.0] * 26
        for ch in text.lower():
            if "a" <= ch <= "z":
                vector[ord(ch) - ord("a")] += 1.0
        return vector

    def embed(self, texts, model=None):
        self.calls.append({"texts": list(texts), "model": model})
        return [self._vector(t) for t in texts]

    def embed_one(self, text, model=None):
        return self.embed([text], model=model)[0]


@pytest.fixture
def default_config():
    """Provide a default ServerConfig instance for testing."""
    return ServerConfig()


@pytest.fixture
def custom_config(tmp_path):
    """Provide a ServerConfig writing into a temporary data directory."""
    config = ServerConfig()
    config.OPENAI_API_KEY = "test-key"
    config.SITE_ROOT_URL = "https://example.com"
    config.DATA_DIR = str(tmp_path / "data")
    config.FAQ_SHEET_URL = "https://docs.google.com/spreadsheets/d/abc123/edit#gid=7"
    config.DEFAULT_PORT = 9000
    return config


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_embedder():
    return FakeEmbedder


@pytest.fixture
def faq_csv():
    """A small FAQ sheet as exported CSV."""
    return (
        "Question,Answer,Category\n"
        "What stages do you invest in?,We invest at pre-seed and seed stages.,Investing\n"
        "How do I submit a pitch?,\"Email your deck to pitch@example.com, with a short intro.\",Pitching\n"
        "Where is the team based?,Our team is based in Toronto and New York.,Team\n"
        "Do you lead rounds?,We lead or co-lead most of our rounds.,Investing\n"
    )


@pytest.fixture
def faq_entries():
    """Entries equivalent to the faq_csv fixture."""
    return [
        FaqEntry(1, "What stages do you invest in?", "We invest at pre-seed and seed stages.", "Investing"),
        FaqEntry(2, "How do I submit a pitch?", "Email your deck to pitch@example.com, with a short intro.", "Pitching"),
        FaqEntry(3, "Where is the team based?", "Our team is based in Toronto and New York.", "Team"),
        FaqEntry(4, "Do you lead rounds?", "We lead or co-lead most of our rounds.", "Investing"),
    ]

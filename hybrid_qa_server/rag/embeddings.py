"""Client for an OpenAI-compatible embeddings endpoint, plus vector helpers."""

import hashlib
import logging
import math
from collections.abc import Sequence

import requests

from ..errors import ConfigurationError, EmbeddingError

logger = logging.getLogger(__name__)

DEFAULT_EMBEDDING_ENDPOINT = "https://api.openai.com/v1"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"

# Keeps cosine similarity finite for zero vectors
COSINE_EPSILON = 1e-8


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity ``dot(a, b) / (|a| * |b| + eps)``.

    Raises:
        ValueError: If the vectors differ in length
    """
    if len(a) != len(b):
        raise ValueError(f"Vector length mismatch: {len(a)} != {len(b)}")
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b) + COSINE_EPSILON)


def text_hash(text: str) -> str:
    """Stable SHA-1 hex digest of ``text``."""
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


class EmbeddingClient:
    """Embeds batches of texts with a remote embedding model."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_EMBEDDING_MODEL,
        endpoint: str = DEFAULT_EMBEDDING_ENDPOINT,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Bearer credential for the embedding service
            model: Default model identifier
            endpoint: Base URL of the OpenAI-compatible API (without /embeddings)
            timeout: Request timeout in seconds
            session: Optional requests session
        """
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config, **kwargs) -> "EmbeddingClient":
        """Create a client from a ServerConfig."""
        return cls(
            api_key=config.OPENAI_API_KEY,
            model=config.EMBEDDING_MODEL,
            endpoint=config.EMBEDDING_ENDPOINT,
            timeout=config.REQUEST_TIMEOUT,
            **kwargs,
        )

    def embed(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """Embed ``texts`` in a single request.

        Args:
            texts: Texts to embed
            model: Model override; defaults to the client's model

        Returns:
            One vector per input text, in input order

        Raises:
            ConfigurationError: If no API key is configured
            EmbeddingError: If the request fails or the response is malformed
        """
        if not texts:
            return []
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is required for embeddings")

        model = model or self.model
        url = f"{self.endpoint}/embeddings"
        logger.debug(f"[EMBED] Embedding {len(texts)} texts with {model}")

        try:
            response = self.session.post(
                url,
                json={"model": model, "input": texts},
                headers={"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise EmbeddingError(f"Embeddings request failed: {e}") from e

        if not response.ok:
            body = response.text
            raise EmbeddingError(
                f"Embeddings failed: {response.status_code} {response.reason} - {body}",
                status=response.status_code,
                body=body,
            )

        try:
            data = response.json()["data"]
            # Responses carry an explicit index; fall back to list order when absent
            data = sorted(data, key=lambda d: d.get("index", 0)) if all("index" in d for d in data) else data
            vectors = [[float(x) for x in d["embedding"]] for d in data]
        except (ValueError, KeyError, TypeError) as e:
            raise EmbeddingError(f"Malformed embeddings response: {e}", status=response.status_code) from e

        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"Embeddings response has {len(vectors)} vectors for {len(texts)} inputs",
                status=response.status_code,
            )
        return vectors

    def embed_one(self, text: str, model: str | None = None) -> list[float]:
        """Embed a single text."""
        return self.embed([text], model=model)[0]

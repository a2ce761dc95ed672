"""Exception types raised by the retrieval and ranking core.

"Nothing relevant found" is never an exception: the site retriever returns an
empty result and the FAQ ranker returns a non-confident outcome, so callers can
tell a failed lookup apart from a lookup with no answer.
"""


class QAServerError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(QAServerError):
    """A required setting (credential, source URL) is missing or invalid."""


class NetworkError(QAServerError):
    """A remote fetch failed.

    Attributes:
        status: HTTP status code when the server answered, None for transport failures
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class EmbeddingError(NetworkError):
    """The embedding service rejected or failed a request."""

    def __init__(self, message: str, status: int | None = None, body: str = ""):
        super().__init__(message, status=status)
        self.body = body


class ParseError(QAServerError):
    """Input could not be parsed (sheet URL, CSV body, persisted index)."""


class NotFoundError(QAServerError):
    """A persisted artifact was not found at any candidate location.

    Attributes:
        attempted: Every location that was checked, in order
    """

    def __init__(self, message: str, attempted: list[str] | None = None):
        self.attempted = list(attempted or [])
        if self.attempted:
            message = f"{message} Tried: {', '.join(self.attempted)}"
        super().__init__(message)


class LockTimeoutError(QAServerError, TimeoutError):
    """Another process held a cache lock for longer than the allowed wait."""

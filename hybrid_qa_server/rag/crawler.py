"""Bounded breadth-first crawler for a single site.

Starting from a root URL and a handful of likely content paths, pages are
fetched one at a time, converted to heading-annotated text, and their
same-origin links are queued until the depth or page budget runs out.
"""

import json
import logging
import sys
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urljoin, urlparse, urlunparse

import requests
from tqdm import tqdm

from ..errors import NotFoundError, ParseError
from ..storage import atomic_write_json
from .extract import extract_links, html_to_text
from .models import Page

logger = logging.getLogger(__name__)

# Default user agent for crawling
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; HybridQACrawler/1.0)"

_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(url: str) -> str:
    """Normalize a URL for deduplication.

    Drops the fragment, lowercases scheme and host, and removes a trailing
    slash from any path other than the root. The query string is kept.

    Args:
        url: URL to normalize

    Returns:
        Normalized URL
    """
    parsed = urlparse(url.strip())
    path = parsed.path or "/"
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/") or "/"
    return urlunparse((parsed.scheme.lower(), parsed.netloc.lower(), path, parsed.params, parsed.query, ""))


def _origin(url: str) -> tuple[str, str, int | None]:
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    return scheme, (parsed.hostname or "").lower(), parsed.port or _DEFAULT_PORTS.get(scheme)


def same_origin(a: str, b: str) -> bool:
    """Return True when both URLs share scheme, host, and port."""
    try:
        return _origin(a) == _origin(b)
    except ValueError:
        return False


class SiteCrawler:
    """Sequential breadth-first crawler restricted to the root URL's origin."""

    def __init__(
        self,
        request_timeout: float = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
        session: requests.Session | None = None,
        show_progress: bool = True,
    ):
        """Initialize the crawler.

        Args:
            request_timeout: HTTP request timeout in seconds
            user_agent: User agent string for requests
            session: Optional requests session (tests pass a stand-in)
            show_progress: Show a progress bar while crawling
        """
        self.request_timeout = request_timeout
        self.user_agent = user_agent
        self.session = session or requests.Session()
        self.show_progress = show_progress

    def crawl(self, root_url: str, seed_paths: list[str], max_depth: int, max_pages: int) -> list[Page]:
        """Walk the site breadth-first from ``root_url``.

        Args:
            root_url: Starting URL; its origin bounds the crawl
            seed_paths: Paths resolved against the root's origin and queued at depth 0
            max_depth: Links are expanded only from pages with depth < max_depth
            max_pages: Stop once this many pages were collected

        Returns:
            Pages in breadth-first (insertion) order
        """
        root = normalize_url(root_url)
        parsed_root = urlparse(root)
        origin = f"{parsed_root.scheme}://{parsed_root.netloc}"

        visited: set[str] = set()
        queued: set[str] = set()
        to_visit: deque[tuple[str, int]] = deque()
        pages: list[Page] = []

        for seed in [root] + [urljoin(origin, path) for path in seed_paths]:
            seed = normalize_url(seed)
            if seed not in queued:
                queued.add(seed)
                to_visit.append((seed, 0))

        logger.info(
            f"[CRAWLER] Starting crawl from {root} "
            f"(seeds: {len(to_visit)}, max depth: {max_depth}, max pages: {max_pages})"
        )

        pbar = tqdm(
            desc="Crawling pages",
            unit="page",
            disable=not self.show_progress,
            file=sys.stderr,
            total=max_pages,
        )

        while to_visit and len(pages) < max_pages:
            current_url, depth = to_visit.popleft()

            # Skip if already visited
            if current_url in visited:
                continue
            visited.add(current_url)

            try:
                html = self.fetch_html(current_url)
            except Exception as e:
                logger.warning(f"[CRAWLER] Failed to crawl {current_url}: {e}")
                continue

            if html is None:
                continue

            pages.append(
                Page(url=current_url, text=html_to_text(html), fetched_at=datetime.now(timezone.utc).isoformat())
            )
            logger.debug(f"[CRAWLER] Fetched: {current_url}")

            pbar.update(1)
            pbar.set_postfix_str(f"depth={depth}, queue={len(to_visit)}", refresh=True)

            if depth >= max_depth:
                continue

            for link in extract_links(html, current_url):
                # Skip external links
                if not same_origin(root, link):
                    continue
                link = normalize_url(link)
                if link not in visited and link not in queued:
                    queued.add(link)
                    to_visit.append((link, depth + 1))

        pbar.close()
        logger.info(f"[CRAWLER] Crawl finished: {len(pages)} pages collected, {len(visited)} URLs visited")
        return pages

    def fetch_html(self, url: str) -> str | None:
        """Fetch a page and return its HTML, or None for non-HTML responses.

        Raises:
            requests.RequestException: On transport errors or non-2xx responses
        """
        response = self.session.get(url, headers={"User-Agent": self.user_agent}, timeout=self.request_timeout)
        response.raise_for_status()

        # Verify final URL is still on the same origin (blocks redirects to external sites)
        final_url = getattr(response, "url", None) or url
        if not same_origin(url, final_url):
            logger.warning(f"[CRAWLER] Redirect to external origin blocked: {url} -> {final_url}")
            return None

        # Only process HTML content
        content_type = response.headers.get("content-type", "")
        if content_type and "html" not in content_type:
            logger.debug(f"[CRAWLER] Skipping non-HTML content: {url} ({content_type})")
            return None

        return response.text


def crawl(
    root_url: str,
    seed_paths: list[str],
    max_depth: int,
    max_pages: int,
    **crawler_kwargs,
) -> list[Page]:
    """Crawl a site with a one-off SiteCrawler. See SiteCrawler.crawl."""
    return SiteCrawler(**crawler_kwargs).crawl(root_url, seed_paths, max_depth, max_pages)


def save_pages(pages: list[Page], path: Path) -> None:
    """Persist a page set as ``{"pages": [...]}``."""
    atomic_write_json(Path(path), {"pages": [page.to_dict() for page in pages]}, indent=2)
    logger.info(f"[CRAWLER] Saved {len(pages)} pages to {path}")


def load_pages(path: Path) -> list[Page]:
    """Load a page set written by save_pages.

    Raises:
        NotFoundError: If the file does not exist
        ParseError: If the file is not a valid page set
    """
    path = Path(path)
    if not path.exists():
        raise NotFoundError("Crawled pages not found.", attempted=[str(path)])
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return [Page.from_dict(page) for page in data["pages"]]
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        raise ParseError(f"Invalid page set at {path}: {e}") from e

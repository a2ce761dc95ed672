"""Fetch a spreadsheet's CSV export with TTL caching and conditional revalidation."""

import logging
from pathlib import Path

import requests

from ..errors import NetworkError
from .cache import SheetCache
from .models import IngestResult
from .sheets import entries_from_csv, export_csv_url, parse_sheet_url

logger = logging.getLogger(__name__)

DEFAULT_TTL_MINUTES = 10.0


class SheetIngestor:
    """Turns a spreadsheet URL into FAQ entries, going to the network only when needed.

    Order of precedence for the CSV body:

    1. Cached body younger than the TTL (``cache``)
    2. Conditional GET answered with 304 (``cache-validated``)
    3. Fresh 2xx body, written to the cache (``network``)
    4. Cached body after a failed fetch (``stale(<reason>)``)
    """

    def __init__(
        self,
        data_dir: str | Path = "data",
        session: requests.Session | None = None,
        timeout: float = 15.0,
        lock_timeout: float = 30.0,
    ):
        self.data_dir = Path(data_dir)
        self.session = session or requests.Session()
        self.timeout = timeout
        self.lock_timeout = lock_timeout

    def cache_for(self, source_url: str, gid: str | None = None) -> tuple[SheetCache, str]:
        """Resolve the cache and the export URL for a sheet URL.

        Args:
            source_url: Sharing or export URL of the spreadsheet
            gid: Tab id overriding the one embedded in the URL

        Raises:
            ConfigurationError: If the URL is missing
            ParseError: If the URL is malformed
        """
        doc_id, parsed_gid = parse_sheet_url(source_url)
        gid = gid or parsed_gid
        return SheetCache(self.data_dir, doc_id, gid), export_csv_url(doc_id, gid)

    def ingest(
        self,
        source_url: str,
        ttl_minutes: float = DEFAULT_TTL_MINUTES,
        gid: str | None = None,
    ) -> IngestResult:
        """Return the sheet's entries, refreshing the cache when it is stale.

        Raises:
            ConfigurationError: If the URL is missing
            ParseError: If the URL or the CSV body is malformed
            NetworkError: If the fetch fails and nothing is cached
        """
        cache, export_url = self.cache_for(source_url, gid)
        with cache.lock(timeout=self.lock_timeout):
            body, origin = self._fetch_body(cache, export_url, ttl_minutes)
        entries = entries_from_csv(body)
        logger.info(f"[SHEETS] Loaded {len(entries)} FAQ entries from {origin}")
        return IngestResult(entries=entries, source=export_url, origin=origin)

    def _fetch_body(self, cache: SheetCache, url: str, ttl_minutes: float) -> tuple[str, str]:
        record = cache.read_record()
        if record is not None and cache.is_fresh(ttl_minutes):
            logger.debug(f"[SHEETS] Cache hit for {cache.key}")
            return cache.read_body(), "cache"

        headers = {}
        if record is not None and cache.has_body():
            if record.etag:
                headers["If-None-Match"] = record.etag
            if record.last_modified:
                headers["If-Modified-Since"] = record.last_modified

        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            return self._stale_or_raise(cache, f"{type(e).__name__}", NetworkError(f"Failed to fetch sheet CSV: {e}"))

        if response.status_code == 304 and cache.has_body():
            logger.debug(f"[SHEETS] Not modified: {cache.key}")
            return cache.read_body(), "cache-validated"

        if not response.ok:
            error = NetworkError(
                f"Failed to fetch sheet CSV. Ensure link sharing is enabled. HTTP {response.status_code}",
                status=response.status_code,
            )
            return self._stale_or_raise(cache, str(response.status_code), error)

        body = response.text
        cache.write(body, response.headers.get("ETag"), response.headers.get("Last-Modified"))
        logger.debug(f"[SHEETS] Fetched {len(body)} bytes for {cache.key}")
        return body, "network"

    def _stale_or_raise(self, cache: SheetCache, reason: str, error: NetworkError) -> tuple[str, str]:
        if cache.has_body():
            logger.warning(f"[SHEETS] {error}; serving stale cache for {cache.key}")
            return cache.read_body(), f"stale({reason})"
        raise error

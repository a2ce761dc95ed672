"""On-disk cache for spreadsheet CSV bodies, their validators, and the built index."""

import json
import logging
import time
from pathlib import Path

from ..storage import atomic_write_json, atomic_write_text, file_lock
from .models import CacheRecord

logger = logging.getLogger(__name__)


class SheetCache:
    """Files for one spreadsheet tab under the data directory.

    Layout (``key`` is ``faq_<doc_id>_<gid|default>``)::

        <data_dir>/<key>.csv         raw CSV body
        <data_dir>/<key>.meta.json   {"etag", "lastModified", "savedAt"}
        <data_dir>/<key>.index.json  last built FaqIndex
    """

    def __init__(self, data_dir: str | Path, doc_id: str, gid: str | None = None):
        self.data_dir = Path(data_dir)
        self.key = f"faq_{doc_id}_{gid or 'default'}"
        self.csv_path = self.data_dir / f"{self.key}.csv"
        self.meta_path = self.data_dir / f"{self.key}.meta.json"
        self.index_path = self.data_dir / f"{self.key}.index.json"

    def has_body(self) -> bool:
        return self.csv_path.exists()

    def read_body(self) -> str:
        return self.csv_path.read_text(encoding="utf-8")

    def read_record(self) -> CacheRecord | None:
        """Saved validators, or None when absent or unreadable."""
        if not self.meta_path.exists():
            return None
        try:
            return CacheRecord.from_dict(json.loads(self.meta_path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError, TypeError, ValueError) as e:
            logger.warning(f"[SHEETS] Ignoring unreadable cache metadata {self.meta_path}: {e}")
            return None

    def is_fresh(self, ttl_minutes: float, now: float | None = None) -> bool:
        """True when a body exists and was written less than ``ttl_minutes`` ago."""
        if ttl_minutes <= 0 or not self.has_body():
            return False
        now = time.time() if now is None else now
        age = now - self.csv_path.stat().st_mtime
        return age < ttl_minutes * 60

    def write(self, body: str, etag: str | None, last_modified: str | None, now: float | None = None) -> CacheRecord:
        """Store a new body and its validators.

        The body is written before the metadata so a reader never sees
        validators that belong to a body not yet on disk.
        """
        record = CacheRecord(saved_at=time.time() if now is None else now, etag=etag, last_modified=last_modified)
        atomic_write_text(self.csv_path, body)
        atomic_write_json(self.meta_path, record.to_dict(), indent=2)
        return record

    def lock(self, timeout: float = 30.0):
        """Exclusive lock serializing read-validate-fetch-write for this key."""
        return file_lock(self.data_dir / self.key, timeout=timeout)

"""Atomic file writes and per-file locking for persisted artifacts.

Readers of the vector index and the FAQ cache must only ever see a complete
file, so every write goes to a temporary file in the same directory and is
moved into place with ``os.replace``.
"""

import contextlib
import json
import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from filelock import FileLock, Timeout

from .errors import LockTimeoutError

logger = logging.getLogger(__name__)

_TMP_SUFFIX = ".tmp"


def atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """Write ``text`` to ``path`` via a temporary file and atomic rename."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=_TMP_SUFFIX)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            with contextlib.suppress(OSError):
                tmp_path.unlink()


def atomic_write_json(path: Path, data: Any, indent: int | None = None) -> None:
    """Serialize ``data`` as JSON and write it atomically."""
    atomic_write_text(path, json.dumps(data, indent=indent, ensure_ascii=False))


@contextlib.contextmanager
def file_lock(path: Path, timeout: float = 30.0) -> Iterator[None]:
    """Hold an exclusive, process-safe lock associated with ``path``.

    The lock file lives next to ``path`` with a ``.lock`` suffix.

    Raises:
        LockTimeoutError: If the lock cannot be acquired within ``timeout`` seconds
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(str(path.with_suffix(path.suffix + ".lock")))
    try:
        lock.acquire(timeout=timeout)
    except Timeout as exc:
        raise LockTimeoutError(f"Could not acquire lock on {path} after {timeout}s") from exc
    try:
        yield
    finally:
        lock.release()

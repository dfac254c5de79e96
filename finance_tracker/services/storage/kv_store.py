"""
Key-Value Store Implementations

DESIGN DECISION: The durable store is a directory with one JSON file per key.
1. Users can open and back up their data with any text editor
2. No database setup required
3. Each key is replaced atomically (write temp file, then rename)

TRADEOFFS:
- Every write rewrites the whole collection (fine at personal scale)
- No cross-key transactions (the ledger never needs one)
"""

import asyncio
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finance_tracker.services.storage.interface import (
    KeyValueStore,
    StorageReadError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)

_VALID_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dictionary-backed store.

    Used for tests and for sessions that should leave nothing behind.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of everything stored (for inspection)."""
        return dict(self._data)


class JsonFileKeyValueStore(KeyValueStore):
    """
    File-backed store: `<data_dir>/<key>.json`.

    File I/O runs in a worker thread so the event loop is never blocked.
    Transient write errors are retried with exponential backoff.
    """

    def __init__(
        self,
        data_dir: Path,
        retry_attempts: int = 3,
        retry_max_wait: float = 2.0,
    ):
        self._data_dir = Path(data_dir)
        self._retry_attempts = retry_attempts
        self._retry_max_wait = retry_max_wait

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _VALID_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def _read_file(self, path: Path) -> Optional[str]:
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write_file(self, path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.stem}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            # Leave no stray temp file behind; the old value stays intact
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    async def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return await asyncio.to_thread(self._read_file, path)
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {key}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._retry_attempts),
                wait=wait_exponential(multiplier=0.1, max=self._retry_max_wait),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            "storage_write_retry",
                            key=key,
                            attempt=attempt.retry_state.attempt_number,
                        )
                    await asyncio.to_thread(self._write_file, path, value)
        except OSError as e:
            raise StorageWriteError(key, f"Failed to write {key}: {e}") from e

    async def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            raise StorageWriteError(key, f"Failed to delete {key}: {e}") from e

"""TTL key-value cache persisted as JSON files, with debounced writes.

Every entry is stored as ``{"timestamp": <epoch seconds>, "data": <payload>}``
in ``<cache_dir>/<key>.json``. Expiry is evaluated lazily on read; there is no
background sweep.
"""

from __future__ import annotations

import asyncio
import errno
import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from redzone.config import settings
from redzone.utils.file_utils import atomic_write, read_json

logger = logging.getLogger(__name__)

_QUOTA_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


class StorageQuotaExceeded(Exception):
    """A write would not fit in the cache's storage budget."""

    def __init__(self, key: str, size: int) -> None:
        self.key = key
        self.size = size
        super().__init__(f"Storage quota exceeded writing {size} bytes for key: {key}")


class LocalCache:
    """Process-local cache over a directory of JSON files.

    ``set`` is debounced per key: calls within ``debounce_seconds`` collapse
    into one physical write of the last value. Pending values are visible to
    ``get`` straight away. The timer table lives on the instance, which is
    created at startup and emptied by ``clear_all``.
    """

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        ttl_seconds: Optional[float] = None,
        debounce_seconds: Optional[float] = None,
        quota_bytes: Optional[int] = None,
        oversize_keys: Iterable[str] = (),
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cache_dir = Path(cache_dir or settings.cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.ttl_seconds = (
            ttl_seconds if ttl_seconds is not None else settings.cache_ttl_minutes * 60
        )
        self.debounce_seconds = (
            debounce_seconds
            if debounce_seconds is not None
            else settings.write_debounce_ms / 1000
        )
        self.quota_bytes = (
            quota_bytes if quota_bytes is not None else settings.storage_quota_bytes
        )
        self.oversize_keys = frozenset(oversize_keys)
        self._clock = clock
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._pending: Dict[str, Any] = {}

    # Reads

    def get(self, key: str) -> Optional[Any]:
        """Return the cached payload, or None if missing, expired or unreadable."""
        if key in self._pending:
            return self._pending[key]

        path = self._path(key)
        if not path.exists():
            return None

        try:
            cached = read_json(path)
            timestamp = float(cached["timestamp"])
            data = cached["data"]
        except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError) as err:
            logger.warning("Error reading cache entry %s: %s", key, err)
            self._unlink(path)
            return None

        if self._is_expired(timestamp):
            self._unlink(path)
            return None

        return data

    def keys(self) -> List[str]:
        return sorted(path.stem for path in self.cache_dir.glob("*.json"))

    # Writes

    def set(self, key: str, value: Any) -> None:
        """Schedule a debounced write of ``value`` under ``key``.

        Without a running event loop there is nothing to schedule the timer
        on, so the value is written immediately.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.set_immediate(key, value)
            return

        self._cancel_timer(key)
        self._pending[key] = value
        self._timers[key] = loop.call_later(
            self.debounce_seconds, self._flush_pending, key
        )

    def set_immediate(self, key: str, value: Any) -> bool:
        """Write ``value`` now, superseding any pending debounced write.

        Returns:
            False if the write was skipped under quota pressure, True otherwise
        """
        self._cancel_timer(key)
        self._pending.pop(key, None)
        return self._write(key, value)

    def flush(self) -> None:
        """Write every pending debounced value immediately.

        Every pending key is attempted. The first quota failure is raised once
        the rest have been written.
        """
        failure: Optional[StorageQuotaExceeded] = None
        for key in list(self._pending):
            self._cancel_timer(key)
            try:
                self._write(key, self._pending.pop(key))
            except StorageQuotaExceeded as err:
                logger.error("Cache write failed: %s", err)
                failure = failure or err
        if failure is not None:
            raise failure

    def remove(self, key: str) -> None:
        self._cancel_timer(key)
        self._pending.pop(key, None)
        self._unlink(self._path(key))

    def clear_expired(self) -> int:
        """Evict expired and malformed entries.

        Returns:
            Number of entries removed
        """
        removed = 0
        for path in list(self.cache_dir.glob("*.json")):
            try:
                timestamp = float(read_json(path)["timestamp"])
            except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError):
                self._unlink(path)
                removed += 1
                continue
            if self._is_expired(timestamp):
                self._unlink(path)
                removed += 1
        return removed

    def clear_all(self) -> None:
        for key in list(self._timers):
            self._cancel_timer(key)
        self._pending.clear()
        for path in list(self.cache_dir.glob("*.json")):
            self._unlink(path)

    # Internals

    def _path(self, key: str) -> Path:
        safe_key = key.replace("/", "_").replace(".", "_")
        return self.cache_dir / f"{safe_key}.json"

    def _is_expired(self, timestamp: float) -> bool:
        return self._clock() - timestamp > self.ttl_seconds

    def _cancel_timer(self, key: str) -> None:
        handle = self._timers.pop(key, None)
        if handle is not None:
            handle.cancel()

    def _flush_pending(self, key: str) -> None:
        self._timers.pop(key, None)
        if key not in self._pending:
            return
        value = self._pending.pop(key)
        try:
            self._write(key, value)
        except StorageQuotaExceeded as err:
            # Timer callbacks have no caller to propagate to
            logger.error("Debounced cache write failed: %s", err)

    def _write(self, key: str, value: Any) -> bool:
        payload = json.dumps({"timestamp": self._clock(), "data": value})
        try:
            self._store(key, payload)
        except StorageQuotaExceeded:
            logger.warning(
                "Storage quota exceeded for key: %s. Clearing expired cache and retrying...",
                key,
            )
            self.clear_expired()
            try:
                self._store(key, payload)
            except StorageQuotaExceeded:
                if key in self.oversize_keys:
                    logger.info(
                        "Skipping cache for %s due to size - will fetch fresh each time",
                        key,
                    )
                    return False
                raise
        return True

    def _store(self, key: str, payload: str) -> None:
        path = self._path(key)
        size = len(payload.encode("utf-8"))
        if self.quota_bytes and self._used_bytes(exclude=path) + size > self.quota_bytes:
            raise StorageQuotaExceeded(key, size)
        try:
            atomic_write(path, payload)
        except OSError as err:
            if err.errno in _QUOTA_ERRNOS:
                raise StorageQuotaExceeded(key, size) from err
            raise

    def _used_bytes(self, exclude: Path) -> int:
        total = 0
        for path in self.cache_dir.glob("*.json"):
            if path == exclude:
                continue
            try:
                total += path.stat().st_size
            except OSError:
                continue
        return total

    @staticmethod
    def _unlink(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass

"""In-memory result cache for comparisons and diffs.

Design:
- Keyed by an opaque id: ``<prefix>_<YYYYMMDD>_<8 hex>``
- Per-entry TTL (24h default), nothing is written to disk
- Expired entries are removed on store, on read, on stats and by a
  background sweep thread started with ``start()``
- One lock guards the store; the sweep thread and request handlers share it
"""

from __future__ import annotations

import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog

from mapdelta.config.constants import CACHE_ID_RANDOM_BYTES
from mapdelta.core.formatting import utc_timestamp

log = structlog.get_logger(__name__)

Clock = Callable[[], float]


def _iso(epoch_seconds: float) -> str:
    return utc_timestamp(datetime.fromtimestamp(epoch_seconds, tz=UTC))


@dataclass
class StoredComparison:
    """A cached result with its creation and expiry times (epoch seconds)."""

    result: Any
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def describe(self, cache_id: str, now: float) -> dict[str, Any]:
        """Metadata for stats listings (excludes the result)."""
        return {
            "id": cache_id,
            "createdAt": _iso(self.created_at),
            "expiresAt": _iso(self.expires_at),
            "timeRemaining": max(0, int((self.expires_at - now) * 1000)),
        }


class ResultCache:
    """Time-limited store of comparison results.

    Usage::

        with ResultCache(ttl_seconds=3600) as cache:
            cache_id = cache.put(result.to_dict())
            cache.get(cache_id)
    """

    def __init__(
        self,
        ttl_seconds: float = 86400.0,
        sweep_interval_seconds: float = 3600.0,
        clock: Clock = time.time,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        if sweep_interval_seconds <= 0:
            raise ValueError(f"sweep_interval_seconds must be positive, got {sweep_interval_seconds}")
        self.ttl_seconds = ttl_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self._clock = clock
        self._entries: dict[str, StoredComparison] = {}
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __enter__(self) -> ResultCache:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()

    # -----------------------------------------------------------------
    # Store operations
    # -----------------------------------------------------------------

    def _new_id(self, prefix: str, now: float) -> str:
        stamp = datetime.fromtimestamp(now, tz=UTC).strftime("%Y%m%d")
        return f"{prefix}_{stamp}_{secrets.token_hex(CACHE_ID_RANDOM_BYTES)}"

    def put(self, result: Any, *, prefix: str = "cmp", ttl_seconds: float | None = None) -> str:
        """Store a result and return its id."""
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        now = self._clock()
        with self._lock:
            cache_id = self._new_id(prefix, now)
            while cache_id in self._entries:
                cache_id = self._new_id(prefix, now)
            self._entries[cache_id] = StoredComparison(
                result=result,
                created_at=now,
                expires_at=now + ttl,
            )
            removed = self._sweep_locked(now)

        log.debug("comparison_stored", cache_id=cache_id, ttl_seconds=ttl, expired_removed=removed)
        return cache_id

    def get(self, cache_id: str) -> Any | None:
        """Return the stored result, or None when unknown or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(cache_id)
            if entry is None:
                return None
            if entry.is_expired(now):
                del self._entries[cache_id]
                log.debug("comparison_expired", cache_id=cache_id)
                return None
            return entry.result

    def delete(self, cache_id: str) -> bool:
        """Remove an entry. Returns False if it was not present."""
        with self._lock:
            return self._entries.pop(cache_id, None) is not None

    def stats(self) -> dict[str, Any]:
        """Count and per-entry timing of live entries."""
        now = self._clock()
        with self._lock:
            self._sweep_locked(now)
            entries = [entry.describe(cache_id, now) for cache_id, entry in self._entries.items()]
        return {"count": len(entries), "entries": entries}

    def sweep(self) -> int:
        """Remove expired entries. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            removed = self._sweep_locked(now)
        if removed:
            log.info("cache_swept", removed=removed)
        return removed

    def _sweep_locked(self, now: float) -> int:
        expired = [cid for cid, entry in self._entries.items() if entry.is_expired(now)]
        for cid in expired:
            del self._entries[cid]
        return len(expired)

    # -----------------------------------------------------------------
    # Background sweep
    # -----------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the periodic sweep thread. No-op if already running."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._sweep_loop,
            name="mapdelta-cache-sweep",
            daemon=True,
        )
        self._thread.start()
        log.debug("cache_sweeper_started", interval_seconds=self.sweep_interval_seconds)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the sweep thread to exit and wait for it."""
        thread = self._thread
        if thread is None:
            return
        self._stop_event.set()
        thread.join(timeout)
        self._thread = None
        log.debug("cache_sweeper_stopped")

    def _sweep_loop(self) -> None:
        while not self._stop_event.wait(self.sweep_interval_seconds):
            self.sweep()

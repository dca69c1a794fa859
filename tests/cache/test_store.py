"""Tests for cache/store.py module.

Covers:
- put()/get() round trip and id format
- expiry on read, on store and via sweep()
- delete()
- stats()
- background sweep thread start/stop and context manager
"""

from __future__ import annotations

import re
import threading
import time

import pytest

from mapdelta.cache import ResultCache

ID_RE = re.compile(r"^cmp_\d{8}_[0-9a-f]{8}$")


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ResultCache:
    return ResultCache(ttl_seconds=60, sweep_interval_seconds=3600, clock=clock)


class TestPutGet:
    """Storing and retrieving results."""

    def test_get_returns_stored_object(self, cache: ResultCache) -> None:
        payload = {"summary": {"flashDelta": 10}}
        cache_id = cache.put(payload)
        assert cache.get(cache_id) is payload

    def test_id_format(self, cache: ResultCache) -> None:
        cache_id = cache.put({})
        assert ID_RE.match(cache_id)
        # 1_700_000_000 is 2023-11-14 UTC
        assert cache_id.startswith("cmp_20231114_")

    def test_custom_prefix(self, cache: ResultCache) -> None:
        assert cache.put({}, prefix="diff").startswith("diff_")

    def test_ids_are_unique(self, cache: ResultCache) -> None:
        ids = {cache.put({"n": i}) for i in range(200)}
        assert len(ids) == 200

    def test_unknown_id(self, cache: ResultCache) -> None:
        assert cache.get("cmp_20240101_deadbeef") is None


class TestExpiry:
    """Entries disappear after their TTL."""

    def test_expired_entry_returns_none(self, cache: ResultCache, clock: FakeClock) -> None:
        cache_id = cache.put({"x": 1})

        clock.advance(61)

        assert cache.get(cache_id) is None
        assert len(cache) == 0

    def test_live_until_ttl(self, cache: ResultCache, clock: FakeClock) -> None:
        cache_id = cache.put({"x": 1})
        clock.advance(59.9)
        assert cache.get(cache_id) == {"x": 1}

    def test_per_entry_ttl(self, cache: ResultCache, clock: FakeClock) -> None:
        short = cache.put({}, ttl_seconds=5)
        long = cache.put({})
        clock.advance(10)
        assert cache.get(short) is None
        assert cache.get(long) == {}

    def test_store_sweeps_expired(self, cache: ResultCache, clock: FakeClock) -> None:
        cache.put({"old": True})
        clock.advance(120)

        cache.put({"new": True})

        assert len(cache) == 1

    def test_sweep_returns_removed_count(self, cache: ResultCache, clock: FakeClock) -> None:
        cache.put({})
        cache.put({})
        clock.advance(30)
        cache.put({})
        clock.advance(40)

        assert cache.sweep() == 2
        assert len(cache) == 1


class TestDelete:
    """Explicit removal."""

    def test_delete_existing(self, cache: ResultCache) -> None:
        cache_id = cache.put({})
        assert cache.delete(cache_id) is True
        assert cache.get(cache_id) is None

    def test_delete_missing(self, cache: ResultCache) -> None:
        assert cache.delete("nope") is False


class TestStats:
    """stats() listing."""

    def test_empty(self, cache: ResultCache) -> None:
        assert cache.stats() == {"count": 0, "entries": []}

    def test_entries(self, cache: ResultCache, clock: FakeClock) -> None:
        cache_id = cache.put({"big": "payload"})
        clock.advance(15)

        stats = cache.stats()

        assert stats["count"] == 1
        [entry] = stats["entries"]
        assert entry == {
            "id": cache_id,
            "createdAt": "2023-11-14T22:13:20.000Z",
            "expiresAt": "2023-11-14T22:14:20.000Z",
            "timeRemaining": 45_000,
        }

    def test_stats_excludes_expired(self, cache: ResultCache, clock: FakeClock) -> None:
        cache.put({})
        clock.advance(61)
        assert cache.stats()["count"] == 0


class TestValidation:
    """Constructor arguments."""

    @pytest.mark.parametrize(
        "kwargs",
        [{"ttl_seconds": 0}, {"ttl_seconds": -1}, {"sweep_interval_seconds": 0}],
    )
    def test_rejects_non_positive(self, kwargs: dict[str, float]) -> None:
        with pytest.raises(ValueError):
            ResultCache(**kwargs)


class TestBackgroundSweep:
    """Sweep thread lifecycle."""

    def test_start_stop(self) -> None:
        cache = ResultCache(sweep_interval_seconds=60)

        cache.start()
        assert cache.running

        cache.stop()
        assert not cache.running

    def test_start_is_idempotent(self) -> None:
        cache = ResultCache(sweep_interval_seconds=60)
        cache.start()
        thread_count = threading.active_count()
        cache.start()
        assert threading.active_count() == thread_count
        cache.stop()

    def test_stop_without_start(self) -> None:
        ResultCache().stop()

    def test_context_manager(self) -> None:
        with ResultCache(sweep_interval_seconds=60) as cache:
            assert cache.running
        assert not cache.running

    def test_thread_sweeps_expired_entries(self, clock: FakeClock) -> None:
        cache = ResultCache(ttl_seconds=10, sweep_interval_seconds=0.01, clock=clock)
        cache.put({})
        clock.advance(11)

        with cache:
            deadline = time.monotonic() + 2.0
            while len(cache) and time.monotonic() < deadline:
                time.sleep(0.01)

        assert len(cache) == 0

"""
Price Cache / Cached Oracle 테스트

TTL 만료, 최대 항목 수, 통계, single flight 로드, 과거 가격 폴백을 검증합니다.
"""

import logging
import threading
from datetime import datetime, timezone

import pytest

from ..oracle import (
    CachedPriceOracle,
    PriceCache,
    PriceConfidence,
    PriceObservation,
    PriceUnavailable,
    cache_key,
)

POOL = "0xC6962004f452bE9203591991D15f6b388e09E8D0"


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeOracle:
    """호출 횟수를 기록하는 테스트용 오라클"""

    def __init__(self, historical_available=True):
        self.historical_available = historical_available
        self.calls = 0

    def get_price(self, pool_address, timestamp):
        self.calls += 1
        if not self.historical_available:
            raise PriceUnavailable("no swap data")
        return PriceObservation(price=4_000 * 10 ** 6, tick=-193000)

    def get_current_price(self, pool_address):
        return PriceObservation(price=4_327 * 10 ** 6, tick=-192593)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return PriceCache(ttl_seconds=60, max_entries=3, clock=clock)


class TestPriceCache:
    """PriceCache 기본 동작"""

    def test_set_and_get(self, cache):
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert cache.get("missing") is None

    def test_ttl_expiry(self, cache, clock):
        cache.set("a", 1)
        clock.advance(59)
        assert cache.get("a") == 1
        clock.advance(1)
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_custom_ttl(self, cache, clock):
        cache.set("a", 1, ttl_seconds=5)
        clock.advance(5)
        assert cache.get("a") is None

    def test_max_entries_evicts_oldest(self, cache):
        for key in ("a", "b", "c", "d"):
            cache.set(key, key)
        assert cache.get("a") is None
        assert cache.get("d") == "d"
        assert cache.stats().evictions == 1

    def test_invalidate_prefix(self, cache):
        cache.set("pool1-1", 1)
        cache.set("pool1-2", 2)
        cache.set("pool2-1", 3)
        assert cache.invalidate("pool1-") == 2
        assert cache.get("pool2-1") == 3

    def test_cleanup(self, cache, clock):
        cache.set("a", 1)
        clock.advance(30)
        cache.set("b", 2)
        clock.advance(31)
        assert cache.cleanup() == 1
        assert len(cache) == 1

    def test_stats_and_clear(self, cache, clock):
        cache.set("a", 1)
        clock.advance(10)
        cache.set("b", 2)
        cache.get("a")
        cache.get("zzz")

        stats = cache.stats()
        assert stats.entries == 2
        assert stats.hits == 1
        assert stats.misses == 1
        assert stats.hit_rate == 0.5
        assert stats.oldest_entry == 1000.0
        assert stats.newest_entry == 1010.0

        cache.clear()
        stats = cache.stats()
        assert stats.entries == 0
        assert stats.hits == 0
        assert stats.oldest_entry is None

    def test_invalid_settings(self):
        with pytest.raises(ValueError):
            PriceCache(ttl_seconds=0)
        with pytest.raises(ValueError):
            PriceCache(max_entries=0)


class TestGetOrLoad:
    """get_or_load 테스트"""

    def test_loads_once(self, cache):
        calls = []

        def loader():
            calls.append(1)
            return 42

        assert cache.get_or_load("k", loader) == 42
        assert cache.get_or_load("k", loader) == 42
        assert len(calls) == 1

    def test_loader_error_not_cached(self, cache):
        def loader():
            raise RuntimeError("rpc down")

        with pytest.raises(RuntimeError):
            cache.get_or_load("k", loader)
        assert cache.get("k") is None

    def test_failed_load_keeps_newer_load_lock(self, cache):
        """실패한 로드는 다른 호출이 새로 등록한 로드 락을 지우지 않음"""
        newer = threading.Lock()

        def loader():
            cache._load_locks["k"] = newer
            raise RuntimeError("rpc down")

        with pytest.raises(RuntimeError):
            cache.get_or_load("k", loader)
        assert cache._load_locks.get("k") is newer

    def test_load_lock_released_after_load(self, cache):
        cache.get_or_load("k", lambda: 1)
        assert "k" not in cache._load_locks

    def test_single_flight(self):
        """동시 요청에도 loader는 한 번만 실행"""
        cache = PriceCache(ttl_seconds=60, max_entries=10)
        started = threading.Event()
        release = threading.Event()
        calls = []

        def loader():
            calls.append(1)
            started.set()
            release.wait(timeout=5)
            return "value"

        results = []

        def worker():
            results.append(cache.get_or_load("k", loader))

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for thread in threads:
            thread.start()
        started.wait(timeout=5)
        release.set()
        for thread in threads:
            thread.join(timeout=5)

        assert results == ["value"] * 5
        assert len(calls) == 1


class TestCachedPriceOracle:
    """CachedPriceOracle 테스트"""

    def test_cache_key(self):
        timestamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert cache_key(POOL, timestamp) == f"{POOL.lower()}-1704067200"

    def test_caches_historical_price(self, cache):
        oracle = FakeOracle()
        cached = CachedPriceOracle(oracle, cache)
        timestamp = datetime(2024, 1, 1, tzinfo=timezone.utc)

        first = cached.get_price(POOL, timestamp)
        second = cached.get_price(POOL, timestamp)

        assert first == second
        assert first.confidence is PriceConfidence.EXACT
        assert oracle.calls == 1

    def test_falls_back_to_current_price(self, cache, caplog):
        """과거 가격이 없으면 현재 가격을 ESTIMATED로 사용"""
        cached = CachedPriceOracle(FakeOracle(historical_available=False), cache)
        with caplog.at_level(logging.WARNING, logger="uniswap_v3_valuation.oracle.cached_oracle"):
            observation = cached.get_price(POOL, datetime(2024, 1, 1, tzinfo=timezone.utc))

        assert observation.confidence is PriceConfidence.ESTIMATED
        assert observation.tick == -192593
        assert any("using current price" in record.getMessage() for record in caplog.records)

    def test_invalidate_pool(self, cache):
        oracle = FakeOracle()
        cached = CachedPriceOracle(oracle, cache)
        timestamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
        cached.get_price(POOL, timestamp)

        assert cached.invalidate_pool(POOL) == 1
        cached.get_price(POOL, timestamp)
        assert oracle.calls == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

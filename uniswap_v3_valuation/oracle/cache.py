"""
Price Cache - 명시적 TTL 캐시

프로세스 전역 싱글톤이 아니라, 호출 측이 만들어 오라클 경계에 넘겨주는 객체입니다.
여러 스레드에서 공유할 수 있으며, 같은 키에 대한 로드는 한 번만 실행됩니다 (single flight).
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

from ..config import settings

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass(frozen=True)
class CacheStats:
    """캐시 통계 스냅샷"""
    entries: int
    hits: int
    misses: int
    sets: int
    evictions: int
    hit_rate: float
    oldest_entry: Optional[float]  # clock 기준 저장 시각
    newest_entry: Optional[float]


@dataclass
class _Entry(Generic[V]):
    value: V
    stored_at: float
    expires_at: float


class PriceCache(Generic[V]):
    """TTL과 최대 항목 수를 가진 스레드 안전 캐시

    Args:
        ttl_seconds: 기본 TTL (초)
        max_entries: 최대 항목 수. 초과 시 가장 오래된 항목부터 제거
        clock: 시간 함수 (테스트에서 교체 가능)
    """

    def __init__(
        self,
        ttl_seconds: float = None,
        max_entries: int = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.PRICE_CACHE_TTL_SECONDS
        self.max_entries = max_entries if max_entries is not None else settings.PRICE_CACHE_MAX_ENTRIES
        if self.ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive: {self.ttl_seconds}")
        if self.max_entries <= 0:
            raise ValueError(f"max_entries must be positive: {self.max_entries}")

        self._clock = clock
        self._entries: Dict[str, _Entry[V]] = {}
        self._lock = threading.Lock()
        self._load_locks: Dict[str, threading.Lock] = {}
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._evictions = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _lookup(self, key: str) -> Optional[V]:
        # self._lock 보유 상태에서 호출
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry.value

    def get(self, key: str) -> Optional[V]:
        """유효한 값 또는 None (만료 항목은 제거)"""
        with self._lock:
            value = self._lookup(key)
            if value is None:
                self._misses += 1
            else:
                self._hits += 1
            return value

    def set(self, key: str, value: V, ttl_seconds: float = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.ttl_seconds
        now = self._clock()
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = _Entry(value=value, stored_at=now, expires_at=now + ttl)
            self._sets += 1
            while len(self._entries) > self.max_entries:
                oldest_key = next(iter(self._entries))
                del self._entries[oldest_key]
                self._evictions += 1
                logger.debug("Price cache evicted %s", oldest_key)

    def get_or_load(self, key: str, loader: Callable[[], V], ttl_seconds: float = None) -> V:
        """캐시 값이 없으면 loader로 로드하여 저장

        같은 키에 대한 동시 호출은 loader를 한 번만 실행합니다.
        loader의 예외는 그대로 전파되며 캐시에 저장되지 않습니다.
        """
        value = self.get(key)
        if value is not None:
            return value

        with self._lock:
            load_lock = self._load_locks.setdefault(key, threading.Lock())

        with load_lock:
            with self._lock:
                value = self._lookup(key)
            if value is not None:
                return value
            try:
                value = loader()
                self.set(key, value, ttl_seconds)
            finally:
                with self._lock:
                    if self._load_locks.get(key) is load_lock:
                        del self._load_locks[key]
            return value

    def invalidate(self, key_prefix: str) -> int:
        """key_prefix로 시작하는 항목 제거, 제거 개수 반환"""
        with self._lock:
            keys = [key for key in self._entries if key.startswith(key_prefix)]
            for key in keys:
                del self._entries[key]
            return len(keys)

    def clear(self) -> None:
        """모든 항목과 통계 초기화"""
        with self._lock:
            self._entries.clear()
            self._hits = self._misses = self._sets = self._evictions = 0

    def cleanup(self) -> int:
        """만료 항목 제거, 제거 개수 반환"""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Price cache cleanup: removed %d expired entries", len(expired))
        return len(expired)

    def stats(self) -> CacheStats:
        with self._lock:
            requests = self._hits + self._misses
            stored = [entry.stored_at for entry in self._entries.values()]
            return CacheStats(
                entries=len(self._entries),
                hits=self._hits,
                misses=self._misses,
                sets=self._sets,
                evictions=self._evictions,
                hit_rate=self._hits / requests if requests else 0.0,
                oldest_entry=min(stored) if stored else None,
                newest_entry=max(stored) if stored else None,
            )

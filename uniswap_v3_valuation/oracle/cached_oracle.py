"""
Cached Price Oracle

PriceOracle 구현을 감싸서 과거 가격 조회 결과를 PriceCache에 저장합니다.
과거 가격을 얻지 못하면 현재 가격으로 대체하고 confidence를 ESTIMATED로 표시합니다.
"""

import logging
from dataclasses import replace
from datetime import datetime

from .cache import PriceCache
from .types import PriceConfidence, PriceObservation, PriceOracle, PriceUnavailable

logger = logging.getLogger(__name__)


def cache_key(pool_address: str, timestamp: datetime) -> str:
    """캐시 키: 소문자 풀 주소 + 초 단위 타임스탬프"""
    return f"{pool_address.lower()}-{int(timestamp.timestamp())}"


class CachedPriceOracle:
    """PriceCache를 사용하는 PriceOracle 래퍼

    Args:
        oracle: 실제 가격 제공자
        cache: 명시적으로 주입되는 캐시 (None이면 기본 설정으로 생성)
    """

    def __init__(self, oracle: PriceOracle, cache: PriceCache = None):
        self.oracle = oracle
        self.cache = cache if cache is not None else PriceCache()

    def get_price(self, pool_address: str, timestamp: datetime) -> PriceObservation:
        key = cache_key(pool_address, timestamp)
        return self.cache.get_or_load(key, lambda: self._load(pool_address, timestamp))

    def get_current_price(self, pool_address: str) -> PriceObservation:
        # 현재 가격은 캐시하지 않음
        return self.oracle.get_current_price(pool_address)

    def invalidate_pool(self, pool_address: str) -> int:
        """해당 풀의 캐시 항목 제거"""
        return self.cache.invalidate(f"{pool_address.lower()}-")

    def _load(self, pool_address: str, timestamp: datetime) -> PriceObservation:
        try:
            return self.oracle.get_price(pool_address, timestamp)
        except PriceUnavailable as exc:
            logger.warning(
                "Historical price unavailable for %s at %s, using current price: %s",
                pool_address, timestamp.isoformat(), exc,
            )
        current = self.oracle.get_current_price(pool_address)
        return replace(current, confidence=PriceConfidence.ESTIMATED)

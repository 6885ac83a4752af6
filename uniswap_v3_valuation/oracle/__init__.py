"""
Price oracle boundary: 가격 조회 인터페이스와 명시적 TTL 캐시
"""

from .types import PriceConfidence, PriceObservation, PriceOracle, PriceUnavailable
from .cache import CacheStats, PriceCache
from .cached_oracle import CachedPriceOracle, cache_key

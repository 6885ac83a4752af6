"""
가격 오라클 경계 타입

과거/현재 풀 가격을 제공하는 외부 협력자의 인터페이스.
구현(서브그래프, RPC 등)은 이 패키지의 범위 밖입니다.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


class PriceConfidence(str, Enum):
    EXACT = "exact"
    ESTIMATED = "estimated"


@dataclass(frozen=True)
class PriceObservation:
    """특정 시점의 풀 가격

    - price: quote per base (quote 최소 단위)
    - tick: 해당 시점의 풀 틱
    - confidence: 정확한 과거 값인지, 현재 가격 등으로 추정한 값인지
    """
    price: int
    tick: int
    confidence: PriceConfidence = PriceConfidence.EXACT


class PriceUnavailable(Exception):
    """오라클이 가격을 제공하지 못함"""


class PriceOracle(Protocol):
    """풀 가격 제공자"""

    def get_price(self, pool_address: str, timestamp: datetime) -> PriceObservation:
        ...

    def get_current_price(self, pool_address: str) -> PriceObservation:
        ...

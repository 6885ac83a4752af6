"""
포지션 밸류에이션 데이터 타입 정의

모든 금액/유동성 필드는 온체인 정밀도를 위해 int 타입을 사용합니다.
float는 CurvePoint/CurveData 같은 표시용 값에만 사용합니다.
모든 타입은 계산 요청마다 새로 만들어지는 불변 값 객체입니다.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..constants import MIN_TICK, MAX_TICK
from ..exceptions import InvalidRange, InvalidTick, ValuationError
from ..math.liquidity_math import validate_liquidity
from ..math.price_math import is_token0
from ..math.tick_math import get_tick_spacing_for_fee


class PositionPhase(str, Enum):
    """PnL 곡선 위 샘플의 구간"""
    BELOW = "below"
    IN_RANGE = "in-range"
    ABOVE = "above"


class RangeStatus(str, Enum):
    """현재 틱 기준 포지션 범위 상태"""
    IN_RANGE = "in-range"
    OUT_OF_RANGE_BELOW = "out-of-range-below"
    OUT_OF_RANGE_ABOVE = "out-of-range-above"


@dataclass(frozen=True)
class TokenRef:
    """풀의 한쪽 토큰"""
    address: str  # 컨트랙트 주소 (hex)
    decimals: int

    def __post_init__(self):
        if self.decimals < 0:
            raise ValuationError(f"decimals는 0 이상이어야 합니다: {self.decimals}")


def sort_tokens(token_a: TokenRef, token_b: TokenRef) -> Tuple[TokenRef, TokenRef]:
    """주소 크기로 (token0, token1) 순서 정렬"""
    if is_token0(token_a.address, token_b.address):
        return token_a, token_b
    return token_b, token_a


@dataclass(frozen=True)
class PositionRange:
    """포지션 틱 범위

    - tick_lower < tick_upper
    - 두 틱 모두 tick_spacing의 배수이며 [MIN_TICK, MAX_TICK] 안에 있어야 함
    """
    tick_lower: int
    tick_upper: int
    tick_spacing: int = 1

    def __post_init__(self):
        for tick in (self.tick_lower, self.tick_upper):
            if tick < MIN_TICK or tick > MAX_TICK:
                raise InvalidTick(f"틱이 유효 범위를 벗어났습니다: {tick}")
        if self.tick_lower >= self.tick_upper:
            raise InvalidRange(
                f"tick_lower는 tick_upper보다 작아야 합니다: {self.tick_lower} >= {self.tick_upper}"
            )
        if self.tick_spacing <= 0:
            raise InvalidRange(f"틱 간격은 양수여야 합니다: {self.tick_spacing}")
        if self.tick_lower % self.tick_spacing or self.tick_upper % self.tick_spacing:
            raise InvalidRange(
                f"틱이 틱 간격 {self.tick_spacing}의 배수가 아닙니다: "
                f"({self.tick_lower}, {self.tick_upper})"
            )

    @classmethod
    def for_fee_tier(cls, tick_lower: int, tick_upper: int, fee_tier: int) -> "PositionRange":
        return cls(tick_lower, tick_upper, get_tick_spacing_for_fee(fee_tier))

    def contains_tick(self, tick: int) -> bool:
        return self.tick_lower <= tick < self.tick_upper


@dataclass(frozen=True)
class PositionSnapshot:
    """임의 가격에서 포지션을 평가하기 위한 최소 입력

    - liquidity: 포지션 유동성 (uint128)
    - range: 틱 범위
    - base_is_token0: base 토큰이 token0인지
    - base_decimals / quote_decimals: 토큰 소수점 자릿수
    - initial_value: 오픈 시점 가치 (quote 최소 단위, 재계산하지 않음)
    """
    liquidity: int
    range: PositionRange
    base_is_token0: bool
    base_decimals: int
    quote_decimals: int
    initial_value: int

    def __post_init__(self):
        validate_liquidity(self.liquidity)
        if self.base_decimals < 0 or self.quote_decimals < 0:
            raise ValuationError(
                f"decimals는 0 이상이어야 합니다: base={self.base_decimals}, quote={self.quote_decimals}"
            )

    @classmethod
    def from_tokens(
        cls,
        base: TokenRef,
        quote: TokenRef,
        liquidity: int,
        position_range: PositionRange,
        initial_value: int,
    ) -> "PositionSnapshot":
        """base/quote TokenRef에서 스냅샷 생성 (주소 순서로 base_is_token0 결정)"""
        return cls(
            liquidity=liquidity,
            range=position_range,
            base_is_token0=is_token0(base.address, quote.address),
            base_decimals=base.decimals,
            quote_decimals=quote.decimals,
            initial_value=initial_value,
        )

    @property
    def tick_lower(self) -> int:
        return self.range.tick_lower

    @property
    def tick_upper(self) -> int:
        return self.range.tick_upper

    @property
    def tick_spacing(self) -> int:
        return self.range.tick_spacing


@dataclass(frozen=True)
class PnlBreakdown:
    """이벤트 원장에서 집계된 PnL 구성 요소 (quote 최소 단위)"""
    cost_basis: int
    realized_pnl: int = 0
    collected_fees: int = 0
    unclaimed_fees: int = 0

    @property
    def break_even_target(self) -> int:
        """손익분기 목표 가치 = 순투자금"""
        return self.cost_basis - self.realized_pnl - self.collected_fees - self.unclaimed_fees


@dataclass(frozen=True)
class PnL:
    """PnL과 퍼센트 (퍼센트는 표시용)"""
    pnl: int
    pnl_percent: float


@dataclass(frozen=True)
class HoldComparison:
    """LP 포지션 vs 단순 보유(HODL) 비교"""
    position_value: int
    hold_value: int
    advantage: int
    advantage_percent: float


@dataclass(frozen=True)
class PositionState:
    """특정 틱에서의 포지션 상태"""
    tick: int
    base_amount: int
    quote_amount: int
    pool_price: int
    position_value: int
    pnl_including_fees: int
    pnl_excluding_fees: int


@dataclass(frozen=True)
class PositionStates:
    """하한/현재/상한 틱에서의 포지션 상태"""
    lower_range: PositionState
    current: PositionState
    upper_range: PositionState


@dataclass(frozen=True)
class CurvePoint:
    """PnL 곡선의 표시용 샘플"""
    price: float
    pnl: float
    phase: PositionPhase


@dataclass(frozen=True)
class ValueRange:
    min: float
    max: float


@dataclass(frozen=True)
class RangeIndices:
    lower: int
    upper: int


@dataclass(frozen=True)
class CurveData:
    """차트용 PnL 곡선 전체 페이로드 (한 번에 생성, 이후 변경 없음)"""
    points: Tuple[CurvePoint, ...]
    price_range: ValueRange
    pnl_range: ValueRange
    current_price_index: int
    range_indices: RangeIndices
    lower_price: float
    upper_price: float
    current_price: float


class BreakEvenStatus(str, Enum):
    """손익분기 탐색 결과 종류"""
    CONVERGED = "converged"
    APPROXIMATE = "approximate"  # 반복 한도 소진, 최종 구간 중앙값
    NOT_FOUND = "not-found"  # 목표 가치 <= 0 (이미 수익 구간)


@dataclass(frozen=True)
class BreakEvenResult:
    status: BreakEvenStatus
    price: Optional[int] = None  # quote 최소 단위
    iterations: int = 0

    @property
    def found(self) -> bool:
        return self.status is not BreakEvenStatus.NOT_FOUND

    @property
    def is_approximate(self) -> bool:
        return self.status is BreakEvenStatus.APPROXIMATE

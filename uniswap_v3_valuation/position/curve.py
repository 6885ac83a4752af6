"""
Curve Data Generator - 차트용 가격 → PnL 곡선

포지션 범위 양쪽에 버퍼를 둔 가격 구간을 균등 분할하여 각 샘플의 PnL을
계산하고, 구간(below / in-range / above)을 태깅합니다.
모든 계산은 정수로 하고, float 변환은 마지막 표시 단계에서만 합니다.

알고리즘:
    1. lower_price, upper_price = 범위 틱의 가격
    2. buffer = (upper - lower) / 5, min = max(lower - buffer, lower / 2), max = upper + buffer
    3. N = 25 구간 (26개 점), price_i = min + (max - min) * i / N
    4. 각 샘플의 pnl_at, 가격으로 구간 태깅
    5. 현재/하한/상한 가격에 가장 가까운 인덱스 추적 (동률이면 먼저 나온 것)
    6. 10^quote_decimals로 나눠 float 변환
"""

import logging
from typing import Dict, Mapping, Optional, Tuple

from ..config import settings
from ..exceptions import InvalidPrice, ValuationError
from ..math.price_math import tick_to_base_price, to_display_float
from .types import CurveData, CurvePoint, PositionSnapshot, RangeIndices, ValueRange
from .valuation import determine_phase, pnl_at

logger = logging.getLogger(__name__)


class CurveDataGenerator:
    """PositionSnapshot에서 CurveData를 생성

    Args:
        num_points: 구간 수 N (샘플은 N + 1개)
        buffer_divisor: 범위 폭 대비 버퍼 비율의 역수 (5 -> 20%)
    """

    def __init__(self, num_points: int = None, buffer_divisor: int = None):
        self.num_points = num_points if num_points is not None else settings.CURVE_NUM_POINTS
        self.buffer_divisor = buffer_divisor if buffer_divisor is not None else settings.CURVE_BUFFER_DIVISOR
        if self.num_points <= 0:
            raise ValuationError(f"num_points는 양수여야 합니다: {self.num_points}")
        if self.buffer_divisor <= 0:
            raise ValuationError(f"buffer_divisor는 양수여야 합니다: {self.buffer_divisor}")

    def price_bounds(self, snapshot: PositionSnapshot) -> Tuple[int, int]:
        """범위 하한/상한 틱의 가격 (quote 최소 단위)"""
        lower_price = tick_to_base_price(snapshot.tick_lower, snapshot.base_is_token0, snapshot.base_decimals)
        upper_price = tick_to_base_price(snapshot.tick_upper, snapshot.base_is_token0, snapshot.base_decimals)
        # base가 token1이면 틱이 커질수록 가격이 작아짐
        if lower_price > upper_price:
            lower_price, upper_price = upper_price, lower_price
        return lower_price, upper_price

    def sample_prices(self, lower_price: int, upper_price: int) -> Tuple[int, ...]:
        """버퍼를 포함한 구간의 균등 샘플 가격 (정수 보간)"""
        buffer = (upper_price - lower_price) // self.buffer_divisor
        # 음수/0 가격 방지
        min_price = max(lower_price - buffer, lower_price // 2)
        max_price = upper_price + buffer
        span = max_price - min_price
        return tuple(
            min_price + span * i // self.num_points
            for i in range(self.num_points + 1)
        )

    def _sample_pnl(self, snapshot: PositionSnapshot, price: int) -> int:
        try:
            return pnl_at(snapshot, price)
        except ValuationError as exc:
            logger.warning("PnL calculation failed for price %s, falling back to 0: %s", price, exc)
            return 0

    def generate(self, snapshot: PositionSnapshot, current_price: int) -> CurveData:
        """가격 → PnL 곡선 생성

        Args:
            snapshot: 포지션 스냅샷
            current_price: 현재 가격 (quote 최소 단위)

        Returns:
            CurveData (points는 가격 비내림차순)

        Raises:
            InvalidPrice: current_price가 0 이하
        """
        if current_price <= 0:
            raise InvalidPrice(f"현재 가격은 양수여야 합니다: {current_price}")

        lower_price, upper_price = self.price_bounds(snapshot)
        prices = self.sample_prices(lower_price, upper_price)

        pnls = []
        phases = []
        current_index = lower_index = upper_index = 0
        for i, price in enumerate(prices):
            pnls.append(self._sample_pnl(snapshot, price))
            phases.append(determine_phase(price, lower_price, upper_price))

            if abs(price - current_price) < abs(prices[current_index] - current_price):
                current_index = i
            if abs(price - lower_price) < abs(prices[lower_index] - lower_price):
                lower_index = i
            if abs(price - upper_price) < abs(prices[upper_index] - upper_price):
                upper_index = i

        decimals = snapshot.quote_decimals
        points = tuple(
            CurvePoint(
                price=to_display_float(price, decimals),
                pnl=to_display_float(pnl, decimals),
                phase=phase,
            )
            for price, pnl, phase in zip(prices, pnls, phases)
        )
        display_prices = [p.price for p in points]
        display_pnls = [p.pnl for p in points]

        return CurveData(
            points=points,
            price_range=ValueRange(min=min(display_prices), max=max(display_prices)),
            pnl_range=ValueRange(min=min(display_pnls), max=max(display_pnls)),
            current_price_index=current_index,
            range_indices=RangeIndices(lower=lower_index, upper=upper_index),
            lower_price=to_display_float(lower_price, decimals),
            upper_price=to_display_float(upper_price, decimals),
            current_price=to_display_float(current_price, decimals),
        )

    def generate_batch(
        self,
        positions: Mapping[str, Tuple[PositionSnapshot, int]],
    ) -> Dict[str, Optional[CurveData]]:
        """여러 포지션의 곡선을 한 번에 생성

        유동성 또는 초기 가치가 0이거나 생성에 실패한 포지션은 None.

        Args:
            positions: {position_id: (snapshot, current_price)}
        """
        results: Dict[str, Optional[CurveData]] = {}
        for position_id, (snapshot, current_price) in positions.items():
            if snapshot.liquidity == 0 or snapshot.initial_value == 0:
                results[position_id] = None
                continue
            try:
                results[position_id] = self.generate(snapshot, current_price)
            except ValuationError as exc:
                logger.warning("Curve generation failed for position %s: %s", position_id, exc)
                results[position_id] = None
        return results


def generate_curve_data(snapshot: PositionSnapshot, current_price: int) -> CurveData:
    """기본 설정으로 곡선 생성"""
    return CurveDataGenerator().generate(snapshot, current_price)

"""
Break-Even Solver - 손익분기 가격 탐색

포지션 가치가 순투자금(목표 가치)과 같아지는 가격을 이분 탐색으로 찾습니다.

주의:
    이분 탐색은 탐색 구간 안에서 포지션 가치가 가격에 대해 단조 증가한다고 가정합니다.
    범위 밖에서는 가치가 평평하거나(quote 쪽) 선형이므로 이 가정은
    [lower_price, upper_price] 안에서만 근사적으로 성립합니다.
"""

import logging
from typing import Optional

from ..config import settings
from ..exceptions import InvalidPrice, ValuationError
from .types import BreakEvenResult, BreakEvenStatus, PnlBreakdown, PositionSnapshot
from .valuation import value_at

logger = logging.getLogger(__name__)


def break_even_tolerance(quote_decimals: int) -> int:
    """수렴 허용 오차 = 10^(quote_decimals - 4), 최소 1 최소 단위"""
    return 10 ** max(quote_decimals - 4, 0)


def find_break_even(
    snapshot: PositionSnapshot,
    current_price: int,
    breakdown: Optional[PnlBreakdown] = None,
    max_iterations: int = None,
    bracket_factor: int = None,
) -> BreakEvenResult:
    """손익분기 가격 탐색

    Args:
        snapshot: 포지션 스냅샷
        current_price: 현재 가격 (quote 최소 단위)
        breakdown: PnL 구성 요소. 없으면 initial_value가 목표 가치
        max_iterations: 최대 반복 횟수 (기본 50)
        bracket_factor: 초기 구간 [current / f, current * f]의 f (기본 10)

    Returns:
        BreakEvenResult
        - NOT_FOUND: 목표 가치 <= 0 (이미 수익 구간)
        - CONVERGED: |value - target| <= tolerance
        - APPROXIMATE: 반복 한도 소진, 최종 구간의 중앙값

    Raises:
        InvalidPrice: current_price가 0 이하
    """
    if current_price <= 0:
        raise InvalidPrice(f"현재 가격은 양수여야 합니다: {current_price}")

    if max_iterations is None:
        max_iterations = settings.BREAK_EVEN_MAX_ITERATIONS
    if bracket_factor is None:
        bracket_factor = settings.BREAK_EVEN_BRACKET_FACTOR
    if bracket_factor < 2:
        raise ValuationError(f"bracket_factor는 2 이상이어야 합니다: {bracket_factor}")

    target_value = breakdown.break_even_target if breakdown is not None else snapshot.initial_value
    if target_value <= 0:
        return BreakEvenResult(status=BreakEvenStatus.NOT_FOUND)

    low_price = max(current_price // bracket_factor, 1)
    high_price = current_price * bracket_factor
    tolerance = break_even_tolerance(snapshot.quote_decimals)

    iterations = 0
    for iterations in range(1, max_iterations + 1):
        mid_price = (low_price + high_price) // 2
        position_value = value_at(snapshot, mid_price)

        if abs(position_value - target_value) <= tolerance:
            logger.debug("Break-even converged after %d iterations at %s", iterations, mid_price)
            return BreakEvenResult(
                status=BreakEvenStatus.CONVERGED,
                price=mid_price,
                iterations=iterations,
            )

        if position_value < target_value:
            low_price = mid_price
        else:
            high_price = mid_price

        # 구간이 최소 단위 1까지 좁혀지면 더 나눌 수 없음
        if high_price - low_price <= 1:
            break

    logger.debug("Break-even did not converge after %d iterations", iterations)
    return BreakEvenResult(
        status=BreakEvenStatus.APPROXIMATE,
        price=(low_price + high_price) // 2,
        iterations=iterations,
    )

"""
Position Valuation - 임의 가격에서의 포지션 가치와 PnL

LiquidityMath와 TickPriceMath를 조합하여 quote 토큰 기준 포지션 가치를 계산합니다.
모든 함수는 입력에 대한 결정적 순수 함수이며, 하위 계층의 예외를 그대로 전파합니다.

핵심 공식:
    value = quote_amount + base_amount * price / 10^base_decimals
    pnl = value - initial_value
"""

from typing import Optional

from ..math.liquidity_math import calculate_position_value, get_token_amounts_from_liquidity
from ..math.price_math import price_to_base_tick, tick_to_base_price
from .types import (
    HoldComparison,
    PnL,
    PnlBreakdown,
    PositionPhase,
    PositionSnapshot,
    PositionState,
    PositionStates,
    RangeStatus,
)


def resolve_tick(snapshot: PositionSnapshot, price: int) -> int:
    """가격에 대응하는 사용 가능한 틱 (틱 간격으로 스냅)"""
    return price_to_base_tick(
        price,
        snapshot.tick_spacing,
        snapshot.base_is_token0,
        snapshot.base_decimals,
    )


def value_at(snapshot: PositionSnapshot, price: int, tick: Optional[int] = None) -> int:
    """가격에서 포지션 가치 (quote 최소 단위)

    tick을 모르는 가상(what-if) 평가에서는 가격으로부터 틱을 구합니다.

    Args:
        snapshot: 포지션 스냅샷
        price: 가격 (quote per base, quote 최소 단위)
        tick: 이미 알고 있는 틱 (예: 풀의 현재 틱)

    Returns:
        포지션 가치 (quote 최소 단위)

    Raises:
        InvalidPrice: 가격이 0 이하
        InvalidSqrtRatio: 가격이 표현 가능한 범위를 벗어남
    """
    if tick is None:
        tick = resolve_tick(snapshot, price)

    return calculate_position_value(
        snapshot.liquidity,
        tick,
        snapshot.tick_lower,
        snapshot.tick_upper,
        price,
        snapshot.base_is_token0,
        snapshot.base_decimals,
    )


def pnl_at(snapshot: PositionSnapshot, price: int, tick: Optional[int] = None) -> int:
    """가격에서의 PnL = value_at - initial_value (반올림 없음)"""
    return value_at(snapshot, price, tick) - snapshot.initial_value


def calculate_pnl(current_value: int, initial_value: int) -> PnL:
    """PnL과 퍼센트 계산

    퍼센트는 0.01% 단위로 0 방향 절삭한 표시용 값입니다.
    """
    pnl = current_value - initial_value
    if initial_value <= 0:
        return PnL(pnl=pnl, pnl_percent=0.0)

    basis_points = abs(pnl) * 10000 // initial_value
    if pnl < 0:
        basis_points = -basis_points
    return PnL(pnl=pnl, pnl_percent=basis_points / 100)


def determine_range_status(tick: int, tick_lower: int, tick_upper: int) -> RangeStatus:
    """틱 기준 범위 상태 (온체인과 동일하게 상한은 범위 밖)"""
    if tick_lower <= tick < tick_upper:
        return RangeStatus.IN_RANGE
    if tick < tick_lower:
        return RangeStatus.OUT_OF_RANGE_BELOW
    return RangeStatus.OUT_OF_RANGE_ABOVE


def determine_phase(price: int, lower_price: int, upper_price: int) -> PositionPhase:
    """가격 기준 곡선 구간 (경계 가격은 in-range)"""
    if price < lower_price:
        return PositionPhase.BELOW
    if price > upper_price:
        return PositionPhase.ABOVE
    return PositionPhase.IN_RANGE


def compare_to_hold_strategy(
    position_value: int,
    initial_base_amount: int,
    initial_quote_amount: int,
    current_price: int,
    base_decimals: int,
) -> HoldComparison:
    """LP 포지션 가치와 초기 토큰을 그냥 보유했을 때의 가치 비교

    Args:
        position_value: 현재 포지션 가치 (quote 최소 단위)
        initial_base_amount: 오픈 시 base 수량
        initial_quote_amount: 오픈 시 quote 수량
        current_price: 현재 가격 (quote 최소 단위)
        base_decimals: base 토큰 소수점 자릿수
    """
    hold_value = initial_quote_amount + initial_base_amount * current_price // 10 ** base_decimals
    advantage = position_value - hold_value
    return HoldComparison(
        position_value=position_value,
        hold_value=hold_value,
        advantage=advantage,
        advantage_percent=calculate_pnl(position_value, hold_value).pnl_percent,
    )


def _position_state_at_tick(
    snapshot: PositionSnapshot,
    breakdown: PnlBreakdown,
    tick: int,
    current_tick: int,
) -> PositionState:
    amount0, amount1 = get_token_amounts_from_liquidity(
        snapshot.liquidity, tick, snapshot.tick_lower, snapshot.tick_upper
    )
    if snapshot.base_is_token0:
        base_amount, quote_amount = amount0, amount1
    else:
        base_amount, quote_amount = amount1, amount0

    pool_price = tick_to_base_price(tick, snapshot.base_is_token0, snapshot.base_decimals)
    position_value = value_at(snapshot, pool_price, tick)

    # 미수령 수수료는 현재 틱에서만 존재
    unclaimed_fees = breakdown.unclaimed_fees if tick == current_tick else 0
    pnl_excluding_fees = (
        position_value - breakdown.cost_basis + breakdown.realized_pnl + breakdown.collected_fees
    )

    return PositionState(
        tick=tick,
        base_amount=base_amount,
        quote_amount=quote_amount,
        pool_price=pool_price,
        position_value=position_value,
        pnl_including_fees=pnl_excluding_fees + unclaimed_fees,
        pnl_excluding_fees=pnl_excluding_fees,
    )


def calculate_position_states(
    snapshot: PositionSnapshot,
    current_tick: int,
    breakdown: Optional[PnlBreakdown] = None,
) -> PositionStates:
    """하한 틱, 현재 틱, 상한 틱에서의 포지션 상태

    breakdown이 없으면 initial_value를 cost basis로 사용합니다.
    """
    if breakdown is None:
        breakdown = PnlBreakdown(cost_basis=snapshot.initial_value)

    return PositionStates(
        lower_range=_position_state_at_tick(snapshot, breakdown, snapshot.tick_lower, current_tick),
        current=_position_state_at_tick(snapshot, breakdown, current_tick, current_tick),
        upper_range=_position_state_at_tick(snapshot, breakdown, snapshot.tick_upper, current_tick),
    )

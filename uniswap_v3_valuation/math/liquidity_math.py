"""
Liquidity Math - 유동성 계산

Uniswap V3의 집중화된 유동성(Concentrated Liquidity) 계산.
특정 가격 범위에서의 토큰 수량과 유동성 간의 변환, 그리고
quote 토큰 기준 포지션 가치 계산.

References:
- Uniswap V3 Core: contracts/libraries/SqrtPriceMath.sol
- Uniswap V3 Periphery: contracts/libraries/LiquidityAmounts.sol
- 백서 Section 6.2.1: Concentrated Liquidity

핵심 공식:
    Δx = L * (√P_b - √P_a) / (√P_a * √P_b)   # token0
    Δy = L * (√P_b - √P_a)                   # token1
"""

from typing import NamedTuple

from ..constants import Q96, Q192, MIN_TICK, MAX_TICK
from ..exceptions import InvalidLiquidity, InvalidRange, InvalidPrice, InvalidSqrtRatio, InvalidTick
from .full_math import mul_div, mul_div_rounding_up, div_rounding_up, check_uint
from .tick_math import get_sqrt_ratio_at_tick


class TokenAmounts(NamedTuple):
    """포지션이 보유한 토큰 수량 (최소 단위)"""
    amount0: int
    amount1: int


def validate_liquidity(liquidity: int) -> int:
    """유동성은 0 이상의 uint128

    Raises:
        InvalidLiquidity: 음수인 경우
        Overflow: uint128을 초과하는 경우
    """
    if liquidity < 0:
        raise InvalidLiquidity(f"유동성은 0 이상이어야 합니다: {liquidity}")
    return check_uint(liquidity, 128, "liquidity")


def validate_tick_range(tick_lower: int, tick_upper: int) -> None:
    """tick_lower < tick_upper 확인

    Raises:
        InvalidRange: tick_lower >= tick_upper
    """
    if tick_lower >= tick_upper:
        raise InvalidRange(f"tick_lower는 tick_upper보다 작아야 합니다: {tick_lower} >= {tick_upper}")


def get_amount0_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = False
) -> int:
    """두 가격 사이에서 유동성에 해당하는 token0 양

    공식: Δx = L * 2^96 * (√P_b - √P_a) / √P_b / √P_a

    Args:
        sqrt_ratio_a_x96: 하한 sqrtPriceX96
        sqrt_ratio_b_x96: 상한 sqrtPriceX96
        liquidity: 유동성
        round_up: True면 올림, False면 내림

    Returns:
        amount0 (token0 수량, 최소 단위)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_a_x96 <= 0:
        raise InvalidSqrtRatio(f"sqrtPriceX96은 양수여야 합니다: {sqrt_ratio_a_x96}")

    numerator1 = liquidity << 96
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return div_rounding_up(
            mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96),
            sqrt_ratio_a_x96
        )
    return mul_div(numerator1, numerator2, sqrt_ratio_b_x96) // sqrt_ratio_a_x96


def get_amount1_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = False
) -> int:
    """두 가격 사이에서 유동성에 해당하는 token1 양

    공식: Δy = L * (√P_b - √P_a) / 2^96
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
    return mul_div(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)


def get_amounts_for_liquidity(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = False
) -> TokenAmounts:
    """현재 sqrtPrice, 범위, 유동성에서 토큰 수량 계산 (LiquidityAmounts)

    Returns:
        TokenAmounts(amount0, amount1)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_x96 <= sqrt_ratio_a_x96:
        # 가격이 범위 아래: token0만 보유
        return TokenAmounts(
            get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, round_up),
            0,
        )
    if sqrt_ratio_x96 < sqrt_ratio_b_x96:
        # 가격이 범위 내: 양쪽 토큰 보유
        return TokenAmounts(
            get_amount0_delta(sqrt_ratio_x96, sqrt_ratio_b_x96, liquidity, round_up),
            get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_x96, liquidity, round_up),
        )
    # 가격이 범위 위: token1만 보유
    return TokenAmounts(
        0,
        get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, round_up),
    )


def get_token_amounts_from_liquidity(
    liquidity: int,
    tick: int,
    tick_lower: int,
    tick_upper: int,
    round_up: bool = False
) -> TokenAmounts:
    """가상(what-if) 틱에서 포지션이 보유한 토큰 수량

    세 구간 공식:
        tick <= tick_lower: 전부 token0
        tick >= tick_upper: 전부 token1
        그 외: 틱의 sqrtRatio에서 분할

    Args:
        liquidity: 포지션 유동성
        tick: 평가할 틱
        tick_lower: 하한 틱
        tick_upper: 상한 틱
        round_up: True면 올림

    Returns:
        TokenAmounts(amount0, amount1)

    Raises:
        InvalidLiquidity: 유동성이 음수
        InvalidRange: tick_lower >= tick_upper
        InvalidTick: 틱이 범위를 벗어남
    """
    validate_liquidity(liquidity)
    validate_tick_range(tick_lower, tick_upper)
    if tick < MIN_TICK or tick > MAX_TICK:
        raise InvalidTick(f"틱이 유효 범위를 벗어났습니다: {tick}")

    sqrt_lower = get_sqrt_ratio_at_tick(tick_lower)
    sqrt_upper = get_sqrt_ratio_at_tick(tick_upper)

    if liquidity == 0:
        return TokenAmounts(0, 0)

    if tick <= tick_lower:
        return TokenAmounts(get_amount0_delta(sqrt_lower, sqrt_upper, liquidity, round_up), 0)
    if tick >= tick_upper:
        return TokenAmounts(0, get_amount1_delta(sqrt_lower, sqrt_upper, liquidity, round_up))

    sqrt_current = get_sqrt_ratio_at_tick(tick)
    return TokenAmounts(
        get_amount0_delta(sqrt_current, sqrt_upper, liquidity, round_up),
        get_amount1_delta(sqrt_lower, sqrt_current, liquidity, round_up),
    )


def get_token_amounts_at_sqrt_price(
    liquidity: int,
    sqrt_price_x96: int,
    tick_lower: int,
    tick_upper: int,
    round_up: bool = False
) -> TokenAmounts:
    """풀의 실제 slot0.sqrtPriceX96에서 포지션이 보유한 토큰 수량

    현재 풀 상태 기준 계산에 사용합니다. 틱으로 반올림하지 않으므로
    get_token_amounts_from_liquidity보다 정밀합니다.
    """
    validate_liquidity(liquidity)
    validate_tick_range(tick_lower, tick_upper)
    if sqrt_price_x96 <= 0:
        raise InvalidSqrtRatio(f"sqrtPriceX96은 양수여야 합니다: {sqrt_price_x96}")

    return get_amounts_for_liquidity(
        sqrt_price_x96,
        get_sqrt_ratio_at_tick(tick_lower),
        get_sqrt_ratio_at_tick(tick_upper),
        liquidity,
        round_up,
    )


def get_liquidity_for_amount0(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int
) -> int:
    """amount0에서 유동성 계산

    공식: L = Δx * √P_a * √P_b / (√P_b - √P_a)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_b_x96 <= sqrt_ratio_a_x96 or amount0 <= 0:
        return 0

    intermediate = mul_div(sqrt_ratio_a_x96, sqrt_ratio_b_x96, Q96)
    return mul_div(amount0, intermediate, sqrt_ratio_b_x96 - sqrt_ratio_a_x96)


def get_liquidity_for_amount1(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount1: int
) -> int:
    """amount1에서 유동성 계산

    공식: L = Δy / (√P_b - √P_a)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_b_x96 <= sqrt_ratio_a_x96 or amount1 <= 0:
        return 0

    return mul_div(amount1, Q96, sqrt_ratio_b_x96 - sqrt_ratio_a_x96)


def get_liquidity_for_amounts(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int,
    amount1: int
) -> int:
    """토큰 수량에서 민트 가능한 최대 유동성 계산

    Returns:
        유동성 (범위 내라면 두 제약 조건 중 작은 값)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_x96 <= sqrt_ratio_a_x96:
        return get_liquidity_for_amount0(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount0)
    if sqrt_ratio_x96 < sqrt_ratio_b_x96:
        liquidity0 = get_liquidity_for_amount0(sqrt_ratio_x96, sqrt_ratio_b_x96, amount0)
        liquidity1 = get_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_ratio_x96, amount1)
        return min(liquidity0, liquidity1)
    return get_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount1)


def get_liquidity_from_investment(
    base_amount: int,
    quote_amount: int,
    base_is_token0: bool,
    sqrt_price_x96: int,
    tick_lower: int,
    tick_upper: int
) -> int:
    """투자 금액(base + quote)으로 얻을 수 있는 최대 유동성

    두 토큰을 현재 가격으로 quote 단위 총 예산으로 합친 뒤,
    범위 위치에 맞게 필요한 토큰으로 환산하여 유동성을 계산합니다.

    Args:
        base_amount: base 토큰 수량 (최소 단위)
        quote_amount: quote 토큰 수량 (최소 단위)
        base_is_token0: base 토큰이 token0인지
        sqrt_price_x96: 현재 slot0.sqrtPriceX96
        tick_lower: 하한 틱
        tick_upper: 상한 틱

    Returns:
        유동성
    """
    validate_tick_range(tick_lower, tick_upper)
    if base_amount < 0 or quote_amount < 0:
        raise InvalidLiquidity(f"투자 수량은 0 이상이어야 합니다: base={base_amount}, quote={quote_amount}")
    if base_amount == 0 and quote_amount == 0:
        return 0
    if sqrt_price_x96 <= 0:
        raise InvalidSqrtRatio(f"sqrtPriceX96은 양수여야 합니다: {sqrt_price_x96}")

    sqrt_lower = get_sqrt_ratio_at_tick(tick_lower)
    sqrt_upper = get_sqrt_ratio_at_tick(tick_upper)
    s = sqrt_price_x96
    s_squared = s * s

    # base를 현재 가격으로 quote 단위로 환산
    if base_is_token0:
        budget = quote_amount + base_amount * s_squared // Q192
    else:
        budget = quote_amount + base_amount * Q192 // s_squared

    if s <= sqrt_lower:
        # 범위 아래: token0만 필요
        amount0 = budget * Q192 // s_squared if base_is_token0 else budget
        return get_liquidity_for_amount0(sqrt_lower, sqrt_upper, amount0)

    if s >= sqrt_upper:
        # 범위 위: token1만 필요
        amount1 = budget if base_is_token0 else budget * s_squared // Q192
        return get_liquidity_for_amount1(sqrt_lower, sqrt_upper, amount1)

    # 범위 내: L = budget * Q96 / K, K = 유동성 1단위당 quote 가치 (Q96)
    if base_is_token0:
        k_x96 = (s - sqrt_lower) + s * (sqrt_upper - s) // sqrt_upper
    else:
        k_x96 = (
            Q192 * (sqrt_upper - s) // (sqrt_upper * s)
            + Q192 * (s - sqrt_lower) // s_squared
        )
    if k_x96 <= 0:
        return 0
    return budget * Q96 // k_x96


def calculate_position_value(
    liquidity: int,
    tick: int,
    tick_lower: int,
    tick_upper: int,
    price: int,
    base_is_token0: bool,
    base_decimals: int
) -> int:
    """틱과 가격에서 포지션 가치 계산 (quote 최소 단위)

    value = quote_amount + base_amount * price / 10^base_decimals

    Args:
        liquidity: 포지션 유동성
        tick: 평가할 틱
        tick_lower: 하한 틱
        tick_upper: 상한 틱
        price: 가격 (quote per base, quote 최소 단위)
        base_is_token0: base 토큰이 token0인지
        base_decimals: base 토큰 소수점 자릿수

    Returns:
        포지션 가치 (quote 최소 단위, 정수)
    """
    if price <= 0:
        raise InvalidPrice(f"가격은 양수여야 합니다: {price}")

    amount0, amount1 = get_token_amounts_from_liquidity(liquidity, tick, tick_lower, tick_upper)

    if base_is_token0:
        base_amount, quote_amount = amount0, amount1
    else:
        base_amount, quote_amount = amount1, amount0

    return quote_amount + base_amount * price // 10 ** base_decimals

"""
Price Math - Tick/sqrtPriceX96 ↔ quote-per-base 가격 변환

Uniswap V3 가격은 항상 token1/token0 기준으로 정의되지만, 사용자에게 보이는
가격은 base/quote 기준(quote per base)입니다. 이 모듈은 주소 순서로
token0/token1을 결정하고, 소수점 조정을 정수 연산 안에서 처리합니다.

가격 표현:
    price(int) = quote per 1 base, quote 토큰 최소 단위 (10^quote_decimals 스케일)

핵심 공식:
    base = token0: price = sqrtPriceX96^2 * 10^base_decimals / 2^192
    base = token1: price = 2^192 * 10^base_decimals / sqrtPriceX96^2
"""

import math

from ..constants import Q192
from ..exceptions import ValuationError, InvalidPrice
from .tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio, round_tick_to_spacing


def is_token0(token_address: str, other_address: str) -> bool:
    """token_address가 token0인지 (주소의 숫자 값이 더 작은지) 확인

    Raises:
        ValuationError: 두 주소가 같은 경우
    """
    a = int(token_address, 16)
    b = int(other_address, 16)
    if a == b:
        raise ValuationError(f"base와 quote 토큰 주소가 같습니다: {token_address}")
    return a < b


def encode_sqrt_ratio_x96(amount1: int, amount0: int) -> int:
    """amount1/amount0 비율을 sqrtPriceX96으로 인코딩

    sqrtPriceX96 = floor(sqrt(amount1 * 2^192 / amount0))

    Raises:
        InvalidPrice: 수량이 0 이하인 경우
    """
    if amount0 <= 0 or amount1 <= 0:
        raise InvalidPrice(f"비율을 구성하는 수량은 양수여야 합니다: {amount1}/{amount0}")
    return math.isqrt((amount1 << 192) // amount0)


def price_to_sqrt_ratio_x96(price: int, base_is_token0: bool, base_decimals: int) -> int:
    """quote-per-base 가격을 sqrtPriceX96으로 변환

    Args:
        price: 가격 (quote 최소 단위)
        base_is_token0: base 토큰이 token0인지
        base_decimals: base 토큰 소수점 자릿수

    Returns:
        sqrtPriceX96

    Raises:
        InvalidPrice: 가격이 0 이하인 경우
    """
    if price <= 0:
        raise InvalidPrice(f"가격은 양수여야 합니다: {price}")

    one_base = 10 ** base_decimals
    if base_is_token0:
        # token1/token0 = price / 1 base
        return encode_sqrt_ratio_x96(price, one_base)
    # token1/token0 = 1 base / price
    return encode_sqrt_ratio_x96(one_base, price)


def sqrt_ratio_x96_to_token1_per_token0(sqrt_price_x96: int, token0_decimals: int) -> int:
    """token0 1개의 가격 (token1 최소 단위)"""
    return (sqrt_price_x96 * sqrt_price_x96 * 10 ** token0_decimals) // Q192


def sqrt_ratio_x96_to_token0_per_token1(sqrt_price_x96: int, token1_decimals: int) -> int:
    """token1 1개의 가격 (token0 최소 단위)"""
    return (Q192 * 10 ** token1_decimals) // (sqrt_price_x96 * sqrt_price_x96)


def sqrt_ratio_x96_to_base_price(sqrt_price_x96: int, base_is_token0: bool, base_decimals: int) -> int:
    """sqrtPriceX96을 quote-per-base 가격(quote 최소 단위)으로 변환"""
    if base_is_token0:
        return sqrt_ratio_x96_to_token1_per_token0(sqrt_price_x96, base_decimals)
    return sqrt_ratio_x96_to_token0_per_token1(sqrt_price_x96, base_decimals)


def tick_to_base_price(tick: int, base_is_token0: bool, base_decimals: int) -> int:
    """틱을 quote-per-base 가격으로 변환 (token 순서를 직접 지정)

    Args:
        tick: 틱 인덱스
        base_is_token0: base 토큰이 token0인지
        base_decimals: base 토큰 소수점 자릿수

    Returns:
        가격 (quote 최소 단위, 정수)
    """
    return sqrt_ratio_x96_to_base_price(get_sqrt_ratio_at_tick(tick), base_is_token0, base_decimals)


def tick_to_price(
    tick: int,
    base_token_address: str,
    quote_token_address: str,
    base_decimals: int
) -> int:
    """틱을 human 가격(quote per base)으로 변환

    주소 비교로 token0/token1 순서를 결정하고, 필요하면 역수를 취합니다.
    부동소수점 변환은 하지 않습니다.

    Args:
        tick: 틱 인덱스
        base_token_address: base 토큰 주소
        quote_token_address: quote 토큰 주소
        base_decimals: base 토큰 소수점 자릿수

    Returns:
        가격 (quote 최소 단위, 10^quote_decimals 스케일)

    Example:
        >>> tick_to_price(-192593, WETH, USDC, 18)  # Arbitrum WETH(token0)/USDC
        4327...  # ≈ 4327.48 USDC
    """
    base_is_token0 = is_token0(base_token_address, quote_token_address)
    return tick_to_base_price(tick, base_is_token0, base_decimals)


def get_closest_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """sqrtPriceX96에 가장 가까운 틱

    get_tick_at_sqrt_ratio는 내림(floor) 틱을 주므로,
    floor 틱과 floor+1 틱의 sqrtRatio 중 입력에 더 가까운 쪽을 선택합니다.
    같은 거리면 floor 틱.
    """
    # sqrt_price_x96 < MAX_SQRT_RATIO 이므로 tick_floor + 1 <= MAX_TICK
    tick_floor = get_tick_at_sqrt_ratio(sqrt_price_x96)

    d_floor = sqrt_price_x96 - get_sqrt_ratio_at_tick(tick_floor)
    d_next = get_sqrt_ratio_at_tick(tick_floor + 1) - sqrt_price_x96
    return tick_floor if d_floor <= d_next else tick_floor + 1


def price_to_base_tick(
    price: int,
    tick_spacing: int,
    base_is_token0: bool,
    base_decimals: int
) -> int:
    """quote-per-base 가격을 사용 가능한 틱으로 변환 (token 순서를 직접 지정)

    가장 가까운 틱을 구한 뒤 tick_spacing의 가장 가까운 배수로 스냅합니다.

    Raises:
        InvalidPrice: 가격이 0 이하인 경우
        InvalidSqrtRatio: 가격이 표현 가능한 범위를 벗어난 경우
    """
    sqrt_price_x96 = price_to_sqrt_ratio_x96(price, base_is_token0, base_decimals)
    tick = get_closest_tick_at_sqrt_ratio(sqrt_price_x96)
    return round_tick_to_spacing(tick, tick_spacing)


def price_to_tick(
    price: int,
    tick_spacing: int,
    base_token_address: str,
    quote_token_address: str,
    base_decimals: int
) -> int:
    """Human 가격(quote per base)을 틱으로 변환

    tick_to_price의 역함수. 결과는 tick_spacing의 배수로 스냅됩니다.

    Args:
        price: 가격 (quote 최소 단위)
        tick_spacing: 틱 간격 (예: 60 for 0.3% fee)
        base_token_address: base 토큰 주소
        quote_token_address: quote 토큰 주소
        base_decimals: base 토큰 소수점 자릿수

    Returns:
        tick_spacing의 배수인 틱

    Raises:
        InvalidPrice: 가격이 0 이하인 경우
    """
    base_is_token0 = is_token0(base_token_address, quote_token_address)
    return price_to_base_tick(price, tick_spacing, base_is_token0, base_decimals)


def to_display_float(amount: int, decimals: int) -> float:
    """최소 단위 정수를 표시용 float로 변환 (표시 단계에서만 사용)"""
    return amount / 10 ** decimals


def sqrt_ratio_x96_to_float_price(sqrt_price_x96: int, token0_decimals: int, token1_decimals: int) -> float:
    """sqrtPriceX96 → token1 per token0 (사람 단위 float, 표시용)"""
    ratio = (sqrt_price_x96 / 2 ** 96) ** 2
    return ratio * 10 ** (token0_decimals - token1_decimals)

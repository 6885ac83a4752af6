"""
Math layer for the valuation engine

온체인 수준 정밀도의 수학 함수들 (정수 연산만 사용):
- full_math: mul_div, 올림 나눗셈, uint 폭 검사
- tick_math: Tick ↔ sqrtPriceX96 변환
- price_math: Tick/sqrtPriceX96 ↔ quote-per-base 가격 변환
- liquidity_math: 유동성 ↔ 토큰 수량, 포지션 가치
"""

from .full_math import (
    mul_div,
    mul_div_rounding_up,
    div_rounding_up,
    check_uint,
)
from .tick_math import (
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    tick_to_sqrt_ratio_x96,
    sqrt_ratio_x96_to_tick,
    round_tick_to_spacing,
    get_tick_spacing_for_fee,
)
from .price_math import (
    is_token0,
    encode_sqrt_ratio_x96,
    price_to_sqrt_ratio_x96,
    tick_to_price,
    price_to_tick,
    tick_to_base_price,
    price_to_base_tick,
    sqrt_ratio_x96_to_float_price,
    to_display_float,
)
from .liquidity_math import (
    TokenAmounts,
    get_amount0_delta,
    get_amount1_delta,
    get_amounts_for_liquidity,
    get_token_amounts_from_liquidity,
    get_token_amounts_at_sqrt_price,
    get_liquidity_for_amount0,
    get_liquidity_for_amount1,
    get_liquidity_for_amounts,
    get_liquidity_from_investment,
    calculate_position_value,
)

"""
Tick Math - Tick ↔ sqrtPriceX96 변환

Uniswap V3의 틱 수학 함수들. 온체인 컨트랙트와 비트 단위로 동일한 결과를 냅니다.

References:
- Uniswap V3 Core: contracts/libraries/TickMath.sol
- 백서 Section 6.1: Ticks and Tick Spacing

핵심 공식:
    price = 1.0001^tick
    sqrtPriceX96 = sqrt(price) * 2^96
"""

from ..constants import (
    MIN_TICK,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MAX_SQRT_RATIO,
    TICK_SPACINGS,
    UINT256_MAX,
)
from ..exceptions import ValuationError, InvalidTick, InvalidSqrtRatio, InvalidRange


# |tick|의 각 비트에 대응하는 1/sqrt(1.0001)^(2^i) 값 (Q128.128)
_TICK_BIT_RATIOS = (
    (0x2, 0xfff97272373d413259a46990580e213a),
    (0x4, 0xfff2e50f5f656932ef12357cf3c7fdcc),
    (0x8, 0xffe5caca7e10e4e61c3624eaa0941cd0),
    (0x10, 0xffcb9843d60f6159c9db58835c926644),
    (0x20, 0xff973b41fa98c081472e6896dfb254c0),
    (0x40, 0xff2ea16466c96a3843ec78b326b52861),
    (0x80, 0xfe5dee046a99a2a811c461f1969c3053),
    (0x100, 0xfcbe86c7900a88aedcffc83b479aa3a4),
    (0x200, 0xf987a7253ac413176f2b074cf7815e54),
    (0x400, 0xf3392b0822b70005940c7a398e4b70f3),
    (0x800, 0xe7159475a2c29b7443b29c7fa6e889d9),
    (0x1000, 0xd097f3bdfd2022b8845ad8f792aa5825),
    (0x2000, 0xa9f746462d870fdf8a65dc1f90e061e5),
    (0x4000, 0x70d869a156d2a1b890bb3df62baf32f7),
    (0x8000, 0x31be135f97d08fd981231505542fcfa6),
    (0x10000, 0x9aa508b5b7a84e1c677de54f3e99bc9),
    (0x20000, 0x5d6af8dedb81196699c329225ee604),
    (0x40000, 0x2216e584f5fa1ea926041bedfe98),
    (0x80000, 0x48a170391f7dc42444e8fa2),
)

# 최상위 비트 탐색 단계: (shift, threshold)
_MSB_STEPS = (
    (7, 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF),
    (6, 0xFFFFFFFFFFFFFFFF),
    (5, 0xFFFFFFFF),
    (4, 0xFFFF),
    (3, 0xFF),
    (2, 0xF),
    (1, 0x3),
)

# log_sqrt(1.0001)(2) (Q128) 및 틱 오차 보정 상수
_LOG_SQRT10001_MULTIPLIER = 255738958999603826347141
_TICK_LOW_OFFSET = 3402992956809132418596140100660247210
_TICK_HIGH_OFFSET = 291339464771989622907027621153398088495


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """틱에서 sqrtPriceX96 계산

    Solidity TickMath.getSqrtRatioAtTick()과 동일한 구현.
    |tick|의 비트마다 조건부 곱셈 후, 양수 틱이면 역수를 취하고
    Q128.128 -> Q64.96으로 올림 시프트합니다.

    Args:
        tick: 틱 인덱스 (-887272 ~ 887272)

    Returns:
        sqrtPriceX96 (Q64.96 형식, uint160 범위)

    Raises:
        InvalidTick: 틱이 유효 범위를 벗어난 경우
    """
    if tick < MIN_TICK or tick > MAX_TICK:
        raise InvalidTick(f"틱이 유효 범위를 벗어났습니다: {tick} (범위: {MIN_TICK} ~ {MAX_TICK})")

    abs_tick = abs(tick)

    ratio = 0xfffcb933bd6fad37aa2d162d1a594001 if abs_tick & 0x1 else 0x100000000000000000000000000000000
    for bit, multiplier in _TICK_BIT_RATIOS:
        if abs_tick & bit:
            ratio = (ratio * multiplier) >> 128

    if tick > 0:
        ratio = UINT256_MAX // ratio

    # Q128.128 -> Q64.96 (올림)
    return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """sqrtPriceX96에서 틱 계산

    Solidity TickMath.getTickAtSqrtRatio()과 동일한 구현.
    이진 로그로 후보 틱을 추정한 뒤, sqrtRatio가 입력을 넘지 않는
    가장 큰 틱을 선택합니다.

    Args:
        sqrt_price_x96: sqrtPriceX96 (Q64.96 형식)

    Returns:
        get_sqrt_ratio_at_tick(tick) <= sqrt_price_x96 인 최대 틱

    Raises:
        InvalidSqrtRatio: sqrtPriceX96이 유효 범위를 벗어난 경우
    """
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
        raise InvalidSqrtRatio(
            f"sqrtPriceX96이 유효 범위를 벗어났습니다: {sqrt_price_x96} "
            f"(범위: {MIN_SQRT_RATIO} ~ {MAX_SQRT_RATIO - 1})"
        )

    ratio = sqrt_price_x96 << 32

    # 최상위 비트 찾기
    r = ratio
    msb = 0
    for shift, threshold in _MSB_STEPS:
        f = (1 if r > threshold else 0) << shift
        msb |= f
        r >>= f
    msb |= 1 if r > 0x1 else 0

    if msb >= 128:
        r = ratio >> (msb - 127)
    else:
        r = ratio << (127 - msb)

    log_2 = (msb - 128) << 64

    # 소수부 14비트
    for i in range(14):
        r = (r * r) >> 127
        f = r >> 128
        log_2 |= f << (63 - i)
        r >>= f

    log_sqrt10001 = log_2 * _LOG_SQRT10001_MULTIPLIER

    tick_low = (log_sqrt10001 - _TICK_LOW_OFFSET) >> 128
    tick_high = (log_sqrt10001 + _TICK_HIGH_OFFSET) >> 128

    if tick_low == tick_high:
        return tick_low
    if get_sqrt_ratio_at_tick(tick_high) <= sqrt_price_x96:
        return tick_high
    return tick_low


# 외부 호출 측 명명 규칙용 별칭
tick_to_sqrt_ratio_x96 = get_sqrt_ratio_at_tick
sqrt_ratio_x96_to_tick = get_tick_at_sqrt_ratio


def round_tick_to_spacing(tick: int, tick_spacing: int) -> int:
    """틱을 가장 가까운 유효 틱으로 반올림 (nearestUsableTick)

    정확히 중간이면 큰 쪽(upper)을 선택하고,
    결과는 [MIN_TICK, MAX_TICK] 안의 사용 가능한 틱으로 제한합니다.

    Args:
        tick: 반올림할 틱
        tick_spacing: 틱 간격 (예: 60 for 0.3% fee)

    Returns:
        tick_spacing의 배수인 가장 가까운 틱
    """
    if tick_spacing <= 0:
        raise InvalidRange(f"틱 간격은 양수여야 합니다: {tick_spacing}")
    if tick < MIN_TICK or tick > MAX_TICK:
        raise InvalidTick(f"틱이 유효 범위를 벗어났습니다: {tick}")

    lower = (tick // tick_spacing) * tick_spacing
    upper = lower + tick_spacing
    rounded = upper if tick - lower >= upper - tick else lower

    if rounded < MIN_TICK:
        return rounded + tick_spacing
    if rounded > MAX_TICK:
        return rounded - tick_spacing
    return rounded


def get_tick_spacing_for_fee(fee_tier: int) -> int:
    """수수료 티어에 해당하는 틱 간격 반환

    Args:
        fee_tier: 수수료 티어 (100, 500, 3000, 10000)

    Returns:
        틱 간격

    Raises:
        ValuationError: 지원하지 않는 수수료 티어
    """
    if fee_tier not in TICK_SPACINGS:
        raise ValuationError(f"지원하지 않는 수수료 티어: {fee_tier}")
    return TICK_SPACINGS[fee_tier]

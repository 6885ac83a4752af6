"""
Full Math - 512비트 중간값 곱셈/나눗셈

Python int는 임의 정밀도이므로 중간값 오버플로우는 없지만,
온체인 FullMath와 동일하게 결과가 uint256을 넘으면 실패합니다.

References:
- Uniswap V3 Core: contracts/libraries/FullMath.sol
- Uniswap V3 Core: contracts/libraries/UnsafeMath.sol
"""

from ..constants import UINT256_MAX
from ..exceptions import Overflow


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator)

    Raises:
        Overflow: denominator가 0이거나 결과가 uint256을 초과하는 경우
    """
    if denominator <= 0:
        raise Overflow(f"분모는 양수여야 합니다: {denominator}")

    result = (a * b) // denominator
    if result > UINT256_MAX:
        raise Overflow(f"mul_div 결과가 uint256을 초과합니다: {a} * {b} / {denominator}")
    return result


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """(a * b) / denominator 올림"""
    result = mul_div(a, b, denominator)
    if (a * b) % denominator > 0:
        if result == UINT256_MAX:
            raise Overflow("mul_div_rounding_up 결과가 uint256을 초과합니다")
        result += 1
    return result


def div_rounding_up(numerator: int, denominator: int) -> int:
    """numerator / denominator 올림"""
    if denominator <= 0:
        raise Overflow(f"분모는 양수여야 합니다: {denominator}")
    result = numerator // denominator
    if numerator % denominator > 0:
        result += 1
    return result


def check_uint(value: int, bits: int, name: str = "value") -> int:
    """value가 uint{bits} 범위에 들어가는지 확인

    Raises:
        Overflow: 음수이거나 bits 폭을 넘는 경우
    """
    if value < 0 or value.bit_length() > bits:
        raise Overflow(f"{name}이(가) uint{bits} 범위를 벗어났습니다: {value}")
    return value

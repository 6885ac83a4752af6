"""
Full Math 테스트
"""

import pytest

from ..constants import UINT256_MAX, Q96
from ..exceptions import Overflow
from ..math.full_math import mul_div, mul_div_rounding_up, div_rounding_up, check_uint


class TestMulDiv:
    """mul_div / mul_div_rounding_up 테스트"""

    def test_exact(self):
        assert mul_div(Q96, 3, Q96) == 3

    def test_floor(self):
        assert mul_div(7, 3, 2) == 10

    def test_rounding_up(self):
        assert mul_div_rounding_up(7, 3, 2) == 11
        assert mul_div_rounding_up(6, 3, 2) == 9

    def test_large_intermediate(self):
        """중간값이 uint256을 넘어도 결과가 범위 안이면 성공"""
        assert mul_div(UINT256_MAX, UINT256_MAX, UINT256_MAX) == UINT256_MAX

    def test_result_overflow(self):
        with pytest.raises(Overflow):
            mul_div(UINT256_MAX, 2, 1)

    def test_rounding_up_overflow(self):
        """UINT256_MAX에서 올림하면 실패"""
        with pytest.raises(Overflow):
            mul_div_rounding_up(UINT256_MAX, UINT256_MAX - 1, UINT256_MAX - 2)

    def test_zero_denominator(self):
        with pytest.raises(Overflow):
            mul_div(1, 1, 0)


class TestDivRoundingUp:

    def test_exact(self):
        assert div_rounding_up(10, 5) == 2

    def test_remainder(self):
        assert div_rounding_up(11, 5) == 3

    def test_zero_denominator(self):
        with pytest.raises(Overflow):
            div_rounding_up(1, 0)


class TestCheckUint:
    """uint 폭 검사"""

    def test_within_range(self):
        assert check_uint(2 ** 128 - 1, 128) == 2 ** 128 - 1

    def test_too_wide(self):
        with pytest.raises(Overflow):
            check_uint(2 ** 128, 128)

    def test_negative(self):
        with pytest.raises(Overflow):
            check_uint(-1, 160)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Tick Math 테스트

tick_math.py의 함수들을 테스트합니다.
온체인 TickMath 값과 비교하여 정확도를 검증합니다.
"""

import pytest

from ..constants import MIN_TICK, MAX_TICK, MIN_SQRT_RATIO, MAX_SQRT_RATIO, Q96
from ..exceptions import InvalidTick, InvalidSqrtRatio, InvalidRange, ValuationError
from ..math.tick_math import (
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    tick_to_sqrt_ratio_x96,
    sqrt_ratio_x96_to_tick,
    round_tick_to_spacing,
    get_tick_spacing_for_fee,
)


class TestGetSqrtRatioAtTick:
    """get_sqrt_ratio_at_tick 테스트"""

    def test_min_tick(self):
        """최소 틱에서의 sqrtPrice"""
        assert get_sqrt_ratio_at_tick(MIN_TICK) == MIN_SQRT_RATIO

    def test_max_tick(self):
        """최대 틱에서의 sqrtPrice"""
        assert get_sqrt_ratio_at_tick(MAX_TICK) == MAX_SQRT_RATIO

    def test_tick_0(self):
        """틱 0에서의 sqrtPrice는 정확히 2^96"""
        assert get_sqrt_ratio_at_tick(0) == Q96

    def test_arbitrum_weth_usdc_tick(self):
        """온체인 값과 비트 단위로 일치 (Arbitrum WETH/USDC)"""
        assert get_sqrt_ratio_at_tick(-192593) == 5211915345268226134615181

    def test_monotonic(self):
        """틱이 커지면 sqrtPrice도 커짐"""
        ticks = [MIN_TICK, -500000, -192593, -1, 0, 1, 60, 200000, MAX_TICK]
        ratios = [get_sqrt_ratio_at_tick(t) for t in ticks]
        assert ratios == sorted(ratios)
        assert len(set(ratios)) == len(ratios)

    def test_invalid_tick_too_low(self):
        """유효 범위를 벗어난 틱 (너무 낮음)"""
        with pytest.raises(InvalidTick):
            get_sqrt_ratio_at_tick(MIN_TICK - 1)

    def test_invalid_tick_too_high(self):
        """유효 범위를 벗어난 틱 (너무 높음)"""
        with pytest.raises(ValueError):
            get_sqrt_ratio_at_tick(MAX_TICK + 1)

    def test_alias(self):
        assert tick_to_sqrt_ratio_x96(-192593) == get_sqrt_ratio_at_tick(-192593)


class TestGetTickAtSqrtRatio:
    """get_tick_at_sqrt_ratio 테스트"""

    def test_min_sqrt_ratio(self):
        """최소 sqrtRatio에서의 틱"""
        assert get_tick_at_sqrt_ratio(MIN_SQRT_RATIO) == MIN_TICK

    def test_max_sqrt_ratio_minus_one(self):
        """MAX_SQRT_RATIO - 1은 MAX_TICK - 1"""
        assert get_tick_at_sqrt_ratio(MAX_SQRT_RATIO - 1) == MAX_TICK - 1

    def test_q96(self):
        """sqrtPrice 2^96에서의 틱"""
        assert get_tick_at_sqrt_ratio(Q96) == 0

    @pytest.mark.parametrize("tick", [MIN_TICK, -887000, -192593, -60, -1, 0, 1, 60, 192593, MAX_TICK - 1])
    def test_round_trip(self, tick):
        """tick → sqrtRatio → tick 왕복"""
        assert get_tick_at_sqrt_ratio(get_sqrt_ratio_at_tick(tick)) == tick

    def test_floor_between_ticks(self):
        """두 틱 사이 값은 아래 틱으로 내림"""
        ratio = get_sqrt_ratio_at_tick(100)
        assert get_tick_at_sqrt_ratio(ratio + 1) == 100
        assert get_tick_at_sqrt_ratio(ratio - 1) == 99

    def test_invalid_sqrt_ratio(self):
        """범위를 벗어난 sqrtRatio"""
        with pytest.raises(InvalidSqrtRatio):
            get_tick_at_sqrt_ratio(MIN_SQRT_RATIO - 1)
        with pytest.raises(InvalidSqrtRatio):
            get_tick_at_sqrt_ratio(MAX_SQRT_RATIO)

    def test_alias(self):
        assert sqrt_ratio_x96_to_tick(Q96) == 0


class TestRoundTickToSpacing:
    """round_tick_to_spacing 테스트"""

    def test_exact_multiple(self):
        """이미 배수인 틱은 그대로"""
        assert round_tick_to_spacing(120, 60) == 120
        assert round_tick_to_spacing(-120, 60) == -120

    def test_rounds_to_nearest(self):
        assert round_tick_to_spacing(29, 60) == 0
        assert round_tick_to_spacing(31, 60) == 60
        assert round_tick_to_spacing(-31, 60) == -60
        assert round_tick_to_spacing(-29, 60) == 0

    def test_tie_rounds_up(self):
        """정확히 중간이면 큰 쪽"""
        assert round_tick_to_spacing(30, 60) == 60
        assert round_tick_to_spacing(-30, 60) == 0

    def test_clamped_to_bounds(self):
        """결과는 사용 가능한 틱 범위 안"""
        assert round_tick_to_spacing(MAX_TICK, 60) <= MAX_TICK
        assert round_tick_to_spacing(MIN_TICK, 60) >= MIN_TICK
        assert round_tick_to_spacing(MAX_TICK, 60) % 60 == 0

    def test_invalid_spacing(self):
        with pytest.raises(InvalidRange):
            round_tick_to_spacing(100, 0)


class TestTickSpacingForFee:
    """get_tick_spacing_for_fee 테스트"""

    def test_known_tiers(self):
        assert get_tick_spacing_for_fee(100) == 1
        assert get_tick_spacing_for_fee(500) == 10
        assert get_tick_spacing_for_fee(3000) == 60
        assert get_tick_spacing_for_fee(10000) == 200

    def test_unknown_tier(self):
        with pytest.raises(ValuationError):
            get_tick_spacing_for_fee(2500)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

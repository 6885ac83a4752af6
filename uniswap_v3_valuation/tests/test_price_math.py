"""
Price Math 테스트

Tick ↔ quote-per-base 가격 변환과 token0/token1 순서 처리를 검증합니다.
"""

import pytest

from ..constants import Q96
from ..exceptions import InvalidPrice, ValuationError
from ..math.price_math import (
    is_token0,
    encode_sqrt_ratio_x96,
    price_to_sqrt_ratio_x96,
    tick_to_price,
    price_to_tick,
    tick_to_base_price,
    price_to_base_tick,
    get_closest_tick_at_sqrt_ratio,
    sqrt_ratio_x96_to_float_price,
    to_display_float,
)
from ..math.tick_math import get_sqrt_ratio_at_tick

# Arbitrum One
WETH = "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1"
USDC = "0xaf88d065e77c8cC2239327C5EDb3A432268e5831"


class TestTokenOrdering:
    """주소 기반 token0/token1 결정"""

    def test_weth_is_token0(self):
        """Arbitrum에서 WETH 주소가 USDC보다 작음"""
        assert is_token0(WETH, USDC) is True
        assert is_token0(USDC, WETH) is False

    def test_case_insensitive(self):
        assert is_token0(WETH.lower(), USDC.upper().replace("0X", "0x")) is True

    def test_same_address(self):
        with pytest.raises(ValuationError):
            is_token0(WETH, WETH)


class TestEncodeSqrtRatio:
    """encode_sqrt_ratio_x96 테스트"""

    def test_one_to_one(self):
        assert encode_sqrt_ratio_x96(1, 1) == Q96

    def test_hundred_to_one(self):
        assert encode_sqrt_ratio_x96(100, 1) == 10 * Q96

    def test_quarter(self):
        assert encode_sqrt_ratio_x96(1, 4) == Q96 // 2

    def test_invalid_amounts(self):
        with pytest.raises(InvalidPrice):
            encode_sqrt_ratio_x96(0, 1)
        with pytest.raises(InvalidPrice):
            encode_sqrt_ratio_x96(1, -1)


class TestTickToPrice:
    """tick_to_price 테스트"""

    def test_weth_usdc(self):
        """WETH/USDC 틱 -192593 ≈ 4327 USDC"""
        price = tick_to_price(-192593, WETH, USDC, 18)
        assert isinstance(price, int)
        assert 4_000 * 10 ** 6 <= price <= 5_000 * 10 ** 6
        assert 4327 * 10 ** 6 <= price < 4328 * 10 ** 6

    def test_usdc_weth_inverted(self):
        """base가 token1이면 역수 (USDC 1개 ≈ 0.000231 WETH)"""
        price = tick_to_price(-192593, USDC, WETH, 6)
        assert 10 ** 18 // 5_000 <= price <= 10 ** 18 // 4_000

    def test_inverse_consistency(self):
        """두 방향 가격의 곱은 약 1"""
        weth_price = tick_to_price(-192593, WETH, USDC, 18)
        usdc_price = tick_to_price(-192593, USDC, WETH, 6)
        product = to_display_float(weth_price, 6) * to_display_float(usdc_price, 18)
        assert abs(product - 1.0) < 1e-6

    def test_higher_tick_higher_price_when_base_is_token0(self):
        assert tick_to_base_price(-192000, True, 18) > tick_to_base_price(-192600, True, 18)

    def test_higher_tick_lower_price_when_base_is_token1(self):
        assert tick_to_base_price(-192000, False, 6) < tick_to_base_price(-192600, False, 6)


class TestPriceToTick:
    """price_to_tick 테스트 (tick_to_price의 역함수)"""

    @pytest.mark.parametrize("tick", [-192600, -192590, -192000, -200000])
    def test_exact_for_spacing_multiples(self, tick):
        """spacing 배수 틱은 정확히 왕복"""
        price = tick_to_price(tick, WETH, USDC, 18)
        assert price_to_tick(price, 10, WETH, USDC, 18) == tick

    @pytest.mark.parametrize("tick", [-192600, -192000])
    def test_exact_for_inverted_pair(self, tick):
        price = tick_to_price(tick, USDC, WETH, 6)
        assert price_to_tick(price, 10, USDC, WETH, 6) == tick

    def test_snaps_to_nearest_spacing(self):
        """-192593은 -192590으로 스냅"""
        price = tick_to_price(-192593, WETH, USDC, 18)
        tick = price_to_tick(price, 10, WETH, USDC, 18)
        assert tick == -192590
        assert abs(tick - (-192593)) <= 10

    def test_result_is_spacing_multiple(self):
        tick = price_to_tick(3_000 * 10 ** 6, 60, WETH, USDC, 18)
        assert tick % 60 == 0

    def test_zero_price(self):
        with pytest.raises(InvalidPrice):
            price_to_tick(0, 10, WETH, USDC, 18)

    def test_negative_price(self):
        with pytest.raises(InvalidPrice):
            price_to_base_tick(-1, 10, True, 18)


class TestClosestTick:
    """get_closest_tick_at_sqrt_ratio 테스트"""

    def test_exact_tick(self):
        ratio = get_sqrt_ratio_at_tick(-192593)
        assert get_closest_tick_at_sqrt_ratio(ratio) == -192593

    def test_just_below_next_tick(self):
        """다음 틱 바로 아래는 다음 틱이 더 가까움"""
        ratio = get_sqrt_ratio_at_tick(101) - 1
        assert get_closest_tick_at_sqrt_ratio(ratio) == 101


class TestSqrtRatioConversions:
    """sqrtPriceX96 ↔ 가격 보조 함수"""

    def test_price_to_sqrt_ratio_matches_tick(self):
        price = tick_to_base_price(-192590, True, 18)
        sqrt_ratio = price_to_sqrt_ratio_x96(price, True, 18)
        on_tick = get_sqrt_ratio_at_tick(-192590)
        # 가격 내림으로 인한 오차는 1틱보다 훨씬 작음
        assert abs(sqrt_ratio - on_tick) < on_tick // 10 ** 6

    def test_invalid_price(self):
        with pytest.raises(InvalidPrice):
            price_to_sqrt_ratio_x96(0, True, 18)

    def test_float_price(self):
        """표시용 float 가격 (WETH 18, USDC 6)"""
        price = sqrt_ratio_x96_to_float_price(get_sqrt_ratio_at_tick(-192593), 18, 6)
        assert 4327 < price < 4328


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

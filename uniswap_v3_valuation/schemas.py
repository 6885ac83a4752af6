"""
Serialization Schemas using Pydantic

밸류에이션 엔진 입출력을 JSON으로 주고받기 위한 모델.
uint128/uint256 범위의 정수는 정밀도 손실을 막기 위해 10진수 문자열로 표현합니다.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from .position.types import (
    BreakEvenResult,
    CurveData,
    PositionRange,
    PositionSnapshot,
    TokenRef,
)


def _parse_decimal_string(value: str, name: str) -> str:
    digits = value[1:] if value.startswith("-") else value
    if not (digits.isascii() and digits.isdigit()):
        raise ValueError(f"{name} must be a decimal integer string: {value!r}")
    return value


class PositionSnapshotPayload(BaseModel):
    """PositionSnapshot 입력 페이로드"""
    liquidity: str = Field(..., description="Position liquidity (uint128, decimal string)")
    tick_lower: int = Field(..., description="Lower tick of the range")
    tick_upper: int = Field(..., description="Upper tick of the range")
    fee_tier: Optional[int] = Field(default=None, description="Pool fee tier (100, 500, 3000 or 10000)")
    tick_spacing: Optional[int] = Field(default=None, description="Tick spacing, overrides fee_tier", gt=0)
    base_token_address: str = Field(..., description="Base token contract address")
    base_decimals: int = Field(..., description="Base token decimals", ge=0)
    quote_token_address: str = Field(..., description="Quote token contract address")
    quote_decimals: int = Field(..., description="Quote token decimals", ge=0)
    initial_value: str = Field(..., description="Value at open in quote minor units (decimal string)")

    class Config:
        json_schema_extra = {
            "example": {
                "liquidity": "1000000000000000000",
                "tick_lower": -192600,
                "tick_upper": -192000,
                "fee_tier": 500,
                "base_token_address": "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",
                "base_decimals": 18,
                "quote_token_address": "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
                "quote_decimals": 6,
                "initial_value": "5000000000"
            }
        }

    @field_validator("liquidity", "initial_value")
    @classmethod
    def check_decimal_string(cls, value: str, info) -> str:
        return _parse_decimal_string(value, info.field_name)

    def to_snapshot(self) -> PositionSnapshot:
        """검증된 PositionSnapshot 생성

        Raises:
            ValuationError: 범위/유동성/주소 검증 실패
        """
        if self.tick_spacing is not None:
            position_range = PositionRange(self.tick_lower, self.tick_upper, self.tick_spacing)
        elif self.fee_tier is not None:
            position_range = PositionRange.for_fee_tier(self.tick_lower, self.tick_upper, self.fee_tier)
        else:
            position_range = PositionRange(self.tick_lower, self.tick_upper)

        return PositionSnapshot.from_tokens(
            base=TokenRef(self.base_token_address, self.base_decimals),
            quote=TokenRef(self.quote_token_address, self.quote_decimals),
            liquidity=int(self.liquidity),
            position_range=position_range,
            initial_value=int(self.initial_value),
        )


class CurvePointPayload(BaseModel):
    price: float
    pnl: float
    phase: str


class ValueRangePayload(BaseModel):
    min: float
    max: float


class CurveDataPayload(BaseModel):
    """PnL 곡선 응답 페이로드"""
    points: List[CurvePointPayload]
    price_range: ValueRangePayload
    pnl_range: ValueRangePayload
    current_price_index: int
    lower_index: int = Field(..., description="Index of the sample closest to the lower range price")
    upper_index: int = Field(..., description="Index of the sample closest to the upper range price")
    lower_price: float
    upper_price: float
    current_price: float

    @classmethod
    def from_curve_data(cls, curve: CurveData) -> "CurveDataPayload":
        return cls(
            points=[
                CurvePointPayload(price=p.price, pnl=p.pnl, phase=p.phase.value)
                for p in curve.points
            ],
            price_range=ValueRangePayload(min=curve.price_range.min, max=curve.price_range.max),
            pnl_range=ValueRangePayload(min=curve.pnl_range.min, max=curve.pnl_range.max),
            current_price_index=curve.current_price_index,
            lower_index=curve.range_indices.lower,
            upper_index=curve.range_indices.upper,
            lower_price=curve.lower_price,
            upper_price=curve.upper_price,
            current_price=curve.current_price,
        )


class BreakEvenPayload(BaseModel):
    """손익분기 탐색 결과 페이로드"""
    status: str = Field(..., description="converged, approximate or not-found")
    price: Optional[str] = Field(default=None, description="Break-even price in quote minor units (decimal string)")
    iterations: int = Field(..., ge=0)

    class Config:
        json_schema_extra = {
            "example": {
                "status": "converged",
                "price": "4327480000",
                "iterations": 31
            }
        }

    @classmethod
    def from_result(cls, result: BreakEvenResult) -> "BreakEvenPayload":
        return cls(
            status=result.status.value,
            price=str(result.price) if result.price is not None else None,
            iterations=result.iterations,
        )

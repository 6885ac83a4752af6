"""
Uniswap V3 Position Valuation Engine

온체인 수준 정밀도로 Uniswap V3 포지션의 가치, PnL 곡선, 손익분기 가격을 계산하는 라이브러리.
모든 금액은 정수(최소 단위)로 계산하고, float는 차트 표시 단계에서만 사용합니다.
"""

__version__ = "0.1.0"

from .config import settings, configure_logging
from .constants import Q96, Q192, FEE_TIERS, TICK_SPACINGS, MIN_TICK, MAX_TICK
from .exceptions import (
    ValuationError,
    InvalidTick,
    InvalidSqrtRatio,
    InvalidPrice,
    InvalidRange,
    InvalidLiquidity,
    Overflow,
)
from .position import (
    TokenRef,
    PositionRange,
    PositionSnapshot,
    PnlBreakdown,
    CurveData,
    BreakEvenResult,
    BreakEvenStatus,
    value_at,
    pnl_at,
    CurveDataGenerator,
    generate_curve_data,
    find_break_even,
)

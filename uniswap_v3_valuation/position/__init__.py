"""
Position layer: 스냅샷 기반 밸류에이션, PnL 곡선, 손익분기 탐색
"""

from .types import (
    TokenRef,
    sort_tokens,
    PositionRange,
    PositionSnapshot,
    PnlBreakdown,
    PnL,
    HoldComparison,
    PositionState,
    PositionStates,
    PositionPhase,
    RangeStatus,
    CurvePoint,
    CurveData,
    ValueRange,
    RangeIndices,
    BreakEvenStatus,
    BreakEvenResult,
)
from .valuation import (
    value_at,
    pnl_at,
    calculate_pnl,
    determine_range_status,
    determine_phase,
    compare_to_hold_strategy,
    calculate_position_states,
)
from .curve import CurveDataGenerator, generate_curve_data
from .break_even import find_break_even

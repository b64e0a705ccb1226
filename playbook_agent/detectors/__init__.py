"""
Pure detector functions.

Each detector takes a window of candles (plus, for some, the
higher-timeframe trend or previous-day levels) and returns a small
frozen result. Too little data yields the empty result, never an error.
"""

from .auction import detect_balance, detect_imbalance
from .liquidity import detect_liquidity, find_swing_highs, find_swing_lows
from .nbb import detect_breaker_block, detect_mmm, detect_ote, detect_premium_discount, snap_ote_level
from .session import detect_session
from .structure import detect_fvg, detect_order_blocks, detect_structure_shift
from .trend import detect_trend
from .trendline import detect_trendline
from .volume import detect_volume

__all__ = [
    "detect_balance",
    "detect_breaker_block",
    "detect_fvg",
    "detect_imbalance",
    "detect_liquidity",
    "detect_mmm",
    "detect_order_blocks",
    "detect_ote",
    "detect_premium_discount",
    "detect_session",
    "detect_structure_shift",
    "detect_trend",
    "detect_trendline",
    "detect_volume",
    "find_swing_highs",
    "find_swing_lows",
    "snap_ote_level",
]

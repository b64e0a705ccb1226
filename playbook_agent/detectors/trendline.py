"""
Trendline detection from swing points.

An ascending line needs every swing low in the window to be strictly
higher than the one before it; a descending line needs every swing high
strictly lower. At least three swing points (two steps) are needed for a
line to exist, and a single break anywhere in the series rejects it.
"""

from typing import List, Sequence

from playbook_agent.detectors.liquidity import find_swing_highs, find_swing_lows
from playbook_agent.schemas import Candle, TrendlineState, Trend

RESPECT_TOLERANCE = 0.02
MIN_STEPS = 2


def _monotonic(levels: List[float], rising: bool) -> bool:
    """True when ``levels`` has at least ``MIN_STEPS`` steps, all strictly in one direction."""
    if len(levels) < MIN_STEPS + 1:
        return False
    return all((cur > prev) if rising else (cur < prev) for prev, cur in zip(levels, levels[1:]))


def _ascending(candles: Sequence[Candle]) -> TrendlineState:
    lows = [level for _, level in find_swing_lows(candles)]
    if not _monotonic(lows, rising=True):
        return TrendlineState()
    respected = candles[-1].low >= lows[-1] * (1 - RESPECT_TOLERANCE)
    return TrendlineState(exists=True, touches=len(lows), respected=respected, direction="ascending")


def _descending(candles: Sequence[Candle]) -> TrendlineState:
    highs = [level for _, level in find_swing_highs(candles)]
    if not _monotonic(highs, rising=False):
        return TrendlineState()
    respected = candles[-1].high <= highs[-1] * (1 + RESPECT_TOLERANCE)
    return TrendlineState(exists=True, touches=len(highs), respected=respected, direction="descending")


def detect_trendline(candles: Sequence[Candle], htf_trend: Trend = "neutral") -> TrendlineState:
    """Pick the line that agrees with ``htf_trend``, else the one with more touches."""
    if len(candles) < 3:
        return TrendlineState()

    asc = _ascending(candles)
    desc = _descending(candles)
    if htf_trend == "bullish" and asc.exists:
        return asc
    if htf_trend == "bearish" and desc.exists:
        return desc
    if not asc.exists and not desc.exists:
        return TrendlineState()
    return asc if asc.touches >= desc.touches else desc

"""
Liquidity zones and sweeps.

Swing highs and lows are strict 3-candle local extremes. A zone is
swept when one of the last ``SWEEP_WINDOW`` candles traded through it
and the latest close is back on the original side. The previous-day
high and low, when supplied, are treated as zones too.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from playbook_agent.schemas import Candle, LiquidityResult, LiquidityZone

logger = logging.getLogger(__name__)

SWEEP_WINDOW = 5


def find_swing_highs(candles: Sequence[Candle]) -> List[Tuple[int, float]]:
    """Return ``(index, high)`` for every strict local high."""
    return [
        (i, candles[i].high)
        for i in range(1, len(candles) - 1)
        if candles[i].high > candles[i - 1].high and candles[i].high > candles[i + 1].high
    ]


def find_swing_lows(candles: Sequence[Candle]) -> List[Tuple[int, float]]:
    """Return ``(index, low)`` for every strict local low."""
    return [
        (i, candles[i].low)
        for i in range(1, len(candles) - 1)
        if candles[i].low < candles[i - 1].low and candles[i].low < candles[i + 1].low
    ]


def _high_swept(recent: Sequence[Candle], level: float) -> bool:
    return any(c.high > level for c in recent) and recent[-1].close < level


def _low_swept(recent: Sequence[Candle], level: float) -> bool:
    return any(c.low < level for c in recent) and recent[-1].close > level


def detect_liquidity(
    candles: Sequence[Candle],
    previous_day_high: Optional[float] = None,
    previous_day_low: Optional[float] = None,
) -> LiquidityResult:
    if len(candles) < 3:
        return LiquidityResult()

    recent = list(candles[-SWEEP_WINDOW:])
    zones: List[LiquidityZone] = []
    # Order matters: the first swept zone decides the context's sweep direction.
    for _, level in find_swing_highs(candles):
        zones.append(LiquidityZone(level=level, type="high", swept=_high_swept(recent, level)))
    for _, level in find_swing_lows(candles):
        zones.append(LiquidityZone(level=level, type="low", swept=_low_swept(recent, level)))
    if previous_day_high is not None:
        zones.append(
            LiquidityZone(level=previous_day_high, type="high", swept=_high_swept(recent, previous_day_high))
        )
    if previous_day_low is not None:
        zones.append(
            LiquidityZone(level=previous_day_low, type="low", swept=_low_swept(recent, previous_day_low))
        )

    swept = tuple(z for z in zones if z.swept)
    if swept:
        logger.debug("Liquidity swept: %s", ", ".join(f"{z.type}@{z.level}" for z in swept))
    return LiquidityResult(zones=tuple(zones), swept=swept)

"""
Detectors used by the NBB model: market-maker-model phase, breaker
blocks, premium/discount (PO3) and optimal trade entry (OTE).
"""

import logging
from typing import Optional, Sequence

from playbook_agent.schemas import (
    BreakerBlock,
    Candle,
    MMMResult,
    OTEResult,
    PremiumDiscountResult,
    Trend,
)

logger = logging.getLogger(__name__)

RANGE_WINDOW = 10
ACCUMULATION_BODY_RATIO = 0.3
DISTRIBUTION_BODY_RATIO = 0.7

OTE_MIN = 0.62
OTE_MAX = 0.79
# (canonical level, lower bound, upper bound)
OTE_BANDS = (
    (0.62, 0.595, 0.645),
    (0.705, 0.68, 0.73),
    (0.79, 0.765, 0.815),
)


def detect_mmm(candles: Sequence[Candle]) -> MMMResult:
    """
    Market-maker-model phase of the latest candles.

    Checked in order: accumulation (small bodies relative to the 5-candle
    range), manipulation (latest candle wicks beyond the prior four
    candles' extreme and closes back inside), distribution (latest body
    over 70% of its range).
    """
    if len(candles) < 5:
        return MMMResult()

    window = list(candles[-5:])
    total_range = max(c.high for c in window) - min(c.low for c in window)
    if total_range > 0:
        avg_body = sum(c.body for c in window) / len(window)
        if avg_body / total_range < ACCUMULATION_BODY_RATIO:
            return MMMResult(phase="accumulation")

    last = window[-1]
    prior_high = max(c.high for c in window[:-1])
    prior_low = min(c.low for c in window[:-1])
    if last.high > prior_high and last.close < prior_high:
        return MMMResult(phase="manipulation", level=prior_high)
    if last.low < prior_low and last.close > prior_low:
        return MMMResult(phase="manipulation", level=prior_low)

    if last.range > 0 and last.body / last.range > DISTRIBUTION_BODY_RATIO:
        return MMMResult(phase="distribution")
    return MMMResult()


def detect_breaker_block(candles: Sequence[Candle]) -> BreakerBlock:
    """Most recent close through the extreme of the candle two bars earlier.

    The candle in between must not have closed through the same level.
    """
    if len(candles) < 4:
        return BreakerBlock()

    for i in range(len(candles) - 1, 1, -1):
        ref = candles[i - 2]
        if candles[i].close > ref.high and candles[i - 1].close <= ref.high:
            return BreakerBlock(exists=True, type="bullish", level=ref.high)
        if candles[i].close < ref.low and candles[i - 1].close >= ref.low:
            return BreakerBlock(exists=True, type="bearish", level=ref.low)
    return BreakerBlock()


def _range(candles: Sequence[Candle]):
    window = candles[-RANGE_WINDOW:]
    return max(c.high for c in window), min(c.low for c in window)


def detect_premium_discount(candles: Sequence[Candle], htf_trend: Trend) -> PremiumDiscountResult:
    if len(candles) < 2 or htf_trend == "neutral":
        return PremiumDiscountResult()

    high, low = _range(candles)
    equilibrium = (high + low) / 2
    close = candles[-1].close
    zone = None
    if close > equilibrium:
        zone = "premium"
    elif close < equilibrium:
        zone = "discount"
    return PremiumDiscountResult(exists=True, zone=zone, equilibrium=equilibrium)


def snap_ote_level(fraction: float) -> float:
    """Snap ``fraction`` to a canonical OTE level, or keep it (3 dp) if no band matches."""
    for level, lower, upper in OTE_BANDS:
        if lower <= fraction <= upper:
            return level
    return round(fraction, 3)


def detect_ote(candles: Sequence[Candle], htf_trend: Trend) -> OTEResult:
    """
    Retracement of the latest close into the 10-candle range.

    For a bullish bias the fraction is measured down from the range
    high, for a bearish bias up from the range low. Only fractions in
    [0.62, 0.79] count.
    """
    if len(candles) < 3 or htf_trend == "neutral":
        return OTEResult()

    high, low = _range(candles)
    span = high - low
    if span <= 0:
        return OTEResult()

    close = candles[-1].close
    if htf_trend == "bullish":
        fraction = (high - close) / span
    else:
        fraction = (close - low) / span

    if not OTE_MIN <= fraction <= OTE_MAX:
        return OTEResult()
    level: Optional[float] = snap_ote_level(fraction)
    logger.debug("OTE retrace %.3f -> %s", fraction, level)
    return OTEResult(available=True, level=level)

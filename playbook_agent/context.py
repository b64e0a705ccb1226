"""
Build a ``MarketContext`` from raw candles.

This is the only place where detectors are invoked. Each detector runs
exactly once per call and every derived flag is read straight off the
detector outputs.
"""

import logging
from typing import Optional, Sequence

from playbook_agent import detectors
from playbook_agent.schemas import BalanceState, Candle, MarketContext

logger = logging.getLogger(__name__)


class MarketDataError(ValueError):
    """Raised when the supplied candle data cannot be analysed."""


def build_context(
    candles: Sequence[Candle],
    previous_day_high: Optional[float] = None,
    previous_day_low: Optional[float] = None,
) -> MarketContext:
    """
    Run every detector over ``candles`` and assemble the snapshot.

    Args:
        candles: Candles ordered by time ascending; the last one is the
            candle being evaluated.
        previous_day_high: Prior-day high, treated as a liquidity zone.
        previous_day_low: Prior-day low, treated as a liquidity zone.

    Raises:
        MarketDataError: If ``candles`` is empty.
    """
    if not candles:
        raise MarketDataError("No candle data provided")

    window = tuple(candles)
    current = window[-1]

    trend = detectors.detect_trend(window)
    liquidity = detectors.detect_liquidity(window, previous_day_high, previous_day_low)
    session = detectors.detect_session(current.time)
    volume = detectors.detect_volume(window)
    trendline = detectors.detect_trendline(window, trend.direction)
    mmm = detectors.detect_mmm(window)
    breaker = detectors.detect_breaker_block(window)
    premium_discount = detectors.detect_premium_discount(window, trend.direction)
    ote = detectors.detect_ote(window, trend.direction)
    fvg = detectors.detect_fvg(window)
    shift = detectors.detect_structure_shift(window, trend.direction)
    order_blocks = detectors.detect_order_blocks(window)
    balance = detectors.detect_balance(window)
    imbalance = detectors.detect_imbalance(window)

    liquidity_sweep = bool(liquidity.swept)
    structure_break = shift.exists or breaker.exists
    if shift.exists:
        break_direction = shift.direction
    elif breaker.exists:
        break_direction = breaker.type
    else:
        break_direction = None

    context = MarketContext(
        session=session,
        htf_trend=trend.direction,
        price=current.close,
        high=current.high,
        low=current.low,
        volume=current.volume or 0.0,
        po3_zone_present=premium_discount.exists,
        price_at_po3=premium_discount.zone is not None,
        liquidity_sweep=liquidity_sweep,
        swept_direction=liquidity.swept[0].type if liquidity_sweep else None,
        liquidity_zones=liquidity.zones,
        structure_break=structure_break,
        break_direction=break_direction,
        volume_spike=volume.spike,
        displacement=volume.displacement,
        ote_retrace=ote.available,
        ote_level=ote.level if ote.available else None,
        trendline=trendline,
        balance_zones=BalanceState(in_balance=balance.in_balance, lvn_detected=imbalance.detected),
        volatility="high" if volume.spike else "low",
        previous_day_high=previous_day_high,
        previous_day_low=previous_day_low,
        trend_strength=trend.strength,
        premium_discount=premium_discount.zone,
        mmm_phase=mmm,
        breaker=breaker,
        fair_value_gap=fvg,
        structure_shift=shift,
        order_blocks=tuple(order_blocks),
        imbalance=imbalance,
        candles=window,
    )
    logger.debug(
        "Context built: session=%s trend=%s sweep=%s break=%s spike=%s ote=%s",
        context.session, context.htf_trend, context.swept_direction,
        context.break_direction, context.volume_spike, context.ote_level,
    )
    return context

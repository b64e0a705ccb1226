"""Fair value gaps, market structure shifts and order blocks."""

from typing import List, Sequence

from playbook_agent.detectors.liquidity import find_swing_highs, find_swing_lows
from playbook_agent.schemas import Candle, FairValueGap, OrderBlock, StructureShift, Trend

STRUCTURE_WINDOW = 10
ORDER_BLOCK_BODY_RATIO = 0.7


def detect_fvg(candles: Sequence[Candle]) -> FairValueGap:
    """
    Most recent three-candle fair value gap.

    Bullish when the first candle's high is below the third candle's
    low, bearish when the first candle's low is above the third's high.
    The gap stays unfilled while no close from the third candle onward
    has traded back into it.
    """
    if len(candles) < 3:
        return FairValueGap()

    for i in range(len(candles) - 1, 1, -1):
        first, third = candles[i - 2], candles[i]
        closes = [c.close for c in candles[i:]]
        if first.high < third.low:
            top, bottom = third.low, first.high
            return FairValueGap(
                exists=True, type="bullish", top=top, bottom=bottom,
                unfilled=all(close >= top for close in closes),
            )
        if first.low > third.high:
            top, bottom = first.low, third.high
            return FairValueGap(
                exists=True, type="bearish", top=top, bottom=bottom,
                unfilled=all(close <= bottom for close in closes),
            )
    return FairValueGap()


def detect_structure_shift(candles: Sequence[Candle], htf_trend: Trend = "neutral") -> StructureShift:
    """Close beyond the most recent swing high (bullish) or swing low (bearish)."""
    if len(candles) < 5:
        return StructureShift()

    window = list(candles[-STRUCTURE_WINDOW:])
    close = window[-1].close
    highs = find_swing_highs(window)
    lows = find_swing_lows(window)

    direction = None
    level = None
    if highs and close > highs[-1][1]:
        direction, level = "bullish", highs[-1][1]
    elif lows and close < lows[-1][1]:
        direction, level = "bearish", lows[-1][1]

    if direction is None:
        return StructureShift()
    return StructureShift(
        exists=True,
        direction=direction,
        level=level,
        bos=direction == htf_trend,
        mss=htf_trend not in (direction, "neutral"),
    )


def detect_order_blocks(candles: Sequence[Candle]) -> List[OrderBlock]:
    """Opposite-coloured candles immediately preceding a displacement candle."""
    if len(candles) < 4:
        return []

    start = max(0, len(candles) - STRUCTURE_WINDOW)
    blocks: List[OrderBlock] = []
    for i in range(start, len(candles) - 1):
        current, move = candles[i], candles[i + 1]
        if move.range <= 0 or move.body / move.range < ORDER_BLOCK_BODY_RATIO:
            continue
        if move.is_bullish and current.is_bearish:
            blocks.append(OrderBlock(type="bullish", high=current.high, low=current.low, index=i))
        elif move.is_bearish and current.is_bullish:
            blocks.append(OrderBlock(type="bearish", high=current.high, low=current.low, index=i))
    return blocks

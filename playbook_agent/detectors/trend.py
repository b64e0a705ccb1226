"""Higher-timeframe trend bias from the last five candles."""

from typing import Sequence

from playbook_agent.schemas import Candle, TrendResult

TREND_WINDOW = 5


def detect_trend(candles: Sequence[Candle]) -> TrendResult:
    """
    Classify the trend over the last ``TREND_WINDOW`` candles.

    Bullish when every candle prints a strictly higher high and higher
    low than the one before it, bearish when strictly lower on both,
    neutral otherwise. Strength is the absolute close-to-close change
    expressed as a percentage of the first candle's range, clamped to
    [0, 100].
    """
    if len(candles) < TREND_WINDOW:
        return TrendResult()

    window = list(candles[-TREND_WINDOW:])
    pairs = list(zip(window, window[1:]))

    if all(cur.high > prev.high and cur.low > prev.low for prev, cur in pairs):
        direction = "bullish"
    elif all(cur.high < prev.high and cur.low < prev.low for prev, cur in pairs):
        direction = "bearish"
    else:
        return TrendResult()

    first, last = window[0], window[-1]
    if first.range <= 0:
        return TrendResult(direction=direction, strength=0.0)
    strength = abs(last.close - first.close) / first.range * 100
    return TrendResult(direction=direction, strength=max(0.0, min(100.0, strength)))

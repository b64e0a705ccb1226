"""Auction-market balance and imbalance detection."""

from typing import Sequence

from playbook_agent.schemas import BalanceResult, Candle, ImbalanceResult

AUCTION_WINDOW = 10
BALANCE_BODY_RATIO = 0.35
BALANCE_RANGE_PCT = 0.03


def detect_balance(candles: Sequence[Candle]) -> BalanceResult:
    """
    Balance is a compressed auction: small bodies relative to ranges and
    a total range under 3% of the mid price across the window.
    """
    if len(candles) < 5:
        return BalanceResult()

    window = list(candles[-AUCTION_WINDOW:])
    high = max(c.high for c in window)
    low = min(c.low for c in window)
    mid = (high + low) / 2
    if mid <= 0:
        return BalanceResult(high=high, low=low)

    avg_body = sum(c.body for c in window) / len(window)
    avg_range = sum(c.range for c in window) / len(window)
    body_ratio = avg_body / avg_range if avg_range > 0 else 0.0
    in_balance = body_ratio < BALANCE_BODY_RATIO and (high - low) / mid < BALANCE_RANGE_PCT
    return BalanceResult(in_balance=in_balance, high=high, low=low)


def detect_imbalance(candles: Sequence[Candle]) -> ImbalanceResult:
    """Most recent pair of consecutive candles whose ranges do not overlap."""
    if len(candles) < 2:
        return ImbalanceResult()

    window = list(candles[-AUCTION_WINDOW:])
    for i in range(len(window) - 1, 0, -1):
        prev, cur = window[i - 1], window[i]
        if cur.low > prev.high:
            return ImbalanceResult(detected=True, type="gap_up", top=cur.low, bottom=prev.high)
        if cur.high < prev.low:
            return ImbalanceResult(detected=True, type="gap_down", top=prev.low, bottom=cur.high)
    return ImbalanceResult()

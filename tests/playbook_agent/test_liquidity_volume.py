"""
Unit tests for the liquidity, volume and trendline detectors.
"""

from datetime import timedelta

import pytest

from playbook_agent.detectors import (
    detect_liquidity,
    detect_trendline,
    detect_volume,
    find_swing_highs,
    find_swing_lows,
)
from playbook_agent.schemas import Candle, LiquidityZone
from tests.factories import T0, candles_from
from tests.scenarios import jadecap, nbb, tori


def test_swing_points_are_strict_three_candle_extremes() -> None:
    candles = candles_from([
        (5, 6, 4, 5),
        (5, 8, 3, 6),
        (6, 7, 4, 6),
        (6, 9, 2, 7),
        (7, 9, 5, 8),  # equal high, so index 3 is not a swing high
        (8, 8.5, 6, 7),
    ])
    assert find_swing_highs(candles) == [(1, 8)]
    assert find_swing_lows(candles) == [(1, 3), (3, 2)]


def test_previous_day_low_sweep() -> None:
    result = detect_liquidity(nbb.CANDLES, nbb.PREVIOUS_DAY_HIGH, nbb.PREVIOUS_DAY_LOW)
    assert result.swept == (LiquidityZone(level=4405, type="low", swept=True),)
    assert LiquidityZone(level=4500, type="high", swept=False) in result.zones
    assert LiquidityZone(level=4400, type="low", swept=False) in result.zones
    assert LiquidityZone(level=4520, type="high", swept=False) in result.zones


def test_swing_high_sweep_reported_first() -> None:
    result = detect_liquidity(jadecap.CANDLES, jadecap.PREVIOUS_DAY_HIGH, jadecap.PREVIOUS_DAY_LOW)
    assert [(z.level, z.type) for z in result.swept] == [(4730, "high")]
    # 4740 was never exceeded
    assert LiquidityZone(level=4740, type="high", swept=False) in result.zones


def test_previous_day_levels_are_optional() -> None:
    result = detect_liquidity(nbb.CANDLES)
    assert result.swept == ()
    assert all(z.level not in (4520, 4405) for z in result.zones)


def test_liquidity_needs_three_candles() -> None:
    result = detect_liquidity(nbb.CANDLES[:2], 4520, 4405)
    assert result.zones == ()
    assert result.swept == ()


def test_volume_spike_with_displacement() -> None:
    rows = [(10, 11, 9, 10)] * 10 + [(10, 12, 10, 11.8)]
    volumes = [100] * 10 + [200]
    result = detect_volume(candles_from(rows, volumes))
    assert result.spike is True
    assert result.displacement is True
    assert result.average == pytest.approx(100)


def test_volume_spike_without_displacement() -> None:
    rows = [(10, 11, 9, 10)] * 10 + [(10, 12, 10, 10.5)]
    volumes = [100] * 10 + [200]
    result = detect_volume(candles_from(rows, volumes))
    assert result.spike is True
    assert result.displacement is False


def test_volume_threshold_is_strict() -> None:
    rows = [(10, 11, 9, 10)] * 11
    volumes = [100] * 10 + [150]
    assert detect_volume(candles_from(rows, volumes)).spike is False


def test_volume_average_excludes_current_and_older_bars() -> None:
    rows = [(10, 11, 9, 10)] * 16
    # Bars outside the ten-bar window would hide the spike if counted
    volumes = [10000] * 5 + [100] * 10 + [200]
    assert detect_volume(candles_from(rows, volumes)).spike is True


def test_missing_volume_never_spikes() -> None:
    candles = [Candle(time=T0 + timedelta(minutes=i), open=10, high=11, low=9, close=10) for i in range(5)]
    result = detect_volume(candles)
    assert result.spike is False
    assert result.average == 0


def test_single_candle_has_no_volume_signal() -> None:
    result = detect_volume(candles_from([(10, 12, 10, 12)], [1000]))
    assert result.spike is False
    assert result.displacement is False


def test_ascending_trendline_from_rising_swing_lows() -> None:
    result = detect_trendline(tori.CANDLES, "bullish")
    assert result.exists is True
    assert result.direction == "ascending"
    assert result.touches == 3
    assert result.respected is True


# Swing lows at 100, 102 and 103
ASCENDING_ROWS = [
    (105, 106, 101, 105),
    (104, 105, 100, 104),
    (104, 107, 103, 106),
    (105, 106, 102, 104),
    (104, 108, 104, 107),
    (107, 109, 103, 105),
    (105, 110, 106, 109),
]


def test_trendline_broken_when_price_falls_far_below_last_swing() -> None:
    candles = candles_from(ASCENDING_ROWS + [(100, 101, 90, 92)])
    result = detect_trendline(candles, "neutral")
    assert result.exists is True
    assert result.touches == 3
    # 90 is more than 2% below the 103 swing low
    assert result.respected is False


def test_trendline_respected_within_tolerance() -> None:
    candles = candles_from(ASCENDING_ROWS + [(106, 111, 101.5, 110)])
    result = detect_trendline(candles, "bullish")
    assert result.exists is True
    assert result.respected is True


def test_no_trendline_from_two_swing_points() -> None:
    # Swing lows 100 and 102 only
    result = detect_trendline(candles_from(ASCENDING_ROWS[:5]), "bullish")
    assert result.exists is False


def test_no_trendline_when_any_swing_breaks_the_sequence() -> None:
    rows = [
        (105, 106, 101, 105),
        (104, 105, 100, 104),
        (104, 107, 103, 106),
        (103, 104, 90, 95),
        (95, 100, 96, 99),
        (99, 101, 95, 100),
        (100, 102, 97, 101),
    ]
    # Swing lows 100, 90, 95: the last step rises but the series does not
    result = detect_trendline(candles_from(rows), "bullish")
    assert result.exists is False
    assert result.touches == 0


def test_descending_trendline_for_bearish_bias() -> None:
    rows = [
        (100, 110, 99, 101),
        (101, 115, 100, 102),
        (102, 108, 100, 101),
        (101, 112, 99, 100),
        (100, 105, 98, 99),
        (99, 109, 97, 98),
        (98, 104, 96, 97),
    ]
    result = detect_trendline(candles_from(rows), "bearish")
    assert result.direction == "descending"
    assert result.touches == 3
    assert result.respected is True


def test_no_trendline_with_single_swing() -> None:
    result = detect_trendline(jadecap.CANDLES[:3], "bullish")
    assert result.exists is False
    assert result.touches == 0

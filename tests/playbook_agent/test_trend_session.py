"""
Unit tests for playbook_agent.detectors.trend and .session.
"""

from datetime import datetime, timedelta, timezone

import pytest

from playbook_agent.detectors import detect_session, detect_trend
from tests.factories import candles_from


BULLISH_ROWS = [
    (10, 20, 10, 12),
    (12, 21, 11, 13),
    (13, 22, 12, 15),
    (15, 23, 13, 16),
    (16, 24, 14, 17),
]


def test_bullish_trend_and_strength() -> None:
    result = detect_trend(candles_from(BULLISH_ROWS))
    assert result.direction == "bullish"
    # |17 - 12| over the first candle's range of 10
    assert result.strength == pytest.approx(50.0)


def test_bearish_trend() -> None:
    rows = [
        (30, 30, 20, 28),
        (28, 29, 19, 27),
        (27, 28, 18, 26),
        (26, 27, 17, 25),
        (25, 26, 16, 23),
    ]
    result = detect_trend(candles_from(rows))
    assert result.direction == "bearish"
    assert result.strength == pytest.approx(50.0)


def test_strength_is_clamped_to_100() -> None:
    rows = [(10, 11, 10, 10.5), (11, 13, 10.5, 12.8), (13, 15, 11, 14.8), (15, 17, 12, 16.8), (17, 19, 13, 18.9)]
    assert detect_trend(candles_from(rows)).strength == 100.0


def test_equal_high_breaks_trend() -> None:
    rows = list(BULLISH_ROWS)
    rows[3] = (15, 22, 13, 16)  # same high as the previous candle
    result = detect_trend(candles_from(rows))
    assert result.direction == "neutral"
    assert result.strength == 0.0


def test_only_last_five_candles_count() -> None:
    rows = [(50, 60, 5, 6)] + BULLISH_ROWS
    assert detect_trend(candles_from(rows)).direction == "bullish"


def test_too_few_candles_is_neutral() -> None:
    result = detect_trend(candles_from(BULLISH_ROWS[:4]))
    assert result.direction == "neutral"
    assert result.strength == 0.0


@pytest.mark.parametrize(
    "hour,minute,expected",
    [
        (0, 0, "asian"),
        (6, 59, "asian"),
        (7, 0, "london"),
        (12, 59, "london"),
        (13, 0, "ny"),
        (21, 59, "ny"),
        (22, 0, "asian"),
        (23, 30, "asian"),
    ],
)
def test_session_boundaries(hour: int, minute: int, expected: str) -> None:
    when = datetime(2024, 1, 2, hour, minute, tzinfo=timezone.utc)
    assert detect_session(when) == expected


def test_session_treats_naive_time_as_utc() -> None:
    assert detect_session(datetime(2024, 1, 2, 14, 0)) == "ny"


def test_session_converts_other_timezones() -> None:
    new_york = timezone(timedelta(hours=-5))
    # 09:00 in New York is 14:00 UTC
    assert detect_session(datetime(2024, 1, 2, 9, 0, tzinfo=new_york)) == "ny"

"""
Tori: a slow grind higher with three rising swing lows
(4195, 4199, 4202) forming an ascending trendline, steady volume and a
compressed range, ending in the New York session.
"""

from datetime import datetime, timezone

from tests.scenarios import make_candles

PREVIOUS_DAY_HIGH = 4260.0
PREVIOUS_DAY_LOW = 4150.0
START = datetime(2024, 3, 14, 13, 30, tzinfo=timezone.utc)  # last bar 14:20, New York

ROWS = [
    (4200, 4206, 4196, 4201, 900000),
    (4201, 4207, 4198, 4202, 900000),
    (4202, 4206, 4195, 4203, 900000),
    (4203, 4210, 4200, 4205, 900000),
    (4205, 4209, 4199, 4206, 900000),
    (4206, 4213, 4203, 4208, 900000),
    (4208, 4214, 4202, 4209, 900000),
    (4209, 4217, 4205, 4211, 900000),
    (4211, 4220, 4208, 4213, 900000),
    (4213, 4223, 4211, 4216, 900000),
    (4216, 4226, 4214, 4218, 900000),
]

CANDLES = make_candles(START, ROWS)

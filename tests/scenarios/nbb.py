"""
Bullish NBB: a sell-off sweeps the previous-day low, price breaks back
above the high two bars earlier (breaker at 4420) on a displacement
candle and closes 70% down the 4400-4500 range (OTE 0.705).
"""

from datetime import datetime, timezone

from tests.scenarios import make_candles

PREVIOUS_DAY_HIGH = 4520.0
PREVIOUS_DAY_LOW = 4405.0
START = datetime(2024, 3, 12, 8, 0, tzinfo=timezone.utc)  # London

ROWS = [
    (4460, 4470, 4455, 4465, 800000),
    (4465, 4500, 4460, 4490, 800000),
    (4490, 4492, 4440, 4445, 800000),
    (4445, 4448, 4400, 4404, 800000),
    (4403, 4412, 4402, 4410, 800000),
    (4410, 4416, 4405, 4408, 800000),
    (4408, 4420, 4406, 4414, 800000),
    (4414, 4422, 4409, 4418, 800000),
    (4416, 4431, 4415, 4430, 2000000),
]

CANDLES = make_candles(START, ROWS)

"""
Literal candle fixtures for the four playbooks.

Each scenario module exposes ``CANDLES``, ``PREVIOUS_DAY_HIGH`` and
``PREVIOUS_DAY_LOW``; bars are five minutes apart and the timestamps
place the last bar in the session the playbook needs.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Sequence, Tuple

from playbook_agent.schemas import Candle

Row = Tuple[float, float, float, float, float]


def make_candles(start: datetime, rows: Sequence[Row], step_minutes: int = 5) -> List[Candle]:
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    return [
        Candle(
            time=start + timedelta(minutes=step_minutes * i),
            open=o,
            high=h,
            low=l,
            close=c,
            volume=v,
        )
        for i, (o, h, l, c, v) in enumerate(rows)
    ]

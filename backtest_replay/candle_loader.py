"""
Load OHLCV candles from CSV files.

Handles:
- Column mapping (e.g. ``{"time": "Date", "close": "Close"}``)
- Timestamps as epoch seconds, epoch milliseconds or ISO-8601 strings,
  parsed to UTC-aware datetime
- Files with or without a header row, any single-character delimiter
- Candle sorting (ascending by time)
- Required columns: time, open, high, low, close
- Optional columns: volume
"""

import csv
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from playbook_agent.schemas import Candle

logger = logging.getLogger(__name__)

# Epoch values above this are taken as milliseconds
EPOCH_MS_THRESHOLD = 1e12


def parse_timestamp(value: str) -> datetime:
    """Parse an epoch (s or ms) or ISO-8601 timestamp as UTC-aware datetime."""
    value = value.strip()
    try:
        epoch = float(value)
    except ValueError:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts.astimezone(timezone.utc)
    if epoch > EPOCH_MS_THRESHOLD:
        epoch /= 1000
    return datetime.fromtimestamp(epoch, tz=timezone.utc)


class CandleLoader:
    """Load and validate OHLCV candles from CSV."""

    REQUIRED_COLUMNS = ("time", "open", "high", "low", "close")
    OPTIONAL_COLUMNS = ("volume",)

    @staticmethod
    def load_csv(
        csv_path: str,
        column_map: Optional[Dict[str, str]] = None,
        delimiter: str = ",",
        has_header: bool = True,
    ) -> List[Candle]:
        """
        Load candles from CSV file.

        Args:
            csv_path: Path to CSV file
            column_map: Maps our field names (time, open, high, low, close,
                volume) to the file's column names. Unmapped fields use
                their own name. Ignored when ``has_header`` is False, in
                which case columns are read positionally in that order.
            delimiter: Field delimiter
            has_header: Whether the first row holds column names

        Returns:
            List of Candle objects, sorted ascending by time

        Raises:
            FileNotFoundError: If CSV not found
            ValueError: If required columns are missing, timestamps repeat,
                or no row could be parsed
        """
        path = Path(csv_path)
        if not path.exists():
            raise FileNotFoundError(f"CSV not found: {csv_path}")

        fields = CandleLoader.REQUIRED_COLUMNS + CandleLoader.OPTIONAL_COLUMNS
        mapping = {name: name for name in fields}
        mapping.update(column_map or {})

        with open(path, "r", newline="") as f:
            reader = csv.reader(f, delimiter=delimiter)
            rows = [row for row in reader if any(cell.strip() for cell in row)]

        if not rows:
            raise ValueError("CSV is empty")

        if has_header:
            header = [h.strip() for h in rows[0]]
            missing = [mapping[name] for name in CandleLoader.REQUIRED_COLUMNS if mapping[name] not in header]
            if missing:
                raise ValueError(f"Missing required columns: {missing}. Found: {header}")
            positions = {name: header.index(mapping[name]) for name in fields if mapping[name] in header}
            data_rows = rows[1:]
            first_row_num = 2
        else:
            positions = {name: i for i, name in enumerate(fields)}
            data_rows = rows
            first_row_num = 1

        candles = []
        for row_num, row in enumerate(data_rows, start=first_row_num):
            candle = CandleLoader._parse_row(row, positions, row_num)
            if candle is not None:
                candles.append(candle)

        if not candles:
            raise ValueError("No valid candles loaded from CSV")

        candles.sort(key=lambda c: c.time)
        CandleLoader._check_duplicates(candles)
        logger.info("Loaded %d candles from %s", len(candles), path)
        return candles

    @staticmethod
    def _parse_row(row: Sequence[str], positions: Dict[str, int], row_num: int) -> Optional[Candle]:
        try:
            volume_pos = positions.get("volume")
            volume = None
            if volume_pos is not None and volume_pos < len(row) and row[volume_pos].strip():
                volume = float(row[volume_pos])
            return Candle(
                time=parse_timestamp(row[positions["time"]]),
                open=float(row[positions["open"]]),
                high=float(row[positions["high"]]),
                low=float(row[positions["low"]]),
                close=float(row[positions["close"]]),
                volume=volume,
            )
        except (IndexError, ValueError) as e:
            logger.warning("Skipping row %d: %s (row data: %s)", row_num, e, list(row))
            return None

    @staticmethod
    def _check_duplicates(candles: Sequence[Candle]) -> None:
        for prev, cur in zip(candles, candles[1:]):
            if prev.time == cur.time:
                raise ValueError(f"Duplicate candle timestamp: {cur.time.isoformat()}")

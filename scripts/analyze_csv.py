#!/usr/bin/env python
"""
Analyze the latest candle of a CSV file.

Runs every detector over the candles, classifies the market against the
configured playbooks and prints the normalized signal.

Usage:
    python scripts/analyze_csv.py --csv data/es_5m.csv --instrument ES --timeframe 5m

Example with explicit previous-day levels and JSON output:
    python scripts/analyze_csv.py \\
        --csv data/es_5m.csv \\
        --pdh 4520 --pdl 4405 \\
        --instrument ES --timeframe 5m --symbol ESZ5 \\
        --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add parent directory to path to allow running as script
sys.path.insert(0, str(Path(__file__).parent.parent))

from backtest_replay.candle_loader import CandleLoader
from playbook_agent.agent import analyze
from playbook_agent.config import get_settings, load_playbook_config
from playbook_agent.logger import setup_logging

logger = logging.getLogger("analyze_csv")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--csv", type=str, required=True, help="Path to OHLCV candles CSV file")
    parser.add_argument("--pdh", type=float, default=None, help="Previous day high (default: max high in CSV)")
    parser.add_argument("--pdl", type=float, default=None, help="Previous day low (default: min low in CSV)")
    parser.add_argument("--instrument", type=str, default="UNKNOWN", help="Instrument name")
    parser.add_argument("--timeframe", type=str, default="5m", help="Chart timeframe")
    parser.add_argument("--symbol", type=str, default=None, help="Broker symbol (optional)")
    parser.add_argument("--config", type=str, default=None, help="Playbook config JSON (optional)")
    parser.add_argument("--delimiter", type=str, default=",", help="CSV delimiter")
    parser.add_argument("--json", action="store_true", help="Print the signal as JSON")
    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging()

    try:
        candles = CandleLoader.load_csv(args.csv, delimiter=args.delimiter)
        config_path = args.config or get_settings().playbooks_config_path
        config = load_playbook_config(config_path) if config_path else None
        result = analyze(
            candles,
            args.pdh,
            args.pdl,
            instrument=args.instrument,
            timeframe=args.timeframe,
            symbol=args.symbol,
            config=config,
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error("Analysis failed: %s", e)
        return 1

    signal = result.signal
    if args.json:
        print(json.dumps(signal.to_dict(), indent=2))
        return 0

    print(f"\n{'='*60}")
    print(f"  {signal.instrument} {signal.timeframe}: {signal.direction.upper()} "
          f"{signal.confidence}% (grade {signal.grade})")
    print(f"  Playbook: {signal.playbook}")
    if result.classification.signal is not None:
        print(f"  Context: {result.classification.signal.context}")
        print(f"  TP logic: {result.classification.signal.tp_logic}")
    print(f"{'─'*60}")
    for reason in signal.reasons:
        print(f"  + {reason}")
    for hint in signal.risk_hints:
        print(f"  ! {hint}")
    print(f"{'='*60}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python
"""
Backtest CLI.

Replays the playbook classifier candle by candle over a CSV of OHLCV
candles, simulates the resulting trades and prints a performance
report. Deterministic; stop-loss wins when stop and target are hit in
the same candle.

Usage:
    python scripts/run_backtest.py \\
        --csv data/es_5m.csv \\
        --pdh 4600 --pdl 4400 \\
        --output results/backtest_report.json

Example with a single playbook and dynamic targets (PDH/PDL):
    python scripts/run_backtest.py \\
        --csv data/es_5m.csv \\
        --playbook NBB \\
        --risk 1 --sl 10 --tp 0 \\
        --capital 50000
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add parent directory to path to allow running as script
sys.path.insert(0, str(Path(__file__).parent.parent))

from backtest_replay.candle_loader import CandleLoader
from backtest_replay.replay_runner import run_backtest
from backtest_replay.report import render_report, result_to_dict
from backtest_replay.schemas import RiskConfig
from playbook_agent.config import get_settings, load_playbook_config
from playbook_agent.logger import setup_logging
from playbook_agent.playbooks import Playbook

logger = logging.getLogger("run_backtest")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--csv", type=str, required=True, help="Path to OHLCV candles CSV file")
    parser.add_argument("--pdh", type=float, default=None, help="Previous day high (default: max high in CSV)")
    parser.add_argument("--pdl", type=float, default=None, help="Previous day low (default: min low in CSV)")
    parser.add_argument("--risk", type=float, default=2.0, help="Risk per trade, percent of capital")
    parser.add_argument("--sl", type=float, default=20.0, help="Stop loss distance in points")
    parser.add_argument("--tp", type=float, default=40.0, help="Take profit distance in points (0 = PDH/PDL)")
    parser.add_argument("--max-positions", type=int, default=1, help="Maximum concurrent positions")
    parser.add_argument("--capital", type=float, default=100000.0, help="Starting capital")
    parser.add_argument("--playbook", type=str, default=None, help="Only trade this playbook (NBB, TORI, FABIO, JADECAP)")
    parser.add_argument("--config", type=str, default=None, help="Playbook config JSON (optional)")
    parser.add_argument("--lookback", type=int, default=None, help="Context window in candles (default from settings)")
    parser.add_argument("--delimiter", type=str, default=",", help="CSV delimiter")
    parser.add_argument("--no-trades", action="store_true", help="Omit the trade list from the JSON report")
    parser.add_argument("--output", type=str, default=None, help="Output JSON report path (optional)")
    return parser


def run(args) -> dict:
    """Load candles, run the simulation and return the JSON report."""
    settings = get_settings()
    candles = CandleLoader.load_csv(args.csv, delimiter=args.delimiter)
    pdh = args.pdh if args.pdh is not None else max(c.high for c in candles)
    pdl = args.pdl if args.pdl is not None else min(c.low for c in candles)

    config_path = args.config or settings.playbooks_config_path
    config = load_playbook_config(config_path) if config_path else None
    playbook = Playbook.parse(args.playbook) if args.playbook and args.playbook.lower() != "all" else None

    risk = RiskConfig(
        risk_per_trade_percent=args.risk,
        stop_loss_points=args.sl,
        take_profit_points=args.tp or None,
        max_positions=args.max_positions,
    )
    result = run_backtest(
        candles,
        pdh,
        pdl,
        risk_config=risk,
        starting_capital=args.capital,
        playbook_filter=playbook,
        config=config,
        lookback=args.lookback or settings.lookback,
    )
    for line in render_report(result):
        logger.info(line)

    report = result_to_dict(result, include_trades=not args.no_trades)
    report["config"]["csv"] = str(args.csv)
    report["config"]["previous_day_high"] = pdh
    report["config"]["previous_day_low"] = pdl
    return report


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging()

    try:
        report = run(args)
    except (FileNotFoundError, ValueError) as e:
        # ConfigError and pydantic's ValidationError are both ValueErrors
        logger.error("Backtest failed: %s", e)
        return 1

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(report, f, indent=2)
        logger.info("Report saved to: %s", output_path)

    return 0


if __name__ == "__main__":
    sys.exit(main())

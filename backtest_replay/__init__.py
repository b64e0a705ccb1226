"""
Backtest replay package initialization.

Replays the playbook pipeline candle by candle over historical data,
simulates the resulting trades and reduces them to performance
metrics. Trades are bookkeeping records only; nothing is sent to a
broker.
"""

from .candle_loader import CandleLoader
from .replay_runner import BacktestRunner, run_backtest
from .schemas import (
    BacktestMetrics,
    EquityCurvePoint,
    ExitReason,
    PerformanceStats,
    PlaybookBreakdown,
    RiskConfig,
    SimulationResult,
    Trade,
)

__all__ = [
    "BacktestMetrics",
    "BacktestRunner",
    "CandleLoader",
    "EquityCurvePoint",
    "ExitReason",
    "PerformanceStats",
    "PlaybookBreakdown",
    "RiskConfig",
    "SimulationResult",
    "Trade",
    "run_backtest",
]

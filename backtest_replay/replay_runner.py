"""
Replay the playbook pipeline over historical candles.

Pipeline, per candle:
1. Test every open trade's stop and target against the candle range
2. If below the position limit, rebuild the market context from the
   trailing window ending at this candle and classify it
3. On a (filtered) match, size and open a trade at the candle close

Remaining trades are closed at the last close (END_OF_DATA), then the
closed-trade list is reduced to metrics, stats and a playbook breakdown.
When a candle touches both stop and target, the stop is taken.
"""

import logging
import math
import time
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple, Union

from playbook_agent.classifier import classify
from playbook_agent.config import PlaybooksConfig
from playbook_agent.context import build_context
from playbook_agent.metrics import backtest_trades_total
from playbook_agent.playbooks import Playbook
from playbook_agent.schemas import Candle

from .metrics import compute_backtest_metrics, compute_performance_stats, compute_playbook_breakdown
from .schemas import EquityCurvePoint, ExitReason, RiskConfig, SimulationResult, Trade

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK = 50
MIN_WINDOW = 5


def check_exit(trade: Trade, candle: Candle) -> Optional[Tuple[float, ExitReason]]:
    """Return ``(exit_price, reason)`` if ``candle`` reaches the stop or target."""
    if trade.direction == "bullish":
        if candle.low <= trade.stop_loss:
            return trade.stop_loss, "SL_HIT"
        if candle.high >= trade.take_profit:
            return trade.take_profit, "TP_HIT"
    else:
        if candle.high >= trade.stop_loss:
            return trade.stop_loss, "SL_HIT"
        if candle.low <= trade.take_profit:
            return trade.take_profit, "TP_HIT"
    return None


def _record_close(trade: Trade) -> None:
    backtest_trades_total.labels(playbook=trade.playbook.value, exit_reason=trade.exit_reason).inc()
    logger.info(
        "Trade #%d closed: %s | P&L: %.2f | Reason: %s",
        trade.id, trade.playbook.display_name, trade.profit_loss_currency, trade.exit_reason,
    )


class BacktestRunner:
    """Candle-by-candle simulator. One instance per run; not reusable."""

    def __init__(
        self,
        candles: Sequence[Candle],
        previous_day_high: Optional[float],
        previous_day_low: Optional[float],
        risk_config: RiskConfig,
        starting_capital: float,
        playbook_filter: Optional[Playbook] = None,
        config: Optional[PlaybooksConfig] = None,
        lookback: int = DEFAULT_LOOKBACK,
    ):
        if risk_config.take_profit_points is None and (previous_day_high is None or previous_day_low is None):
            raise ValueError("take_profit_points is required when previous-day levels are not given")
        self.candles = tuple(candles)
        self.previous_day_high = previous_day_high
        self.previous_day_low = previous_day_low
        self.risk_config = risk_config
        self.starting_capital = starting_capital
        self.playbook_filter = playbook_filter
        self.config = config
        self.lookback = lookback

    def run(self) -> SimulationResult:
        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        logger.info(
            "Starting simulation: %d candles, filter=%s, capital=%.2f, risk=%s%%",
            len(self.candles),
            self.playbook_filter.value if self.playbook_filter else "all",
            self.starting_capital,
            self.risk_config.risk_per_trade_percent,
        )

        closed: List[Trade] = []
        open_trades: Tuple[Trade, ...] = ()
        capital = self.starting_capital
        peak = capital
        next_id = 1
        equity_curve: List[EquityCurvePoint] = []

        for index, candle in enumerate(self.candles):
            remaining = []
            for trade in open_trades:
                hit = check_exit(trade, candle)
                if hit is None:
                    remaining.append(trade)
                    continue
                done = trade.close(candle.time, hit[0], hit[1])
                capital += done.profit_loss_currency
                closed.append(done)
                _record_close(done)

            open_trades = tuple(remaining)
            if len(open_trades) < self.risk_config.max_positions:
                opened = self._try_open(index, candle, capital, next_id)
                if opened is not None:
                    open_trades = open_trades + (opened,)
                    next_id += 1

            peak = max(peak, capital)
            equity_curve.append(EquityCurvePoint(index=index, time=candle.time, equity=capital, drawdown=peak - capital))

        if open_trades:
            last = self.candles[-1]
            for trade in open_trades:
                done = trade.close(last.time, last.close, "END_OF_DATA")
                capital += done.profit_loss_currency
                closed.append(done)
                _record_close(done)
            peak = max(peak, capital)
            equity_curve[-1] = EquityCurvePoint(
                index=len(self.candles) - 1, time=last.time, equity=capital, drawdown=peak - capital
            )

        metrics = compute_backtest_metrics(closed, self.starting_capital)
        stats = compute_performance_stats(metrics, self.starting_capital)
        breakdown = compute_playbook_breakdown(closed)
        total_return = (
            (capital - self.starting_capital) / self.starting_capital * 100 if self.starting_capital > 0 else 0.0
        )
        finished_at = datetime.now(timezone.utc)

        logger.info(
            "Simulation complete: %d trades, win rate %.2f%%, net P&L %.2f, return %.2f%%, max DD %.2f (%.2f%%)",
            metrics.total_trades, metrics.win_rate, metrics.net_profit_loss, total_return,
            metrics.max_drawdown, metrics.max_drawdown_percent,
        )
        return SimulationResult(
            trades=closed,
            metrics=metrics,
            stats=stats,
            playbook_breakdown=breakdown,
            starting_capital=self.starting_capital,
            final_capital=capital,
            total_return_percent=total_return,
            risk_config=self.risk_config,
            playbook_filter=self.playbook_filter,
            candle_count=len(self.candles),
            started_at=started_at,
            finished_at=finished_at,
            duration_ms=(time.perf_counter() - start) * 1000,
            equity_curve=equity_curve,
        )

    def _try_open(self, index: int, candle: Candle, capital: float, trade_id: int) -> Optional[Trade]:
        window = self.candles[max(0, index - self.lookback + 1): index + 1]
        if len(window) < MIN_WINDOW:
            return None

        context = build_context(window, self.previous_day_high, self.previous_day_low)
        signal = classify(context, self.config, now=candle.time).signal
        if signal is None:
            return None
        if self.playbook_filter is not None and signal.playbook is not self.playbook_filter:
            return None

        risk = self.risk_config
        size = math.floor(capital * risk.risk_per_trade_percent / 100 / risk.stop_loss_points)
        if size <= 0:
            logger.debug("Skipping %s entry at index %d: position size %d", signal.playbook_name, index, size)
            return None

        entry = candle.close
        bullish = signal.direction == "bullish"
        stop_loss = entry - risk.stop_loss_points if bullish else entry + risk.stop_loss_points
        if risk.take_profit_points is not None:
            take_profit = entry + risk.take_profit_points if bullish else entry - risk.take_profit_points
        else:
            take_profit = self.previous_day_high if bullish else self.previous_day_low

        trade = Trade(
            id=trade_id,
            entry_time=candle.time,
            entry_price=entry,
            direction=signal.direction,
            playbook=signal.playbook,
            size=size,
            stop_loss=stop_loss,
            take_profit=take_profit,
            signal=signal,
        )
        logger.info(
            "Trade #%d opened: %s | %s @ %.2f | SL: %.2f | TP: %.2f | size %d",
            trade.id, signal.playbook_name, trade.direction.upper(), entry, stop_loss, take_profit, size,
        )
        return trade


def run_backtest(
    candles: Sequence[Candle],
    previous_day_high: Optional[float],
    previous_day_low: Optional[float],
    risk_config: Optional[RiskConfig] = None,
    starting_capital: float = 100_000.0,
    playbook_filter: Union[Playbook, str, None] = None,
    config: Optional[PlaybooksConfig] = None,
    lookback: int = DEFAULT_LOOKBACK,
) -> SimulationResult:
    """
    Replay ``candles`` through the classifier and simulate the trades.

    Args:
        candles: Historical candles, ascending by time.
        previous_day_high: Prior-day high for context and dynamic targets.
        previous_day_low: Prior-day low for context and dynamic targets.
        risk_config: Sizing and exit distances (defaults: 2% risk, 20 pt
            stop, 40 pt target, one position).
        starting_capital: Capital at the start of the run.
        playbook_filter: Only open trades for this playbook; "all" or
            None opens trades for any playbook.
        config: Playbook table handed to the classifier.
        lookback: Trailing window length used to build each context.

    Returns:
        SimulationResult with closed trades and aggregate statistics.
    """
    if isinstance(playbook_filter, str) and not isinstance(playbook_filter, Playbook):
        playbook_filter = None if playbook_filter.lower() == "all" else Playbook.parse(playbook_filter)
    runner = BacktestRunner(
        candles,
        previous_day_high,
        previous_day_low,
        risk_config or RiskConfig(),
        starting_capital,
        playbook_filter=playbook_filter,
        config=config,
        lookback=lookback,
    )
    return runner.run()

"""
Data models used by the backtest simulator.

Trades are immutable: closing a trade returns a new ``Trade`` with the
exit fields filled in. Aggregate results are plain dataclasses computed
once from the closed-trade list.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from playbook_agent.playbooks import Playbook
from playbook_agent.schemas import Direction, PlaybookSignal

# Why a simulated trade was closed
ExitReason = Literal["TP_HIT", "SL_HIT", "END_OF_DATA"]


class RiskConfig(BaseModel):
    """Position sizing and exit distances, all in price points.

    ``take_profit_points=None`` targets the previous-day high (longs) or
    low (shorts) instead of a fixed distance.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    risk_per_trade_percent: float = Field(2.0, gt=0, le=100)
    stop_loss_points: float = Field(20.0, gt=0)
    take_profit_points: Optional[float] = Field(40.0, gt=0)
    max_positions: int = Field(1, ge=1)


@dataclass(frozen=True)
class Trade:
    """A simulated position.

    Attributes:
        id: Sequential trade number within one run, starting at 1.
        entry_time: Time of the candle the trade was opened on.
        entry_price: Close of that candle.
        direction: "bullish" (long) or "bearish" (short).
        playbook: Playbook that produced the entry.
        size: Units traded.
        stop_loss: Stop price.
        take_profit: Target price.
        signal: The playbook signal behind the entry.
        exit_time: Time of the closing candle. None while open.
        exit_price: Fill price on exit. None while open.
        exit_reason: Why the trade closed. None while open.
        profit_loss_points: Signed price move captured.
        profit_loss_currency: ``profit_loss_points * size``.
    """

    id: int
    entry_time: datetime
    entry_price: float
    direction: Direction
    playbook: Playbook
    size: int
    stop_loss: float
    take_profit: float
    signal: PlaybookSignal
    exit_time: Optional[datetime] = None
    exit_price: Optional[float] = None
    exit_reason: Optional[ExitReason] = None
    profit_loss_points: Optional[float] = None
    profit_loss_currency: Optional[float] = None

    @property
    def is_closed(self) -> bool:
        return self.exit_time is not None

    def close(self, exit_time: datetime, exit_price: float, reason: ExitReason) -> "Trade":
        sign = 1 if self.direction == "bullish" else -1
        points = sign * (exit_price - self.entry_price)
        return replace(
            self,
            exit_time=exit_time,
            exit_price=exit_price,
            exit_reason=reason,
            profit_loss_points=points,
            profit_loss_currency=points * self.size,
        )


@dataclass(frozen=True)
class BacktestMetrics:
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float
    total_profit: float
    total_loss: float
    net_profit_loss: float
    avg_win: float
    avg_loss: float
    profit_factor: float
    max_drawdown: float
    max_drawdown_percent: float
    largest_win: float
    largest_loss: float
    avg_trade_duration: float
    max_consecutive_wins: int
    max_consecutive_losses: int


@dataclass(frozen=True)
class PerformanceStats:
    expectancy: float
    kelly_criterion: float
    roi: float
    total_return: float
    recovery_factor: float
    avg_risk_reward_ratio: float


@dataclass(frozen=True)
class PlaybookBreakdown:
    playbook: str
    trades_count: int
    win_rate: float
    net_profit_loss: float
    profit_factor: float
    avg_win: float
    avg_loss: float


@dataclass(frozen=True)
class EquityCurvePoint:
    index: int
    time: datetime
    equity: float
    drawdown: float


@dataclass(frozen=True)
class SimulationResult:
    """Everything produced by one backtest run.

    ``final_capital`` always equals ``starting_capital`` plus the sum of
    ``profit_loss_currency`` over ``trades``.
    """

    trades: List[Trade]
    metrics: BacktestMetrics
    stats: PerformanceStats
    playbook_breakdown: List[PlaybookBreakdown]
    starting_capital: float
    final_capital: float
    total_return_percent: float
    risk_config: RiskConfig
    playbook_filter: Optional[Playbook]
    candle_count: int
    started_at: datetime
    finished_at: datetime
    duration_ms: float
    equity_curve: List[EquityCurvePoint] = field(default_factory=list)

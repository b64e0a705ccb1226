"""
Performance metrics for backtest results.

Every function here is a pure reduction over the list of closed trades,
in the order they were closed. Nothing is carried over from the replay
loop itself.

Example usage:

    metrics = compute_backtest_metrics(trades, starting_capital=100_000)
    stats = compute_performance_stats(metrics, starting_capital=100_000)
    by_playbook = compute_playbook_breakdown(trades)
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Tuple

from .schemas import BacktestMetrics, PerformanceStats, PlaybookBreakdown, Trade


def _pnl(trade: Trade) -> float:
    return trade.profit_loss_currency or 0.0


def profit_factor(total_profit: float, total_loss: float) -> float:
    """Gross profit over gross loss; ``inf`` with profits and no losses, 0 with neither."""
    if total_loss > 0:
        return total_profit / total_loss
    return float("inf") if total_profit > 0 else 0.0


def compute_drawdown(trades: Iterable[Trade], starting_capital: float) -> float:
    """Largest drop in realised capital from a running peak.

    The peak starts at ``starting_capital`` and only realised P&L moves
    capital, so open-trade excursions are not counted.
    """
    capital = starting_capital
    peak = starting_capital
    max_dd = 0.0
    for trade in trades:
        capital += _pnl(trade)
        if capital > peak:
            peak = capital
        max_dd = max(max_dd, peak - capital)
    return max_dd


def compute_streaks(trades: Iterable[Trade]) -> Tuple[int, int]:
    """Return ``(max_consecutive_wins, max_consecutive_losses)``.

    A trade with zero P&L counts as a loss.
    """
    max_wins = max_losses = 0
    wins = losses = 0
    for trade in trades:
        if _pnl(trade) > 0:
            wins += 1
            losses = 0
            max_wins = max(max_wins, wins)
        else:
            losses += 1
            wins = 0
            max_losses = max(max_losses, losses)
    return max_wins, max_losses


def compute_backtest_metrics(trades: Sequence[Trade], starting_capital: float) -> BacktestMetrics:
    closed = [t for t in trades if t.is_closed]
    winners = [_pnl(t) for t in closed if _pnl(t) > 0]
    losers = [_pnl(t) for t in closed if _pnl(t) <= 0]

    total_profit = sum(winners)
    total_loss = abs(sum(losers))
    max_dd = compute_drawdown(closed, starting_capital)
    max_wins, max_losses = compute_streaks(closed)

    durations = [(t.exit_time - t.entry_time).total_seconds() for t in closed]

    return BacktestMetrics(
        total_trades=len(closed),
        winning_trades=len(winners),
        losing_trades=len(losers),
        win_rate=len(winners) / len(closed) * 100 if closed else 0.0,
        total_profit=total_profit,
        total_loss=total_loss,
        net_profit_loss=total_profit - total_loss,
        avg_win=total_profit / len(winners) if winners else 0.0,
        avg_loss=total_loss / len(losers) if losers else 0.0,
        profit_factor=profit_factor(total_profit, total_loss),
        max_drawdown=max_dd,
        max_drawdown_percent=max_dd / starting_capital * 100 if starting_capital > 0 else 0.0,
        largest_win=max(winners) if winners else 0.0,
        largest_loss=min(losers) if losers else 0.0,
        avg_trade_duration=sum(durations) / len(durations) if durations else 0.0,
        max_consecutive_wins=max_wins,
        max_consecutive_losses=max_losses,
    )


def compute_performance_stats(metrics: BacktestMetrics, starting_capital: float) -> PerformanceStats:
    """Expectancy, Kelly fraction and return ratios derived from ``metrics``."""
    win_rate = metrics.win_rate / 100
    avg_win = metrics.avg_win
    avg_loss = metrics.avg_loss

    expectancy = win_rate * avg_win - (1 - win_rate) * avg_loss
    kelly = expectancy / avg_win if avg_win > 0 and avg_loss > 0 else 0.0
    roi = metrics.net_profit_loss / starting_capital * 100 if starting_capital > 0 else 0.0

    return PerformanceStats(
        expectancy=expectancy,
        kelly_criterion=kelly,
        roi=roi,
        total_return=roi,
        recovery_factor=metrics.net_profit_loss / metrics.max_drawdown if metrics.max_drawdown > 0 else 0.0,
        avg_risk_reward_ratio=avg_win / avg_loss if avg_loss > 0 else 0.0,
    )


def compute_playbook_breakdown(trades: Iterable[Trade]) -> List[PlaybookBreakdown]:
    """Per-playbook summary, best net P&L first."""
    groups: Dict[str, List[float]] = defaultdict(list)
    for trade in trades:
        groups[trade.playbook.display_name].append(_pnl(trade))

    breakdown = []
    for playbook, pnls in groups.items():
        winners = [p for p in pnls if p > 0]
        losers = [p for p in pnls if p <= 0]
        total_profit = sum(winners)
        total_loss = abs(sum(losers))
        breakdown.append(
            PlaybookBreakdown(
                playbook=playbook,
                trades_count=len(pnls),
                win_rate=len(winners) / len(pnls) * 100,
                net_profit_loss=total_profit - total_loss,
                profit_factor=profit_factor(total_profit, total_loss),
                avg_win=total_profit / len(winners) if winners else 0.0,
                avg_loss=total_loss / len(losers) if losers else 0.0,
            )
        )
    return sorted(breakdown, key=lambda b: b.net_profit_loss, reverse=True)

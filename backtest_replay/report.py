"""Human-readable and JSON renderings of a ``SimulationResult``."""

import logging
import math
from typing import Any, Dict, List

from .schemas import SimulationResult

logger = logging.getLogger(__name__)


def _num(value: float) -> Any:
    # JSON has no infinity
    return None if math.isinf(value) else round(value, 4)


def render_report(result: SimulationResult) -> List[str]:
    """Return the report as a list of lines, one section after another."""
    m, s, rc = result.metrics, result.stats, result.risk_config
    take_profit = f"{rc.take_profit_points} points" if rc.take_profit_points is not None else "Dynamic (PDH/PDL)"
    lines = [
        "=" * 60,
        "SIMULATION REPORT",
        "=" * 60,
        "CONFIGURATION:",
        f"   Starting Capital: {result.starting_capital:,.2f}",
        f"   Risk per Trade: {rc.risk_per_trade_percent}%",
        f"   Stop Loss: {rc.stop_loss_points} points",
        f"   Take Profit: {take_profit}",
        f"   Max Positions: {rc.max_positions}",
        f"   Playbook Filter: {result.playbook_filter.display_name if result.playbook_filter else 'All'}",
        f"   Data Points: {result.candle_count} candles",
        "OVERALL PERFORMANCE:",
        f"   Final Capital: {result.final_capital:,.2f}",
        f"   Total Return: {result.total_return_percent:+.2f}%",
        f"   Net P&L: {m.net_profit_loss:.2f}",
        f"   ROI: {s.roi:.2f}%",
        "TRADE STATISTICS:",
        f"   Total Trades: {m.total_trades}",
        f"   Winning Trades: {m.winning_trades} ({m.win_rate:.2f}%)",
        f"   Losing Trades: {m.losing_trades}",
        f"   Profit Factor: {m.profit_factor:.2f}",
        f"   Expectancy: {s.expectancy:.2f} per trade",
        "WIN/LOSS ANALYSIS:",
        f"   Total Profit: {m.total_profit:.2f}",
        f"   Total Loss: {m.total_loss:.2f}",
        f"   Average Win: {m.avg_win:.2f}",
        f"   Average Loss: {m.avg_loss:.2f}",
        f"   Avg Risk/Reward: {s.avg_risk_reward_ratio:.2f}:1",
        f"   Largest Win: {m.largest_win:.2f}",
        f"   Largest Loss: {m.largest_loss:.2f}",
        "RISK METRICS:",
        f"   Max Drawdown: {m.max_drawdown:.2f} ({m.max_drawdown_percent:.2f}%)",
        f"   Recovery Factor: {s.recovery_factor:.2f}",
        f"   Kelly Criterion: {s.kelly_criterion:.4f}",
        f"   Max Consecutive Wins: {m.max_consecutive_wins}",
        f"   Max Consecutive Losses: {m.max_consecutive_losses}",
    ]
    if result.playbook_breakdown:
        lines.append("PLAYBOOK BREAKDOWN:")
        for pb in result.playbook_breakdown:
            lines.extend([
                f"   {pb.playbook}:",
                f"      Trades: {pb.trades_count}",
                f"      Win Rate: {pb.win_rate:.2f}%",
                f"      Net P&L: {pb.net_profit_loss:.2f}",
                f"      Profit Factor: {pb.profit_factor:.2f}",
                f"      Avg Win: {pb.avg_win:.2f} | Avg Loss: {pb.avg_loss:.2f}",
            ])
    lines.append(f"Execution Time: {result.duration_ms:.0f}ms")
    lines.append("=" * 60)
    return lines


def log_report(result: SimulationResult) -> None:
    for line in render_report(result):
        logger.info(line)


def result_to_dict(result: SimulationResult, include_trades: bool = True) -> Dict[str, Any]:
    """JSON-serialisable summary of ``result``."""
    m, s, rc = result.metrics, result.stats, result.risk_config
    report: Dict[str, Any] = {
        "config": {
            "starting_capital": result.starting_capital,
            "risk": rc.model_dump(),
            "playbook_filter": result.playbook_filter.value if result.playbook_filter else None,
            "candles": result.candle_count,
        },
        "final_capital": round(result.final_capital, 4),
        "total_return_percent": round(result.total_return_percent, 4),
        "metrics": {
            "total_trades": m.total_trades,
            "winning_trades": m.winning_trades,
            "losing_trades": m.losing_trades,
            "win_rate": _num(m.win_rate),
            "total_profit": _num(m.total_profit),
            "total_loss": _num(m.total_loss),
            "net_profit_loss": _num(m.net_profit_loss),
            "avg_win": _num(m.avg_win),
            "avg_loss": _num(m.avg_loss),
            "profit_factor": _num(m.profit_factor),
            "max_drawdown": _num(m.max_drawdown),
            "max_drawdown_percent": _num(m.max_drawdown_percent),
            "largest_win": _num(m.largest_win),
            "largest_loss": _num(m.largest_loss),
            "avg_trade_duration_seconds": _num(m.avg_trade_duration),
            "max_consecutive_wins": m.max_consecutive_wins,
            "max_consecutive_losses": m.max_consecutive_losses,
        },
        "stats": {
            "expectancy": _num(s.expectancy),
            "kelly_criterion": _num(s.kelly_criterion),
            "roi": _num(s.roi),
            "total_return": _num(s.total_return),
            "recovery_factor": _num(s.recovery_factor),
            "avg_risk_reward_ratio": _num(s.avg_risk_reward_ratio),
        },
        "playbook_breakdown": [
            {
                "playbook": pb.playbook,
                "trades": pb.trades_count,
                "win_rate": _num(pb.win_rate),
                "net_profit_loss": _num(pb.net_profit_loss),
                "profit_factor": _num(pb.profit_factor),
                "avg_win": _num(pb.avg_win),
                "avg_loss": _num(pb.avg_loss),
            }
            for pb in result.playbook_breakdown
        ],
        "started_at": result.started_at.isoformat(),
        "duration_ms": round(result.duration_ms, 2),
    }
    if include_trades:
        report["trades"] = [
            {
                "id": t.id,
                "playbook": t.playbook.value,
                "direction": t.direction,
                "entry_time": t.entry_time.isoformat(),
                "entry_price": t.entry_price,
                "size": t.size,
                "stop_loss": t.stop_loss,
                "take_profit": t.take_profit,
                "exit_time": t.exit_time.isoformat() if t.exit_time else None,
                "exit_price": t.exit_price,
                "exit_reason": t.exit_reason,
                "profit_loss_points": t.profit_loss_points,
                "profit_loss_currency": t.profit_loss_currency,
                "confidence": t.signal.confidence,
            }
            for t in result.trades
        ]
    return report

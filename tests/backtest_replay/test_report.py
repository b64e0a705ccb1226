"""
Tests for report rendering and JSON export.
"""

import json

from backtest_replay.replay_runner import run_backtest
from backtest_replay.report import log_report, render_report, result_to_dict
from backtest_replay.schemas import RiskConfig
from playbook_agent.playbooks import Playbook
from tests.scenarios import make_candles, nbb


def winning_run():
    candles = make_candles(nbb.START, nbb.ROWS + [(4430, 4452, 4425, 4445, 800000)])
    risk = RiskConfig(risk_per_trade_percent=1, stop_loss_points=10, take_profit_points=20)
    return run_backtest(
        candles, nbb.PREVIOUS_DAY_HIGH, nbb.PREVIOUS_DAY_LOW,
        risk_config=risk, playbook_filter=Playbook.NBB,
    )


def test_render_report_sections():
    lines = render_report(winning_run())
    for section in (
        "CONFIGURATION:",
        "OVERALL PERFORMANCE:",
        "TRADE STATISTICS:",
        "WIN/LOSS ANALYSIS:",
        "RISK METRICS:",
        "PLAYBOOK BREAKDOWN:",
    ):
        assert section in lines
    assert "   Playbook Filter: NBB" in lines
    assert "   Take Profit: 20.0 points" in lines
    assert "   Final Capital: 102,000.00" in lines
    assert "   Total Trades: 1" in lines


def test_render_report_without_trades():
    result = run_backtest([], 4520, 4405, risk_config=RiskConfig(take_profit_points=None))
    lines = render_report(result)
    assert "PLAYBOOK BREAKDOWN:" not in lines
    assert "   Take Profit: Dynamic (PDH/PDL)" in lines
    assert "   Playbook Filter: All" in lines


def test_log_report(caplog):
    caplog.set_level("INFO", logger="backtest_replay.report")
    log_report(winning_run())
    assert "SIMULATION REPORT" in caplog.text


def test_result_to_dict_is_json_safe():
    report = result_to_dict(winning_run())
    # Profit factor is infinite with no losing trades
    assert report["metrics"]["profit_factor"] is None
    assert report["playbook_breakdown"][0]["profit_factor"] is None
    assert report["config"]["playbook_filter"] == "NBB"
    assert report["final_capital"] == 102_000
    assert report["trades"][0]["exit_reason"] == "TP_HIT"
    assert report["trades"][0]["playbook"] == "NBB"
    json.dumps(report)


def test_result_to_dict_without_trades():
    report = result_to_dict(winning_run(), include_trades=False)
    assert "trades" not in report
    assert report["metrics"]["total_trades"] == 1

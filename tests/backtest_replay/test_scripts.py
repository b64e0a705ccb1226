"""
Tests for the command line entry points in scripts/.
"""

import json
import sys
from pathlib import Path

import pytest

# Add scripts directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "scripts"))
import analyze_csv  # noqa: E402
import run_backtest  # noqa: E402

from tests.scenarios import nbb  # noqa: E402

EXIT_ROW = (4430, 4452, 4425, 4445, 800000)


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(run_backtest, "setup_logging", lambda: None)
    monkeypatch.setattr(analyze_csv, "setup_logging", lambda: None)


@pytest.fixture
def candles_csv(tmp_path):
    path = tmp_path / "es_5m.csv"
    lines = ["time,open,high,low,close,volume"]
    for candle, row in zip(nbb.CANDLES, nbb.ROWS):
        lines.append(f"{candle.time.isoformat()},{row[0]},{row[1]},{row[2]},{row[3]},{row[4]}")
    last = nbb.CANDLES[-1].time.timestamp() + 300
    lines.append(f"{int(last)},{','.join(str(v) for v in EXIT_ROW)}")
    path.write_text("\n".join(lines) + "\n")
    return path


class TestRunBacktestCli:
    def test_writes_json_report(self, candles_csv, tmp_path):
        output = tmp_path / "out" / "report.json"
        code = run_backtest.main([
            "--csv", str(candles_csv),
            "--pdh", "4520", "--pdl", "4405",
            "--risk", "1", "--sl", "10", "--tp", "20",
            "--playbook", "NBB",
            "--output", str(output),
        ])
        assert code == 0
        report = json.loads(output.read_text())
        assert report["final_capital"] == 102_000
        assert report["config"]["previous_day_high"] == 4520
        assert report["config"]["csv"] == str(candles_csv)
        assert len(report["trades"]) == 1

    def test_zero_tp_means_dynamic_target(self, candles_csv):
        args = run_backtest.build_parser().parse_args([
            "--csv", str(candles_csv), "--pdh", "4520", "--pdl", "4405",
            "--risk", "1", "--sl", "10", "--tp", "0", "--no-trades",
        ])
        report = run_backtest.run(args)
        assert report["config"]["risk"]["take_profit_points"] is None
        assert "trades" not in report
        assert report["metrics"]["total_trades"] == 1

    def test_missing_csv_fails(self, tmp_path):
        assert run_backtest.main(["--csv", str(tmp_path / "missing.csv")]) == 1

    def test_unknown_playbook_fails(self, candles_csv):
        assert run_backtest.main(["--csv", str(candles_csv), "--playbook", "silver"]) == 1

    def test_bad_config_fails(self, candles_csv, tmp_path):
        config = tmp_path / "playbooks.json"
        config.write_text("{}")
        assert run_backtest.main(["--csv", str(candles_csv), "--config", str(config)]) == 1


class TestAnalyzeCsvCli:
    def test_prints_json_signal(self, candles_csv, capsys):
        code = analyze_csv.main([
            "--csv", str(candles_csv), "--pdh", "4520", "--pdl", "4405",
            "--instrument", "ES", "--timeframe", "5m", "--json",
        ])
        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["instrument"] == "ES"
        assert payload["timeframe"] == "5m"
        assert payload["grade"] in ("A", "B", "C")

    def test_prints_banner(self, candles_csv, capsys):
        assert analyze_csv.main(["--csv", str(candles_csv), "--instrument", "ES"]) == 0
        out = capsys.readouterr().out
        assert "ES 5m:" in out
        assert "Playbook:" in out

    def test_missing_csv_fails(self, tmp_path):
        assert analyze_csv.main(["--csv", str(tmp_path / "missing.csv")]) == 1

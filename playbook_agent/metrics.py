"""Prometheus collectors for classification, normalisation and backtests."""

from prometheus_client import Counter, Histogram

playbook_classifications_total = Counter(
    'playbook_classifications_total', 'Classifier results by matched playbook', ['playbook']
)
playbook_rejections_total = Counter(
    'playbook_rejections_total', 'Playbook signals rejected below min confidence', ['playbook']
)
playbook_classify_latency_seconds = Histogram(
    'playbook_classify_latency_seconds', 'Classifier latency (seconds)'
)
flowrex_signals_total = Counter('flowrex_signals_total', 'Normalized signals by grade', ['grade'])
backtest_trades_total = Counter(
    'backtest_trades_total', 'Closed simulated trades', ['playbook', 'exit_reason']
)

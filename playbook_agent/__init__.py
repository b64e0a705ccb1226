"""
Market playbook agent.

Runs a battery of price-action detectors over a candle series, picks the
highest-priority trading playbook whose conditions hold and normalises
it into a graded signal. The pipeline is pure and synchronous; every
call builds its own context.
"""

from .agent import AnalysisResult, InsufficientDataError, analyze
from .classifier import check_playbook, classify
from .config import ConfigError, PlaybookConfig, PlaybooksConfig, default_playbooks_config, load_playbook_config
from .context import MarketDataError, build_context
from .playbooks import Playbook, evaluate_playbook
from .schemas import Candle, ClassifierOutput, FlowrexSignal, MarketContext, PlaybookSignal
from .signal_engine import grade_for, normalize

__all__ = [
    "AnalysisResult",
    "Candle",
    "ClassifierOutput",
    "ConfigError",
    "FlowrexSignal",
    "InsufficientDataError",
    "MarketContext",
    "MarketDataError",
    "Playbook",
    "PlaybookConfig",
    "PlaybookSignal",
    "PlaybooksConfig",
    "analyze",
    "build_context",
    "check_playbook",
    "classify",
    "default_playbooks_config",
    "evaluate_playbook",
    "grade_for",
    "load_playbook_config",
    "normalize",
]

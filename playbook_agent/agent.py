"""
Live-path entry point: candles in, context + classification + graded
signal out.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from playbook_agent.classifier import classify
from playbook_agent.config import PlaybooksConfig
from playbook_agent.context import MarketDataError, build_context
from playbook_agent.schemas import Candle, ClassifierOutput, FlowrexSignal, MarketContext
from playbook_agent.signal_engine import normalize

logger = logging.getLogger(__name__)

MIN_ANALYSIS_CANDLES = 3


class InsufficientDataError(MarketDataError):
    """Raised when too few candles are supplied for a top-level analysis."""


@dataclass(frozen=True)
class AnalysisResult:
    context: MarketContext
    classification: ClassifierOutput
    signal: FlowrexSignal


def analyze(
    candles: Sequence[Candle],
    previous_day_high: Optional[float] = None,
    previous_day_low: Optional[float] = None,
    *,
    instrument: str,
    timeframe: str,
    symbol: Optional[str] = None,
    config: Optional[PlaybooksConfig] = None,
    now: Optional[datetime] = None,
) -> AnalysisResult:
    """
    Run the full pipeline once over ``candles``.

    Previous-day levels default to the highest high and lowest low of
    the supplied candles.

    Raises:
        InsufficientDataError: If fewer than three candles are supplied.
    """
    if len(candles) < MIN_ANALYSIS_CANDLES:
        raise InsufficientDataError(
            f"At least {MIN_ANALYSIS_CANDLES} candles required, got {len(candles)}"
        )

    if previous_day_high is None:
        previous_day_high = max(c.high for c in candles)
    if previous_day_low is None:
        previous_day_low = min(c.low for c in candles)

    logger.info(
        "Analyzing %s %s: %d candles, PDH=%s PDL=%s",
        instrument, timeframe, len(candles), previous_day_high, previous_day_low,
    )
    context = build_context(candles, previous_day_high, previous_day_low)
    classification = classify(context, config, now=now)
    if classification.signal is None:
        logger.warning("No playbook activated, market conditions not met")
    signal = normalize(context, classification, instrument, timeframe, symbol=symbol, now=now)
    return AnalysisResult(context=context, classification=classification, signal=signal)

"""
Priority-ordered playbook classifier.

Enabled playbooks are evaluated in ascending priority; the first signal
that clears its playbook's minimum confidence wins. The configuration is
passed in explicitly, so two calls with the same context and the same
config always select the same playbook.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from playbook_agent.config import PlaybookConfig, PlaybooksConfig, default_playbooks_config
from playbook_agent.metrics import (
    playbook_classifications_total,
    playbook_classify_latency_seconds,
    playbook_rejections_total,
)
from playbook_agent.playbooks import Playbook, evaluate_playbook
from playbook_agent.schemas import ClassifierOutput, MarketContext, PlaybookSignal

logger = logging.getLogger(__name__)


def check_playbook(
    playbook: Playbook,
    context: MarketContext,
    config: PlaybookConfig,
) -> Optional[PlaybookSignal]:
    """Evaluate one playbook and drop its signal if below ``config.min_confidence``."""
    signal = evaluate_playbook(playbook, context)
    if signal is None:
        return None
    if signal.confidence < config.min_confidence:
        logger.info(
            "[%s] confidence %s below minimum %s, rejected",
            playbook.value, signal.confidence, config.min_confidence,
        )
        playbook_rejections_total.labels(playbook=playbook.value).inc()
        return None
    return signal


def classify(
    context: MarketContext,
    config: Optional[PlaybooksConfig] = None,
    now: Optional[datetime] = None,
) -> ClassifierOutput:
    """
    Select the highest-priority playbook whose guard chain passes.

    Args:
        context: Market snapshot to classify.
        config: Playbook table; the built-in defaults when omitted.
        now: Timestamp stamped on the output (current UTC time by default).

    Returns:
        ClassifierOutput with the winning signal and its configured
        priority, or ``signal=None`` and ``priority=0`` when nothing matched.
    """
    config = config or default_playbooks_config()
    timestamp = now or datetime.now(timezone.utc)
    start = time.perf_counter()
    try:
        for playbook, playbook_config in config.ordered():
            logger.debug("Checking %s (priority %d)", playbook.value, playbook_config.priority)
            signal = check_playbook(playbook, context, playbook_config)
            if signal is not None:
                logger.info(
                    "Playbook selected: %s %s @ %s",
                    signal.playbook_name, signal.direction, signal.confidence,
                )
                playbook_classifications_total.labels(playbook=playbook.value).inc()
                return ClassifierOutput(signal=signal, priority=playbook_config.priority, timestamp=timestamp)

        logger.debug("No playbook conditions met")
        playbook_classifications_total.labels(playbook="none").inc()
        return ClassifierOutput(signal=None, priority=0, timestamp=timestamp)
    finally:
        playbook_classify_latency_seconds.observe(time.perf_counter() - start)

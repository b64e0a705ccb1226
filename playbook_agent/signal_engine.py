"""
Normalise a classifier result into a graded ``FlowrexSignal``.

Confidence starts at the playbook's own score and is adjusted by the
penalties and boosts below, then clamped to [0, 100]:

    late NY session (hour >= 20 UTC)       -5
    high volatility without displacement  -10
    Asian session                          -5
    counter-trend to HTF                  -15
    sweep + structure break + OTE         +10
    volume spike + displacement            +5
    respected trendline                    +5

Example:
    >>> ctx = build_context(candles, pdh, pdl)
    >>> signal = normalize(ctx, classify(ctx), instrument="ES", timeframe="5m")
    >>> signal.grade
    'A'
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from playbook_agent.metrics import flowrex_signals_total
from playbook_agent.playbooks import Playbook
from playbook_agent.schemas import ClassifierOutput, FlowrexSignal, Grade, MarketContext, ensure_utc

logger = logging.getLogger(__name__)

LATE_SESSION_HOUR = 20
NO_MATCH_PLAYBOOK = "NONE"


def grade_for(confidence: float) -> Grade:
    if confidence >= 75:
        return "A"
    if confidence >= 50:
        return "B"
    return "C"


def _risk_adjustments(context: MarketContext, direction: str, now: datetime) -> List[Tuple[str, int]]:
    penalties = []
    if context.session == "ny" and now.hour >= LATE_SESSION_HOUR:
        penalties.append(("Late NY session", -5))
    if context.volatility == "high" and not context.displacement:
        penalties.append(("High volatility without clear displacement", -10))
    if context.session == "asian":
        penalties.append(("Asian session (lower liquidity)", -5))
    if _is_counter_trend(context, direction):
        penalties.append(("Counter-trend trade (against HTF)", -15))
    return penalties


def _confluence_adjustments(context: MarketContext) -> List[Tuple[str, int]]:
    boosts = []
    if context.liquidity_sweep and context.structure_break and context.ote_retrace:
        boosts.append(("Triple confluence (liquidity + structure + OTE)", 10))
    if context.volume_spike and context.displacement:
        boosts.append(("Strong volume + displacement", 5))
    if context.trendline.exists and context.trendline.respected:
        boosts.append(("Respected trendline", 5))
    return boosts


def _is_counter_trend(context: MarketContext, direction: str) -> bool:
    return (direction == "long" and context.htf_trend == "bearish") or (
        direction == "short" and context.htf_trend == "bullish"
    )


def _is_aligned(context: MarketContext, direction: str) -> bool:
    return (direction == "long" and context.htf_trend == "bullish") or (
        direction == "short" and context.htf_trend == "bearish"
    )


def normalize(
    context: MarketContext,
    output: ClassifierOutput,
    instrument: str,
    timeframe: str,
    symbol: Optional[str] = None,
    now: Optional[datetime] = None,
) -> FlowrexSignal:
    """
    Build the unified signal for ``output``.

    ``now`` drives the late-session check and ``created_at``; it defaults
    to the current UTC time.
    """
    now = ensure_utc(now or datetime.now(timezone.utc))

    if output.signal is None:
        logger.warning("No playbook matched, returning neutral signal for %s %s", instrument, timeframe)
        flowrex_signals_total.labels(grade="C").inc()
        return FlowrexSignal(
            direction="neutral",
            confidence=0,
            grade="C",
            playbook=NO_MATCH_PLAYBOOK,
            primary_playbook=NO_MATCH_PLAYBOOK,
            reasons=("No playbook conditions met",),
            risk_hints=(),
            timeframe=timeframe,
            instrument=instrument,
            symbol=symbol,
            created_at=now,
        )

    signal = output.signal
    direction = "long" if signal.direction == "bullish" else "short"

    penalties = _risk_adjustments(context, direction, now)
    boosts = _confluence_adjustments(context)
    confidence = signal.confidence + sum(delta for _, delta in penalties + boosts)
    confidence = max(0, min(100, confidence))
    grade = grade_for(confidence)

    reasons = [f"{signal.playbook_name} playbook conditions met"]
    if _is_aligned(context, direction):
        reasons.append(f"Aligned with {context.htf_trend} HTF trend")
    if context.liquidity_sweep:
        reasons.append(f"Liquidity sweep detected ({context.swept_direction})")
    if context.structure_break:
        reasons.append(f"Structure break ({context.break_direction})")
    if context.ote_retrace and context.ote_level is not None:
        reasons.append(f"OTE retrace to {context.ote_level * 100:.1f}% level")
    reasons.append(f"{context.session.upper()} session")
    if context.volume_spike:
        reasons.append("Volume spike confirmation")
    reasons.extend(label for label, _ in boosts)

    risk_hints = [label for label, _ in penalties]
    if context.balance_zones.in_balance:
        risk_hints.append("Price in balance zone (potential consolidation)")
    if not context.volume_spike and not context.displacement:
        risk_hints.append("Low volume activity (weaker conviction)")
    if context.volatility == "low" and signal.playbook is Playbook.NBB:
        risk_hints.append("Low volatility may limit profit potential")

    logger.info(
        "Signal generated: %s @ %s (grade %s) via %s, %d reasons, %d risk hints",
        direction.upper(), confidence, grade, signal.playbook_name, len(reasons), len(risk_hints),
    )
    flowrex_signals_total.labels(grade=grade).inc()
    return FlowrexSignal(
        direction=direction,
        confidence=confidence,
        grade=grade,
        playbook=signal.playbook_name,
        primary_playbook=signal.playbook_name,
        reasons=tuple(reasons),
        risk_hints=tuple(risk_hints),
        timeframe=timeframe,
        instrument=instrument,
        symbol=symbol,
        created_at=now,
    )

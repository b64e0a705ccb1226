"""
Fabio auction model: the market has left balance through a low-volume
node with aggressive volume and a confirming structure break.
"""

from typing import Optional

from playbook_agent.playbooks.base import Playbook, passes_guards
from playbook_agent.schemas import MarketContext, PlaybookSignal

BASE_CONFIDENCE = 75

GUARDS = (
    ("balance to imbalance", lambda ctx: not ctx.balance_zones.in_balance),
    ("low volume node", lambda ctx: ctx.balance_zones.lvn_detected),
    ("footprint aggression", lambda ctx: ctx.displacement and ctx.volume_spike),
    ("orderflow confirmation", lambda ctx: ctx.structure_break and ctx.htf_trend != "neutral"),
)


def evaluate_fabio(context: MarketContext) -> Optional[PlaybookSignal]:
    if not passes_guards(Playbook.FABIO, context, GUARDS):
        return None

    direction = context.htf_trend
    confidence = BASE_CONFIDENCE
    if context.volume_spike and context.displacement:
        confidence += 5
    if context.break_direction == context.htf_trend:
        confidence += 5

    gap = context.imbalance
    gap_text = f"{gap.type} between {gap.bottom} and {gap.top}" if gap.detected else "low volume node"
    return PlaybookSignal(
        playbook=Playbook.FABIO,
        playbook_name=Playbook.FABIO.display_name,
        direction=direction,
        context=f"Balance broken {direction} through {gap_text}, aggression confirmed by displacement",
        tp_logic="Target the next high volume node or prior balance extreme",
        confidence=confidence,
        session=context.session,
    )

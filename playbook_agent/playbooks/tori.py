"""Tori trendline continuation: trade with the bias off a respected trendline."""

from typing import Optional

from playbook_agent.playbooks.base import Playbook, passes_guards
from playbook_agent.schemas import MarketContext, PlaybookSignal

BASE_CONFIDENCE = 80

GUARDS = (
    ("trendline with htf bias", lambda ctx: ctx.trendline.exists and ctx.htf_trend != "neutral"),
    ("trendline respected", lambda ctx: ctx.trendline.respected and ctx.trendline.touches >= 2),
    ("clean structure", lambda ctx: ctx.balance_zones.in_balance),
    ("london or ny session", lambda ctx: ctx.session in ("london", "ny")),
)


def evaluate_tori(context: MarketContext) -> Optional[PlaybookSignal]:
    if not passes_guards(Playbook.TORI, context, GUARDS):
        return None

    direction = context.htf_trend
    confidence = BASE_CONFIDENCE
    if context.trendline.touches >= 3:
        confidence += 5
    if context.session == "ny":
        confidence += 5

    line = context.trendline.direction or "trend"
    return PlaybookSignal(
        playbook=Playbook.TORI,
        playbook_name=Playbook.TORI.display_name,
        direction=direction,
        context=(
            f"{line.capitalize()} trendline respected with {context.trendline.touches} touches "
            f"in {context.session.upper()} session"
        ),
        tp_logic="Target the opposite side of the current range, trail below the trendline",
        confidence=confidence,
        session=context.session,
    )

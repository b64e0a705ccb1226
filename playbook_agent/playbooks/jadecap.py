"""JadeCap liquidity model: New York reversal after a session liquidity sweep."""

from typing import Optional

from playbook_agent.playbooks.base import Playbook, passes_guards
from playbook_agent.schemas import MarketContext, PlaybookSignal

BASE_CONFIDENCE = 80

GUARDS = (
    ("session sweep", lambda ctx: ctx.liquidity_sweep and ctx.swept_direction is not None),
    ("ny window", lambda ctx: ctx.session == "ny"),
    ("fvg or mss", lambda ctx: ctx.structure_break and ctx.displacement),
    ("volatility", lambda ctx: ctx.volatility == "high" and ctx.volume_spike),
)


def evaluate_jadecap(context: MarketContext) -> Optional[PlaybookSignal]:
    if not passes_guards(Playbook.JADECAP, context, GUARDS):
        return None

    # Taking sell-side liquidity sets up longs, buy-side sets up shorts.
    direction = "bullish" if context.swept_direction == "low" else "bearish"
    confidence = BASE_CONFIDENCE
    if context.volume_spike and context.displacement:
        confidence += 5
    if context.break_direction == direction:
        confidence += 5

    swept_level = next((z.level for z in context.liquidity_zones if z.swept), None)
    target = context.previous_day_high if direction == "bullish" else context.previous_day_low
    return PlaybookSignal(
        playbook=Playbook.JADECAP,
        playbook_name=Playbook.JADECAP.display_name,
        direction=direction,
        context=(
            f"{context.swept_direction.capitalize()} liquidity swept at {swept_level} "
            f"then {context.break_direction} shift in NY session"
        ),
        tp_logic=f"Target opposing liquidity at {target}" if target is not None else "Target opposing session liquidity",
        confidence=confidence,
        session=context.session,
    )

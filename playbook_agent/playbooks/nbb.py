"""
NBB model: higher-timeframe bias, price in the matching premium or
discount half, opposite-side liquidity taken, structure broken with the
bias, displacement on volume and a retracement into the OTE band.
"""

from typing import Optional

from playbook_agent.playbooks.base import Playbook, passes_guards
from playbook_agent.schemas import MarketContext, PlaybookSignal

BASE_CONFIDENCE = 80
SWEET_SPOT_OTE = 0.705


def _has_bias(ctx: MarketContext) -> bool:
    return ctx.htf_trend != "neutral"


def _in_po3_zone(ctx: MarketContext) -> bool:
    if not (ctx.po3_zone_present and ctx.price_at_po3):
        return False
    wanted = "discount" if ctx.htf_trend == "bullish" else "premium"
    return ctx.premium_discount == wanted


def _opposite_sweep(ctx: MarketContext) -> bool:
    wanted = "low" if ctx.htf_trend == "bullish" else "high"
    return ctx.liquidity_sweep and ctx.swept_direction == wanted


def _aligned_break(ctx: MarketContext) -> bool:
    return ctx.structure_break and ctx.break_direction == ctx.htf_trend


def _displacement(ctx: MarketContext) -> bool:
    return ctx.volume_spike and ctx.displacement


def _ote(ctx: MarketContext) -> bool:
    return ctx.ote_retrace and ctx.ote_level is not None and 0.62 <= ctx.ote_level <= 0.79


GUARDS = (
    ("htf bias", _has_bias),
    ("po3 zone", _in_po3_zone),
    ("liquidity sweep against bias", _opposite_sweep),
    ("structure break with bias", _aligned_break),
    ("volume displacement", _displacement),
    ("ote retrace", _ote),
)


def evaluate_nbb(context: MarketContext) -> Optional[PlaybookSignal]:
    if not passes_guards(Playbook.NBB, context, GUARDS):
        return None

    direction = context.htf_trend
    confidence = BASE_CONFIDENCE
    if context.displacement:
        confidence += 5
    if context.ote_level == SWEET_SPOT_OTE:
        confidence += 5

    zone = context.premium_discount
    swept = "sell-side" if context.swept_direction == "low" else "buy-side"
    if direction == "bullish":
        tp_logic = f"Target previous day high {context.previous_day_high} or next buy-side liquidity"
    else:
        tp_logic = f"Target previous day low {context.previous_day_low} or next sell-side liquidity"
    return PlaybookSignal(
        playbook=Playbook.NBB,
        playbook_name=Playbook.NBB.display_name,
        direction=direction,
        context=(
            f"{direction.capitalize()} HTF bias, price in {zone}, {swept} liquidity swept, "
            f"structure broken {context.break_direction}, OTE {context.ote_level}"
        ),
        tp_logic=tp_logic,
        confidence=confidence,
        session=context.session,
    )

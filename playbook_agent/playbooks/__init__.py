"""
The closed set of playbooks and their evaluators.

``evaluate_playbook`` dispatches over every ``Playbook`` member
explicitly; adding a member without a branch raises at call time.
"""

from typing import Optional

from playbook_agent.schemas import MarketContext, PlaybookSignal

from .base import Playbook
from .fabio import evaluate_fabio
from .jadecap import evaluate_jadecap
from .nbb import evaluate_nbb
from .tori import evaluate_tori


def evaluate_playbook(playbook: Playbook, context: MarketContext) -> Optional[PlaybookSignal]:
    if playbook is Playbook.NBB:
        return evaluate_nbb(context)
    if playbook is Playbook.TORI:
        return evaluate_tori(context)
    if playbook is Playbook.FABIO:
        return evaluate_fabio(context)
    if playbook is Playbook.JADECAP:
        return evaluate_jadecap(context)
    raise ValueError(f"Unhandled playbook: {playbook!r}")


__all__ = [
    "Playbook",
    "evaluate_playbook",
    "evaluate_fabio",
    "evaluate_jadecap",
    "evaluate_nbb",
    "evaluate_tori",
]

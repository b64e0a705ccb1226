"""Playbook identity and the guard-chain runner shared by every playbook."""

import logging
from enum import Enum
from typing import Callable, Sequence, Tuple

from playbook_agent.schemas import MarketContext

logger = logging.getLogger(__name__)

Guard = Tuple[str, Callable[[MarketContext], bool]]


class Playbook(str, Enum):
    NBB = "NBB"
    TORI = "TORI"
    FABIO = "FABIO"
    JADECAP = "JADECAP"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: str) -> "Playbook":
        """Look up a playbook by enum value or display name, case-insensitively."""
        wanted = value.strip().upper()
        for member in cls:
            if wanted in (member.value, member.display_name.upper()):
                return member
        raise ValueError(f"Unknown playbook: {value!r}")


_DISPLAY_NAMES = {
    Playbook.NBB: "NBB",
    Playbook.TORI: "Tori Trendline",
    Playbook.FABIO: "Fabio Auction Market",
    Playbook.JADECAP: "JadeCap Liquidity Model",
}


def passes_guards(playbook: Playbook, context: MarketContext, guards: Sequence[Guard]) -> bool:
    """Evaluate ``guards`` in order, stopping at the first that fails."""
    for name, check in guards:
        if not check(context):
            logger.debug("[%s] guard failed: %s", playbook.value, name)
            return False
    return True

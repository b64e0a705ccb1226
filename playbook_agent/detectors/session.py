"""Trading session lookup by UTC hour."""

from datetime import datetime

from playbook_agent.schemas import Session, ensure_utc

# UTC hour boundaries: London 07:00-13:00, New York 13:00-22:00, Asia otherwise
LONDON_OPEN = 7
NY_OPEN = 13
NY_CLOSE = 22


def detect_session(when: datetime) -> Session:
    hour = ensure_utc(when).hour
    if LONDON_OPEN <= hour < NY_OPEN:
        return "london"
    if NY_OPEN <= hour < NY_CLOSE:
        return "ny"
    return "asian"

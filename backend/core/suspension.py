"""
Suspension rules over locally stored card history.

Two rules, evaluated in order against a player's per-matchday card records
for one season:

    A. Red card in the most recent recorded matchday, with nothing recorded
       after it → suspended for the next match.
    B. Five or more yellow cards across the five most recent recorded
       matchdays → suspended for accumulation.

Pure functions only; the caller loads the records.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

STATUS_AVAILABLE = "AVAILABLE"
STATUS_INJURED = "INJURED"
STATUS_SUSPENDED = "SUSPENDED"

REASON_INJURED = "injured"
REASON_RED_CARD = "red card suspension"
REASON_ACCUMULATED = "accumulated cards"

YELLOW_WINDOW = 5
YELLOW_THRESHOLD = 5


@dataclass(frozen=True)
class CardRecord:
    """Cards a player received in one matchday."""

    player_id: int
    season: int
    jornada: int
    yellow_cards: int = 0
    red_cards: int = 0


@dataclass(frozen=True)
class Availability:
    """Resolved availability for one player."""

    status: str
    reason: Optional[str] = None

    @property
    def is_available(self) -> bool:
        return self.status == STATUS_AVAILABLE


AVAILABLE = Availability(STATUS_AVAILABLE, None)


def evaluate_suspension(records: Iterable[CardRecord]) -> Optional[Availability]:
    """
    Return a SUSPENDED availability if either rule fires, else None.

    ``records`` may arrive in any order; they are ranked by matchday,
    most recent first, before the rules run.
    """
    ranked: List[CardRecord] = sorted(records, key=lambda r: r.jornada, reverse=True)
    if not ranked:
        return None

    # ranked[0] is the last matchday on record, so nothing was played after it.
    latest = ranked[0]
    if (latest.red_cards or 0) > 0:
        return Availability(STATUS_SUSPENDED, REASON_RED_CARD)

    yellows = sum(r.yellow_cards or 0 for r in ranked[:YELLOW_WINDOW])
    if yellows >= YELLOW_THRESHOLD:
        return Availability(STATUS_SUSPENDED, REASON_ACCUMULATED)

    return None

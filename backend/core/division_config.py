"""Division-level configuration: per-competition constants.

:class:`DivisionConfig` is a frozen dataclass carrying what differs between
the divisions a fantasy league can be played in: the upstream competition
id used against API-Football and the key of the player table that holds the
division's squad.  :data:`DIVISIONS` is the registry, iterated in priority
order wherever "try every division" logic is needed (availability
persistence, bet generation for all leagues).

Typical usage::

    from backend.core.division_config import get_division

    cfg = get_division("segunda")
    fixtures = client.get_fixtures(cfg.competition_id, season, jornada)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Final, Tuple

#: Division identifiers stored on ``leagues.division``.
DIVISION_PRIMERA: Final[str] = "primera"
DIVISION_SEGUNDA: Final[str] = "segunda"
DIVISION_PREMIER: Final[str] = "premier"

DEFAULT_SEASON: Final[int] = int(os.getenv("FOOTBALL_SEASON", "2025"))

# ---------------------------------------------------------------------------
# Market selection constants
# ---------------------------------------------------------------------------

#: Inclusive odds window for any bookmaker-sourced option to be playable.
MIN_PLAYABLE_ODD: Final[float] = 1.40
MAX_PLAYABLE_ODD: Final[float] = 3.00

#: Fixed fallback markets appended to every fixture: (market, line, over, under).
SYNTHETIC_MARKETS: Final[Tuple[Tuple[str, str, float, float], ...]] = (
    ("Corners Over/Under", "8.5", 2.10, 1.90),
    ("Cards Over/Under", "4.5", 2.10, 1.90),
)

# ---------------------------------------------------------------------------
# Provider rate limits (milliseconds)
# ---------------------------------------------------------------------------

AVAILABILITY_SYNC_DELAY_MS: Final[int] = int(os.getenv("AVAILABILITY_SYNC_DELAY_MS", "400"))
ODDS_FIXTURE_DELAY_MS: Final[int] = int(os.getenv("ODDS_FIXTURE_DELAY_MS", "1000"))


@dataclass(frozen=True)
class DivisionConfig:
    """Immutable bundle describing one division.

    Attributes:
        key: Identifier stored on leagues and used in API routes.
        name: Human-readable competition name for logs.
        competition_id: API-Football ``league`` id for fixtures/odds.
        player_table: Name of the table holding this division's players.
    """

    key: str
    name: str
    competition_id: int
    player_table: str

    def round_name(self, jornada: int) -> str:
        """Provider round label for a matchday, e.g. ``Regular Season - 12``."""
        return f"Regular Season - {jornada}"


PRIMERA = DivisionConfig(
    key=DIVISION_PRIMERA,
    name="La Liga",
    competition_id=140,
    player_table="players_primera",
)

SEGUNDA = DivisionConfig(
    key=DIVISION_SEGUNDA,
    name="La Liga 2",
    competition_id=141,
    player_table="players_segunda",
)

PREMIER = DivisionConfig(
    key=DIVISION_PREMIER,
    name="Premier League",
    competition_id=39,
    player_table="players_premier",
)

#: Registry in persistence priority order.
DIVISIONS: Final[Tuple[DivisionConfig, ...]] = (PRIMERA, SEGUNDA, PREMIER)

_BY_KEY: Dict[str, DivisionConfig] = {d.key: d for d in DIVISIONS}


def get_division(key: str | None) -> DivisionConfig:
    """Return the config for ``key``; leagues without a division play in primera."""
    if not key:
        return PRIMERA
    try:
        return _BY_KEY[key.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown division {key!r}") from None

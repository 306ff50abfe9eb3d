"""
Playable market selection from a bookmaker's bet list.

Works on the raw API-Football ``/odds`` payload of a single bookmaker::

    {"bets": [{"id": 1, "name": "Match Winner",
               "values": [{"value": "Home", "odd": "1.85"}, ...]}, ...]}

Acceptance rules per market family (odds window from ``division_config``):

    Handicap     : always discarded.
    Match Winner : 3 options (name heuristic or Home/Draw/Away shape);
                   all three in range or the whole market is dropped.
    Over/Under   : options grouped by line; a line is accepted when both
                   its Over and Under are in range; exactly one accepted
                   line is kept, chosen at random.
    Binary       : 2 options, both in range.
    Ternary      : 3 options (e.g. Double Chance), all in range.
    Anything else: ignored.

The two synthetic markets (corners, cards) are appended to every fixture's
pool.  Randomness always comes from an injected ``random.Random`` so that a
seeded instance reproduces the same selection.
"""

import logging
import random
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from backend.core.division_config import (
    MAX_PLAYABLE_ODD,
    MIN_PLAYABLE_ODD,
    SYNTHETIC_MARKETS,
)
from backend.core.translator import translate_label, translate_market

logger = logging.getLogger(__name__)

SYNTHETIC_FAMILY_PREFIX = "synthetic:"
MATCH_WINNER_SHAPE = frozenset({"Home", "Draw", "Away"})


@dataclass(frozen=True)
class MarketCandidate:
    """One playable option for a fixture, already translated."""

    family: str  # provider market name, or "synthetic:<market>"
    bet_type: str
    bet_label: str
    odd: float

    @property
    def is_synthetic(self) -> bool:
        return self.family.startswith(SYNTHETIC_FAMILY_PREFIX)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def parse_odd(raw) -> Optional[float]:
    """Provider odds arrive as strings ("1.85"); unparseable → None."""
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def in_playable_range(odd: Optional[float]) -> bool:
    return odd is not None and MIN_PLAYABLE_ODD <= odd <= MAX_PLAYABLE_ODD


def all_in_range(values: Iterable[Dict]) -> bool:
    return all(in_playable_range(parse_odd(v.get("odd"))) for v in values)


def is_match_winner(bet: Dict) -> bool:
    """Name heuristic first, then the 3-way Home/Draw/Away shape."""
    name = (bet.get("name") or "").lower()
    if "match winner" in name:
        return True
    if "winner" in name and "first" not in name and "second" not in name:
        return True
    labels = {v.get("value") for v in bet.get("values") or []}
    return len(bet.get("values") or []) == 3 and labels == MATCH_WINNER_SHAPE


def is_over_under(bet: Dict) -> bool:
    name = (bet.get("name") or "").lower()
    return "over" in name or "under" in name


def group_over_under_lines(values: Sequence[Dict]) -> "OrderedDict[str, Dict[str, Dict]]":
    """``[{"value": "Over 2.5"}, {"value": "Under 2.5"}]`` → ``{"2.5": {"over": .., "under": ..}}``."""
    lines: "OrderedDict[str, Dict[str, Dict]]" = OrderedDict()
    for value in values:
        label = str(value.get("value") or "").strip()
        if label.startswith("Over"):
            side, line = "over", label[len("Over"):].strip()
        elif label.startswith("Under"):
            side, line = "under", label[len("Under"):].strip()
        else:
            continue
        lines.setdefault(line, {})[side] = value
    return lines


def _candidates(
    bet: Dict,
    values: Iterable[Dict],
    home_team: Optional[str],
    away_team: Optional[str],
) -> List[MarketCandidate]:
    bet_type = translate_market(bet.get("name") or "")
    return [
        MarketCandidate(
            family=bet.get("name") or "",
            bet_type=bet_type,
            bet_label=translate_label(str(v.get("value")), home_team, away_team),
            odd=parse_odd(v.get("odd")),
        )
        for v in values
    ]


# ---------------------------------------------------------------------------
# Per-family selection
# ---------------------------------------------------------------------------

def select_over_under_line(values: Sequence[Dict], rng: random.Random) -> List[Dict]:
    """Return the Over/Under value pair of one randomly chosen accepted line, or []."""
    accepted = [
        (pair["over"], pair["under"])
        for pair in group_over_under_lines(values).values()
        if "over" in pair and "under" in pair and all_in_range((pair["over"], pair["under"]))
    ]
    if not accepted:
        return []
    over, under = rng.choice(accepted)
    return [over, under]


def select_bet_values(bet: Dict, rng: random.Random) -> List[Dict]:
    """Apply the acceptance rules to one provider bet; returns the kept values."""
    name = (bet.get("name") or "").lower()
    values = list(bet.get("values") or [])

    if "handicap" in name:
        return []

    match_winner = is_match_winner(bet)
    if match_winner and len(values) == 3:
        return values if all_in_range(values) else []

    if is_over_under(bet):
        return select_over_under_line(values, rng)

    if len(values) == 2:
        return values if all_in_range(values) else []

    if len(values) == 3 and not match_winner:
        return values if all_in_range(values) else []

    return []


def synthetic_candidates() -> List[MarketCandidate]:
    """Fixed corners and cards markets offered on every fixture."""
    candidates: List[MarketCandidate] = []
    for market, line, over_odd, under_odd in SYNTHETIC_MARKETS:
        bet_type = translate_market(market)
        family = f"{SYNTHETIC_FAMILY_PREFIX}{market}"
        candidates.append(MarketCandidate(family, bet_type, translate_label(f"Over {line}"), over_odd))
        candidates.append(MarketCandidate(family, bet_type, translate_label(f"Under {line}"), under_odd))
    return candidates


def select_markets(
    bets: Iterable[Dict],
    home_team: Optional[str] = None,
    away_team: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> List[MarketCandidate]:
    """Build a fixture's candidate pool from one bookmaker's bets plus the synthetics."""
    rng = rng or random.Random()
    pool: List[MarketCandidate] = []

    for bet in bets or []:
        kept = select_bet_values(bet, rng)
        if kept:
            pool.extend(_candidates(bet, kept, home_team, away_team))
        else:
            logger.debug("Market %r dropped for %s vs %s", bet.get("name"), home_team, away_team)

    pool.extend(synthetic_candidates())
    return pool


def group_by_family(candidates: Iterable[MarketCandidate]) -> "OrderedDict[str, List[MarketCandidate]]":
    grouped: "OrderedDict[str, List[MarketCandidate]]" = OrderedDict()
    for candidate in candidates:
        grouped.setdefault(candidate.family, []).append(candidate)
    return grouped


def pick_family(
    candidates: Iterable[MarketCandidate],
    rng: Optional[random.Random] = None,
) -> List[MarketCandidate]:
    """Pick one market family uniformly at random; [] when the pool is empty."""
    grouped = group_by_family(candidates)
    if not grouped:
        return []
    rng = rng or random.Random()
    family = rng.choice(list(grouped.keys()))
    return grouped[family]

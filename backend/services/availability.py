"""
Player availability: resolve and sync.

Resolution order for one player (strict priority INJURED > SUSPENDED > AVAILABLE):

    1. API-Football ``/players`` for the requested season, then the season
       before it.  The first season that returns any entry ends the search;
       if that entry is flagged ``injured`` the player is INJURED and the
       card check is skipped.
    2. Suspension rules over the locally stored card history of the
       requested season (runs even when no season returned data).
    3. Otherwise AVAILABLE.

Resolution fails open: any provider, DB or parsing error yields AVAILABLE.

``sync_all_players_availability`` walks every player of the three division
tables, resolves them one at a time with a fixed pause between players to
stay inside the provider's rate limit, and overwrites the stored status.
"""

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Callable, Dict, List, Optional

from backend.core.division_config import AVAILABILITY_SYNC_DELAY_MS, DEFAULT_SEASON
from backend.core.suspension import (
    AVAILABLE,
    REASON_INJURED,
    STATUS_AVAILABLE,
    STATUS_INJURED,
    STATUS_SUSPENDED,
    Availability,
    CardRecord,
    evaluate_suspension,
)
from backend.models import SessionLocal
from backend.services.football_api import FootballAPIClient, ProviderUnavailable
from backend.services.repositories import (
    PartitionNotFound,
    PersistenceFailure,
    PlayerRepositoryChain,
    load_card_records,
)

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 10

CardSource = Callable[[int, int], List[CardRecord]]


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class AvailabilityResolver:
    """Combines the provider injury flag with local card history."""

    def __init__(self, client: FootballAPIClient, card_source: CardSource):
        self.client = client
        self.card_source = card_source

    def _find_injury_flag(self, player_id: int, season: int) -> Optional[bool]:
        """Injured flag from the first season with data, None if no season had any."""
        for candidate in (season, season - 1):
            try:
                entry = self.client.get_player(player_id, candidate)
            except ProviderUnavailable as exc:
                logger.warning("Player %d season %d lookup failed: %s", player_id, candidate, exc)
                continue
            if entry is None:
                continue
            injured = (entry.get("player") or {}).get("injured") is True
            logger.debug("Player %d season %d: injured=%s", player_id, candidate, injured)
            return injured
        return None

    def resolve(self, player_id: int, season: int = DEFAULT_SEASON) -> Availability:
        try:
            if self._find_injury_flag(player_id, season):
                return Availability(STATUS_INJURED, REASON_INJURED)

            # TODO: confirm whether the card check should be skipped when neither
            # season returned provider data; today it always runs.
            suspension = evaluate_suspension(self.card_source(player_id, season))
            if suspension is not None:
                return suspension

            return AVAILABLE
        except Exception as exc:
            logger.error("Availability check failed for player %d, assuming available: %s", player_id, exc)
            return AVAILABLE


def resolve_player_availability(
    player_id: int,
    season: int = DEFAULT_SEASON,
    client: Optional[FootballAPIClient] = None,
    session_factory=SessionLocal,
) -> Availability:
    """Resolve one player's availability without persisting it."""
    db = session_factory()
    try:
        resolver = AvailabilityResolver(
            client or FootballAPIClient(),
            lambda pid, s: load_card_records(db, pid, s),
        )
        return resolver.resolve(player_id, season)
    finally:
        db.close()


# ---------------------------------------------------------------------------
# Sync
# ---------------------------------------------------------------------------

@dataclass
class SyncSummary:
    season: int
    processed: int = 0
    available: int = 0
    injured: int = 0
    suspended: int = 0
    not_found: int = 0
    errors: List[str] = field(default_factory=list)

    def count(self, status: str) -> None:
        if status == STATUS_AVAILABLE:
            self.available += 1
        elif status == STATUS_INJURED:
            self.injured += 1
        elif status == STATUS_SUSPENDED:
            self.suspended += 1

    def to_dict(self) -> Dict:
        return asdict(self)


def update_player_availability(
    player_id: int,
    season: int = DEFAULT_SEASON,
    client: Optional[FootballAPIClient] = None,
    session_factory=SessionLocal,
    chain: Optional[PlayerRepositoryChain] = None,
) -> Dict:
    """
    Resolve and persist one player.

    Raises ``PartitionNotFound`` when no division holds the player and
    ``PersistenceFailure`` when the write fails.
    """
    chain = chain or PlayerRepositoryChain()
    db = session_factory()
    try:
        resolver = AvailabilityResolver(
            client or FootballAPIClient(),
            lambda pid, s: load_card_records(db, pid, s),
        )
        availability = resolver.resolve(player_id, season)
        division = chain.update_availability(db, player_id, availability)
    finally:
        db.close()

    logger.info(
        "Player %d (%s): %s%s",
        player_id, division, availability.status,
        f" - {availability.reason}" if availability.reason else "",
    )
    return {
        "player_id": player_id,
        "season": season,
        "status": availability.status,
        "reason": availability.reason,
        "division": division,
    }


def sync_all_players_availability(
    season: int = DEFAULT_SEASON,
    client: Optional[FootballAPIClient] = None,
    session_factory=SessionLocal,
    chain: Optional[PlayerRepositoryChain] = None,
    sleep: Callable[[float], None] = time.sleep,
    delay_ms: int = AVAILABILITY_SYNC_DELAY_MS,
) -> Dict:
    """
    Resolve and overwrite the availability of every player in every division.

    One player at a time, pausing ``delay_ms`` after each.  A single
    player's failure is logged and counted; the run always continues.
    """
    logger.info("Starting availability sync for season %d", season)
    chain = chain or PlayerRepositoryChain()
    summary = SyncSummary(season=season)
    db = session_factory()

    try:
        resolver = AvailabilityResolver(
            client or FootballAPIClient(),
            lambda pid, s: load_card_records(db, pid, s),
        )
        player_ids = chain.all_player_ids(db)
        logger.info("Availability sync: %d players to process", len(player_ids))

        for player_id in player_ids:
            try:
                availability = resolver.resolve(player_id, season)
                chain.update_availability(db, player_id, availability)
                summary.count(availability.status)
            except PartitionNotFound:
                summary.not_found += 1
                logger.warning("Player %d not found in any division, skipping", player_id)
            except PersistenceFailure as exc:
                summary.errors.append(f"Player {player_id}: {exc}")
                logger.error("Error saving availability for player %d: %s", player_id, exc)

            summary.processed += 1
            sleep(delay_ms / 1000.0)

            if summary.processed % PROGRESS_EVERY == 0:
                logger.info("Availability sync progress: %d/%d players", summary.processed, len(player_ids))
    finally:
        db.close()

    logger.info(
        "Availability sync done: %d processed (%d available, %d injured, %d suspended, %d not found, %d errors)",
        summary.processed, summary.available, summary.injured, summary.suspended,
        summary.not_found, len(summary.errors),
    )
    return summary.to_dict()


def get_all_players_availability(
    session_factory=SessionLocal,
    division: Optional[str] = None,
    chain: Optional[PlayerRepositoryChain] = None,
) -> List[Dict]:
    """Every player with availability; unavailable players first, then by name."""
    chain = chain or PlayerRepositoryChain()
    db = session_factory()
    try:
        players = chain.list_all(db)
    finally:
        db.close()

    if division:
        players = [p for p in players if p["division"] == division]
    return sorted(
        players,
        key=lambda p: (p["availability_status"] == STATUS_AVAILABLE, p["name"] or ""),
    )

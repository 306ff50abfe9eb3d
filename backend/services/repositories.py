"""
Persistence for availability and bet-option snapshots.

Players live in one table per division.  ``PlayerRepositoryChain`` wraps the
three ``DivisionPlayerRepository`` instances in priority order and writes an
availability to the first division whose table holds the player id; a miss
in one division is not an error, a miss in all of them raises
``PartitionNotFound``.

Bet options are stored per (league_id, jornada) and only ever replaced as a
whole: delete the partition, insert the new rows with fresh ids, commit.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.division_config import DIVISIONS, DivisionConfig
from backend.core.suspension import Availability, CardRecord
from backend.models import PLAYER_MODELS, BetOption, League, PlayerStats

logger = logging.getLogger(__name__)


class PersistenceFailure(RuntimeError):
    """A store write failed; the session has been rolled back."""


class PartitionNotFound(LookupError):
    """No division table holds the player id."""


# ---------------------------------------------------------------------------
# Players
# ---------------------------------------------------------------------------

class DivisionPlayerRepository:
    """Player table of a single division."""

    def __init__(self, division: DivisionConfig, model=None):
        self.division = division
        self.model = model or PLAYER_MODELS[division.player_table]

    def list_ids(self, db: Session) -> List[int]:
        return [row.id for row in db.query(self.model.id).order_by(self.model.id).all()]

    def list_all(self, db: Session) -> list:
        return db.query(self.model).all()

    def find_and_update(self, db: Session, player_id: int, availability: Availability) -> bool:
        """Write the availability if this division has the player; False on a miss."""
        player = db.query(self.model).filter(self.model.id == player_id).first()
        if player is None:
            return False
        player.availability_status = availability.status
        player.availability_info = availability.reason
        db.flush()
        return True


class PlayerRepositoryChain:
    """Ordered division repositories, tried first to last."""

    def __init__(self, repositories: Optional[Sequence[DivisionPlayerRepository]] = None):
        self.repositories = list(repositories or [DivisionPlayerRepository(d) for d in DIVISIONS])

    def all_player_ids(self, db: Session) -> List[int]:
        """Union of player ids across divisions, first-seen order."""
        seen: Dict[int, None] = {}
        for repo in self.repositories:
            for player_id in repo.list_ids(db):
                seen.setdefault(player_id, None)
        return list(seen)

    def update_availability(self, db: Session, player_id: int, availability: Availability) -> str:
        """
        Persist ``availability`` in the first division that accepts it.

        Returns the accepting division key.  Raises ``PartitionNotFound`` if
        no division has the player and ``PersistenceFailure`` on DB errors.
        """
        try:
            for repo in self.repositories:
                if repo.find_and_update(db, player_id, availability):
                    db.commit()
                    return repo.division.key
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceFailure(f"availability update for player {player_id} failed: {exc}") from exc
        raise PartitionNotFound(f"player {player_id} not found in any division")

    def list_all(self, db: Session) -> List[Dict]:
        """Every player with its division and availability."""
        rows = []
        for repo in self.repositories:
            for player in repo.list_all(db):
                rows.append({
                    "id": player.id,
                    "name": player.name,
                    "position": player.position,
                    "team_name": player.team_name,
                    "team_crest": player.team_crest,
                    "price": player.price,
                    "division": repo.division.key,
                    "availability_status": player.availability_status,
                    "availability_info": player.availability_info,
                })
        return rows


def load_card_records(db: Session, player_id: int, season: int) -> List[CardRecord]:
    """Card history for one player/season, most recent matchday first."""
    rows = (
        db.query(PlayerStats)
        .filter(PlayerStats.player_id == player_id, PlayerStats.season == season)
        .order_by(PlayerStats.jornada.desc())
        .all()
    )
    return [
        CardRecord(
            player_id=row.player_id,
            season=row.season,
            jornada=row.jornada,
            yellow_cards=row.yellow_cards or 0,
            red_cards=row.red_cards or 0,
        )
        for row in rows
    ]


# ---------------------------------------------------------------------------
# Leagues
# ---------------------------------------------------------------------------

def get_league(db: Session, league_id: str) -> Optional[League]:
    return db.query(League).filter(League.id == league_id).first()


def list_active_leagues(db: Session) -> List[League]:
    return db.query(League).filter(League.is_active.is_(True)).order_by(League.id).all()


# ---------------------------------------------------------------------------
# Bet options
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BetOptionRow:
    """A staged bet option, ready to be written."""

    match_id: int
    home_team: str
    away_team: str
    home_crest: Optional[str]
    away_crest: Optional[str]
    bet_type: str
    bet_label: str
    odd: float


class BetOptionRepository:
    """Snapshot store keyed by (league_id, jornada)."""

    def replace(self, db: Session, league_id: str, jornada: int, rows: Iterable[BetOptionRow]) -> int:
        """Delete the partition and insert ``rows`` with new ids in one transaction."""
        rows = list(rows)
        try:
            deleted = (
                db.query(BetOption)
                .filter(BetOption.league_id == league_id, BetOption.jornada == jornada)
                .delete(synchronize_session=False)
            )
            db.add_all([
                BetOption(
                    id=uuid.uuid4().hex,
                    league_id=league_id,
                    jornada=jornada,
                    match_id=row.match_id,
                    home_team=row.home_team,
                    away_team=row.away_team,
                    home_crest=row.home_crest,
                    away_crest=row.away_crest,
                    bet_type=row.bet_type,
                    bet_label=row.bet_label,
                    odd=row.odd,
                )
                for row in rows
            ])
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                "Bet option replace failed for league %s jornada %d: %s",
                league_id, jornada, exc, exc_info=True,
            )
            raise PersistenceFailure(
                f"bet option replace for league {league_id} jornada {jornada} failed: {exc}"
            ) from exc

        logger.info(
            "Bet options league %s jornada %d: %d replaced by %d",
            league_id, jornada, deleted, len(rows),
        )
        return len(rows)

    def find(self, db: Session, league_id: str, jornada: int) -> List[BetOption]:
        return (
            db.query(BetOption)
            .filter(BetOption.league_id == league_id, BetOption.jornada == jornada)
            .order_by(BetOption.match_id, BetOption.bet_type)
            .all()
        )

    def exists(self, db: Session, league_id: str, jornada: int) -> bool:
        return (
            db.query(BetOption.id)
            .filter(BetOption.league_id == league_id, BetOption.jornada == jornada)
            .first()
            is not None
        )

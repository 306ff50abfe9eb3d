"""
Bet option generation per (league, jornada).

Pipeline for one league:

    1. league → division → API-Football competition id
    2. fixtures for "Regular Season - {jornada}" (none → success=False)
    3. per fixture, sequentially with a pause between fixtures:
       odds → playable candidate pool (``market_selector``), or the
       synthetic corners/cards markets when the fixture has no bookmaker
    4. per fixture, one market family picked at random
    5. replace the stored (league_id, jornada) snapshot as a whole

``generate_bet_options_for_all_leagues`` fetches each division's fixtures
and odds once and reuses them for every league of that division.  The
family pick in step 4 runs separately for each league, so two leagues of the
same division can end up offering different markets on the same fixture.
"""

import logging
import random
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.division_config import (
    DEFAULT_SEASON,
    ODDS_FIXTURE_DELAY_MS,
    DivisionConfig,
    get_division,
)
from backend.core.market_selector import (
    MarketCandidate,
    pick_family,
    select_markets,
    synthetic_candidates,
)
from backend.models import DataFetch, SessionLocal
from backend.services.football_api import FootballAPIClient, ProviderUnavailable
from backend.services.repositories import (
    BetOptionRepository,
    BetOptionRow,
    get_league,
    list_active_leagues,
)

logger = logging.getLogger(__name__)


@dataclass
class MatchMarkets:
    """A fixture and its candidate pool."""

    match_id: int
    home_team: str
    away_team: str
    home_crest: Optional[str] = None
    away_crest: Optional[str] = None
    candidates: List[MarketCandidate] = field(default_factory=list)


def _record_fetch(
    db: Session,
    source: str,
    success: bool,
    records: int,
    started: float,
    error: Optional[str] = None,
) -> None:
    try:
        db.add(DataFetch(
            data_source=source,
            success=success,
            records_fetched=records,
            error_message=error[:500] if error else None,
            response_time_ms=int((time.perf_counter() - started) * 1000),
        ))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Could not record %s fetch: %s", source, exc)


class BetOptionGenerator:
    """Drives fixture/odds ingestion and snapshot replacement."""

    def __init__(
        self,
        client: Optional[FootballAPIClient] = None,
        session_factory=SessionLocal,
        repository: Optional[BetOptionRepository] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
        delay_ms: int = ODDS_FIXTURE_DELAY_MS,
        season: int = DEFAULT_SEASON,
    ):
        self.client = client or FootballAPIClient()
        self.session_factory = session_factory
        self.repository = repository or BetOptionRepository()
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.delay_ms = delay_ms
        self.season = season

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def fetch_fixtures(self, db: Session, jornada: int, division: DivisionConfig) -> List[Dict]:
        """Fixtures of a matchday; [] when the provider has none."""
        started = time.perf_counter()
        try:
            fixtures = self.client.get_fixtures(
                division.competition_id, self.season, division.round_name(jornada)
            )
        except ProviderUnavailable as exc:
            _record_fetch(db, "fixtures", False, 0, started, str(exc))
            raise
        _record_fetch(db, "fixtures", True, len(fixtures), started)
        return fixtures

    def fetch_odds_for_fixture(
        self,
        db: Session,
        fixture_id: int,
        home_team: str,
        away_team: str,
    ) -> List[MarketCandidate]:
        """Candidate pool for one fixture; synthetic markets only without bookmaker data."""
        started = time.perf_counter()
        try:
            odds = self.client.get_odds(fixture_id)
        except ProviderUnavailable as exc:
            logger.warning("Odds unavailable for fixture %d (%s vs %s): %s", fixture_id, home_team, away_team, exc)
            _record_fetch(db, "odds", False, 0, started, str(exc))
            return synthetic_candidates()

        try:
            _record_fetch(db, "odds", True, len(odds), started)
            bookmakers = (odds[0].get("bookmakers") or []) if odds else []
            if not bookmakers:
                logger.info("No bookmaker odds for fixture %d (%s vs %s), synthetic markets only",
                            fixture_id, home_team, away_team)
                return synthetic_candidates()

            return select_markets(bookmakers[0].get("bets") or [], home_team, away_team, self.rng)
        except (AttributeError, KeyError, TypeError, IndexError) as exc:
            logger.warning("Malformed odds payload for fixture %d (%s vs %s), synthetic markets only: %r",
                           fixture_id, home_team, away_team, exc)
            return synthetic_candidates()

    def collect_match_markets(self, db: Session, jornada: int, division: DivisionConfig) -> List[MatchMarkets]:
        """Fixtures plus candidate pools for one division's matchday."""
        fixtures = self.fetch_fixtures(db, jornada, division)
        logger.info("%s jornada %d: %d fixtures", division.name, jornada, len(fixtures))

        matches: List[MatchMarkets] = []
        for i, fixture in enumerate(fixtures):
            if i > 0:
                self.sleep(self.delay_ms / 1000.0)
            home = fixture["teams"]["home"]
            away = fixture["teams"]["away"]
            fixture_id = fixture["fixture"]["id"]
            matches.append(MatchMarkets(
                match_id=fixture_id,
                home_team=home["name"],
                away_team=away["name"],
                home_crest=home.get("logo"),
                away_crest=away.get("logo"),
                candidates=self.fetch_odds_for_fixture(db, fixture_id, home["name"], away["name"]),
            ))
        return matches

    # ------------------------------------------------------------------
    # Selection and persistence
    # ------------------------------------------------------------------

    def stage_rows(self, matches: List[MatchMarkets]) -> List[BetOptionRow]:
        """One random market family per fixture, flattened to rows."""
        rows: List[BetOptionRow] = []
        for match in matches:
            chosen = pick_family(match.candidates, self.rng)
            if not chosen:
                logger.debug("Fixture %d has no candidates, skipped", match.match_id)
                continue
            rows.extend(
                BetOptionRow(
                    match_id=match.match_id,
                    home_team=match.home_team,
                    away_team=match.away_team,
                    home_crest=match.home_crest,
                    away_crest=match.away_crest,
                    bet_type=c.bet_type,
                    bet_label=c.bet_label,
                    odd=c.odd,
                )
                for c in chosen
            )
        return rows

    def _save(self, db: Session, league_id: str, jornada: int, matches: List[MatchMarkets]) -> int:
        return self.repository.replace(db, league_id, jornada, self.stage_rows(matches))

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def generate_for_league(self, league_id: str, jornada: int) -> Dict:
        """
        Regenerate the snapshot of one league/jornada.

        Provider failures and empty matchdays return ``success=False``;
        ``PersistenceFailure`` propagates.
        """
        logger.info("Generating bet options for league %s jornada %d", league_id, jornada)
        db = self.session_factory()
        try:
            league = get_league(db, league_id)
            if league is None:
                logger.warning("League %s not found, generating with primera fixtures", league_id)
            division = _league_division(league)

            try:
                matches = self.collect_match_markets(db, jornada, division)
            except ProviderUnavailable as exc:
                logger.error("Fixtures unavailable for league %s jornada %d: %s", league_id, jornada, exc)
                return _league_summary(False, league_id, jornada, 0, 0)

            if not matches:
                logger.warning("No fixtures for %s jornada %d", division.name, jornada)
                return _league_summary(False, league_id, jornada, 0, 0)

            options = self._save(db, league_id, jornada, matches)
        finally:
            db.close()

        return _league_summary(True, league_id, jornada, len(matches), options)

    def generate_for_all_leagues(self, jornada: int) -> Dict:
        """
        Regenerate every active league, fetching each division's data once.

        ``PersistenceFailure`` on any league aborts the run.
        """
        logger.info("Generating bet options for all leagues, jornada %d", jornada)
        db = self.session_factory()
        matches_processed = 0
        leagues_updated = 0
        total_options = 0

        try:
            by_division: "OrderedDict[str, list]" = OrderedDict()
            for league in list_active_leagues(db):
                by_division.setdefault(_league_division(league).key, []).append(league)

            for division_key, leagues in by_division.items():
                division = get_division(division_key)
                try:
                    matches = self.collect_match_markets(db, jornada, division)
                except ProviderUnavailable as exc:
                    logger.error("Fixtures unavailable for %s jornada %d: %s", division.name, jornada, exc)
                    continue
                if not matches:
                    logger.warning("No fixtures for %s jornada %d, %d leagues skipped",
                                   division.name, jornada, len(leagues))
                    continue

                matches_processed += len(matches)
                for league in leagues:
                    count = self._save(db, league.id, jornada, matches)
                    leagues_updated += 1
                    total_options += count
                    logger.info("League %r (%s): %d options", league.name, division.key, count)
        finally:
            db.close()

        logger.info(
            "Bet generation jornada %d done: %d leagues, %d fixtures, %d options",
            jornada, leagues_updated, matches_processed, total_options,
        )
        return {
            "success": leagues_updated > 0,
            "jornada": jornada,
            "matchesProcessed": matches_processed,
            "leaguesUpdated": leagues_updated,
            "totalOptions": total_options,
        }

    def get_options(self, league_id: str, jornada: int) -> List[Dict]:
        db = self.session_factory()
        try:
            return [_option_to_dict(o) for o in self.repository.find(db, league_id, jornada)]
        finally:
            db.close()

    def has_options(self, league_id: str, jornada: int) -> bool:
        db = self.session_factory()
        try:
            return self.repository.exists(db, league_id, jornada)
        finally:
            db.close()

    def get_or_generate(self, league_id: str, jornada: int) -> List[Dict]:
        """Stored snapshot, generating it first when the partition is empty."""
        if not self.has_options(league_id, jornada):
            logger.info("No bet options for league %s jornada %d, generating", league_id, jornada)
            self.generate_for_league(league_id, jornada)
        return self.get_options(league_id, jornada)


def _league_division(league) -> DivisionConfig:
    """Division of a league row; missing leagues and unknown divisions play in primera."""
    if league is None:
        return get_division(None)
    try:
        return get_division(league.division)
    except ValueError:
        logger.warning("League %s has unknown division %r, using primera", league.id, league.division)
        return get_division(None)


def _league_summary(success: bool, league_id: str, jornada: int, matches: int, options: int) -> Dict:
    return {
        "success": success,
        "league_id": league_id,
        "jornada": jornada,
        "matchesProcessed": matches,
        "optionsCount": options,
    }


def _option_to_dict(option) -> Dict:
    return {
        "id": option.id,
        "league_id": option.league_id,
        "jornada": option.jornada,
        "match_id": option.match_id,
        "home_team": option.home_team,
        "away_team": option.away_team,
        "home_crest": option.home_crest,
        "away_crest": option.away_crest,
        "bet_type": option.bet_type,
        "bet_label": option.bet_label,
        "odd": option.odd,
    }


# ---------------------------------------------------------------------------
# Public wrappers
# ---------------------------------------------------------------------------

def generate_bet_options_for_league(league_id: str, jornada: int, **kwargs) -> Dict:
    return BetOptionGenerator(**kwargs).generate_for_league(league_id, jornada)


def generate_bet_options_for_all_leagues(jornada: int, **kwargs) -> Dict:
    return BetOptionGenerator(**kwargs).generate_for_all_leagues(jornada)


def get_bet_options(league_id: str, jornada: int, **kwargs) -> List[Dict]:
    return BetOptionGenerator(**kwargs).get_options(league_id, jornada)


def has_bet_options(league_id: str, jornada: int, **kwargs) -> bool:
    return BetOptionGenerator(**kwargs).has_options(league_id, jornada)


def get_or_generate_bet_options(league_id: str, jornada: int, **kwargs) -> List[Dict]:
    return BetOptionGenerator(**kwargs).get_or_generate(league_id, jornada)

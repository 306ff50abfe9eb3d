"""
Tests for player availability resolution and sync.
Run with: pytest tests/test_availability.py -v
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from backend.core.suspension import (
    REASON_ACCUMULATED,
    REASON_INJURED,
    REASON_RED_CARD,
    STATUS_AVAILABLE,
    STATUS_INJURED,
    STATUS_SUSPENDED,
    Availability,
    CardRecord,
)
from backend.models import PlayerPremier, PlayerPrimera, PlayerSegunda, PlayerStats
from backend.services.availability import (
    AvailabilityResolver,
    get_all_players_availability,
    resolve_player_availability,
    sync_all_players_availability,
    update_player_availability,
)
from backend.services.football_api import ProviderUnavailable
from backend.services.repositories import PartitionNotFound, PersistenceFailure, PlayerRepositoryChain


def _entry(injured):
    return {"player": {"id": 1, "injured": injured}}


def _client(by_season=None, error=None):
    """Client whose get_player answers from a {season: entry} map."""
    client = MagicMock()
    if error is not None:
        client.get_player.side_effect = error
    else:
        by_season = by_season or {}
        client.get_player.side_effect = lambda pid, season: by_season.get(season)
    return client


def _reds(player_id=1, season=2025):
    return [CardRecord(player_id, season, 10, red_cards=1)]


class TestAvailabilityResolver:

    def test_injured_overrides_cards(self):
        cards = MagicMock(return_value=_reds())
        resolver = AvailabilityResolver(_client({2025: _entry(True)}), cards)
        result = resolver.resolve(1, 2025)
        assert result.status == STATUS_INJURED
        assert result.reason == REASON_INJURED
        cards.assert_not_called()

    def test_falls_back_to_previous_season(self):
        client = _client({2024: _entry(True)})
        result = AvailabilityResolver(client, lambda pid, s: []).resolve(1, 2025)
        assert result.status == STATUS_INJURED
        assert [c.args[1] for c in client.get_player.call_args_list] == [2025, 2024]

    def test_first_season_with_data_ends_search(self):
        client = _client({2025: _entry(False), 2024: _entry(True)})
        result = AvailabilityResolver(client, lambda pid, s: []).resolve(1, 2025)
        assert result.status == STATUS_AVAILABLE
        assert client.get_player.call_count == 1

    def test_red_card_suspends(self):
        resolver = AvailabilityResolver(_client({2025: _entry(False)}), lambda pid, s: _reds())
        result = resolver.resolve(1, 2025)
        assert (result.status, result.reason) == (STATUS_SUSPENDED, REASON_RED_CARD)

    def test_cards_checked_without_provider_data(self):
        resolver = AvailabilityResolver(_client({}), lambda pid, s: _reds())
        assert resolver.resolve(1, 2025).status == STATUS_SUSPENDED

    def test_provider_error_still_checks_cards(self):
        resolver = AvailabilityResolver(_client(error=ProviderUnavailable("down")), lambda pid, s: [])
        assert resolver.resolve(1, 2025).status == STATUS_AVAILABLE

    def test_unexpected_error_fails_open(self):
        cards = MagicMock(side_effect=RuntimeError("db gone"))
        result = AvailabilityResolver(_client({}), cards).resolve(1, 2025)
        assert result.status == STATUS_AVAILABLE
        assert result.reason is None


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

@pytest.fixture
def seeded(session_factory):
    db = session_factory()
    db.add_all([
        PlayerPrimera(id=1, name="Zubimendi", team_name="Real Sociedad"),
        PlayerPrimera(id=2, name="Aspas", team_name="Celta"),
        PlayerSegunda(id=3, name="Borja", team_name="Zaragoza"),
        PlayerPremier(id=4, name="Saka", team_name="Arsenal"),
    ])
    db.add_all([
        PlayerStats(player_id=3, season=2025, jornada=j, yellow_cards=1, red_cards=0)
        for j in range(1, 6)
    ])
    db.commit()
    db.close()
    return session_factory


class TestUpdatePlayerAvailability:

    def test_writes_to_owning_division(self, seeded):
        result = update_player_availability(3, 2025, client=_client({}), session_factory=seeded)
        assert result == {
            "player_id": 3,
            "season": 2025,
            "status": STATUS_SUSPENDED,
            "reason": REASON_ACCUMULATED,
            "division": "segunda",
        }
        db = seeded()
        player = db.get(PlayerSegunda, 3)
        assert player.availability_status == STATUS_SUSPENDED
        assert player.availability_info == REASON_ACCUMULATED
        db.close()

    def test_unknown_player_raises(self, seeded):
        with pytest.raises(PartitionNotFound):
            update_player_availability(999, 2025, client=_client({}), session_factory=seeded)

    def test_available_clears_previous_reason(self, seeded):
        db = seeded()
        player = db.get(PlayerPremier, 4)
        player.availability_status = STATUS_INJURED
        player.availability_info = REASON_INJURED
        db.commit()
        db.close()

        update_player_availability(4, 2025, client=_client({2025: _entry(False)}), session_factory=seeded)

        db = seeded()
        player = db.get(PlayerPremier, 4)
        assert player.availability_status == STATUS_AVAILABLE
        assert player.availability_info is None
        db.close()

    def test_resolve_does_not_persist(self, seeded):
        result = resolve_player_availability(1, 2025, client=_client({2025: _entry(True)}), session_factory=seeded)
        assert result.status == STATUS_INJURED
        db = seeded()
        assert db.get(PlayerPrimera, 1).availability_status == STATUS_AVAILABLE
        db.close()


class TestSyncAllPlayers:

    def test_counts_and_pauses(self, seeded):
        sleep = MagicMock()
        client = MagicMock()
        client.get_player.side_effect = lambda pid, season: _entry(pid == 1)

        summary = sync_all_players_availability(
            2025, client=client, session_factory=seeded, sleep=sleep, delay_ms=400,
        )

        assert summary["processed"] == 4
        assert summary["injured"] == 1
        assert summary["suspended"] == 1
        assert summary["available"] == 2
        assert summary["not_found"] == 0
        assert summary["errors"] == []
        assert sleep.call_count == 4
        sleep.assert_called_with(0.4)

    def test_partition_miss_counted_and_run_continues(self, seeded):
        chain = PlayerRepositoryChain()
        chain.all_player_ids = MagicMock(return_value=[1, 999, 2])

        summary = sync_all_players_availability(
            2025, client=_client({}), session_factory=seeded, chain=chain, sleep=lambda s: None,
        )

        assert summary["processed"] == 3
        assert summary["not_found"] == 1
        assert summary["available"] == 2


class TestListPlayers:

    def test_unavailable_first_then_by_name(self, seeded):
        update_player_availability(3, 2025, client=_client({}), session_factory=seeded)
        players = get_all_players_availability(session_factory=seeded)
        assert [p["name"] for p in players] == ["Borja", "Aspas", "Saka", "Zubimendi"]
        assert players[0]["division"] == "segunda"

    def test_division_filter(self, seeded):
        players = get_all_players_availability(session_factory=seeded, division="primera")
        assert {p["id"] for p in players} == {1, 2}


class TestPersistenceFailures:

    def test_failed_write_counted_and_sync_continues(self, seeded):
        chain = PlayerRepositoryChain()
        real_update = chain.update_availability

        def update(db, player_id, availability):
            if player_id == 2:
                raise PersistenceFailure("player 2 write failed")
            return real_update(db, player_id, availability)

        chain.update_availability = update

        summary = sync_all_players_availability(
            2025, client=_client({}), session_factory=seeded, chain=chain, sleep=lambda s: None,
        )

        assert summary["processed"] == 4
        assert summary["available"] == 2
        assert summary["suspended"] == 1
        assert len(summary["errors"]) == 1
        assert summary["errors"][0].startswith("Player 2:")

    def test_db_error_rolled_back_and_wrapped(self, seeded):
        db = seeded()
        db.commit = MagicMock(side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error")))

        with pytest.raises(PersistenceFailure):
            PlayerRepositoryChain().update_availability(db, 4, Availability(STATUS_INJURED, REASON_INJURED))
        db.close()

        db = seeded()
        assert db.get(PlayerPremier, 4).availability_status == STATUS_AVAILABLE
        db.close()

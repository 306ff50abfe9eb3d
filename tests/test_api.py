"""
Tests for the HTTP routes (auth, validation, wiring).
Run with: pytest tests/test_api.py -v
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from backend.core.suspension import Availability
from backend.main import app
from backend.services.repositories import PartitionNotFound

ADMIN = {"X-API-Key": "dev-key-insecure"}


@pytest.fixture
def client():
    # No context manager: the scheduler lifespan stays off in tests
    return TestClient(app)


class TestAuth:

    def test_missing_key_rejected(self, client):
        assert client.get("/api/bet-options/L1/3").status_code == 401

    def test_invalid_key_rejected(self, client):
        response = client.post("/api/bet-options/L1/3/generate", headers={"X-API-Key": "nope"})
        assert response.status_code == 401


class TestBetOptionRoutes:

    @pytest.mark.parametrize("path", [
        "/api/bet-options/L1/0",
        "/api/bet-options/L1/-2/exists",
        "/api/bet-options/L1/0/get-or-generate",
    ])
    def test_invalid_jornada(self, client, path):
        assert client.get(path, headers=ADMIN).status_code == 400

    def test_invalid_jornada_on_generate_all(self, client):
        assert client.post("/admin/bet-options/generate-all/0", headers=ADMIN).status_code == 400

    def test_generate_returns_summary(self, client):
        summary = {"success": True, "league_id": "L1", "jornada": 4, "matchesProcessed": 10, "optionsCount": 23}
        with patch("backend.main.generate_bet_options_for_league", return_value=summary) as gen:
            response = client.post("/api/bet-options/L1/4/generate", headers=ADMIN)
        assert response.status_code == 200
        assert response.json() == summary
        gen.assert_called_once_with("L1", 4)


class TestPlayerRoutes:

    def test_single_player_status(self, client):
        with patch("backend.main.resolve_player_availability",
                   return_value=Availability("SUSPENDED", "red card suspension")):
            response = client.get("/api/players/874/status?season=2025")
        assert response.json() == {
            "player_id": 874, "season": 2025, "status": "SUSPENDED", "reason": "red card suspension",
        }

    def test_sync_unknown_player_404(self, client):
        with patch("backend.main.update_player_availability", side_effect=PartitionNotFound("x")):
            response = client.post("/api/players/999/status/sync", headers=ADMIN)
        assert response.status_code == 404

    def test_full_sync_runs_in_background(self, client):
        with patch("backend.main.sync_all_players_availability") as sync:
            response = client.post("/api/players/status/sync", json={"season": 2024}, headers=ADMIN)
        assert response.status_code == 202
        assert response.json()["season"] == 2024
        sync.assert_called_once_with(2024)


def test_root(client):
    assert client.get("/").json()["status"] == "operational"


def test_non_admin_key_forbidden_on_generation(client):
    with patch.dict("backend.auth.VALID_API_KEYS", {"reader-key": "user3"}):
        response = client.post("/api/bet-options/L1/4/generate", headers={"X-API-Key": "reader-key"})
    assert response.status_code == 403

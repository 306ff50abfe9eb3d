"""
Tests for the API-Football client.
Run with: pytest tests/test_football_api.py -v
"""

from unittest.mock import MagicMock

import pytest
import requests

from backend.services.football_api import (
    FALLBACK_APISPORTS_KEY,
    FootballAPIClient,
    ProviderUnavailable,
    build_headers,
)


class TestBuildHeaders:

    def test_apisports_key_wins(self):
        env = {"RAPIDAPI_KEY": "rapid", "APISPORTS_API_KEY": "direct"}
        assert build_headers(env) == {"x-apisports-key": "direct"}

    def test_candidate_order(self):
        env = {"APISPORTS_KEY": "last", "FOOTBALL_API_KEY": "first"}
        assert build_headers(env) == {"x-apisports-key": "first"}

    def test_rapidapi_headers(self):
        headers = build_headers({"RAPIDAPI_FOOTBALL_KEY": "rapid"})
        assert headers["x-rapidapi-key"] == "rapid"
        assert headers["x-rapidapi-host"] == "v3.football.api-sports.io"

    def test_empty_values_skipped(self):
        assert build_headers({"FOOTBALL_API_KEY": "", "RAPIDAPI_KEY": "rapid"})["x-rapidapi-key"] == "rapid"

    def test_fallback_key(self):
        assert build_headers({}) == {"x-apisports-key": FALLBACK_APISPORTS_KEY}


def _client(payload=None, exc=None):
    session = MagicMock()
    session.headers = {}
    response = MagicMock()
    response.json.return_value = payload
    response.headers = {}
    if exc is not None:
        session.get.side_effect = exc
    else:
        session.get.return_value = response
    return FootballAPIClient(headers={"x-apisports-key": "k"}, base_url="http://api", session=session), session


class TestFootballAPIClient:

    def test_get_player_first_entry(self):
        entry = {"player": {"id": 874, "injured": True}}
        client, session = _client({"results": 1, "response": [entry], "errors": []})
        assert client.get_player(874, 2025) == entry
        session.get.assert_called_once_with(
            "http://api/players", params={"id": 874, "season": 2025}, timeout=client.timeout
        )

    def test_get_player_no_results(self):
        client, _ = _client({"results": 0, "response": [], "errors": []})
        assert client.get_player(874, 2025) is None

    def test_get_fixtures_passes_round(self):
        client, session = _client({"results": 1, "response": [{"fixture": {"id": 1}}], "errors": []})
        assert client.get_fixtures(140, 2025, "Regular Season - 12") == [{"fixture": {"id": 1}}]
        assert session.get.call_args.kwargs["params"] == {
            "league": 140, "season": 2025, "round": "Regular Season - 12",
        }

    def test_get_odds_empty(self):
        client, _ = _client({"results": 0, "response": [], "errors": []})
        assert client.get_odds(99) == []

    def test_network_error_raises(self):
        client, _ = _client(exc=requests.exceptions.ConnectionError("down"))
        with pytest.raises(ProviderUnavailable):
            client.get_odds(99)

    def test_error_body_raises(self):
        client, _ = _client({"results": 0, "response": [], "errors": {"requests": "limit reached"}})
        with pytest.raises(ProviderUnavailable):
            client.get_fixtures(140, 2025, "Regular Season - 1")

    def test_invalid_json_raises(self):
        client, session = _client()
        session.get.return_value.json.side_effect = ValueError("no json")
        with pytest.raises(ProviderUnavailable):
            client.get_player(1, 2025)

    @pytest.mark.parametrize("body", [[{"unexpected": True}], None, "ok"])
    def test_non_object_body_raises(self, body):
        client, _ = _client(body)
        with pytest.raises(ProviderUnavailable):
            client.get_odds(99)

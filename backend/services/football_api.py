"""
API-Football (api-sports.io v3) client.
https://www.api-football.com/documentation-v3

Only the three read-only lookups the backend needs:

    GET /players?id=&season=            injury flag for one player
    GET /fixtures?league=&season=&round= fixtures of one matchday
    GET /odds?fixture=                   bookmaker odds for one fixture

Failures (network, HTTP status, non-JSON body) raise ``ProviderUnavailable``.
An empty ``response`` list is not an error; callers decide the fallback.
"""

import logging
import os
import time
from typing import Dict, List, Mapping, Optional

import requests

logger = logging.getLogger(__name__)

BASE_URL = os.getenv("FOOTBALL_API_BASE_URL", "https://v3.football.api-sports.io")
API_HOST = "v3.football.api-sports.io"
TIMEOUT_SECONDS = float(os.getenv("FOOTBALL_API_TIMEOUT", "15"))

# Direct api-sports keys, then RapidAPI keys, first non-empty wins.
APISPORTS_KEY_VARS = (
    "FOOTBALL_API_KEY",
    "APISPORTS_API_KEY",
    "API_FOOTBALL_KEY",
    "APISPORTS_KEY",
)
RAPIDAPI_KEY_VARS = (
    "RAPIDAPI_KEY",
    "RAPIDAPI_FOOTBALL_KEY",
    "API_FOOTBALL_RAPID_KEY",
)
# Shared key the deployment has always fallen back to when nothing is configured.
FALLBACK_APISPORTS_KEY = "099ef4c6c0803639d80207d4ac1ad5da"


class ProviderUnavailable(RuntimeError):
    """Raised when API-Football cannot be reached or answers with an error."""


def build_headers(env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Resolve the auth headers from the ordered environment candidates."""
    env = os.environ if env is None else env

    for var in APISPORTS_KEY_VARS:
        if env.get(var):
            return {"x-apisports-key": env[var]}

    for var in RAPIDAPI_KEY_VARS:
        if env.get(var):
            return {"x-rapidapi-key": env[var], "x-rapidapi-host": API_HOST}

    logger.warning("No API-Football key configured; using the shared fallback key")
    return {"x-apisports-key": FALLBACK_APISPORTS_KEY}


class FootballAPIClient:
    """Client for API-Football v3"""

    def __init__(
        self,
        headers: Optional[Dict[str, str]] = None,
        base_url: str = BASE_URL,
        timeout: float = TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(headers or build_headers())

    def _get(self, endpoint: str, params: Dict) -> Dict:
        url = f"{self.base_url}/{endpoint}"
        started = time.perf_counter()
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise ProviderUnavailable(f"GET /{endpoint} {params} failed: {e}") from e
        except ValueError as e:
            raise ProviderUnavailable(f"GET /{endpoint} returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ProviderUnavailable(f"GET /{endpoint} returned {type(data).__name__}, expected an object")

        # API-Football reports quota/plan problems in a 200 body
        errors = data.get("errors")
        if errors:
            raise ProviderUnavailable(f"GET /{endpoint} {params} errors: {errors}")

        logger.debug(
            "API-Football /%s %s: %s results in %.0fms (remaining today: %s)",
            endpoint,
            params,
            data.get("results"),
            (time.perf_counter() - started) * 1000,
            response.headers.get("x-ratelimit-requests-remaining"),
        )
        return data

    def get_player(self, player_id: int, season: int) -> Optional[Dict]:
        """
        Return the first ``/players`` entry for a player/season, or None.

        The injury flag lives at ``entry["player"]["injured"]``.
        """
        data = self._get("players", {"id": player_id, "season": season})
        if not data.get("results"):
            return None
        response = data.get("response") or []
        return response[0] if response else None

    def get_fixtures(self, competition_id: int, season: int, round_name: str) -> List[Dict]:
        """Fixtures for one competition round; [] when the provider has none."""
        data = self._get(
            "fixtures",
            {"league": competition_id, "season": season, "round": round_name},
        )
        if not data.get("results"):
            return []
        return data.get("response") or []

    def get_odds(self, fixture_id: int) -> List[Dict]:
        """Raw ``/odds`` response entries for one fixture; [] when uncovered."""
        data = self._get("odds", {"fixture": fixture_id})
        if not data.get("results"):
            return []
        return data.get("response") or []

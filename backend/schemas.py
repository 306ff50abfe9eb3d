"""
Pydantic request/response schemas for the fantasy backend API.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

AvailabilityStatus = Literal["AVAILABLE", "INJURED", "SUSPENDED"]


# ---------------------------------------------------------------------------
# Player availability
# ---------------------------------------------------------------------------

class SyncRequest(BaseModel):
    """Optional body for the availability sync routes."""

    season: Optional[int] = Field(None, ge=2000, le=2100, description="Defaults to FOOTBALL_SEASON")


class AvailabilityResponse(BaseModel):
    player_id: int
    season: int
    status: AvailabilityStatus
    reason: Optional[str] = None


class PlayerSyncResponse(AvailabilityResponse):
    division: str = Field(..., description="Division table that accepted the update")


class SyncStartedResponse(BaseModel):
    message: str
    season: int


class PlayerAvailabilityItem(BaseModel):
    id: int
    name: str
    position: Optional[str] = None
    team_name: Optional[str] = None
    team_crest: Optional[str] = None
    price: Optional[int] = None
    division: str
    availability_status: AvailabilityStatus
    availability_info: Optional[str] = None


# ---------------------------------------------------------------------------
# Bet options
# ---------------------------------------------------------------------------

class BetOptionResponse(BaseModel):
    id: str
    league_id: str
    jornada: int
    match_id: int
    home_team: str
    away_team: str
    home_crest: Optional[str] = None
    away_crest: Optional[str] = None
    bet_type: str
    bet_label: str
    odd: float


class BetOptionsExistResponse(BaseModel):
    exists: bool


class LeagueGenerationResponse(BaseModel):
    success: bool
    league_id: str
    jornada: int
    matchesProcessed: int
    optionsCount: int


class AllLeaguesGenerationResponse(BaseModel):
    success: bool
    jornada: int
    matchesProcessed: int
    leaguesUpdated: int
    totalOptions: int

"""
FastAPI application for the fantasy football backend
Player availability, bet option generation, and scheduled sync
"""

from fastapi import FastAPI, Depends, HTTPException, Query, BackgroundTasks
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional
import logging
import os

from backend.models import get_db
from backend.auth import verify_api_key, verify_admin_api_key
from backend.core.division_config import DEFAULT_SEASON
from backend.services.availability import (
    get_all_players_availability,
    resolve_player_availability,
    sync_all_players_availability,
    update_player_availability,
)
from backend.services.bet_options import (
    get_bet_options,
    get_or_generate_bet_options,
    has_bet_options,
    generate_bet_options_for_all_leagues,
    generate_bet_options_for_league,
)
from backend.services.repositories import PartitionNotFound, PersistenceFailure
from backend.schemas import (
    AllLeaguesGenerationResponse,
    AvailabilityResponse,
    BetOptionResponse,
    BetOptionsExistResponse,
    LeagueGenerationResponse,
    PlayerAvailabilityItem,
    PlayerSyncResponse,
    SyncRequest,
    SyncStartedResponse,
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Scheduler instance
scheduler = BackgroundScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("🚀 Starting fantasy backend")

    scheduler_tz = os.getenv("SCHEDULER_TIMEZONE", "Europe/Madrid")
    sync_enabled = os.getenv("AVAILABILITY_SYNC_ENABLED", "false").lower() == "true"
    if sync_enabled:
        sync_hour = int(os.getenv("AVAILABILITY_SYNC_CRON_HOUR", "5"))
        scheduler.add_job(
            _availability_sync_job,
            CronTrigger(hour=sync_hour, minute=0, timezone=scheduler_tz),
            id="availability_sync",
            name="Nightly Player Availability Sync",
            replace_existing=True,
        )
        logger.info("Availability sync scheduled daily at %02d:00 %s", sync_hour, scheduler_tz)

    scheduler.start()

    yield

    logger.info("👋 Shutting down fantasy backend")
    scheduler.shutdown()


app = FastAPI(
    title="Fantasy Liga Backend",
    description="Player availability and bet option generation from API-Football",
    version="1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "http://localhost:8081").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# SCHEDULED JOB
# ============================================================================

def _availability_sync_job(season: int = DEFAULT_SEASON):
    """Walk every player and refresh availability."""
    try:
        summary = sync_all_players_availability(season)
        logger.info("Availability sync job: %s", summary)
    except Exception as exc:
        logger.error("Availability sync job failed: %s", exc, exc_info=True)


def _check_jornada(jornada: int) -> None:
    if jornada < 1:
        raise HTTPException(status_code=400, detail="Invalid jornada")


@app.get("/")
async def root():
    """Health check"""
    return {
        "app": "Fantasy Liga Backend",
        "version": "1.0",
        "status": "operational",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Health check endpoint"""
    health = {"status": "healthy", "database": "connected", "scheduler": "running"}

    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Health check database error: %s", e)
        health["status"] = "degraded"
        health["database"] = f"error: {str(e)}"

    if not scheduler.running:
        health["status"] = "degraded"
        health["scheduler"] = "stopped"

    return health


# ============================================================================
# PLAYER AVAILABILITY
# ============================================================================

@app.get("/api/players/status", response_model=List[PlayerAvailabilityItem])
def get_players_availability(
    division: Optional[str] = Query(default=None, pattern="^(primera|segunda|premier)$"),
):
    """All players with availability, injured/suspended first"""
    return get_all_players_availability(division=division)


@app.get("/api/players/{player_id}/status", response_model=AvailabilityResponse)
def get_player_availability(
    player_id: int,
    season: int = Query(default=DEFAULT_SEASON, ge=2000, le=2100),
):
    """Resolve one player's availability without saving it"""
    availability = resolve_player_availability(player_id, season)
    return AvailabilityResponse(
        player_id=player_id,
        season=season,
        status=availability.status,
        reason=availability.reason,
    )


@app.post("/api/players/status/sync", response_model=SyncStartedResponse, status_code=202)
async def sync_players_availability(
    background_tasks: BackgroundTasks,
    body: Optional[SyncRequest] = None,
    user: str = Depends(verify_admin_api_key),
):
    """Start a full availability sync in the background"""
    season = (body.season if body else None) or DEFAULT_SEASON
    logger.info("Availability sync for season %d triggered by %s", season, user)
    background_tasks.add_task(_availability_sync_job, season)
    return SyncStartedResponse(message="Availability sync started in background", season=season)


@app.post("/api/players/{player_id}/status/sync", response_model=PlayerSyncResponse)
def sync_player_availability(
    player_id: int,
    body: Optional[SyncRequest] = None,
    user: str = Depends(verify_admin_api_key),
):
    """Resolve and save one player's availability"""
    season = (body.season if body else None) or DEFAULT_SEASON
    try:
        result = update_player_availability(player_id, season)
    except PartitionNotFound:
        raise HTTPException(status_code=404, detail="Player not found")
    except PersistenceFailure as exc:
        logger.error("Player %d sync failed: %s", player_id, exc, exc_info=True)
        raise HTTPException(status_code=500, detail=str(exc))
    return PlayerSyncResponse(**result)


# ============================================================================
# BET OPTIONS
# ============================================================================

@app.get("/api/bet-options/{league_id}/{jornada}", response_model=List[BetOptionResponse])
def read_bet_options(league_id: str, jornada: int, user: str = Depends(verify_api_key)):
    """Stored bet options for a league and jornada"""
    _check_jornada(jornada)
    return get_bet_options(league_id, jornada)


@app.get("/api/bet-options/{league_id}/{jornada}/exists", response_model=BetOptionsExistResponse)
def check_bet_options_exist(league_id: str, jornada: int, user: str = Depends(verify_api_key)):
    _check_jornada(jornada)
    return BetOptionsExistResponse(exists=has_bet_options(league_id, jornada))


@app.post("/api/bet-options/{league_id}/{jornada}/generate", response_model=LeagueGenerationResponse)
def generate_bet_options(league_id: str, jornada: int, user: str = Depends(verify_admin_api_key)):
    """Regenerate the bet options of one league and jornada"""
    _check_jornada(jornada)
    logger.info("Bet generation for league %s jornada %d triggered by %s", league_id, jornada, user)
    try:
        return generate_bet_options_for_league(league_id, jornada)
    except PersistenceFailure as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/api/bet-options/{league_id}/{jornada}/get-or-generate", response_model=List[BetOptionResponse])
def read_or_generate_bet_options(league_id: str, jornada: int, user: str = Depends(verify_api_key)):
    """Stored bet options, generated on first request"""
    _check_jornada(jornada)
    try:
        return get_or_generate_bet_options(league_id, jornada)
    except PersistenceFailure as exc:
        raise HTTPException(status_code=500, detail=str(exc))


# ============================================================================
# ADMIN
# ============================================================================

@app.post("/admin/bet-options/generate-all/{jornada}", response_model=AllLeaguesGenerationResponse)
def generate_all_bet_options(jornada: int, user: str = Depends(verify_admin_api_key)):
    """Regenerate bet options for every active league"""
    _check_jornada(jornada)
    logger.info("Bet generation for all leagues, jornada %d, triggered by %s", jornada, user)
    try:
        return generate_bet_options_for_all_leagues(jornada)
    except PersistenceFailure as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/admin/scheduler/status")
async def get_scheduler_status(user: str = Depends(verify_admin_api_key)):
    """Get scheduler job status"""
    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
        })

    return {
        "running": scheduler.running,
        "jobs": jobs,
    }


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Catch-all exception handler"""
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": type(exc).__name__}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

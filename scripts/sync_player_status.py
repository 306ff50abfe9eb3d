#!/usr/bin/env python3
"""
Refresh player availability from the command line

Usage:
    python scripts/sync_player_status.py                 # every player, FOOTBALL_SEASON
    python scripts/sync_player_status.py --season 2024
    python scripts/sync_player_status.py --player 874    # one player
    python scripts/sync_player_status.py --player 874 --dry-run
"""

import sys
import os
import json

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dotenv import load_dotenv
load_dotenv()

import logging

from backend.core.division_config import DEFAULT_SEASON
from backend.services.availability import (
    resolve_player_availability,
    sync_all_players_availability,
    update_player_availability,
)
from backend.services.repositories import PartitionNotFound, PersistenceFailure

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main() -> int:
    import argparse

    parser = argparse.ArgumentParser(description="Sync player availability from API-Football")
    parser.add_argument("--season", type=int, default=DEFAULT_SEASON, help="Season year")
    parser.add_argument("--player", type=int, help="Only this player id")
    parser.add_argument("--dry-run", action="store_true", help="Resolve without saving (needs --player)")
    args = parser.parse_args()

    if args.dry_run and args.player is None:
        parser.error("--dry-run requires --player")

    if args.player is not None and args.dry_run:
        availability = resolve_player_availability(args.player, args.season)
        print(json.dumps({"player_id": args.player, "season": args.season,
                          "status": availability.status, "reason": availability.reason}))
        return 0

    if args.player is not None:
        try:
            print(json.dumps(update_player_availability(args.player, args.season)))
        except PartitionNotFound as e:
            logger.error("❌ %s", e)
            return 1
        except PersistenceFailure as e:
            logger.error("❌ %s", e)
            return 2
        return 0

    summary = sync_all_players_availability(args.season)
    print(json.dumps(summary, indent=2))
    return 0 if not summary["errors"] else 2


if __name__ == "__main__":
    sys.exit(main())

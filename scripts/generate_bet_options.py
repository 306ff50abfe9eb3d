#!/usr/bin/env python3
"""
Generate bet options for a jornada

Usage:
    python scripts/generate_bet_options.py 12                 # every active league
    python scripts/generate_bet_options.py 12 --league abc123 # one league
    python scripts/generate_bet_options.py 12 --seed 7        # reproducible market picks
"""

import sys
import os
import json
import random

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dotenv import load_dotenv
load_dotenv()

import logging

from backend.core.division_config import DEFAULT_SEASON
from backend.services.bet_options import BetOptionGenerator
from backend.services.repositories import PersistenceFailure

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main() -> int:
    import argparse

    parser = argparse.ArgumentParser(description="Generate bet options from API-Football odds")
    parser.add_argument("jornada", type=int, help="Matchday number (>= 1)")
    parser.add_argument("--league", help="Only this league id")
    parser.add_argument("--season", type=int, default=DEFAULT_SEASON, help="Season year")
    parser.add_argument("--seed", type=int, help="Seed for the market picks")
    args = parser.parse_args()

    if args.jornada < 1:
        parser.error("jornada must be >= 1")

    rng = random.Random(args.seed) if args.seed is not None else None
    generator = BetOptionGenerator(rng=rng, season=args.season)

    try:
        if args.league:
            result = generator.generate_for_league(args.league, args.jornada)
        else:
            result = generator.generate_for_all_leagues(args.jornada)
    except PersistenceFailure as e:
        logger.error("❌ %s", e)
        return 2

    print(json.dumps(result, indent=2))
    return 0 if result["success"] else 1


if __name__ == "__main__":
    sys.exit(main())

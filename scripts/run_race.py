"""
Utility script to run a single headless dice race.

Usage:
    python scripts/run_race.py --seed 7
    python scripts/run_race.py --seed 7 --silent --odds --simulations 5000

Race parameters come from dice_derby/configs/game_balance.json (or the file
named by DICE_DERBY_CONFIG).
"""

from __future__ import annotations

import argparse
import os
import sys

# Ensure repo root is on sys.path when script is executed from anywhere
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.append(REPO_ROOT)

from dice_derby.bookie import Bookie  # noqa: E402
from dice_derby.engine import DiceRaceLoop, RaceSettings, RandomDice  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a Dice Derby race simulation.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the dice.")
    parser.add_argument("--silent", action="store_true", help="Only print the finish order.")
    parser.add_argument("--odds", action="store_true", help="Also price the bet board with the Bookie.")
    parser.add_argument("--simulations", type=int, default=None, help="Monte Carlo runs for --odds.")
    args = parser.parse_args()

    settings = RaceSettings.from_config()
    loop = DiceRaceLoop(RandomDice(args.seed), settings, verbose=not args.silent)
    outcome = loop.run_to_completion()

    print("\nFinish Order:")
    for idx, horse_id in enumerate(outcome.final_ranking, start=1):
        print(f"{idx}. Horse #{horse_id}")

    if args.odds:
        bookie = Bookie(settings, seed=args.seed, verbose=True)
        if args.simulations:
            bookie.run_monte_carlo(simulations=args.simulations)
        else:
            bookie.run_monte_carlo()


if __name__ == "__main__":
    main()

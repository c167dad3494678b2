from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from dice_derby.config import get_config
from dice_derby.engine import RaceSettings, RandomDice, simulate_race
from dice_derby.odds_table import (
    BET_RULES,
    HORSE_IDS,
    BetCategory,
    BetKey,
    RuleKind,
    all_bet_keys,
    multiplier_for,
)

DEFAULT_SIMULATIONS = int(get_config("bookie.simulations", 2000))
DEFAULT_SEED = get_config("bookie.seed", None)


@dataclass(frozen=True, eq=False)
class BookieReport:
    simulations: int
    # positions[i, h] is the 0-indexed finishing position of horse h + 1 in run i
    positions: np.ndarray
    hit_rates: Dict[BetKey, float]
    expected_returns: Dict[BetKey, float]

    def win_probability(self, horse_id: int) -> float:
        return float(np.mean(self.positions[:, horse_id - 1] == 0))

    def best_bets(self, count: int = 5):
        ordered = sorted(self.expected_returns.items(), key=lambda item: (-item[1], str(item[0])))
        return ordered[:count]


class Bookie:
    """
    Prices the bet board by running Monte Carlo simulations of the dice race.
    """

    def __init__(self, settings: Optional[RaceSettings] = None, seed: Optional[int] = DEFAULT_SEED, verbose: bool = False):
        self.settings = settings or RaceSettings.from_config()
        self.seed = seed
        self.verbose = verbose
        self.report: Optional[BookieReport] = None

    def run_monte_carlo(self, simulations: int = DEFAULT_SIMULATIONS) -> BookieReport:
        if simulations <= 0:
            raise ValueError("simulations must be positive.")
        if self.verbose:
            print(f"\nBookie: Running {simulations} Monte Carlo simulations...")

        rng = random.Random(self.seed)
        dice = RandomDice(rng=rng)
        positions = np.zeros((simulations, len(HORSE_IDS)), dtype=np.int8)
        for run in range(simulations):
            outcome = simulate_race(dice, self.settings)
            for position, horse_id in enumerate(outcome.final_ranking):
                positions[run, horse_id - 1] = position

        hit_rates = {key: self._hit_rate(key, positions) for key in all_bet_keys()}
        expected = {key: rate * multiplier_for(key) - 1.0 for key, rate in hit_rates.items()}
        self.report = BookieReport(simulations, positions, hit_rates, expected)

        if self.verbose:
            print("Monte Carlo complete.")
            for key in all_bet_keys():
                print(f"  -> {str(key):<12} hit {hit_rates[key] * 100:5.1f}%  EV {expected[key]:+.2f} per coin")
        return self.report

    @staticmethod
    def _hit_rate(key: BetKey, positions: np.ndarray) -> float:
        rule = BET_RULES[key.category]
        if rule.kind is RuleKind.WINNER_IN_GROUP:
            columns = [horse_id - 1 for horse_id in sorted(rule.horses)]
            hits = np.any(positions[:, columns] == 0, axis=1)
        elif rule.kind is RuleKind.HORSE_AT_OR_BELOW:
            columns = [horse_id - 1 for horse_id in sorted(rule.horses)]
            hits = np.all(positions[:, columns] >= rule.position, axis=1)
        else:
            hits = positions[:, key.horse_id - 1] < rule.position
        return float(np.mean(hits))


def quote(category: BetCategory, horse_id: Optional[int] = None, report: Optional[BookieReport] = None) -> float:
    """Expected return per coin for a single bet, pricing a fresh board when no report is given."""
    key = BetKey(category, horse_id)
    if not key.is_valid():
        raise ValueError(f"Invalid bet key: {key}")
    report = report or Bookie().run_monte_carlo()
    return report.expected_returns[key]

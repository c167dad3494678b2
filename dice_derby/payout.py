"""
Settlement of bets against a final ranking.

A winning bet pays ``stake x multiplier`` as pure winnings; the stake itself
was already deducted when the bet was placed and is never handed back.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Sequence, Tuple

from dice_derby.game_state import Player
from dice_derby.odds_table import HORSE_IDS, BetKey, evaluate, multiplier_for


class InvalidRankingError(ValueError):
    """A final ranking that is not a permutation of every horse id."""


@dataclass(frozen=True)
class BetOutcome:
    bet_key: BetKey
    amount: int
    won: bool
    payout: int


def validate_ranking(ranking: Sequence[int]) -> Tuple[int, ...]:
    ranking = tuple(ranking)
    if (
        len(ranking) != len(HORSE_IDS)
        or not all(isinstance(horse_id, int) for horse_id in ranking)
        or sorted(ranking) != sorted(HORSE_IDS)
    ):
        raise InvalidRankingError(f"Final ranking must be a permutation of {list(HORSE_IDS)}, got {list(ranking)}")
    return ranking


def compute_payout(bet_key: BetKey, amount: int, final_ranking: Sequence[int]) -> int:
    if not amount or amount <= 0:
        return 0
    return amount * multiplier_for(bet_key) if evaluate(bet_key, final_ranking) else 0


def payout_breakdown(player: Player, final_ranking: Sequence[int]) -> List[BetOutcome]:
    outcomes = []
    for bet_key, amount in player.bets.items():
        payout = compute_payout(bet_key, amount, final_ranking)
        outcomes.append(BetOutcome(bet_key, amount, payout > 0, payout))
    return outcomes


def settle_player(player: Player, final_ranking: Sequence[int]) -> Player:
    total = sum(outcome.payout for outcome in payout_breakdown(player, final_ranking))
    return replace(player, coins=player.coins + total, last_earned=total, bets={})


def settle(players: Sequence[Player], final_ranking: Sequence[int]) -> Tuple[Player, ...]:
    ranking = validate_ranking(final_ranking)
    return tuple(settle_player(player, ranking) for player in players)

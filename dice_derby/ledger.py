"""
Per-player betting ledger.

Staking deducts coins immediately and re-staking a key only moves the
difference, so ``coins + staked`` never changes through these calls.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from dice_derby.game_state import Player, Reason
from dice_derby.odds_table import BetKey


@dataclass(frozen=True)
class LedgerResult:
    success: bool
    player: Player
    reason: Optional[Reason] = None
    message: str = ""
    refund: int = 0


def is_valid_amount(amount) -> bool:
    return isinstance(amount, int) and not isinstance(amount, bool) and amount > 0


def available_for(player: Player, bet_key: BetKey) -> int:
    """Largest amount ``bet_key`` could be set to right now."""
    return player.coins + player.bets.get(bet_key, 0)


def staked_total(player: Player) -> int:
    return player.staked


def place_bet(player: Player, bet_key: BetKey, amount) -> LedgerResult:
    if not is_valid_amount(amount):
        return LedgerResult(False, player, Reason.INVALID_AMOUNT, "Bet amount must be a positive whole number.")
    if not isinstance(bet_key, BetKey) or not bet_key.is_valid():
        return LedgerResult(False, player, Reason.INVALID_BET_KEY, f"Unknown bet: {bet_key}")

    prior = player.bets.get(bet_key, 0)
    new_coins = player.coins - (amount - prior)
    if new_coins < 0:
        return LedgerResult(
            False,
            player,
            Reason.INSUFFICIENT_FUNDS,
            f"{player.name} can stake at most {available_for(player, bet_key)} on {bet_key}.",
        )

    bets = dict(player.bets)
    bets[bet_key] = amount
    updated = replace(player, coins=new_coins, bets=bets)
    return LedgerResult(True, updated, message=f"Staked {amount} on {bet_key}.", refund=max(prior - amount, 0))


def remove_bet(player: Player, bet_key: BetKey) -> LedgerResult:
    refund = player.bets.get(bet_key, 0)
    if not refund:
        return LedgerResult(True, player, message=f"No stake on {bet_key}.")

    bets = dict(player.bets)
    del bets[bet_key]
    updated = replace(player, coins=player.coins + refund, bets=bets)
    return LedgerResult(True, updated, message=f"Refunded {refund} from {bet_key}.", refund=refund)

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from dice_derby.odds_table import BetKey


class Phase(Enum):
    START = "start"
    BET = "bet"
    RACING = "racing"
    COLLECT = "collect"
    RESULT = "result"


class Reason(Enum):
    """Rejection codes reported by ledger and engine commands."""

    INVALID_PHASE = "invalid_phase"
    INVALID_CONFIGURATION = "invalid_configuration"
    NOT_CONFIGURED = "not_configured"
    UNKNOWN_PLAYER = "unknown_player"
    NOT_CURRENT_BETTOR = "not_current_bettor"
    INVALID_BET_KEY = "invalid_bet_key"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    NO_TURNS_REMAINING = "no_turns_remaining"


@dataclass(frozen=True)
class Player:
    """A bettor. ``bets`` is a read-only view; ledger calls return new players."""

    player_id: int
    name: str
    coins: int
    bets: Mapping[BetKey, int] = field(default_factory=dict)
    last_earned: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "bets", MappingProxyType(dict(self.bets)))

    @property
    def staked(self) -> int:
        return sum(self.bets.values())


@dataclass(frozen=True)
class PlayerSnapshot:
    player_id: int
    name: str
    coins: int
    last_earned: int

    @classmethod
    def of(cls, player: Player) -> "PlayerSnapshot":
        return cls(player.player_id, player.name, player.coins, player.last_earned)


@dataclass(frozen=True)
class TurnRecord:
    turn: int
    final_ranking: Tuple[int, ...]
    player_snapshots: Tuple[PlayerSnapshot, ...]

    @property
    def winner(self) -> int:
        return self.final_ranking[0]


@dataclass(frozen=True)
class GameState:
    phase: Phase = Phase.START
    max_turns: int = 3
    current_turn: int = 1
    players: Tuple[Player, ...] = ()
    current_bettor_index: int = 0
    final_ranking: Tuple[int, ...] = ()
    turn_history: Tuple[TurnRecord, ...] = ()

    def player(self, player_id: int) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    @property
    def turn_settled(self) -> bool:
        """True once the race for ``current_turn`` has been recorded."""
        return len(self.turn_history) == self.current_turn


def initial_state() -> GameState:
    return GameState()

"""
Phase state machine for the dice derby.

Every command is a pure function ``(state, ...) -> CommandResult``. A
rejected command returns the untouched input state with a ``Reason``;
a malformed final ranking raises ``InvalidRankingError`` instead.

    START -> BET -> RACING -> COLLECT -> (BET | RESULT) -> START
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence

from dice_derby import ledger, payout
from dice_derby.config import get_config
from dice_derby.game_state import (
    GameState,
    Phase,
    Player,
    PlayerSnapshot,
    Reason,
    TurnRecord,
    initial_state,
)
from dice_derby.odds_table import BetKey

INITIAL_COINS = int(get_config("economy.initial_coins", 5))
TURN_INCOME = int(get_config("economy.turn_income", 5))
MIN_PLAYERS = int(get_config("game.min_players", 1))
MAX_PLAYERS = int(get_config("game.max_players", 5))
MIN_TURNS = int(get_config("game.min_turns", 1))
MAX_TURNS = int(get_config("game.max_turns", 3))


@dataclass(frozen=True)
class CommandResult:
    success: bool
    state: GameState
    reason: Optional[Reason] = None
    message: str = ""


@dataclass(frozen=True)
class Standing:
    rank: int
    player: Player


def _ok(state: GameState, message: str = "") -> CommandResult:
    return CommandResult(True, state, message=message)


def _reject(state: GameState, reason: Reason, message: str) -> CommandResult:
    return CommandResult(False, state, reason, message)


def _wrong_phase(state: GameState, command: str) -> CommandResult:
    return _reject(state, Reason.INVALID_PHASE, f"'{command}' is not allowed during {state.phase.name}.")


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# --- START ---

def configure(state: GameState, turn_count: int, player_names: Sequence[str]) -> CommandResult:
    if state.phase is not Phase.START:
        return _wrong_phase(state, "configure")
    if not _is_int(turn_count) or not MIN_TURNS <= turn_count <= MAX_TURNS:
        return _reject(
            state, Reason.INVALID_CONFIGURATION, f"Turn count must be between {MIN_TURNS} and {MAX_TURNS}."
        )
    if isinstance(player_names, str) or not MIN_PLAYERS <= len(player_names) <= MAX_PLAYERS:
        return _reject(
            state, Reason.INVALID_CONFIGURATION, f"Player count must be between {MIN_PLAYERS} and {MAX_PLAYERS}."
        )

    players = tuple(
        Player(
            player_id=index,
            name=(str(name).strip() if name is not None else "") or f"Player {index + 1}",
            coins=INITIAL_COINS,
        )
        for index, name in enumerate(player_names)
    )
    configured = replace(state, max_turns=turn_count, players=players, current_bettor_index=0)
    return _ok(configured, f"Configured {len(players)} players for {turn_count} turns.")


def enter_betting(state: GameState) -> CommandResult:
    if state.phase is Phase.START:
        if not state.players:
            return _reject(state, Reason.NOT_CONFIGURED, "Configure players before betting.")
    elif state.phase is Phase.COLLECT:
        if state.turn_settled:
            return _reject(state, Reason.INVALID_PHASE, "Advance to the next turn before betting again.")
    else:
        return _wrong_phase(state, "enter_betting")

    players = tuple(
        replace(player, coins=player.coins + TURN_INCOME, bets={}, last_earned=0)
        for player in state.players
    )
    betting = replace(state, phase=Phase.BET, players=players, current_bettor_index=0)
    return _ok(betting, f"Turn {state.current_turn}: betting is open.")


# --- BET ---

def current_bettor(state: GameState) -> Optional[Player]:
    if state.phase is not Phase.BET or not state.players:
        return None
    return state.players[state.current_bettor_index]


def _bettor_check(state: GameState, player_id: int, command: str) -> Optional[CommandResult]:
    if state.phase is not Phase.BET:
        return _wrong_phase(state, command)
    if state.player(player_id) is None:
        return _reject(state, Reason.UNKNOWN_PLAYER, f"No player with id {player_id}.")
    if current_bettor(state).player_id != player_id:
        return _reject(state, Reason.NOT_CURRENT_BETTOR, "It is not this player's turn to bet.")
    return None


def _with_player(state: GameState, updated: Player) -> GameState:
    players = tuple(updated if p.player_id == updated.player_id else p for p in state.players)
    return replace(state, players=players)


def place_bet(state: GameState, player_id: int, bet_key: BetKey, amount: int) -> CommandResult:
    rejected = _bettor_check(state, player_id, "place_bet")
    if rejected:
        return rejected
    result = ledger.place_bet(state.player(player_id), bet_key, amount)
    if not result.success:
        return _reject(state, result.reason, result.message)
    return _ok(_with_player(state, result.player), result.message)


def remove_bet(state: GameState, player_id: int, bet_key: BetKey) -> CommandResult:
    rejected = _bettor_check(state, player_id, "remove_bet")
    if rejected:
        return rejected
    result = ledger.remove_bet(state.player(player_id), bet_key)
    return _ok(_with_player(state, result.player), result.message)


def advance_bettor(state: GameState) -> CommandResult:
    if state.phase is not Phase.BET:
        return _wrong_phase(state, "advance_bettor")
    next_index = state.current_bettor_index + 1
    if next_index >= len(state.players):
        return _ok(replace(state, phase=Phase.RACING), "All bets are in. The race is ready.")
    return _ok(replace(state, current_bettor_index=next_index), f"{state.players[next_index].name} to bet.")


# --- RACING ---

def start_race(state: GameState) -> CommandResult:
    if state.phase is not Phase.RACING:
        return _wrong_phase(state, "start_race")
    return _ok(state, "They're off.")


def race_finished(state: GameState, final_ranking: Sequence[int]) -> CommandResult:
    ranking = payout.validate_ranking(final_ranking)
    if state.phase is not Phase.RACING:
        return _wrong_phase(state, "race_finished")

    players = payout.settle(state.players, ranking)
    record = TurnRecord(
        turn=state.current_turn,
        final_ranking=ranking,
        player_snapshots=tuple(PlayerSnapshot.of(player) for player in players),
    )
    settled = replace(
        state,
        phase=Phase.COLLECT,
        players=players,
        final_ranking=ranking,
        turn_history=state.turn_history + (record,),
    )
    return _ok(settled, f"Horse #{ranking[0]} wins turn {state.current_turn}.")


# --- COLLECT ---

def is_last_turn(state: GameState) -> bool:
    return state.current_turn >= state.max_turns


def next_turn(state: GameState) -> CommandResult:
    if state.phase is not Phase.COLLECT or not state.turn_settled:
        return _wrong_phase(state, "next_turn")
    if is_last_turn(state):
        return _reject(state, Reason.NO_TURNS_REMAINING, "That was the final turn.")
    return _ok(replace(state, current_turn=state.current_turn + 1, final_ranking=()))


def finish_game(state: GameState) -> CommandResult:
    if state.phase is not Phase.COLLECT or not state.turn_settled:
        return _wrong_phase(state, "finish_game")
    return _ok(replace(state, phase=Phase.RESULT), "Final standings are in.")


# --- RESULT ---

def reset(state: GameState) -> CommandResult:
    if state.phase is not Phase.RESULT:
        return _wrong_phase(state, "reset")
    return _ok(initial_state())


def final_standings(state: GameState) -> List[Standing]:
    ranked = sorted(state.players, key=lambda player: (-player.coins, player.player_id))
    return [Standing(rank, player) for rank, player in enumerate(ranked, start=1)]


COMMANDS: Dict[str, Callable[..., CommandResult]] = {
    "configure": configure,
    "enter_betting": enter_betting,
    "place_bet": place_bet,
    "remove_bet": remove_bet,
    "advance_bettor": advance_bettor,
    "start_race": start_race,
    "race_finished": race_finished,
    "next_turn": next_turn,
    "finish_game": finish_game,
    "reset": reset,
}


def dispatch(state: GameState, command: str, *args) -> CommandResult:
    """Applies a command by name; used to replay a recorded game."""
    try:
        handler = COMMANDS[command]
    except KeyError as exc:
        raise ValueError(f"Unknown command: {command}") from exc
    return handler(state, *args)

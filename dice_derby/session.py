from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from dice_derby import game_engine
from dice_derby.engine import (
    DiceRaceLoop,
    DiceSource,
    RaceOutcome,
    RaceSettings,
    RaceState,
    RandomDice,
    TelemetryCollector,
    TickScheduler,
)
from dice_derby.game_engine import CommandResult
from dice_derby.game_state import GameState, Phase, initial_state
from dice_derby.odds_table import BetKey


@dataclass(frozen=True)
class CommandLogEntry:
    command: str
    args: Tuple
    success: bool


class GameSession:
    """
    Stateful wrapper a presentation layer holds on to.

    Commands go through the pure engine and the resulting state replaces
    the current one. The session owns the race loop: ``start_race`` launches
    it on the scheduler (or runs it to completion when there is none) and the
    loop's finish event feeds ``race_finished``. Leaving RACING always stops
    the scheduled tick.
    """

    def __init__(
        self,
        scheduler: Optional[TickScheduler] = None,
        dice: Optional[DiceSource] = None,
        settings: Optional[RaceSettings] = None,
        telemetry: Optional[TelemetryCollector] = None,
        verbose: bool = False,
    ):
        self.scheduler = scheduler
        self.verbose = verbose
        self.race_loop = DiceRaceLoop(
            dice or RandomDice(),
            settings=settings,
            telemetry=telemetry,
            on_finished=self._on_race_finished,
            verbose=verbose,
        )
        self.log: List[CommandLogEntry] = []
        self._state = initial_state()

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def race_state(self) -> RaceState:
        return self.race_loop.state

    @property
    def live_ranking(self) -> Tuple[int, ...]:
        if self._state.final_ranking:
            return self._state.final_ranking
        return self.race_loop.state.ranking

    def _apply(self, command: str, *args) -> CommandResult:
        result = game_engine.dispatch(self._state, command, *args)
        self.log.append(CommandLogEntry(command, tuple(args), result.success))
        self._state = result.state
        if self.verbose:
            if result.success:
                if result.message:
                    print(result.message)
            else:
                print(f"  -> Rejected {command}: {result.message}")
        if self._state.phase is not Phase.RACING and self.race_loop.running:
            self.race_loop.stop()
        return result

    def configure(self, turn_count: int, player_names: Sequence[str]) -> CommandResult:
        return self._apply("configure", turn_count, list(player_names))

    def enter_betting(self) -> CommandResult:
        return self._apply("enter_betting")

    def place_bet(self, player_id: int, bet_key: BetKey, amount: int) -> CommandResult:
        return self._apply("place_bet", player_id, bet_key, amount)

    def remove_bet(self, player_id: int, bet_key: BetKey) -> CommandResult:
        return self._apply("remove_bet", player_id, bet_key)

    def advance_bettor(self) -> CommandResult:
        return self._apply("advance_bettor")

    def start_race(self) -> CommandResult:
        result = self._apply("start_race")
        if not result.success:
            return result
        if self.scheduler is None:
            self.race_loop.run_to_completion()
        else:
            self.race_loop.start(self.scheduler)
        return replace(result, state=self._state)

    def race_finished(self, final_ranking: Sequence[int]) -> CommandResult:
        return self._apply("race_finished", tuple(final_ranking))

    def next_turn(self) -> CommandResult:
        return self._apply("next_turn")

    def finish_game(self) -> CommandResult:
        return self._apply("finish_game")

    def reset(self) -> CommandResult:
        result = self._apply("reset")
        if result.success:
            self.race_loop.reset()
        return result

    def history(self) -> Tuple[CommandLogEntry, ...]:
        """Commands applied so far, in order; feed to ``replay`` to rebuild the state."""
        return tuple(self.log)

    def standings(self) -> List[game_engine.Standing]:
        return game_engine.final_standings(self._state)

    def _on_race_finished(self, outcome: RaceOutcome) -> None:
        self.race_finished(outcome.final_ranking)


def replay(entries: Iterable[CommandLogEntry], state: Optional[GameState] = None) -> GameState:
    """Re-applies a command log to a fresh (or given) state."""
    state = state or initial_state()
    for entry in entries:
        state = game_engine.dispatch(state, entry.command, *entry.args).state
    return state

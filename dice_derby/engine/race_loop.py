from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

from .data_models import DiceRoll, RaceError, RaceOutcome, RaceSettings, RaceState
from .dice import DiceSource, roll_pair
from .scheduler import ScheduledTick, TickScheduler
from .telemetry import TelemetryCollector, TelemetryFrame
from dice_derby.odds_table import HORSE_IDS


def compute_ranking(progress: Sequence[float]) -> Tuple[int, ...]:
    """Horse ids by progress descending; equal progress ranks the lower id first."""
    return tuple(sorted(HORSE_IDS, key=lambda horse_id: (-progress[horse_id - 1], horse_id)))


def new_race(settings: RaceSettings) -> RaceState:
    progress = tuple(0.0 for _ in HORSE_IDS)
    return RaceState(
        tick=0,
        progress=progress,
        ranking=compute_ranking(progress),
        countdown=tuple(settings.countdown),
    )


def countdown_step(state: RaceState) -> RaceState:
    if state.started:
        raise RaceError("Countdown already complete.")
    return RaceState(
        tick=state.tick,
        progress=state.progress,
        ranking=state.ranking,
        countdown=state.countdown[1:],
    )


def is_dice_tick(state: RaceState, settings: RaceSettings) -> bool:
    return (state.tick + 1) % settings.dice_interval_ticks == 0


def tick(state: RaceState, settings: RaceSettings, roll: Optional[DiceRoll] = None) -> RaceState:
    """
    Advances the race by one tick.

    Every horse moves ``base_speed``; on every ``dice_interval_ticks``-th
    tick the horses matching each die get ``boost_amount`` (both boosts
    apply when the dice agree). Progress is clamped to the track length
    and the race finishes the moment the leader reaches it.
    """
    if not state.started:
        raise RaceError("Cannot tick during the countdown.")
    if state.finished:
        raise RaceError("Race already finished.")

    dice_tick = is_dice_tick(state, settings)
    if dice_tick and roll is None:
        raise RaceError(f"Tick {state.tick + 1} requires a dice roll.")
    if not dice_tick and roll is not None:
        raise RaceError(f"Tick {state.tick + 1} is not a dice tick.")

    length = settings.track_length
    progress: List[float] = [min(pos + settings.base_speed, length) for pos in state.progress]

    if roll is not None:
        for value in roll:
            if not 1 <= value <= settings.dice_faces:
                raise RaceError(f"Die value {value} outside 1..{settings.dice_faces}.")
            if value in HORSE_IDS:
                progress[value - 1] = min(progress[value - 1] + settings.boost_amount, length)

    ranking = compute_ranking(progress)
    finished = progress[ranking[0] - 1] >= length
    return RaceState(
        tick=state.tick + 1,
        progress=tuple(progress),
        ranking=ranking,
        finished=finished,
        last_roll=roll,
    )


class DiceRaceLoop:
    """
    Drives one race at a time over the pure ``countdown_step``/``tick``
    functions. Starting again resets all race-local state and replaces
    any schedule that is still running.
    """

    def __init__(
        self,
        dice: DiceSource,
        settings: Optional[RaceSettings] = None,
        telemetry: Optional[TelemetryCollector] = None,
        on_frame: Optional[Callable[[RaceState], None]] = None,
        on_finished: Optional[Callable[[RaceOutcome], None]] = None,
        verbose: bool = False,
    ) -> None:
        self.dice = dice
        self.settings = settings or RaceSettings.from_config()
        self.telemetry = telemetry
        self.on_frame = on_frame
        self.on_finished = on_finished
        self.verbose = verbose
        self.rolls: List[DiceRoll] = []
        self.outcome: Optional[RaceOutcome] = None
        self._handle: Optional[ScheduledTick] = None
        self._scheduler: Optional[TickScheduler] = None
        self._state = new_race(self.settings)

    @property
    def state(self) -> RaceState:
        return self._state

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.active

    def reset(self) -> RaceState:
        self.stop()
        self._state = new_race(self.settings)
        self.rolls = []
        self.outcome = None
        if self.telemetry is not None:
            self.telemetry.clear()
        self._emit()
        return self._state

    def advance(self) -> RaceState:
        """Runs one countdown step or one tick, rolling dice when the tick calls for it."""
        if not self._state.started:
            self._state = countdown_step(self._state)
            if self.verbose and self._state.countdown_label:
                print(self._state.countdown_label)
        else:
            roll = None
            if is_dice_tick(self._state, self.settings):
                roll = roll_pair(self.dice, self.settings.dice_faces)
                self.rolls.append(roll)
                if self.verbose:
                    print(f"  -> Tick {self._state.tick + 1}: dice {roll.d1} & {roll.d2}")
            self._state = tick(self._state, self.settings, roll)
        self._emit()
        if self._state.finished:
            self._finish()
        return self._state

    def start(self, scheduler: TickScheduler) -> None:
        self.reset()
        self._scheduler = scheduler
        if self.verbose and self._state.countdown_label:
            print(self._state.countdown_label)
        if self._state.started:
            self._handle = scheduler.schedule(self.settings.tick_seconds, self._on_tick)
        else:
            self._handle = scheduler.schedule(self.settings.countdown_seconds, self._on_countdown)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def run_to_completion(self) -> RaceOutcome:
        """Runs a whole race synchronously, without a scheduler."""
        self.reset()
        while not self._state.finished:
            self.advance()
        return self.outcome

    def _on_countdown(self) -> None:
        self.advance()
        if self._state.started:
            self.stop()
            self._handle = self._scheduler.schedule(self.settings.tick_seconds, self._on_tick)

    def _on_tick(self) -> None:
        if self._state.finished:
            self.stop()
            return
        self.advance()

    def _emit(self) -> None:
        if self.telemetry is not None:
            self.telemetry.record_frame(TelemetryFrame.from_state(self._state))
        if self.on_frame is not None:
            self.on_frame(self._state)

    def _finish(self) -> None:
        self.stop()
        self.outcome = RaceOutcome(
            final_ranking=self._state.ranking,
            ticks=self._state.tick,
            rolls=tuple(self.rolls),
        )
        if self.verbose:
            print(f"Race finished after {self._state.tick} ticks. Winner: #{self.outcome.winner}")
            print("  -> Finish order: " + ", ".join(f"#{horse_id}" for horse_id in self.outcome.final_ranking))
        if self.on_finished is not None:
            self.on_finished(self.outcome)


def simulate_race(dice: DiceSource, settings: Optional[RaceSettings] = None) -> RaceOutcome:
    return DiceRaceLoop(dice, settings).run_to_completion()

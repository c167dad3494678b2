from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from dice_derby.config import get_config
from dice_derby.odds_table import HORSE_IDS


class RaceError(RuntimeError):
    """Illegal use of the race simulator (ticking a finished race, missing dice, ...)."""


@dataclass(frozen=True)
class RaceSettings:
    """Track and dice parameters; times are in seconds."""

    track_length: float = 100.0
    base_speed: float = 0.38
    tick_seconds: float = 0.1
    dice_interval_ticks: int = 20
    boost_amount: float = 4.0
    dice_faces: int = 7
    countdown: Tuple[str, ...] = ("Ready", "GO!")
    countdown_seconds: float = 1.2

    def __post_init__(self) -> None:
        if self.dice_interval_ticks <= 0:
            raise ValueError("dice_interval_ticks must be positive.")
        if self.base_speed <= 0 or self.track_length <= 0:
            raise ValueError("Track length and base speed must be positive.")

    @classmethod
    def from_config(cls) -> "RaceSettings":
        defaults = cls()
        tick_ms = get_config("race.tick_ms")
        countdown_ms = get_config("race.countdown_ms")
        return cls(
            track_length=float(get_config("race.track_length", defaults.track_length)),
            base_speed=float(get_config("race.base_speed", defaults.base_speed)),
            tick_seconds=tick_ms / 1000.0 if tick_ms is not None else defaults.tick_seconds,
            dice_interval_ticks=int(get_config("race.dice_interval_ticks", defaults.dice_interval_ticks)),
            boost_amount=float(get_config("race.boost_amount", defaults.boost_amount)),
            dice_faces=int(get_config("race.dice_faces", defaults.dice_faces)),
            countdown=tuple(get_config("race.countdown", defaults.countdown)),
            countdown_seconds=countdown_ms / 1000.0 if countdown_ms is not None else defaults.countdown_seconds,
        )


@dataclass(frozen=True)
class DiceRoll:
    d1: int
    d2: int

    def __iter__(self):
        return iter((self.d1, self.d2))


@dataclass(frozen=True)
class RaceState:
    """Immutable snapshot of one race; ``progress`` is indexed by horse id - 1."""

    tick: int = 0
    progress: Tuple[float, ...] = tuple(0.0 for _ in HORSE_IDS)
    ranking: Tuple[int, ...] = HORSE_IDS
    countdown: Tuple[str, ...] = ()
    finished: bool = False
    last_roll: Optional[DiceRoll] = None

    @property
    def countdown_label(self) -> Optional[str]:
        return self.countdown[0] if self.countdown else None

    @property
    def started(self) -> bool:
        return not self.countdown

    @property
    def winner(self) -> Optional[int]:
        return self.ranking[0] if self.finished else None

    @property
    def final_ranking(self) -> Optional[Tuple[int, ...]]:
        return self.ranking if self.finished else None

    def progress_of(self, horse_id: int) -> float:
        return self.progress[horse_id - 1]


@dataclass(frozen=True)
class RaceOutcome:
    final_ranking: Tuple[int, ...]
    ticks: int
    rolls: Sequence[DiceRoll] = field(default_factory=tuple)

    @property
    def winner(self) -> int:
        return self.final_ranking[0]

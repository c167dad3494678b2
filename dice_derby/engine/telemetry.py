from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .data_models import DiceRoll, RaceState


@dataclass(frozen=True)
class TelemetryFrame:
    tick: int
    countdown_label: Optional[str]
    progress: Tuple[float, ...]
    ranking: Tuple[int, ...]
    roll: Optional[DiceRoll]
    finished: bool

    @classmethod
    def from_state(cls, state: RaceState) -> "TelemetryFrame":
        return cls(
            tick=state.tick,
            countdown_label=state.countdown_label,
            progress=state.progress,
            ranking=state.ranking,
            roll=state.last_roll,
            finished=state.finished,
        )


class TelemetryCollector:
    """Frame stream of one race, recorded by the loop on every countdown step and tick."""

    def __init__(self) -> None:
        self.frames: List[TelemetryFrame] = []

    def record_frame(self, frame: TelemetryFrame) -> None:
        self.frames.append(frame)

    def latest(self) -> Optional[TelemetryFrame]:
        return self.frames[-1] if self.frames else None

    def roll_frames(self) -> Tuple[TelemetryFrame, ...]:
        """Frames of the ticks on which the dice were thrown."""
        return tuple(frame for frame in self.frames if frame.roll is not None)

    def progress_series(self, horse_id: int) -> Tuple[float, ...]:
        return tuple(frame.progress[horse_id - 1] for frame in self.frames)

    def export(self) -> Tuple[TelemetryFrame, ...]:
        return tuple(self.frames)

    def clear(self) -> None:
        self.frames.clear()

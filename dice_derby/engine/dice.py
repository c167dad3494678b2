from __future__ import annotations

import random
from typing import Iterable, List, Optional

from .data_models import DiceRoll, RaceError


class DiceSource:
    """Random-integer capability handed to the race loop."""

    def roll(self, faces: int) -> int:
        raise NotImplementedError


class RandomDice(DiceSource):
    """Seeded dice; two sources built with the same seed roll identically."""

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        self.seed = seed
        self.rng = rng or random.Random(seed)

    def roll(self, faces: int) -> int:
        return self.rng.randint(1, faces)


class ScriptedDice(DiceSource):
    """Replays a fixed sequence of die faces."""

    def __init__(self, values: Iterable[int]) -> None:
        self._values: List[int] = list(values)
        self._cursor = 0

    @classmethod
    def from_pairs(cls, pairs: Iterable[Iterable[int]]) -> "ScriptedDice":
        return cls(value for pair in pairs for value in pair)

    @property
    def remaining(self) -> int:
        return len(self._values) - self._cursor

    def roll(self, faces: int) -> int:
        if self._cursor >= len(self._values):
            raise RaceError("Scripted dice exhausted.")
        value = self._values[self._cursor]
        if not 1 <= value <= faces:
            raise RaceError(f"Scripted die value {value} outside 1..{faces}.")
        self._cursor += 1
        return value


def roll_pair(source: DiceSource, faces: int) -> DiceRoll:
    return DiceRoll(source.roll(faces), source.roll(faces))

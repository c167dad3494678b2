"""
Race engine package for the seven-horse dice race.

The package is split into data models, dice sources, tick schedulers and
telemetry. ``race_loop`` holds the pure tick functions and the loop that
drives them from a scheduler.
"""

from .data_models import DiceRoll, RaceError, RaceOutcome, RaceSettings, RaceState  # noqa: F401
from .dice import DiceSource, RandomDice, ScriptedDice, roll_pair  # noqa: F401
from .scheduler import AsyncioScheduler, ManualScheduler, ScheduledTick, TickScheduler  # noqa: F401
from .telemetry import TelemetryCollector, TelemetryFrame  # noqa: F401
from .race_loop import (  # noqa: F401
    DiceRaceLoop,
    compute_ranking,
    countdown_step,
    is_dice_tick,
    new_race,
    simulate_race,
    tick,
)

__all__ = [
    "DiceRoll",
    "RaceError",
    "RaceOutcome",
    "RaceSettings",
    "RaceState",
    "DiceSource",
    "RandomDice",
    "ScriptedDice",
    "roll_pair",
    "AsyncioScheduler",
    "ManualScheduler",
    "ScheduledTick",
    "TickScheduler",
    "TelemetryCollector",
    "TelemetryFrame",
    "DiceRaceLoop",
    "compute_ranking",
    "countdown_step",
    "is_dice_tick",
    "new_race",
    "simulate_race",
    "tick",
]

"""
Static betting data for the seven-horse dice derby.

Horses, their colour groups, and the rule table that maps every bet
category to a multiplier and a win condition over a final ranking.
Win conditions are tagged rules (``RuleKind``) evaluated through a single
dispatch table so every condition can be audited and tested in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple


class HorseColor(Enum):
    BLUE = "blue"
    YELLOW = "yellow"
    RED = "red"
    BLACK = "black"


@dataclass(frozen=True)
class Horse:
    horse_id: int
    color: HorseColor
    label: str
    bg: str
    text: str


HORSES: Tuple[Horse, ...] = (
    Horse(1, HorseColor.BLUE, "No. 1", "#1565C0", "#fff"),
    Horse(2, HorseColor.BLUE, "No. 2", "#1976D2", "#fff"),
    Horse(3, HorseColor.BLUE, "No. 3", "#42A5F5", "#fff"),
    Horse(4, HorseColor.YELLOW, "No. 4", "#F9A825", "#333"),
    Horse(5, HorseColor.YELLOW, "No. 5", "#FDD835", "#333"),
    Horse(6, HorseColor.RED, "No. 6", "#C62828", "#fff"),
    Horse(7, HorseColor.BLACK, "No. 7", "#212121", "#fff"),
)

HORSE_MAP: Dict[int, Horse] = {horse.horse_id: horse for horse in HORSES}
HORSE_IDS: Tuple[int, ...] = tuple(horse.horse_id for horse in HORSES)


def horses_in_group(color: HorseColor) -> FrozenSet[int]:
    return frozenset(horse.horse_id for horse in HORSES if horse.color is color)


class BetCategory(Enum):
    """Bet board categories; the value is the board-cell token prefix."""

    COLOR_BLUE = "colorBlue"
    COLOR_YELLOW = "colorYellow"
    COLOR_RED = "colorRed"
    COLOR_BLACK = "colorBlack"
    SHOW = "show"
    PLACE = "place"
    WIN = "win"

    @property
    def needs_horse(self) -> bool:
        return self in PER_HORSE_CATEGORIES

    @classmethod
    def from_str(cls, value: str) -> "BetCategory":
        try:
            return cls(value)
        except ValueError as exc:
            raise ValueError(f"Unknown bet category: {value}") from exc


COLOR_CATEGORIES = (
    BetCategory.COLOR_BLUE,
    BetCategory.COLOR_YELLOW,
    BetCategory.COLOR_RED,
    BetCategory.COLOR_BLACK,
)
PER_HORSE_CATEGORIES = (BetCategory.SHOW, BetCategory.PLACE, BetCategory.WIN)


@dataclass(frozen=True)
class BetKey:
    """One wagerable outcome: a colour group, or a (bet type, horse) pair."""

    category: BetCategory
    horse_id: Optional[int] = None

    @classmethod
    def color(cls, category: BetCategory) -> "BetKey":
        return cls(category)

    @classmethod
    def for_horse(cls, category: BetCategory, horse_id: int) -> "BetKey":
        return cls(category, horse_id)

    @classmethod
    def parse(cls, token: str) -> "BetKey":
        """Inverse of ``str(key)``: ``colorBlue`` or ``show_3``."""
        if "_" in token:
            prefix, _, raw_id = token.partition("_")
            try:
                horse_id = int(raw_id)
            except ValueError as exc:
                raise ValueError(f"Invalid horse id in bet key: {token}") from exc
            key = cls(BetCategory.from_str(prefix), horse_id)
        else:
            key = cls(BetCategory.from_str(token))
        if not key.is_valid():
            raise ValueError(f"Invalid bet key: {token}")
        return key

    def is_valid(self) -> bool:
        if not isinstance(self.category, BetCategory):
            return False
        if self.category.needs_horse:
            return (
                isinstance(self.horse_id, int)
                and not isinstance(self.horse_id, bool)
                and self.horse_id in HORSE_MAP
            )
        return self.horse_id is None

    def __str__(self) -> str:
        if self.horse_id is None:
            return self.category.value
        return f"{self.category.value}_{self.horse_id}"


class RuleKind(Enum):
    WINNER_IN_GROUP = "winner_in_group"
    HORSE_AT_OR_BELOW = "horse_at_or_below"
    HORSE_IN_TOP = "horse_in_top"


@dataclass(frozen=True)
class BetRule:
    kind: RuleKind
    multiplier: int
    label: str
    horses: FrozenSet[int] = frozenset()
    position: int = 0


BET_RULES: Dict[BetCategory, BetRule] = {
    BetCategory.COLOR_BLUE: BetRule(
        RuleKind.WINNER_IN_GROUP, 2, "Blue wins", horses=horses_in_group(HorseColor.BLUE)
    ),
    BetCategory.COLOR_YELLOW: BetRule(
        RuleKind.WINNER_IN_GROUP, 3, "Yellow wins", horses=horses_in_group(HorseColor.YELLOW)
    ),
    BetCategory.COLOR_RED: BetRule(
        RuleKind.WINNER_IN_GROUP, 4, "Red wins", horses=horses_in_group(HorseColor.RED)
    ),
    # Horse 7 finishes 5th or worse (0-indexed position >= 4)
    BetCategory.COLOR_BLACK: BetRule(
        RuleKind.HORSE_AT_OR_BELOW, 5, "Black 5th or worse", horses=frozenset({7}), position=4
    ),
    BetCategory.SHOW: BetRule(RuleKind.HORSE_IN_TOP, 2, "Show (top 3)", position=3),
    BetCategory.PLACE: BetRule(RuleKind.HORSE_IN_TOP, 3, "Place (top 2)", position=2),
    BetCategory.WIN: BetRule(RuleKind.HORSE_IN_TOP, 5, "Win (1st)", position=1),
}


def _rank_of(horse_id: int, ranking: Sequence[int]) -> Optional[int]:
    try:
        return list(ranking).index(horse_id)
    except ValueError:
        return None


def _winner_in_group(rule: BetRule, key: BetKey, ranking: Sequence[int]) -> bool:
    return bool(ranking) and ranking[0] in rule.horses


def _horse_at_or_below(rule: BetRule, key: BetKey, ranking: Sequence[int]) -> bool:
    # A horse missing from the ranking never satisfies a placing rule.
    ranks = [_rank_of(horse_id, ranking) for horse_id in rule.horses]
    return all(rank is not None and rank >= rule.position for rank in ranks)


def _horse_in_top(rule: BetRule, key: BetKey, ranking: Sequence[int]) -> bool:
    rank = _rank_of(key.horse_id, ranking)
    return rank is not None and rank < rule.position


RULE_EVALUATORS: Dict[RuleKind, Callable[[BetRule, BetKey, Sequence[int]], bool]] = {
    RuleKind.WINNER_IN_GROUP: _winner_in_group,
    RuleKind.HORSE_AT_OR_BELOW: _horse_at_or_below,
    RuleKind.HORSE_IN_TOP: _horse_in_top,
}


def rule_for(bet_key: BetKey) -> BetRule:
    return BET_RULES[bet_key.category]


def multiplier_for(bet_key: BetKey) -> int:
    return rule_for(bet_key).multiplier


def evaluate(bet_key: BetKey, final_ranking: Sequence[int]) -> bool:
    """Returns True when ``bet_key`` wins against ``final_ranking``."""
    rule = rule_for(bet_key)
    return RULE_EVALUATORS[rule.kind](rule, bet_key, final_ranking)


def all_bet_keys() -> List[BetKey]:
    keys = [BetKey.color(category) for category in COLOR_CATEGORIES]
    for category in PER_HORSE_CATEGORIES:
        keys.extend(BetKey.for_horse(category, horse_id) for horse_id in HORSE_IDS)
    return keys

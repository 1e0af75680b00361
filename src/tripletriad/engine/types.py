from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

Element = Literal["fire", "ice", "thunder", "earth", "wind", "water", "poison", "holy"]
Difficulty = Literal["LOW", "MID", "HIGH", "EXPERT"]

ELEMENTS: tuple[Element, ...] = ("fire", "ice", "thunder", "earth", "wind", "water", "poison", "holy")
DIFFICULTIES: tuple[Difficulty, ...] = ("LOW", "MID", "HIGH", "EXPERT")

# Player ids. A draw is represented by ``None`` wherever a winner is reported.
PLAYER_A = 0
PLAYER_B = 1

HAND_SIZE = 5
BOARD_SIZE = 9
STAT_MIN = 1
STAT_MAX = 10
LEVEL_MIN = 1
LEVEL_MAX = 10

Stats = tuple[int, int, int, int]  # (up, left, right, down)


@dataclass(frozen=True)
class CardDefinition:
    id: int
    level: int
    name: str
    stats: Stats
    element: Element | None = None
    img: str = ""


@dataclass(frozen=True)
class CardDatabase:
    """Immutable card catalog used by the engine."""

    cards: dict[int, CardDefinition]

    def get(self, card_id: int) -> CardDefinition:
        return self.cards[card_id]

    def all_ids(self) -> Sequence[int]:
        return list(self.cards.keys())

    def by_level(self, level: int) -> list[CardDefinition]:
        return [c for c in self.cards.values() if c.level == level]


@dataclass
class Card:
    """A card instance for a single round.

    Only ``owner`` changes during play. ``effective_stats`` is fixed once,
    when the card is placed on the board.
    """

    definition: CardDefinition
    owner: int | None = None
    effective_stats: Stats | None = None

    @property
    def id(self) -> int:
        return self.definition.id

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def element(self) -> Element | None:
        return self.definition.element

    @property
    def base_stats(self) -> Stats:
        return self.definition.stats

    @property
    def stats(self) -> Stats:
        """Stats used for combat: the placement snapshot, or base stats in hand."""
        if self.effective_stats is not None:
            return self.effective_stats
        return self.definition.stats

    def fix_stats(self, stats: Stats) -> None:
        if self.effective_stats is not None:
            raise ValueError(f"Effective stats of card {self.id} are already fixed.")
        self.effective_stats = stats


@dataclass
class Tile:
    index: int
    element: Element | None = None
    card: Card | None = None

    @property
    def occupied(self) -> bool:
        return self.card is not None


@dataclass(frozen=True)
class RuleConfig:
    """Per-series rule toggles supplied by the menu layer.

    tiebreak_by_stats:
      break drawn rounds by the summed base stats of each side's board cards,
      then by a seeded coin flip.
    combo_from_basic:
      let basic-rule captures seed the COMBO cascade as well.
    deck_level_budget:
      total card level of a generated hand; ``None`` draws without a budget.
    """

    elemental_enabled: bool = True
    same_enabled: bool = False
    plus_enabled: bool = False
    cpu_difficulty: Difficulty = "LOW"
    pvp_mode: bool = False
    tiebreak_by_stats: bool = False
    combo_from_basic: bool = False
    deck_level_budget: int | None = 30


def validate_rules(rules: RuleConfig) -> None:
    if rules.cpu_difficulty not in DIFFICULTIES:
        raise ValueError(f"Unknown CPU difficulty: {rules.cpu_difficulty!r}")
    for name in (
        "elemental_enabled",
        "same_enabled",
        "plus_enabled",
        "pvp_mode",
        "tiebreak_by_stats",
        "combo_from_basic",
    ):
        if not isinstance(getattr(rules, name), bool):
            raise ValueError(f"{name} must be a bool")
    budget = rules.deck_level_budget
    if budget is not None:
        if not isinstance(budget, int) or isinstance(budget, bool):
            raise ValueError("deck_level_budget must be an int or None")
        low, high = HAND_SIZE * LEVEL_MIN, HAND_SIZE * LEVEL_MAX
        if not low <= budget <= high:
            raise ValueError(f"deck_level_budget must be within {low}..{high}")


@dataclass(frozen=True)
class RoundResult:
    winner: int | None
    scores: tuple[int, int]
    tiebreak_totals: tuple[int, int] | None = None

    @property
    def is_draw(self) -> bool:
        return self.winner is None


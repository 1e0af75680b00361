"""Best-of-three series built from single rounds.

Phases run ``deck_select -> coin_toss -> playing -> round_end`` and loop back
to ``deck_select`` until one side has two round wins or three rounds have been
played, at which point the series is ``series_over``.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from .actions import Action
from .ai import choose_action
from .decks import DeckGenerator
from .errors import InvalidPhase
from .match import Event, MatchState, StepResult, new_match, step
from .types import (
    HAND_SIZE,
    PLAYER_A,
    PLAYER_B,
    CardDatabase,
    CardDefinition,
    Element,
    RoundResult,
    RuleConfig,
    validate_rules,
)

logger = logging.getLogger(__name__)

Phase = Literal["deck_select", "coin_toss", "playing", "round_end", "series_over"]

MAX_ROUNDS = 3
WINS_NEEDED = 2


@dataclass
class SeriesState:
    cards: CardDatabase
    rules: RuleConfig
    seed: int
    rng: random.Random
    decks: DeckGenerator
    phase: Phase = "deck_select"
    results: list[RoundResult] = field(default_factory=list)
    hands: tuple[list[CardDefinition], list[CardDefinition]] | None = None
    round: MatchState | None = None
    event_log: list[Event] = field(default_factory=list)

    @property
    def round_number(self) -> int:
        """1-based number of the round being set up or played."""
        if self.phase in ("round_end", "series_over"):
            return len(self.results)
        return len(self.results) + 1

    @property
    def champion(self) -> int | None:
        if self.phase != "series_over":
            return None
        return series_winner(self.results)


def win_counts(results: Sequence[RoundResult]) -> tuple[int, int]:
    a = sum(1 for r in results if r.winner == PLAYER_A)
    b = sum(1 for r in results if r.winner == PLAYER_B)
    return a, b


def is_series_over(results: Sequence[RoundResult]) -> bool:
    a, b = win_counts(results)
    return a >= WINS_NEEDED or b >= WINS_NEEDED or len(results) >= MAX_ROUNDS


def series_winner(results: Sequence[RoundResult]) -> int | None:
    """Side with more round wins, or None for a drawn series."""
    a, b = win_counts(results)
    if a > b:
        return PLAYER_A
    if b > a:
        return PLAYER_B
    return None


def _require(series: SeriesState, *phases: Phase) -> None:
    if series.phase not in phases:
        raise InvalidPhase(f"Expected phase {' or '.join(phases)}, series is in {series.phase}.")


def new_series(cards: CardDatabase, rules: RuleConfig, seed: int) -> SeriesState:
    validate_rules(rules)
    rng = random.Random(seed)
    return SeriesState(cards=cards, rules=rules, seed=seed, rng=rng, decks=DeckGenerator(cards, rng))


def offer_decks(
    series: SeriesState, count: int = 5, exclude_ids: Sequence[int] = ()
) -> list[list[CardDefinition]]:
    """Candidate hands for the deck-selection screen."""
    _require(series, "deck_select")
    return series.decks.options(count, exclude_ids=set(exclude_ids), budget=series.rules.deck_level_budget)


def _check_hand(hand: Sequence[CardDefinition], label: str) -> None:
    if len(hand) != HAND_SIZE:
        raise ValueError(f"{label} must be exactly {HAND_SIZE} cards.")
    if len({c.id for c in hand}) != len(hand):
        raise ValueError(f"{label} contains duplicate cards.")


def select_decks(
    series: SeriesState,
    deck_a: Sequence[CardDefinition] | None = None,
    deck_b: Sequence[CardDefinition] | None = None,
) -> tuple[list[CardDefinition], list[CardDefinition]]:
    """Fix both hands for the coming round.

    Missing hands are drawn at random and never contain a card the other
    player already holds. Supplied hands are checked before anything is drawn.
    """
    _require(series, "deck_select")
    budget = series.rules.deck_level_budget
    if deck_a is not None:
        _check_hand(deck_a, "Player A hand")
    if deck_b is not None:
        _check_hand(deck_b, "Player B hand")
    if deck_a is not None and deck_b is not None:
        if {c.id for c in deck_a} & {c.id for c in deck_b}:
            raise ValueError("The two hands share cards.")

    if deck_a is not None:
        hand_a = list(deck_a)
    else:
        b_ids = {c.id for c in deck_b} if deck_b is not None else set()
        hand_a = series.decks.generate(exclude_ids=b_ids, budget=budget)
    if deck_b is not None:
        hand_b = list(deck_b)
    else:
        hand_b = series.decks.generate(exclude_ids={c.id for c in hand_a}, budget=budget)

    series.hands = (hand_a, hand_b)
    series.phase = "coin_toss"
    series.event_log.append(
        {
            "type": "DECKS_SELECTED",
            "round": series.round_number,
            "hands": [[c.id for c in hand_a], [c.id for c in hand_b]],
        }
    )
    return hand_a, hand_b


def coin_toss(series: SeriesState, elements: Sequence[Element | None] | None = None) -> int:
    """Pick the first player at random and start the round."""
    _require(series, "coin_toss")
    assert series.hands is not None
    first = series.rng.choice((PLAYER_A, PLAYER_B))
    round_seed = series.rng.randrange(2**31)
    series.round = new_match(
        series.hands[0],
        series.hands[1],
        series.rules,
        round_seed,
        first_player=first,
        elements=elements,
    )
    series.phase = "playing"
    series.event_log.append({"type": "COIN_TOSS", "round": series.round_number, "first_player": first})
    logger.info("round %d: player %d moves first", series.round_number, first)
    return first


def _record_round(series: SeriesState, result: RoundResult) -> list[Event]:
    series.results.append(result)
    events: list[Event] = []
    if is_series_over(series.results):
        series.phase = "series_over"
        champion = series_winner(series.results)
        events.append({"type": "SERIES_ENDED", "champion": champion, "wins": list(win_counts(series.results))})
        logger.info("series ended after %d rounds: champion=%s", len(series.results), champion)
    else:
        series.phase = "round_end"
    series.event_log.extend(events)
    return events


def play(series: SeriesState, action: Action) -> StepResult:
    """Apply a placement to the current round and advance the series if it ends."""
    _require(series, "playing")
    assert series.round is not None
    res = step(series.round, action)
    if res.ok and series.round.result is not None:
        res.events.extend(_record_round(series, series.round.result))
    return res


def cpu_turn(series: SeriesState) -> StepResult:
    """Let the move evaluator play for the side to move."""
    _require(series, "playing")
    assert series.round is not None
    return play(series, choose_action(series.round))


def next_round(series: SeriesState) -> None:
    _require(series, "round_end")
    series.hands = None
    series.round = None
    series.phase = "deck_select"

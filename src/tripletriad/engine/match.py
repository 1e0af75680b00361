from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .actions import Action, PlaceCardAction
from .board import empty_tiles, is_full, new_board, occupied_count, random_elements
from .capture import PlacementReport, apply_placement
from .errors import IllegalMove
from .types import (
    BOARD_SIZE,
    HAND_SIZE,
    PLAYER_A,
    PLAYER_B,
    Card,
    CardDefinition,
    Element,
    RoundResult,
    RuleConfig,
    Tile,
    validate_rules,
)

logger = logging.getLogger(__name__)

Event = dict[str, object]


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None


@dataclass
class MatchState:
    """One round: a board, two hands and whose turn it is."""

    rules: RuleConfig
    seed: int
    rng: random.Random
    board: list[Tile]
    hands: list[list[Card]]
    first_player: int
    current_player: int
    result: RoundResult | None = None
    action_log: list[Action] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)

    def opponent(self, player: int) -> int:
        return 1 - player

    @property
    def is_over(self) -> bool:
        return self.result is not None


def scores(state: MatchState) -> tuple[int, int]:
    """Cards in hand plus owned tiles, per player."""
    totals = [len(state.hands[PLAYER_A]), len(state.hands[PLAYER_B])]
    for tile in state.board:
        if tile.card is not None and tile.card.owner is not None:
            totals[tile.card.owner] += 1
    return totals[0], totals[1]


def _owned_stat_totals(state: MatchState) -> tuple[int, int]:
    totals = [0, 0]
    for tile in state.board:
        if tile.card is not None and tile.card.owner is not None:
            totals[tile.card.owner] += sum(tile.card.base_stats)
    return totals[0], totals[1]


def _finish_round(state: MatchState) -> RoundResult:
    score_a, score_b = scores(state)
    winner: int | None = None
    if score_a > score_b:
        winner = PLAYER_A
    elif score_b > score_a:
        winner = PLAYER_B

    tiebreak: tuple[int, int] | None = None
    if winner is None and state.rules.tiebreak_by_stats:
        tiebreak = _owned_stat_totals(state)
        if tiebreak[0] > tiebreak[1]:
            winner = PLAYER_A
        elif tiebreak[1] > tiebreak[0]:
            winner = PLAYER_B
        else:
            winner = state.rng.choice((PLAYER_A, PLAYER_B))

    result = RoundResult(winner=winner, scores=(score_a, score_b), tiebreak_totals=tiebreak)
    state.result = result
    state.event_log.append(
        {
            "type": "ROUND_ENDED",
            "winner": winner,
            "scores": [score_a, score_b],
            "tiebreak_totals": list(tiebreak) if tiebreak is not None else None,
        }
    )
    logger.info("round ended: winner=%s scores=%d-%d", winner, score_a, score_b)
    return result


def _validate(state: MatchState, tile: int, player: int, hand_index: int) -> None:
    if state.is_over:
        raise IllegalMove("Round already ended.")
    if player != state.current_player:
        raise IllegalMove("Not your turn.")
    if not 0 <= tile < BOARD_SIZE:
        raise IllegalMove(f"Invalid tile index: {tile}")
    if state.board[tile].card is not None:
        raise IllegalMove(f"Tile {tile} is occupied.")
    if not 0 <= hand_index < len(state.hands[player]):
        raise IllegalMove("Card is not in hand.")


def _placement_events(report: PlacementReport) -> list[Event]:
    outcome = report.outcome
    events: list[Event] = [
        {
            "type": "CARD_PLACED",
            "player": report.player,
            "tile": report.tile,
            "card_id": report.card_id,
            "stats": list(outcome.stats),
        }
    ]
    # SAME / PLUS / COMBO are advisory signals for presentation only
    if outcome.same_triggered:
        events.append({"type": "SAME", "player": report.player, "tiles": list(outcome.same_tiles)})
    if outcome.plus_triggered:
        events.append({"type": "PLUS", "player": report.player, "tiles": list(outcome.plus_tiles)})
    for cap in report.all_captures:
        events.append(
            {
                "type": "CARD_CAPTURED",
                "player": report.player,
                "tile": cap.tile,
                "rule": cap.rule,
                "source": cap.source,
            }
        )
    if report.combo:
        events.append({"type": "COMBO", "player": report.player, "tiles": [c.tile for c in report.combo]})
    return events


def place_card(state: MatchState, tile: int, player: int, hand_index: int) -> list[Event]:
    """Place ``state.hands[player][hand_index]`` on ``tile`` and resolve captures.

    Raises IllegalMove without touching the state if the move is not allowed.
    Returns the events produced by this placement.
    """
    _validate(state, tile, player, hand_index)
    start = len(state.event_log)

    card = state.hands[player].pop(hand_index)
    report = apply_placement(state.board, tile, card, player, state.rules)
    state.action_log.append(PlaceCardAction(player=player, tile=tile, hand_index=hand_index))
    state.event_log.extend(_placement_events(report))

    state.current_player = state.opponent(player)
    state.event_log.append({"type": "TURN_PASSED", "player": state.current_player})

    if is_full(state.board):
        _finish_round(state)
    return state.event_log[start:]


def step(state: MatchState, action: Action) -> StepResult:
    """Apply a single action, reporting a rejected move instead of raising."""
    try:
        events = place_card(state, action.tile, action.player, action.hand_index)
    except IllegalMove as e:
        logger.debug("rejected %s: %s", action, e)
        return StepResult(ok=False, events=[], error=str(e))
    return StepResult(ok=True, events=events)


def new_match(
    hand_a: Sequence[CardDefinition],
    hand_b: Sequence[CardDefinition],
    rules: RuleConfig,
    seed: int,
    first_player: int = PLAYER_A,
    elements: Sequence[Element | None] | None = None,
) -> MatchState:
    validate_rules(rules)
    if len(hand_a) != HAND_SIZE or len(hand_b) != HAND_SIZE:
        raise ValueError(f"Hands must be exactly {HAND_SIZE} cards.")
    if first_player not in (PLAYER_A, PLAYER_B):
        raise ValueError(f"Invalid first player: {first_player}")

    rng = random.Random(seed)
    if elements is None and rules.elemental_enabled:
        elements = random_elements(rng)
    board = new_board(elements)

    hands = [
        [Card(definition=d, owner=PLAYER_A) for d in hand_a],
        [Card(definition=d, owner=PLAYER_B) for d in hand_b],
    ]
    state = MatchState(
        rules=rules,
        seed=seed,
        rng=rng,
        board=board,
        hands=hands,
        first_player=first_player,
        current_player=first_player,
    )
    state.event_log.append(
        {
            "type": "ROUND_STARTED",
            "first_player": first_player,
            "elements": [t.element for t in board],
        }
    )
    return state


def replay(
    hand_a: Sequence[CardDefinition],
    hand_b: Sequence[CardDefinition],
    rules: RuleConfig,
    seed: int,
    actions: Iterable[Action],
    first_player: int = PLAYER_A,
    elements: Sequence[Element | None] | None = None,
) -> MatchState:
    state = new_match(hand_a, hand_b, rules, seed, first_player=first_player, elements=elements)
    for a in actions:
        step(state, a)
        if state.is_over:
            break
    return state


def cards_in_play(state: MatchState) -> int:
    return len(state.hands[PLAYER_A]) + len(state.hands[PLAYER_B]) + occupied_count(state.board)


def legal_moves(state: MatchState) -> list[PlaceCardAction]:
    if state.is_over:
        return []
    player = state.current_player
    return [
        PlaceCardAction(player=player, tile=t, hand_index=h)
        for t in empty_tiles(state.board)
        for h in range(len(state.hands[player]))
    ]

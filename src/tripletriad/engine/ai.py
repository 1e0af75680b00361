from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass

from .actions import PlaceCardAction
from .board import CORNERS, empty_tiles
from .capture import elemental_stats, resolve_placement
from .errors import EmptyHandMove, IllegalMove
from .match import MatchState
from .types import Card, Difficulty, RuleConfig, Tile

CAPTURE_SCORE = 20.0
SAME_BONUS = 50.0
PLUS_BONUS = 60.0
CORNER_BONUS = 15.0
EXPERT_SCALE = 1.2

# weight on the mean effective stat of the placed card
DEFENSE_WEIGHT: dict[Difficulty, float] = {
    "LOW": 0.0,
    "MID": 1.0,
    "HIGH": 2.0,
    "EXPERT": 2.5,
}


@dataclass(frozen=True)
class ScoredMove:
    tile: int
    hand_index: int
    score: float


def score_move(
    board: Sequence[Tile], tile: int, card: Card, player: int, rules: RuleConfig
) -> float:
    """Heuristic value of placing ``card`` on ``tile``; the board is not modified."""
    difficulty = rules.cpu_difficulty
    stats = elemental_stats(card.base_stats, card.element, board[tile].element, rules.elemental_enabled)
    outcome = resolve_placement(board, tile, stats, player, rules)

    score = CAPTURE_SCORE * len(outcome.captures)
    if outcome.same_triggered:
        score += SAME_BONUS
    if outcome.plus_triggered:
        score += PLUS_BONUS
    if tile in CORNERS:
        score += CORNER_BONUS
    score += DEFENSE_WEIGHT[difficulty] * (sum(stats) / 4)

    if difficulty == "EXPERT":
        score *= EXPERT_SCALE
    return score


def rank_moves(
    board: Sequence[Tile],
    hand: Sequence[Card],
    rules: RuleConfig,
    player: int,
    rng: random.Random,
) -> list[ScoredMove]:
    """All (tile, card) candidates, best first; equal scores end up in random order."""
    moves = [
        ScoredMove(tile=t, hand_index=h, score=score_move(board, t, card, player, rules))
        for t in empty_tiles(board)
        for h, card in enumerate(hand)
    ]
    rng.shuffle(moves)
    moves.sort(key=lambda m: m.score, reverse=True)
    return moves


def select_move(
    board: Sequence[Tile],
    hand: Sequence[Card],
    rules: RuleConfig,
    player: int,
    rng: random.Random,
) -> tuple[int, int]:
    """Pick ``(tile_index, hand_index)`` for ``player`` at ``rules.cpu_difficulty``."""
    if not hand:
        raise EmptyHandMove("Cannot choose a move from an empty hand.")
    empty = empty_tiles(board)
    if not empty:
        raise IllegalMove("No empty tile left on the board.")

    if rules.cpu_difficulty == "LOW":
        return rng.choice(empty), rng.randrange(len(hand))

    best = rank_moves(board, hand, rules, player, rng)[0]
    return best.tile, best.hand_index


def choose_action(state: MatchState, player: int | None = None) -> PlaceCardAction:
    """Evaluator move for ``player`` (default: the side to move), using the round RNG."""
    if player is None:
        player = state.current_player
    tile, hand_index = select_move(state.board, state.hands[player], state.rules, player, state.rng)
    return PlaceCardAction(player=player, tile=tile, hand_index=hand_index)

"""Deterministic, headless rules engine for Triple Triad.

IMPORTANT: This package performs no I/O and never configures logging.
"""

from .actions import PlaceCardAction
from .errors import DeckGenerationExhausted, EmptyHandMove, EngineError, IllegalMove, InvalidPhase
from .match import MatchState, StepResult, new_match, place_card, scores, step
from .series import SeriesState, coin_toss, cpu_turn, new_series, next_round, play, select_decks
from .types import CardDatabase, CardDefinition, RoundResult, RuleConfig

__all__ = [
    "CardDatabase",
    "CardDefinition",
    "DeckGenerationExhausted",
    "EmptyHandMove",
    "EngineError",
    "IllegalMove",
    "InvalidPhase",
    "MatchState",
    "PlaceCardAction",
    "RoundResult",
    "RuleConfig",
    "SeriesState",
    "StepResult",
    "coin_toss",
    "cpu_turn",
    "new_match",
    "new_series",
    "next_round",
    "place_card",
    "play",
    "scores",
    "select_decks",
    "step",
]

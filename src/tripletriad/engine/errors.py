from __future__ import annotations


class EngineError(RuntimeError):
    pass


class IllegalMove(EngineError):
    """Placement rejected: wrong turn, bad tile, card not in hand, or round over."""


class EmptyHandMove(EngineError):
    """Move evaluator asked to choose from an empty hand."""


class DeckGenerationExhausted(EngineError):
    """No hand matching the level budget was found within the attempt cap."""


class InvalidPhase(EngineError):
    """Series transition requested from the wrong phase."""

from __future__ import annotations

from .actions import Action
from .match import MatchState, scores
from .series import SeriesState, win_counts
from .types import Card, CardDefinition, RoundResult, Tile


def action_to_dict(a: Action) -> dict[str, object]:
    return {"type": "place", "player": a.player, "tile": a.tile, "hand_index": a.hand_index}


def card_def_to_dict(c: CardDefinition) -> dict[str, object]:
    return {
        "id": c.id,
        "level": c.level,
        "name": c.name,
        "stats": list(c.stats),
        "attr": c.element,
        "img": c.img,
    }


def _card_to_dict(c: Card | None) -> dict[str, object] | None:
    if c is None:
        return None
    return {
        "id": c.id,
        "name": c.name,
        "attr": c.element,
        "owner": c.owner,
        "base_stats": list(c.base_stats),
        "effective_stats": list(c.effective_stats) if c.effective_stats is not None else None,
    }


def _tile_to_dict(t: Tile) -> dict[str, object]:
    return {"index": t.index, "element": t.element, "card": _card_to_dict(t.card)}


def result_to_dict(r: RoundResult) -> dict[str, object]:
    return {
        "winner": r.winner,
        "scores": list(r.scores),
        "tiebreak_totals": list(r.tiebreak_totals) if r.tiebreak_totals is not None else None,
    }


def snapshot(state: MatchState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current round."""
    return {
        "seed": state.seed,
        "first_player": state.first_player,
        "current_player": state.current_player,
        "scores": list(scores(state)),
        "board": [_tile_to_dict(t) for t in state.board],
        "hands": [[_card_to_dict(c) for c in hand] for hand in state.hands],
        "result": result_to_dict(state.result) if state.result is not None else None,
        "action_log": [action_to_dict(a) for a in state.action_log],
    }


def series_snapshot(series: SeriesState) -> dict[str, object]:
    return {
        "seed": series.seed,
        "phase": series.phase,
        "round_number": series.round_number,
        "results": [result_to_dict(r) for r in series.results],
        "wins": list(win_counts(series.results)),
        "champion": series.champion,
        "round": snapshot(series.round) if series.round is not None else None,
    }

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PlaceCardAction:
    player: int
    tile: int
    hand_index: int


Action = PlaceCardAction

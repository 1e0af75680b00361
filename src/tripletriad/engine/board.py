from __future__ import annotations

import random
from collections.abc import Sequence
from typing import NamedTuple

from .types import BOARD_SIZE, ELEMENTS, Element, Tile

UP = 0
LEFT = 1
RIGHT = 2
DOWN = 3

SIDE_NAMES = ("up", "left", "right", "down")
CORNERS = frozenset({0, 2, 6, 8})
MAX_ELEMENT_TILES = 5


class Neighbor(NamedTuple):
    side: int  # side of the card at the origin tile
    index: int  # neighboring tile
    facing: int  # side of the neighbor that faces the origin


def neighbors(index: int) -> list[Neighbor]:
    """Positional neighbors of a tile, in up/left/right/down order."""
    if not 0 <= index < BOARD_SIZE:
        raise IndexError(f"Tile index out of range: {index}")
    out: list[Neighbor] = []
    if index >= 3:
        out.append(Neighbor(UP, index - 3, DOWN))
    if index % 3 != 0:
        out.append(Neighbor(LEFT, index - 1, RIGHT))
    if index % 3 != 2:
        out.append(Neighbor(RIGHT, index + 1, LEFT))
    if index < 6:
        out.append(Neighbor(DOWN, index + 3, UP))
    return out


def new_board(elements: Sequence[Element | None] | None = None) -> list[Tile]:
    if elements is None:
        elements = [None] * BOARD_SIZE
    if len(elements) != BOARD_SIZE:
        raise ValueError(f"Board layout must have exactly {BOARD_SIZE} tiles.")
    for el in elements:
        if el is not None and el not in ELEMENTS:
            raise ValueError(f"Unknown element: {el!r}")
    return [Tile(index=i, element=el) for i, el in enumerate(elements)]


def random_elements(rng: random.Random) -> list[Element | None]:
    """Tag 0-5 distinct tiles with a random element each."""
    layout: list[Element | None] = [None] * BOARD_SIZE
    count = rng.randrange(MAX_ELEMENT_TILES + 1)
    for idx in rng.sample(range(BOARD_SIZE), count):
        layout[idx] = rng.choice(ELEMENTS)
    return layout


def empty_tiles(board: Sequence[Tile]) -> list[int]:
    return [t.index for t in board if t.card is None]


def occupied_count(board: Sequence[Tile]) -> int:
    return sum(1 for t in board if t.card is not None)


def is_full(board: Sequence[Tile]) -> bool:
    return occupied_count(board) == BOARD_SIZE

"""Placement resolution: elemental adjustment, SAME/PLUS/basic capture and COMBO.

``resolve_placement`` is side-effect free so the move evaluator can score a
candidate with exactly the rules the real placement uses; ``apply_placement``
mutates the board.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from .board import neighbors
from .types import STAT_MAX, STAT_MIN, Card, Element, RuleConfig, Stats, Tile

logger = logging.getLogger(__name__)

CaptureRule = Literal["same", "plus", "basic", "combo"]


@dataclass(frozen=True)
class Contact:
    index: int
    side: int
    facing: int
    my_value: int
    their_value: int
    owner: int | None


@dataclass(frozen=True)
class Capture:
    tile: int
    rule: CaptureRule
    source: int  # tile whose card won the comparison


@dataclass
class CaptureOutcome:
    """What a placement would do before the COMBO cascade."""

    stats: Stats
    contacts: list[Contact]
    same_tiles: list[int] = field(default_factory=list)
    plus_tiles: list[int] = field(default_factory=list)
    captures: list[Capture] = field(default_factory=list)
    seeds: list[int] = field(default_factory=list)

    @property
    def same_triggered(self) -> bool:
        return bool(self.same_tiles)

    @property
    def plus_triggered(self) -> bool:
        return bool(self.plus_tiles)

    def captured_tiles(self) -> list[int]:
        return [c.tile for c in self.captures]


@dataclass
class PlacementReport:
    tile: int
    card_id: int
    player: int
    outcome: CaptureOutcome
    combo: list[Capture] = field(default_factory=list)

    @property
    def all_captures(self) -> list[Capture]:
        return self.outcome.captures + self.combo


def _clamp(v: int) -> int:
    return max(STAT_MIN, min(STAT_MAX, v))


def elemental_stats(
    base: Stats, card_element: Element | None, tile_element: Element | None, enabled: bool
) -> Stats:
    if not enabled or tile_element is None:
        return base
    modifier = 1 if card_element == tile_element else -1
    up, left, right, down = (_clamp(s + modifier) for s in base)
    return (up, left, right, down)


def _contacts(board: Sequence[Tile], index: int, stats: Stats) -> list[Contact]:
    out: list[Contact] = []
    for n in neighbors(index):
        other = board[n.index].card
        if other is None:
            continue
        out.append(
            Contact(
                index=n.index,
                side=n.side,
                facing=n.facing,
                my_value=stats[n.side],
                their_value=other.stats[n.facing],
                owner=other.owner,
            )
        )
    return out


def resolve_placement(
    board: Sequence[Tile], index: int, stats: Stats, player: int, rules: RuleConfig
) -> CaptureOutcome:
    """Compute the captures a card with ``stats`` would make at ``index``.

    The board is not touched. COMBO is not included.
    """
    opponent = 1 - player
    contacts = _contacts(board, index, stats)
    outcome = CaptureOutcome(stats=stats, contacts=contacts)
    captured: set[int] = set()

    def capture(c: Contact, rule: CaptureRule) -> None:
        if c.index in captured:
            return
        captured.add(c.index)
        outcome.captures.append(Capture(tile=c.index, rule=rule, source=index))

    def seed(tile: int) -> None:
        if tile not in outcome.seeds:
            outcome.seeds.append(tile)

    if rules.same_enabled:
        matches = [c for c in contacts if c.my_value == c.their_value]
        if len(matches) >= 2:
            for c in matches:
                outcome.same_tiles.append(c.index)
                if c.owner == opponent:
                    capture(c, "same")
                # own cards that complete a SAME still spread the combo
                seed(c.index)

    if rules.plus_enabled:
        groups: dict[int, list[Contact]] = {}
        for c in contacts:
            groups.setdefault(c.my_value + c.their_value, []).append(c)
        for members in groups.values():
            if len(members) < 2:
                continue
            for c in members:
                outcome.plus_tiles.append(c.index)
                if c.owner == opponent:
                    capture(c, "plus")
                    seed(c.index)

    for c in contacts:
        if c.index in captured or c.owner != opponent:
            continue
        if c.my_value > c.their_value:
            capture(c, "basic")
            if rules.combo_from_basic:
                seed(c.index)

    return outcome


def run_combo(board: Sequence[Tile], origin: int, seeds: Sequence[int], player: int) -> list[Capture]:
    """Breadth-first cascade from ``seeds`` using the basic comparison.

    Every tile is processed at most once, so the cascade halts after at most
    one pass over the board.
    """
    opponent = 1 - player
    chain: list[Capture] = []
    visited = {origin, *seeds}
    queue = deque(seeds)
    while queue:
        src = queue.popleft()
        attacker = board[src].card
        if attacker is None:
            continue
        for n in neighbors(src):
            target = board[n.index].card
            if target is None or target.owner != opponent:
                continue
            if attacker.stats[n.side] > target.stats[n.facing]:
                target.owner = player
                chain.append(Capture(tile=n.index, rule="combo", source=src))
                if n.index not in visited:
                    visited.add(n.index)
                    queue.append(n.index)
    return chain


def apply_placement(
    board: Sequence[Tile], index: int, card: Card, player: int, rules: RuleConfig
) -> PlacementReport:
    """Put ``card`` on ``board[index]`` and flip everything it captures.

    The caller validates the move; this function cannot fail half-way.
    """
    tile = board[index]
    stats = elemental_stats(card.base_stats, card.element, tile.element, rules.elemental_enabled)
    outcome = resolve_placement(board, index, stats, player, rules)

    card.fix_stats(stats)
    card.owner = player
    tile.card = card

    for cap in outcome.captures:
        flipped = board[cap.tile].card
        assert flipped is not None
        flipped.owner = player

    combo = run_combo(board, index, outcome.seeds, player)
    report = PlacementReport(tile=index, card_id=card.id, player=player, outcome=outcome, combo=combo)
    logger.debug(
        "player %d placed card %d on tile %d: captures=%s combo=%s",
        player,
        card.id,
        index,
        [(c.tile, c.rule) for c in outcome.captures],
        [c.tile for c in combo],
    )
    return report

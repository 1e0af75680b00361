from __future__ import annotations

import logging
import random
from collections.abc import Collection
from dataclasses import dataclass

from .errors import DeckGenerationExhausted
from .types import HAND_SIZE, LEVEL_MAX, LEVEL_MIN, CardDatabase, CardDefinition

logger = logging.getLogger(__name__)

DEFAULT_LEVEL_BUDGET = 30
MAX_ATTEMPTS = 2000


@dataclass
class DeckGenerator:
    """Draws 5-card hands from the catalog.

    With a level budget, four cards are drawn at random and the fifth must bring
    the total to the budget exactly; the draw is retried up to ``max_attempts``
    times before falling back to an unconstrained draw.
    """

    cards: CardDatabase
    rng: random.Random
    max_attempts: int = MAX_ATTEMPTS

    def _pool(self, exclude_ids: Collection[int]) -> list[CardDefinition]:
        # sorted so a given seed always sees the same ordering
        return sorted(
            (c for c in self.cards.cards.values() if c.id not in exclude_ids),
            key=lambda c: c.id,
        )

    def draw_unconstrained(self, exclude_ids: Collection[int] = ()) -> list[CardDefinition]:
        pool = self._pool(exclude_ids)
        if len(pool) < HAND_SIZE:
            raise ValueError(
                f"Card pool too small: {len(pool)} cards available, {HAND_SIZE} required."
            )
        return self.rng.sample(pool, HAND_SIZE)

    def draw_budgeted(self, budget: int, exclude_ids: Collection[int] = ()) -> list[CardDefinition]:
        pool = self._pool(exclude_ids)
        for _ in range(self.max_attempts):
            if len(pool) < HAND_SIZE:
                break
            hand = self.rng.sample(pool, HAND_SIZE - 1)
            required = budget - sum(c.level for c in hand)
            if not LEVEL_MIN <= required <= LEVEL_MAX:
                continue
            taken = {c.id for c in hand}
            last = [c for c in pool if c.level == required and c.id not in taken]
            if last:
                hand.append(self.rng.choice(last))
                return hand
        raise DeckGenerationExhausted(
            f"No hand with total level {budget} found in {self.max_attempts} attempts."
        )

    def generate(
        self, exclude_ids: Collection[int] = (), budget: int | None = DEFAULT_LEVEL_BUDGET
    ) -> list[CardDefinition]:
        """Return 5 distinct cards, none of them in ``exclude_ids``.

        An unreachable budget only costs a fallback draw, but fewer than 5
        cards left after ``exclude_ids`` raises ValueError either way. The
        catalog schema requires at least 10 cards, so excluding one full
        hand is always safe.
        """
        if budget is None:
            return self.draw_unconstrained(exclude_ids)
        try:
            return self.draw_budgeted(budget, exclude_ids)
        except DeckGenerationExhausted as e:
            logger.warning("%s Falling back to an unconstrained draw.", e)
            return self.draw_unconstrained(exclude_ids)

    def options(
        self, count: int, exclude_ids: Collection[int] = (), budget: int | None = DEFAULT_LEVEL_BUDGET
    ) -> list[list[CardDefinition]]:
        return [self.generate(exclude_ids, budget) for _ in range(count)]

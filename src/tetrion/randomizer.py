"""Seven-bag piece generator."""

from __future__ import annotations

import random
from typing import List, Optional, Tuple

from .tetromino import TetrominoType


BAG_SIZE = len(TetrominoType)


class BagRandomizer:
    """Produce the upcoming piece sequence one shuffled bag at a time.

    Two bags are queued after construction and a fresh bag is appended
    whenever fewer than seven pieces remain, so the preview never runs dry.
    With ``deterministic=True`` every bag comes out in enumeration order,
    which keeps tests reproducible without relying on a seed.
    """

    def __init__(self, *, seed: Optional[int] = None, deterministic: bool = False) -> None:
        self._rng = random.Random(seed)
        self._deterministic = deterministic
        self._queue: List[TetrominoType] = []
        self._fill()

    def seed(self, seed: Optional[int]) -> None:
        """Reseed the generator and discard the queued pieces."""

        self._rng.seed(seed)
        self.reset()

    def reset(self) -> None:
        self._queue = []
        self._fill()

    def __len__(self) -> int:
        return len(self._queue)

    def next(self) -> TetrominoType:
        """Pop and return the next piece kind."""

        piece = self._queue.pop(0)
        self._fill()
        return piece

    def peek(self, n: int = 1) -> Tuple[TetrominoType, ...]:
        """Return the next ``n`` kinds without consuming them."""

        if n < 0:
            raise ValueError("peek count must be non-negative")
        while len(self._queue) < n:
            self._append_bag()
        return tuple(self._queue[:n])

    # Internal helpers -------------------------------------------------
    def _fill(self) -> None:
        # Start with two bags, then top up one bag at a time.
        if not self._queue:
            self._append_bag()
            self._append_bag()
        while len(self._queue) < BAG_SIZE:
            self._append_bag()

    def _append_bag(self) -> None:
        bag = list(TetrominoType)
        if not self._deterministic:
            self._rng.shuffle(bag)
        self._queue.extend(bag)

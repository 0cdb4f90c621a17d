"""Score and level bookkeeping.

Point values follow the modern guideline tables: every award is multiplied by
the level in effect when the piece locked, "difficult" clears (a tetris or a
T-spin that clears lines) earn a back-to-back bonus when they follow each
other, and consecutive clearing locks build a combo.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


LINES_PER_LEVEL = 10

LINE_CLEAR_POINTS = {0: 0, 1: 100, 2: 300, 3: 500, 4: 800}
T_SPIN_POINTS = {0: 400, 1: 800, 2: 1200, 3: 1600}
ALL_CLEAR_POINTS = {1: 800, 2: 1200, 3: 1800, 4: 2000}
BACK_TO_BACK_MULTIPLIER = 1.5
COMBO_POINTS = 50
SOFT_DROP_POINTS = 1
HARD_DROP_POINTS = 2


class ClearKind(str, Enum):
    """Classification of a lock by the number of rows it cleared."""

    NONE = "none"
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    TETRIS = "tetris"

    @classmethod
    def from_count(cls, count: int) -> "ClearKind":
        return _KINDS_BY_COUNT[count]


_KINDS_BY_COUNT = {
    0: ClearKind.NONE,
    1: ClearKind.SINGLE,
    2: ClearKind.DOUBLE,
    3: ClearKind.TRIPLE,
    4: ClearKind.TETRIS,
}


@dataclass(frozen=True)
class ClearResult:
    """Outcome of scoring a single lock."""

    lines: int
    kind: ClearKind
    points: int
    t_spin: bool = False
    back_to_back: bool = False
    all_clear: bool = False
    combo: int = -1
    level_before: int = 1
    level_after: int = 1

    @property
    def leveled_up(self) -> bool:
        return self.level_after > self.level_before


class ScoreKeeper:
    """Track score, cleared lines and level for a game session."""

    def __init__(self, *, start_level: int = 1, back_to_back: bool = True) -> None:
        if start_level < 1:
            raise ValueError("start_level must be at least 1")
        self.start_level = start_level
        self.back_to_back_enabled = back_to_back
        self.reset()

    def reset(self) -> None:
        self.score = 0
        self.lines = 0
        self.level = self.start_level
        self.combo = -1
        self.back_to_back = False
        self.last_clear = ClearKind.NONE

    def level_for_lines(self, lines: int) -> int:
        """Return the level reached after clearing ``lines`` rows in total."""

        return self.start_level + lines // LINES_PER_LEVEL

    def add_drop(self, rows: int, *, hard: bool) -> int:
        """Award points for ``rows`` descended by a soft or hard drop."""

        if rows < 0:
            raise ValueError("rows must be non-negative")
        points = rows * (HARD_DROP_POINTS if hard else SOFT_DROP_POINTS)
        self.score += points
        return points

    def award_clear(
        self, lines: int, *, t_spin: bool = False, all_clear: bool = False
    ) -> ClearResult:
        """Score a lock that cleared ``lines`` rows.

        Parameters
        ----------
        lines:
            Number of rows removed by the lock, ``0`` to ``4``.
        t_spin:
            Whether the lock qualified as a T-spin.
        all_clear:
            Whether the board was left completely empty.
        """

        if lines not in LINE_CLEAR_POINTS:
            raise ValueError(f"Cannot clear {lines} lines at once")

        level = self.level
        base = T_SPIN_POINTS[lines] if t_spin else LINE_CLEAR_POINTS[lines]

        difficult = lines == 4 or (t_spin and lines > 0)
        back_to_back = False
        if lines > 0:
            back_to_back = self.back_to_back_enabled and difficult and self.back_to_back
            self.back_to_back = difficult and self.back_to_back_enabled
            self.combo += 1
        else:
            self.combo = -1

        points = base * level
        if back_to_back:
            points = int(points * BACK_TO_BACK_MULTIPLIER)
        if self.combo > 0:
            points += COMBO_POINTS * self.combo * level
        if all_clear and lines > 0:
            points += ALL_CLEAR_POINTS[lines] * level

        self.score += points
        self.lines += lines
        self.level = max(self.level, self.level_for_lines(self.lines))
        self.last_clear = ClearKind.from_count(lines)

        return ClearResult(
            lines=lines,
            kind=self.last_clear,
            points=points,
            t_spin=t_spin,
            back_to_back=back_to_back,
            all_clear=all_clear and lines > 0,
            combo=self.combo,
            level_before=level,
            level_after=self.level,
        )

"""Actions consumed by the engine and notifications it emits.

Collaborators (renderers, audio, agents) feed :class:`GameAction` values into
:meth:`GameState.tick` and read back a :class:`TickResult` holding the events
of that tick and an immutable :class:`Snapshot`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple

import numpy as np

from .scoring import ClearKind
from .tetromino import Cell, Rotation, TetrominoType


class GameAction(str, Enum):
    """Abstract input actions, already mapped from keys or touches."""

    LEFT = "left"
    RIGHT = "right"
    ROTATE_CW = "rotate_cw"
    ROTATE_CCW = "rotate_ccw"
    SOFT_DROP_START = "soft_drop_start"
    SOFT_DROP_STOP = "soft_drop_stop"
    HARD_DROP = "hard_drop"
    HOLD = "hold"
    PAUSE = "pause"
    RESUME = "resume"
    RESET = "reset"


class Phase(str, Enum):
    """States of the game state machine."""

    SPAWNING = "spawning"
    FALLING = "falling"
    LOCKING = "locking"
    LINE_CLEAR = "line_clear"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class Event:
    """Base class for per-tick notifications."""


@dataclass(frozen=True)
class Spawned(Event):
    shape: TetrominoType


@dataclass(frozen=True)
class Moved(Event):
    drow: int
    dcol: int


@dataclass(frozen=True)
class Rotated(Event):
    rotation: Rotation
    kick_index: int


@dataclass(frozen=True)
class HardDropped(Event):
    rows: int


@dataclass(frozen=True)
class Held(Event):
    shape: TetrominoType
    swapped_in: Optional[TetrominoType]


@dataclass(frozen=True)
class Locked(Event):
    shape: TetrominoType
    cells: FrozenSet[Cell]


@dataclass(frozen=True)
class LinesCleared(Event):
    count: int
    rows: Tuple[int, ...]
    kind: ClearKind
    points: int
    t_spin: bool = False
    back_to_back: bool = False
    all_clear: bool = False
    combo: int = 0


@dataclass(frozen=True)
class LevelUp(Event):
    level: int


@dataclass(frozen=True)
class Paused(Event):
    pass


@dataclass(frozen=True)
class Resumed(Event):
    pass


@dataclass(frozen=True)
class GameOver(Event):
    score: int
    level: int
    lines: int


@dataclass(frozen=True)
class Reset(Event):
    pass


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the engine after a tick.

    ``board`` includes the hidden buffer rows and excludes the active piece;
    use :attr:`active_cells` to overlay it.
    """

    tick: int
    phase: Phase
    paused: bool
    board: np.ndarray
    hidden_rows: int
    active: Optional[TetrominoType]
    active_rotation: Optional[Rotation]
    active_cells: FrozenSet[Cell]
    ghost_cells: FrozenSet[Cell]
    preview: Tuple[TetrominoType, ...]
    hold: Optional[TetrominoType]
    hold_available: bool
    score: int
    level: int
    lines: int
    combo: int
    back_to_back: bool
    lock_resets: int

    @property
    def game_over(self) -> bool:
        return self.phase is Phase.GAME_OVER


@dataclass(frozen=True)
class TickResult:
    events: Tuple[Event, ...]
    snapshot: Snapshot

    def of_type(self, event_type: type) -> Tuple[Event, ...]:
        """Return the events that are instances of ``event_type``."""

        return tuple(e for e in self.events if isinstance(e, event_type))

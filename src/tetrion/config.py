"""Engine configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .board import HEIGHT, HIDDEN_ROWS, WIDTH


# Logic ticks per second.
TICK_RATE = 60
# Ticks a grounded piece may sit before it locks (0.5 s at 60 Hz).
LOCK_DELAY_TICKS = 30
# Moves/rotations that may restart the lock delay for one piece.
MAX_LOCK_RESETS = 15
# Ticks spent in the line-clear state before the next piece spawns.
LINE_CLEAR_TICKS = 12
SOFT_DROP_FACTOR = 20
PREVIEW_SIZE = 5


@dataclass(frozen=True)
class EngineConfig:
    """Tunable rules for a :class:`~tetrion.game_state.GameState`.

    Durations are counted in logic ticks so a session replays identically
    for the same seed and action sequence.
    """

    width: int = WIDTH
    height: int = HEIGHT
    hidden_rows: int = HIDDEN_ROWS
    tick_rate: int = TICK_RATE
    lock_delay_ticks: int = LOCK_DELAY_TICKS
    max_lock_resets: int = MAX_LOCK_RESETS
    line_clear_ticks: int = LINE_CLEAR_TICKS
    soft_drop_factor: int = SOFT_DROP_FACTOR
    preview_size: int = PREVIEW_SIZE
    start_level: int = 1
    back_to_back: bool = True
    hold_enabled: bool = True
    seed: Optional[int] = None
    deterministic_bag: bool = False

    def __post_init__(self) -> None:
        if self.tick_rate <= 0:
            raise ValueError("tick_rate must be positive")
        if self.lock_delay_ticks < 1:
            raise ValueError("lock_delay_ticks must be at least 1")
        for name in ("max_lock_resets", "line_clear_ticks", "preview_size"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.soft_drop_factor < 1:
            raise ValueError("soft_drop_factor must be at least 1")
        if self.start_level < 1:
            raise ValueError("start_level must be at least 1")

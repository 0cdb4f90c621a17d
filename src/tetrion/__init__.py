"""Deterministic SRS falling-block game engine."""

from .board import Board, PIECE_VALUES
from .config import EngineConfig
from .events import (
    Event,
    GameAction,
    GameOver,
    HardDropped,
    Held,
    LevelUp,
    LinesCleared,
    Locked,
    Moved,
    Paused,
    Phase,
    Reset,
    Resumed,
    Rotated,
    Snapshot,
    Spawned,
    TickResult,
)
from .game_state import GameState
from .randomizer import BagRandomizer
from .scoring import ClearKind, ClearResult, ScoreKeeper
from .srs import kick_offsets, resolve_rotation, try_rotate
from .tetromino import Rotation, Tetromino, TetrominoType, cells_for, shape_blocks
from .timestep import FixedTimestep
from .utils import can_move, gravity_interval_ticks, render_grid

__all__ = [
    "Board",
    "PIECE_VALUES",
    "EngineConfig",
    "Event",
    "GameAction",
    "GameOver",
    "HardDropped",
    "Held",
    "LevelUp",
    "LinesCleared",
    "Locked",
    "Moved",
    "Paused",
    "Phase",
    "Reset",
    "Resumed",
    "Rotated",
    "Snapshot",
    "Spawned",
    "TickResult",
    "GameState",
    "BagRandomizer",
    "ClearKind",
    "ClearResult",
    "ScoreKeeper",
    "kick_offsets",
    "resolve_rotation",
    "try_rotate",
    "Rotation",
    "Tetromino",
    "TetrominoType",
    "cells_for",
    "shape_blocks",
    "FixedTimestep",
    "can_move",
    "gravity_interval_ticks",
    "render_grid",
]

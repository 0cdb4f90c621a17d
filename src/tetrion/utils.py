"""Utility helpers for the engine."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .board import Board, PIECE_VALUES, VALUE_PIECES
from .tetromino import Cell, Tetromino, TetrominoType


# Gravity stops speeding up after this level.
MAX_GRAVITY_LEVEL = 20


def gravity_interval_ticks(level: int, tick_rate: int = 60) -> int:
    """Return how many ticks the active piece waits before falling one row.

    Uses the guideline curve ``(0.8 - (level - 1) * 0.007) ** (level - 1)``
    seconds per row.  The result never drops below a single tick, so from
    roughly level 13 upward the piece falls one row every tick.
    """

    level = min(max(level, 1), MAX_GRAVITY_LEVEL)
    seconds = (0.8 - (level - 1) * 0.007) ** (level - 1)
    return max(1, round(seconds * tick_rate))


def can_move(board: Board, tetromino: Tetromino, drow: int, dcol: int) -> bool:
    """Return ``True`` if ``tetromino`` can move by ``drow``/``dcol`` on ``board``."""

    return board.can_place(tetromino.moved(drow, dcol).cells())


def drop_distance(board: Board, tetromino: Tetromino) -> int:
    """Return how many rows ``tetromino`` can fall before it is blocked."""

    distance = 0
    while can_move(board, tetromino, distance + 1, 0):
        distance += 1
    return distance


def render_grid(
    board: Board,
    active: Optional[Tetromino] = None,
    *,
    include_hidden: bool = False,
) -> List[List[int]]:
    """Return the board as nested lists with ``active`` drawn in.

    The board itself is left untouched.  Only the visible rows are returned
    unless ``include_hidden`` is set, in which case row 0 is the top of the
    spawn buffer.
    """

    grid = [[int(value) for value in row] for row in board.grid]
    if active is not None:
        value = PIECE_VALUES[active.shape]
        for r, c in active.cells():
            if board.in_bounds(r, c):
                grid[r][c] = value
    if include_hidden:
        return grid
    return grid[board.hidden_rows :]


def format_grid(
    grid: Iterable[Iterable[int]], ghost: Iterable[Cell] = (), row_offset: int = 0
) -> str:
    """Return ``grid`` as text, one line per row.

    Occupied cells show their piece letter, ``ghost`` cells (given in board
    coordinates, shifted by ``row_offset``) show ``:`` and empty cells ``.``.
    """

    ghost_cells = {(r - row_offset, c) for r, c in ghost}
    lines = []
    for r, row in enumerate(grid):
        chars = []
        for c, value in enumerate(row):
            if value:
                shape = VALUE_PIECES.get(int(value))
                chars.append(shape.value if shape is not None else "#")
            elif (r, c) in ghost_cells:
                chars.append(":")
            else:
                chars.append(".")
        lines.append("".join(chars))
    return "\n".join(lines)


def piece_index(shape: Optional[TetrominoType]) -> int:
    """Return the position of ``shape`` in :class:`TetrominoType`, ``-1`` for none."""

    if shape is None:
        return -1
    return list(TetrominoType).index(shape)

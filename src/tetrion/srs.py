"""Super Rotation System wall kicks.

Kick offsets are ``(dcol, drow)`` pairs in board coordinates, so a positive
``drow`` moves the piece DOWN.  The published SRS tables use y-up offsets;
the values below already have their vertical component negated.  The zero
offset is always tried first and the first legal candidate wins.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from .board import Board
from .tetromino import Rotation, Tetromino, TetrominoType

Offset = Tuple[int, int]
KickTable = Dict[Tuple[Rotation, Rotation], Tuple[Offset, ...]]


# Wall kicks shared by J, L, S, T and Z.
JLSTZ_KICKS: KickTable = {
    (Rotation.SPAWN, Rotation.RIGHT): ((0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)),
    (Rotation.RIGHT, Rotation.SPAWN): ((0, 0), (1, 0), (1, 1), (0, -2), (1, -2)),
    (Rotation.RIGHT, Rotation.REVERSE): ((0, 0), (1, 0), (1, 1), (0, -2), (1, -2)),
    (Rotation.REVERSE, Rotation.RIGHT): ((0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)),
    (Rotation.REVERSE, Rotation.LEFT): ((0, 0), (1, 0), (1, -1), (0, 2), (1, 2)),
    (Rotation.LEFT, Rotation.REVERSE): ((0, 0), (-1, 0), (-1, 1), (0, -2), (-1, -2)),
    (Rotation.LEFT, Rotation.SPAWN): ((0, 0), (-1, 0), (-1, 1), (0, -2), (-1, -2)),
    (Rotation.SPAWN, Rotation.LEFT): ((0, 0), (1, 0), (1, -1), (0, 2), (1, 2)),
}

# The I piece has its own table.
I_KICKS: KickTable = {
    (Rotation.SPAWN, Rotation.RIGHT): ((0, 0), (-2, 0), (1, 0), (-2, 1), (1, -2)),
    (Rotation.RIGHT, Rotation.SPAWN): ((0, 0), (2, 0), (-1, 0), (2, -1), (-1, 2)),
    (Rotation.RIGHT, Rotation.REVERSE): ((0, 0), (-1, 0), (2, 0), (-1, -2), (2, 1)),
    (Rotation.REVERSE, Rotation.RIGHT): ((0, 0), (1, 0), (-2, 0), (1, 2), (-2, -1)),
    (Rotation.REVERSE, Rotation.LEFT): ((0, 0), (2, 0), (-1, 0), (2, -1), (-1, 2)),
    (Rotation.LEFT, Rotation.REVERSE): ((0, 0), (-2, 0), (1, 0), (-2, 1), (1, -2)),
    (Rotation.LEFT, Rotation.SPAWN): ((0, 0), (1, 0), (-2, 0), (1, 2), (-2, -1)),
    (Rotation.SPAWN, Rotation.LEFT): ((0, 0), (-1, 0), (2, 0), (-1, -2), (2, 1)),
}

# O does not kick.
O_KICKS: Tuple[Offset, ...] = ((0, 0),)

T_SPIN_CORNERS: Tuple[Offset, ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))


def kick_offsets(
    shape: TetrominoType, start: Rotation, target: Rotation
) -> Tuple[Offset, ...]:
    """Return the ordered kick candidates for rotating ``shape``.

    Raises:
        ValueError: If ``start`` and ``target`` are not adjacent states.
    """

    if shape is TetrominoType.O:
        return O_KICKS
    table = I_KICKS if shape is TetrominoType.I else JLSTZ_KICKS
    try:
        return table[(Rotation(start), Rotation(target))]
    except KeyError:
        raise ValueError(f"No kick data for {start!r} -> {target!r}") from None


def resolve_rotation(
    board: Board, piece: Tetromino, direction: int
) -> Optional[Tuple[Tetromino, int]]:
    """Rotate ``piece`` on ``board`` using the SRS kick search.

    Parameters
    ----------
    board:
        Board the candidates are tested against.
    piece:
        The piece to rotate.  It is never modified.
    direction:
        ``1`` for clockwise, ``-1`` for counter-clockwise.

    Returns the rotated piece together with the index of the kick that was
    accepted (``0`` for an in-place rotation), or ``None`` when every
    candidate collides.
    """

    if direction not in (1, -1):
        raise ValueError("direction must be 1 (clockwise) or -1 (counter-clockwise)")

    target = piece.rotation.turned(direction)
    for index, (dcol, drow) in enumerate(kick_offsets(piece.shape, piece.rotation, target)):
        candidate = piece.with_rotation(target, (drow, dcol))
        if board.can_place(candidate.cells()):
            return candidate, index
    return None


def try_rotate(board: Board, piece: Tetromino, direction: int) -> Optional[Tetromino]:
    """Return the rotated piece, or ``None`` if the rotation is rejected."""

    resolved = resolve_rotation(board, piece, direction)
    if resolved is None:
        return None
    return resolved[0]


def t_spin_corners(board: Board, piece: Tetromino) -> int:
    """Count the diagonal corners around a T piece's pivot that are blocked.

    Cells outside the board count as blocked, so a T wedged against a wall or
    the floor scores those corners too.
    """

    pivot_row, pivot_col = piece.pivot
    blocked = 0
    for drow, dcol in T_SPIN_CORNERS:
        row, col = pivot_row + drow, pivot_col + dcol
        if not board.in_bounds(row, col) or board.is_occupied(row, col):
            blocked += 1
    return blocked

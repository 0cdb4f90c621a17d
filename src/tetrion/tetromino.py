"""Tetromino definitions and the SRS shape table.

Every piece kind is described by its spawn orientation inside a square
bounding box.  The remaining three rotation states are derived by turning the
box clockwise about its centre, which reproduces the Super Rotation System's
"true rotation" states.  Coordinates are ``(row, col)`` offsets from the top
left corner of the box with rows growing downward.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Dict, FrozenSet, Tuple

Cell = Tuple[int, int]
RotationState = Tuple[Cell, ...]


class TetrominoType(str, Enum):
    """Enumeration of the seven standard tetromino shapes."""

    I = "I"
    O = "O"
    T = "T"
    S = "S"
    Z = "Z"
    J = "J"
    L = "L"


class Rotation(IntEnum):
    """The four SRS rotation states."""

    SPAWN = 0
    RIGHT = 1
    REVERSE = 2
    LEFT = 3

    def cw(self) -> "Rotation":
        return Rotation((self + 1) % 4)

    def ccw(self) -> "Rotation":
        return Rotation((self - 1) % 4)

    def turned(self, direction: int) -> "Rotation":
        """Return the state reached by rotating ``direction`` quarter turns.

        Positive values rotate clockwise, negative values counter-clockwise.
        """

        return Rotation((self + direction) % 4)


def _rotate(state: RotationState, size: int) -> RotationState:
    """Return ``state`` rotated 90 degrees clockwise inside a ``size`` box.

    Unlike a normalising rotation the cells keep their place relative to the
    box centre, so the pivot of every piece stays fixed between states.
    """

    return tuple(sorted((c, size - 1 - r) for r, c in state))


def _generate_rotations(state: RotationState, size: int) -> Tuple[RotationState, ...]:
    """Generate the four rotation states for a piece starting from ``state``."""

    rotations = [tuple(sorted(state))]
    for _ in range(3):
        rotations.append(_rotate(rotations[-1], size))
    return tuple(rotations)


# Spawn orientation and bounding box size for each tetromino.  J, L, S, T and
# Z share a 3x3 box, I uses a 4x4 box and O a 2x2 box so that turning it
# leaves the occupied cells unchanged.
_BASE_SHAPES: Dict[TetrominoType, Tuple[RotationState, int]] = {
    TetrominoType.I: (((1, 0), (1, 1), (1, 2), (1, 3)), 4),
    TetrominoType.O: (((0, 0), (0, 1), (1, 0), (1, 1)), 2),
    TetrominoType.T: (((0, 1), (1, 0), (1, 1), (1, 2)), 3),
    TetrominoType.S: (((0, 1), (0, 2), (1, 0), (1, 1)), 3),
    TetrominoType.Z: (((0, 0), (0, 1), (1, 1), (1, 2)), 3),
    TetrominoType.J: (((0, 0), (1, 0), (1, 1), (1, 2)), 3),
    TetrominoType.L: (((0, 2), (1, 0), (1, 1), (1, 2)), 3),
}


TETROMINO_SHAPES: Dict[TetrominoType, Tuple[RotationState, ...]] = {
    t_type: _generate_rotations(shape, size)
    for t_type, (shape, size) in _BASE_SHAPES.items()
}

BOX_SIZES: Dict[TetrominoType, int] = {
    t_type: size for t_type, (_, size) in _BASE_SHAPES.items()
}

# Anchor column of the bounding box at spawn on a 10 wide board.  Three wide
# pieces spawn over columns 3-5, I over 3-6 and O over 4-5.
SPAWN_COLUMNS: Dict[TetrominoType, int] = {
    TetrominoType.I: 3,
    TetrominoType.O: 4,
    TetrominoType.T: 3,
    TetrominoType.S: 3,
    TetrominoType.Z: 3,
    TetrominoType.J: 3,
    TetrominoType.L: 3,
}


def shape_blocks(shape: TetrominoType, rotation: int) -> RotationState:
    """Return the block offsets for ``shape`` at ``rotation``.

    Parameters
    ----------
    shape:
        The :class:`TetrominoType` to query.
    rotation:
        Index of the desired rotation state.  Values are wrapped so any integer
        is accepted.
    """

    states = TETROMINO_SHAPES[shape]
    return states[rotation % len(states)]


def cells_for(shape: TetrominoType, rotation: int, anchor: Cell) -> FrozenSet[Cell]:
    """Return the board cells covered by ``shape`` at ``rotation`` and ``anchor``."""

    row, col = anchor
    return frozenset((row + dr, col + dc) for dr, dc in shape_blocks(shape, rotation))


def spawn_position(shape: TetrominoType, board_width: int = 10) -> Cell:
    """Return the spawn anchor for ``shape`` on a board ``board_width`` wide."""

    # Keep the standard placement centred on boards of other widths.
    offset = (board_width - 10) // 2
    return (0, SPAWN_COLUMNS[shape] + offset)


@dataclass(frozen=True)
class Tetromino:
    """Active falling piece in the game.

    Instances are immutable; movement and rotation return new pieces so that
    candidate placements can be tested against the board before committing.
    """

    shape: TetrominoType
    rotation: Rotation = Rotation.SPAWN
    position: Cell = (0, 0)  # (row, col)

    @classmethod
    def spawn(cls, shape: TetrominoType, board_width: int = 10) -> "Tetromino":
        return cls(shape, Rotation.SPAWN, spawn_position(shape, board_width))

    def moved(self, drow: int, dcol: int) -> "Tetromino":
        """Return a copy translated by ``drow`` rows and ``dcol`` columns."""

        row, col = self.position
        return replace(self, position=(row + drow, col + dcol))

    def with_rotation(self, rotation: int, offset: Cell = (0, 0)) -> "Tetromino":
        """Return a copy in ``rotation`` with the anchor shifted by ``offset``.

        ``offset`` is ``(drow, dcol)``.
        """

        row, col = self.position
        drow, dcol = offset
        return replace(
            self, rotation=Rotation(rotation % 4), position=(row + drow, col + dcol)
        )

    def cells(self) -> FrozenSet[Cell]:
        """Return the global cell coordinates for this piece."""

        return cells_for(self.shape, self.rotation, self.position)

    @property
    def pivot(self) -> Cell:
        """Return the board cell at the centre of a 3x3 bounding box."""

        row, col = self.position
        return (row + 1, col + 1)

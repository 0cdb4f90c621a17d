"""Board representation for the playfield."""

from __future__ import annotations

from typing import Iterable, Tuple

import numpy as np
from numpy.typing import NDArray

from .tetromino import Cell, TetrominoType


# Dimensions of the standard board.  ``HIDDEN_ROWS`` extra rows sit above the
# visible area and give new pieces room to spawn.
WIDTH = 10
HEIGHT = 20
HIDDEN_ROWS = 2

EMPTY = 0

Grid = NDArray[np.uint8]

# Mapping from ``TetrominoType`` to the integer stored in the grid.  The
# specific numeric values are not important as long as ``0`` represents an empty
# cell.
PIECE_VALUES = {t: i + 1 for i, t in enumerate(TetrominoType)}
VALUE_PIECES = {value: t for t, value in PIECE_VALUES.items()}


def create_empty_grid(rows: int = HEIGHT + HIDDEN_ROWS, width: int = WIDTH) -> Grid:
    """Return a new empty board grid filled with zeros."""

    return np.zeros((rows, width), dtype=np.uint8)


class Board:
    """Board holding the locked cells.

    Row ``0`` is the top of the hidden buffer; the visible playfield is the
    bottom ``height`` rows of :attr:`grid`.
    """

    def __init__(
        self, width: int = WIDTH, height: int = HEIGHT, hidden_rows: int = HIDDEN_ROWS
    ) -> None:
        if width < 4 or height < 4 or hidden_rows < 0:
            raise ValueError("Board must be at least 4x4 with a non-negative buffer")
        self.width = width
        self.height = height
        self.hidden_rows = hidden_rows
        self.grid: Grid = create_empty_grid(height + hidden_rows, width)

    @property
    def rows(self) -> int:
        """Total number of rows including the hidden buffer."""

        return self.height + self.hidden_rows

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.width

    def get_cell(self, row: int, col: int) -> int:
        """Return the stored piece value at ``(row, col)``, ``0`` when empty.

        Row 0 is the top hidden row; visible rows start at ``hidden_rows``.

        Raises:
            IndexError: If the cell lies outside the grid.
        """
        if self.in_bounds(row, col):
            return int(self.grid[row, col])
        raise IndexError(f"Cell {(row, col)} out of bounds")

    def set_cell(self, row: int, col: int, value: int) -> None:
        """Write ``value`` into ``(row, col)``, hidden rows included.

        Raises:
            IndexError: If the cell lies outside the grid.
        """
        if self.in_bounds(row, col):
            self.grid[row, col] = np.uint8(value)
        else:
            raise IndexError(f"Cell {(row, col)} out of bounds")

    def is_occupied(self, row: int, col: int) -> bool:
        """Return ``True`` if the cell at ``(row, col)`` holds a block.

        Raises:
            IndexError: If the coordinates are outside the board, hidden rows
                included.
        """

        return self.get_cell(row, col) != EMPTY

    def can_place(self, cells: Iterable[Cell]) -> bool:
        """Return ``True`` if every cell is on the board and empty.

        Off-board positions are rejected rather than raising, which is what
        collision tests for candidate placements need.
        """

        for row, col in cells:
            if not self.in_bounds(row, col) or self.grid[row, col] != EMPTY:
                return False
        return True

    def lock(self, cells: Iterable[Cell], value: int) -> None:
        """Write ``value`` into every cell.

        The cells are validated first and nothing is written when any of them
        is invalid.

        Raises:
            IndexError: If a cell is outside the board.
            ValueError: If a cell is already occupied or ``value`` is empty.
        """

        if value == EMPTY:
            raise ValueError("Cannot lock an empty value")
        coordinates = np.asarray(list(cells), dtype=np.int16).reshape(-1, 2)
        if coordinates.size == 0:
            return

        rows, cols = coordinates.T
        if (
            np.any(rows < 0)
            or np.any(rows >= self.rows)
            or np.any(cols < 0)
            or np.any(cols >= self.width)
        ):
            raise IndexError("Block out of bounds")
        if np.any(self.grid[rows, cols] != EMPTY):
            raise ValueError("Block overlaps an occupied cell")

        self.grid[rows, cols] = np.uint8(value)

    def find_completed_rows(self) -> Tuple[int, ...]:
        """Return the indices of full rows, ordered top to bottom."""

        full_rows = np.all(self.grid != EMPTY, axis=1)
        return tuple(int(row) for row in np.flatnonzero(full_rows))

    def clear_rows(self, rows: Iterable[int]) -> int:
        """Remove ``rows`` and drop everything above them.

        Each surviving row moves down by the number of removed rows beneath
        it and empty rows fill the top.  The order of ``rows`` does not matter
        and duplicates are ignored.  Returns the number of rows removed.

        Raises:
            IndexError: If a row index is outside the board.
        """

        targets = sorted(set(rows))
        if not targets:
            return 0
        if targets[0] < 0 or targets[-1] >= self.rows:
            raise IndexError("Row out of bounds")

        keep = np.ones(self.rows, dtype=bool)
        keep[targets] = False
        cleared = len(targets)
        new_rows = np.zeros((cleared, self.width), dtype=self.grid.dtype)
        self.grid = np.vstack((new_rows, self.grid[keep]))
        return cleared

    def is_empty(self) -> bool:
        """Return ``True`` when no cell is occupied."""

        return not np.any(self.grid)

    def reset(self) -> None:
        """Set every cell to empty."""

        self.grid.fill(EMPTY)

    def visible_grid(self) -> Grid:
        """Return a copy of the visible rows."""

        return self.grid[self.hidden_rows :].copy()

    def copy(self) -> "Board":
        board = Board(self.width, self.height, self.hidden_rows)
        board.grid = self.grid.copy()
        return board

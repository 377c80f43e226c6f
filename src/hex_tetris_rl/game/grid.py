from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

import numpy as np

from .field import Field
from .hexmath import AxialCoord


class SpecialCellType(str, Enum):
    BOMB = "bomb"
    MULTIPLIER = "multiplier"
    FROZEN = "frozen"


@dataclass(frozen=True)
class CellState:
    """State of one cell. `clearing` is a render hint (line count), not gameplay state."""

    filled: bool = False
    color: Optional[str] = None
    special: Optional[SpecialCellType] = None
    frozen_cleared: bool = False
    clearing: Optional[int] = None
    # Piece type value, kept for array views and coloring
    kind: int = 0

    def with_clearing(self, line_count: int) -> "CellState":
        return replace(self, clearing=line_count)


EMPTY_CELL = CellState()


def filled_cell(color: str, kind: int = 0, special: Optional[SpecialCellType] = None) -> CellState:
    return CellState(filled=True, color=color, special=special, kind=kind)


class GameGrid(Mapping[AxialCoord, CellState]):
    """Immutable map from every field coordinate to its cell state.

    Every transition returns a new grid; a grid handed out is never mutated,
    so earlier frames stay valid while they are being rendered.
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: Mapping[AxialCoord, CellState]) -> None:
        self._cells: Dict[AxialCoord, CellState] = dict(cells)

    @classmethod
    def empty(cls, field: Field) -> "GameGrid":
        return cls({coord: EMPTY_CELL for coord in field.cells})

    @classmethod
    def from_filled(cls, field: Field, cells: Iterable[AxialCoord], color: str = "#ff0000") -> "GameGrid":
        """Build a grid with the given cells filled; handy for tests and fixtures."""
        grid = cls.empty(field)
        return grid.with_cells({coord: filled_cell(color) for coord in cells})

    def __getitem__(self, coord: AxialCoord) -> CellState:
        return self._cells[coord]

    def __iter__(self) -> Iterator[AxialCoord]:
        return iter(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, GameGrid):
            return self._cells == other._cells
        return NotImplemented

    def __repr__(self) -> str:
        return f"GameGrid(filled={len(self.filled_coords())}, size={len(self._cells)})"

    def cell(self, coord: AxialCoord) -> CellState:
        """Return the state at `coord`, treating coordinates off the grid as empty."""
        return self._cells.get(coord, EMPTY_CELL)

    def is_filled(self, coord: AxialCoord) -> bool:
        return self.cell(coord).filled

    def filled_coords(self) -> List[AxialCoord]:
        return [coord for coord, state in self._cells.items() if state.filled]

    def with_cells(self, updates: Mapping[AxialCoord, CellState]) -> "GameGrid":
        """Return a copy with `updates` applied; coordinates outside the grid are ignored."""
        cells = dict(self._cells)
        for coord, state in updates.items():
            if coord in cells:
                cells[coord] = state
        return GameGrid(cells)

    def cleared(self, coords: Iterable[AxialCoord]) -> "GameGrid":
        return self.with_cells({coord: EMPTY_CELL for coord in coords})

    def place_cells(self, coords: Iterable[AxialCoord], state: CellState) -> "GameGrid":
        return self.with_cells({coord: state for coord in coords})

    # ----- array views and board analytics -----

    def to_array(self, field: Field) -> np.ndarray:
        """Rows x columns int8 view in visual order: 0 empty, else the piece kind."""
        arr = np.zeros((field.rows, field.columns), dtype=np.int8)
        for coord, state in self._cells.items():
            if state.filled:
                col, row = field.to_offset(coord)
                arr[row, col] = state.kind if state.kind else 1
        return arr

    def special_array(self, field: Field) -> np.ndarray:
        """Rows x columns int8 view of special cells (0 none, 1 bomb, 2 multiplier, 3 frozen)."""
        codes = {special: i for i, special in enumerate(SpecialCellType, start=1)}
        arr = np.zeros((field.rows, field.columns), dtype=np.int8)
        for coord, state in self._cells.items():
            if state.filled and state.special is not None:
                col, row = field.to_offset(coord)
                arr[row, col] = codes[state.special]
        return arr

    def column_heights(self, field: Field) -> np.ndarray:
        occupied = self.to_array(field) != 0
        heights = np.zeros(field.columns, dtype=np.int32)
        for col in range(field.columns):
            rows = np.flatnonzero(occupied[:, col])
            if rows.size:
                heights[col] = field.rows - int(rows[0])
        return heights

    def max_height(self, field: Field) -> int:
        heights = self.column_heights(field)
        return int(heights.max()) if heights.size else 0

    def count_holes(self, field: Field) -> int:
        occupied = self.to_array(field) != 0
        holes = 0
        for col in range(field.columns):
            column = occupied[:, col]
            seen_block = False
            for cell in column:
                if cell:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes

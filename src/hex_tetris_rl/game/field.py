from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from typing import FrozenSet, Iterator, List, Tuple

from .hexmath import AxialCoord


FIELD_COLUMNS = 11
FIELD_ROWS = 20


@dataclass(frozen=True)
class Field:
    """Fixed set of playable cells laid out as vertical columns.

    Column `c`, row `k` maps to axial `q=c, r=k - c//2`, which keeps columns
    visually vertical for flat-top hexagons.
    """

    columns: int
    rows: int
    cells: FrozenSet[AxialCoord] = dataclass_field(repr=False)
    spawn_position: AxialCoord

    def __contains__(self, coord: object) -> bool:
        return coord in self.cells

    def __iter__(self) -> Iterator[AxialCoord]:
        return iter(sorted(self.cells))

    def __len__(self) -> int:
        return len(self.cells)

    def bottom_r(self, q: int) -> int:
        return self.rows - 1 - q // 2

    def to_offset(self, coord: AxialCoord) -> Tuple[int, int]:
        """Return (column, row) for an axial coordinate."""
        return coord.q, coord.r + coord.q // 2

    def from_offset(self, column: int, row: int) -> AxialCoord:
        return AxialCoord(column, row - column // 2)

    def coords(self) -> List[AxialCoord]:
        return sorted(self.cells)


def create_field(columns: int = FIELD_COLUMNS, rows: int = FIELD_ROWS) -> Field:
    cells = frozenset(
        AxialCoord(col, row - col // 2) for col in range(columns) for row in range(rows)
    )
    # Top of the middle column
    spawn_q = columns // 2
    spawn = AxialCoord(spawn_q, -(spawn_q // 2))
    return Field(columns=int(columns), rows=int(rows), cells=cells, spawn_position=spawn)


DEFAULT_FIELD = create_field()
SPAWN_POSITION = DEFAULT_FIELD.spawn_position

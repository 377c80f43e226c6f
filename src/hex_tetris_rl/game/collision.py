from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from .field import Field
from .grid import GameGrid
from .pieces import Piece, get_piece_cells


class CollisionReason(str, Enum):
    NONE = "none"
    OUT_OF_BOUNDS = "out-of-bounds"
    OVERLAP = "overlap"


class CollisionResult(NamedTuple):
    valid: bool
    reason: CollisionReason = CollisionReason.NONE

    def __bool__(self) -> bool:
        return self.valid


def is_valid_position(piece: Piece, grid: GameGrid, field: Field) -> CollisionResult:
    """Check every cell of `piece` is inside the field and empty; first failure wins."""
    for coord in get_piece_cells(piece):
        if coord not in field:
            return CollisionResult(False, CollisionReason.OUT_OF_BOUNDS)
        if grid.is_filled(coord):
            return CollisionResult(False, CollisionReason.OVERLAP)
    return CollisionResult(True)

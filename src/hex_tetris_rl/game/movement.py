"""Piece movement, wall kicks and the lock-delay state machine.

Every move builds a candidate piece and returns it only if it is valid;
otherwise it returns None. Rejections are expected and never raise.

Left/right moves keep the piece on the same visual row. With columns encoded
as r = row - q // 2, stepping into an odd column to the left needs r + 1 and
stepping into an even column to the right needs r - 1.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .collision import is_valid_position
from .field import Field
from .grid import GameGrid
from .hexmath import AXIAL_DIRECTIONS, BOTTOM_LEFT, BOTTOM_RIGHT, AxialCoord
from .pieces import Piece, rotate_piece


LOCK_DELAY_MS = 500


def _try(candidate: Piece, grid: GameGrid, field: Field) -> Optional[Piece]:
    return candidate if is_valid_position(candidate, grid, field).valid else None


def move_down(piece: Piece, grid: GameGrid, field: Field) -> Optional[Piece]:
    return _try(piece.moved(0, 1), grid, field)


def move_left(piece: Piece, grid: GameGrid, field: Field) -> Optional[Piece]:
    new_q = piece.position.q - 1
    dr = 1 if new_q % 2 == 1 else 0
    return _try(piece.moved(-1, dr), grid, field)


def move_right(piece: Piece, grid: GameGrid, field: Field) -> Optional[Piece]:
    new_q = piece.position.q + 1
    dr = -1 if new_q % 2 == 0 else 0
    return _try(piece.moved(1, dr), grid, field)


def move_down_left(piece: Piece, grid: GameGrid, field: Field) -> Optional[Piece]:
    """Step to the bottom-left neighbour; used to tuck pieces during lock delay."""
    return _try(piece.moved(BOTTOM_LEFT.q, BOTTOM_LEFT.r), grid, field)


def move_down_right(piece: Piece, grid: GameGrid, field: Field) -> Optional[Piece]:
    """Step to the bottom-right neighbour; used to tuck pieces during lock delay."""
    return _try(piece.moved(BOTTOM_RIGHT.q, BOTTOM_RIGHT.r), grid, field)


def calculate_drop_position(piece: Piece, grid: GameGrid, field: Field) -> AxialCoord:
    current = piece
    while True:
        moved = move_down(current, grid, field)
        if moved is None:
            return current.position
        current = moved


def hard_drop(piece: Piece, grid: GameGrid, field: Field) -> Piece:
    """Teleport the piece to its lowest valid position. Also gives the ghost preview."""
    return replace(piece, position=calculate_drop_position(piece, grid, field))


def rotate_with_wall_kick(piece: Piece, grid: GameGrid, field: Field) -> Optional[Piece]:
    """Rotate clockwise, kicking into a neighbour cell or one row down if blocked."""
    rotated = rotate_piece(piece)
    if is_valid_position(rotated, grid, field).valid:
        return rotated

    for direction in AXIAL_DIRECTIONS:
        kicked = rotated.moved(direction.q, direction.r)
        if is_valid_position(kicked, grid, field).valid:
            return kicked

    return _try(rotated.moved(0, 1), grid, field)


class LockState(str, Enum):
    FREE = "free"
    LOCKING = "locking"


@dataclass(frozen=True)
class LockDelay:
    """Lock-delay state for the falling piece.

    `FREE` while the piece can still fall. Once it rests on something the
    state becomes `LOCKING` with the time it started; the timer restarts
    whenever the piece is re-evaluated while still resting. A piece that
    stays `LOCKING` for `delay_ms` locks. Times are caller-supplied
    milliseconds.
    """

    state: LockState = LockState.FREE
    started_at: float = 0.0
    delay_ms: float = LOCK_DELAY_MS

    @property
    def is_locking(self) -> bool:
        return self.state is LockState.LOCKING

    def update(self, piece: Piece, grid: GameGrid, field: Field, now: float) -> "LockDelay":
        """Re-evaluate after a drop tick or a successful player move."""
        if move_down(piece, grid, field) is not None:
            return self.cancel()
        return replace(self, state=LockState.LOCKING, started_at=now)

    def cancel(self) -> "LockDelay":
        return replace(self, state=LockState.FREE, started_at=0.0)

    def expired(self, now: float) -> bool:
        return self.is_locking and now - self.started_at >= self.delay_ms

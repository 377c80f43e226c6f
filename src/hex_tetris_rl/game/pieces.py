from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Tuple

from .grid import SpecialCellType
from .hexmath import (
    BOTTOM,
    BOTTOM_LEFT,
    BOTTOM_RIGHT,
    TOP,
    TOP_LEFT,
    TOP_RIGHT,
    AxialCoord,
    rotate_cw,
)
from .special import DEFAULT_SPAWN_RATES, SpecialSpawnRates, roll_special_piece_type


class PieceType(IntEnum):
    I = 1  # Bar
    S = 2  # Worm
    Z = 3  # Mirror worm
    L = 4
    J = 5  # Mirror L
    T = 6  # Pistol
    P = 7  # Mirror pistol
    U = 8  # Ring arc around an empty center
    O = 9  # Rhombus
    Y = 10  # Propeller


Shape = Tuple[AxialCoord, ...]


@dataclass(frozen=True)
class PieceMetadata:
    shape: Shape
    color: str
    name: str
    has_center: bool = True
    # 3 for shapes with 180 degree symmetry
    rotation_states: int = 6
    spawn_weight: float = 1.0


# Offsets from the origin. The origin is part of the piece only if has_center.
PIECE_METADATA: Dict[PieceType, PieceMetadata] = {
    PieceType.I: PieceMetadata((TOP, BOTTOM, AxialCoord(0, 2)), "#06b6d4", "Bar", rotation_states=3),
    PieceType.S: PieceMetadata((TOP_LEFT, TOP_RIGHT, AxialCoord(2, -1)), "#f97316", "Worm", rotation_states=3),
    PieceType.Z: PieceMetadata((TOP_RIGHT, TOP_LEFT, AxialCoord(-2, 1)), "#84cc16", "Mirror Worm", rotation_states=3),
    PieceType.L: PieceMetadata((TOP, AxialCoord(0, -2), BOTTOM_RIGHT), "#3b82f6", "L-Shape"),
    PieceType.J: PieceMetadata((TOP, AxialCoord(0, -2), BOTTOM_LEFT), "#f59e0b", "Mirror L"),
    PieceType.T: PieceMetadata((TOP, BOTTOM, TOP_RIGHT), "#8b5cf6", "Pistol"),
    PieceType.P: PieceMetadata((TOP, BOTTOM, TOP_LEFT), "#ec4899", "Mirror Pistol"),
    PieceType.U: PieceMetadata((TOP, TOP_RIGHT, BOTTOM_RIGHT, BOTTOM), "#22c55e", "U-Shape", has_center=False),
    PieceType.O: PieceMetadata((TOP_RIGHT, BOTTOM_RIGHT, BOTTOM), "#ef4444", "Rhombus", rotation_states=3),
    PieceType.Y: PieceMetadata((TOP, BOTTOM_RIGHT, BOTTOM_LEFT), "#eab308", "Propeller"),
}


@dataclass(frozen=True)
class Piece:
    type: PieceType
    shape: Shape
    color: str
    position: AxialCoord
    # Unbounded; reduced modulo the type's rotation_states when cells are computed
    rotation: int = 0
    special: Optional[SpecialCellType] = None

    @property
    def metadata(self) -> PieceMetadata:
        return PIECE_METADATA[self.type]

    def cells(self) -> List[AxialCoord]:
        return get_piece_cells(self)

    def moved(self, dq: int, dr: int) -> "Piece":
        return replace(self, position=AxialCoord(self.position.q + dq, self.position.r + dr))

    def rotated(self, delta: int = 1) -> "Piece":
        return replace(self, rotation=self.rotation + delta)


def rotate_shape(shape: Iterable[AxialCoord], steps: int) -> Shape:
    steps %= 6
    if steps == 0:
        return tuple(shape)
    return tuple(rotate_cw(offset, steps) for offset in shape)


def get_piece_cells(piece: Piece) -> List[AxialCoord]:
    meta = PIECE_METADATA[piece.type]
    cells: List[AxialCoord] = []
    if meta.has_center:
        cells.append(piece.position)
    for dq, dr in rotate_shape(piece.shape, piece.rotation % meta.rotation_states):
        cells.append(AxialCoord(piece.position.q + dq, piece.position.r + dr))
    return cells


def create_piece(
    kind: PieceType,
    position: AxialCoord,
    rotation: int = 0,
    special: Optional[SpecialCellType] = None,
) -> Piece:
    meta = PIECE_METADATA[kind]
    return Piece(kind, meta.shape, meta.color, position, rotation, special)


def rotate_piece(piece: Piece) -> Piece:
    """Rotate 60 degrees clockwise without any validity check."""
    return piece.rotated(1)


def choose_piece_type(rng: random.Random, exclude: Iterable[PieceType] = ()) -> PieceType:
    """Weighted random pick; falls back to a uniform pick if no weight is left."""
    excluded = set(exclude)
    candidates = [
        kind for kind, meta in PIECE_METADATA.items() if meta.spawn_weight > 0 and kind not in excluded
    ]
    if not candidates:
        return rng.choice(list(PieceType))
    weights = [PIECE_METADATA[kind].spawn_weight for kind in candidates]
    return rng.choices(candidates, weights=weights, k=1)[0]


def min_r_offset(kind: PieceType) -> int:
    """Row offset of the topmost cell relative to the piece origin."""
    meta = PIECE_METADATA[kind]
    rows = [offset.r for offset in meta.shape]
    if meta.has_center:
        rows.append(0)
    return min(rows)


def spawn_piece(
    spawn_position: AxialCoord,
    rng: random.Random,
    exclude: Iterable[PieceType] = (),
    level: int = 1,
    rates: Optional[SpecialSpawnRates] = DEFAULT_SPAWN_RATES,
) -> Piece:
    """Create a random piece whose topmost cell sits on the spawn row.

    Pass `rates=None` to never tag the piece as special.
    """
    kind = choose_piece_type(rng, exclude)
    position = AxialCoord(spawn_position.q, spawn_position.r - min_r_offset(kind))
    special = roll_special_piece_type(level, rng, rates) if rates is not None else None
    return create_piece(kind, position, special=special)

"""Hexagonal coordinate math for flat-top hexagons.

Cells are addressed with axial coordinates (q, r). Rotation goes through cube
coordinates (x, y, z) with x + y + z == 0.
"""

from __future__ import annotations

import math
from typing import List, NamedTuple, Tuple

from .errors import InvalidCoordinateKeyError


class AxialCoord(NamedTuple):
    q: int
    r: int

    def __add__(self, other: Tuple[int, int]) -> "AxialCoord":  # type: ignore[override]
        return AxialCoord(self.q + other[0], self.r + other[1])


class CubeCoord(NamedTuple):
    x: int
    y: int
    z: int


def axial_to_cube(axial: AxialCoord) -> CubeCoord:
    return CubeCoord(axial.q, axial.r, -axial.q - axial.r)


def cube_to_axial(cube: CubeCoord) -> AxialCoord:
    if cube.x + cube.y + cube.z != 0:
        raise ValueError(f"Cube coordinate off the x+y+z=0 plane: {cube}")
    return AxialCoord(cube.x, cube.y)


# Order: top, top-right, bottom-right, bottom, bottom-left, top-left
AXIAL_DIRECTIONS: Tuple[AxialCoord, ...] = (
    AxialCoord(0, -1),
    AxialCoord(1, -1),
    AxialCoord(1, 0),
    AxialCoord(0, 1),
    AxialCoord(-1, 1),
    AxialCoord(-1, 0),
)

TOP, TOP_RIGHT, BOTTOM_RIGHT, BOTTOM, BOTTOM_LEFT, TOP_LEFT = AXIAL_DIRECTIONS


def hex_neighbors(coord: AxialCoord) -> List[AxialCoord]:
    return [coord + d for d in AXIAL_DIRECTIONS]


def rotate_cw(coord: AxialCoord, steps: int = 1) -> AxialCoord:
    """Rotate `coord` around the origin by `steps` x 60 degrees clockwise."""
    cube = axial_to_cube(coord)
    for _ in range(steps % 6):
        cube = CubeCoord(-cube.z, -cube.x, -cube.y)
    return cube_to_axial(cube)


def axial_to_key(axial: Tuple[int, int]) -> str:
    return f"{axial[0]},{axial[1]}"


def key_to_axial(key: str) -> AxialCoord:
    parts = key.split(",")
    if len(parts) != 2:
        raise InvalidCoordinateKeyError(key)
    try:
        return AxialCoord(int(parts[0]), int(parts[1]))
    except ValueError:
        raise InvalidCoordinateKeyError(key) from None


def axial_to_pixel(axial: AxialCoord, size: float) -> Tuple[float, float]:
    # size is the center-to-corner distance
    x = size * 1.5 * axial.q
    y = size * (math.sqrt(3) / 2 * axial.q + math.sqrt(3) * axial.r)
    return x, y

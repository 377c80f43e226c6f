"""Line detection, gravity and cascading clears.

Lines run along the two diagonal families of a flat-top hex field:
diagonal-right cells share `r`, diagonal-left cells share `q + r`. A line is
complete when every field cell on it is filled.

Gravity is per cell. A cell is grounded when nothing in the field is below
it or the cell directly below is grounded; support only propagates
vertically. Every other cell is floating and falls one row per step, so
connected cells do not fall as a rigid body.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Set, Tuple

from .field import Field
from .grid import GameGrid
from .hexmath import AxialCoord
from .special import (
    apply_bomb_explosions,
    bomb_cells,
    bomb_explosion_cells,
    has_multiplier_cell,
    process_frozen_cells,
)


class LineDirection(str, Enum):
    DIAGONAL_RIGHT = "diagonalRight"
    DIAGONAL_LEFT = "diagonalLeft"


@dataclass(frozen=True)
class Line:
    direction: LineDirection
    cells: Tuple[AxialCoord, ...]


def line_constant(coord: AxialCoord, direction: LineDirection) -> int:
    if direction is LineDirection.DIAGONAL_RIGHT:
        return coord.r
    return coord.q + coord.r


def field_lines(field: Field, direction: LineDirection) -> Dict[int, List[AxialCoord]]:
    groups: Dict[int, List[AxialCoord]] = {}
    for coord in field.coords():
        groups.setdefault(line_constant(coord, direction), []).append(coord)
    return groups


def detect_lines(grid: GameGrid, field: Field) -> List[Line]:
    lines: List[Line] = []
    for direction in LineDirection:
        groups = field_lines(field, direction)
        for constant in sorted(groups):
            cells = groups[constant]
            if cells and all(grid.is_filled(c) for c in cells):
                lines.append(Line(direction, tuple(cells)))
    return lines


class ClearResult(NamedTuple):
    grid_after_line_clear: GameGrid
    bomb_explosion_cells: List[AxialCoord]
    grid_after_bombs: GameGrid
    has_multiplier: bool


def clear_lines(grid: GameGrid, lines: Iterable[Line], field: Field) -> ClearResult:
    """Remove the union of `lines`' cells, applying frozen and bomb rules."""
    batch: List[AxialCoord] = []
    seen: Set[AxialCoord] = set()
    for line in lines:
        for coord in line.cells:
            if coord not in seen:
                seen.add(coord)
                batch.append(coord)

    multiplier = has_multiplier_cell(grid, batch)
    to_remove, thawed = process_frozen_cells(grid, batch)
    bombs = bomb_cells(thawed, to_remove)

    after_lines = thawed.cleared(to_remove)
    exploded = bomb_explosion_cells(after_lines, bombs, field)
    after_bombs = apply_bomb_explosions(after_lines, bombs, field)
    return ClearResult(after_lines, exploded, after_bombs, multiplier)


def classify_cells(grid: GameGrid, field: Field) -> Tuple[Set[AxialCoord], Set[AxialCoord]]:
    """Split filled cells into (grounded, floating)."""
    filled = grid.filled_coords()
    grounded: Set[AxialCoord] = set()

    # Sweep bottom-up so each cell sees the status of the one below it
    for coord in sorted(filled, key=lambda c: c.r, reverse=True):
        below = AxialCoord(coord.q, coord.r + 1)
        if below not in field or below in grounded:
            grounded.add(coord)

    floating = {c for c in filled if c not in grounded}
    return grounded, floating


class GravityStep(NamedTuple):
    grid: GameGrid
    moved: bool


def apply_gravity_step(grid: GameGrid, field: Field) -> GravityStep:
    """Move every floating cell down one row where the target is free.

    Floating cells are resolved bottom-most first, so a cell can only move
    into a cell vacated by the one below it in the same step, never through
    it.
    """
    grounded, floating = classify_cells(grid, field)
    if not floating:
        return GravityStep(grid, False)

    occupied: Set[AxialCoord] = set(grounded)
    updates = {coord: grid[coord] for coord in grounded}
    moved = False
    for coord in sorted(floating, key=lambda c: c.r, reverse=True):
        target = AxialCoord(coord.q, coord.r + 1)
        if target in field and target not in occupied:
            updates[target] = grid[coord]
            occupied.add(target)
            moved = True
        else:
            updates[coord] = grid[coord]
            occupied.add(coord)

    new_grid = GameGrid.empty(field).with_cells(updates)
    return GravityStep(new_grid, moved)


def get_gravity_frames(grid: GameGrid, field: Field) -> List[GameGrid]:
    """Every intermediate grid until nothing moves; empty if already settled."""
    frames: List[GameGrid] = []
    current = grid
    while True:
        current, moved = apply_gravity_step(current, field)
        if not moved:
            return frames
        frames.append(current)


def settle(grid: GameGrid, field: Field) -> GameGrid:
    frames = get_gravity_frames(grid, field)
    return frames[-1] if frames else grid


@dataclass(frozen=True)
class LineClearStage:
    lines: Tuple[Line, ...]
    grid_after_line_clear: GameGrid
    bomb_explosion_cells: Tuple[AxialCoord, ...]
    grid_after_clear: GameGrid
    gravity_frames: Tuple[GameGrid, ...]
    grid_after_gravity: GameGrid
    has_multiplier: bool


def detect_lines_for_animation(
    grid: GameGrid,
    field: Field,
    after_settle: Optional[Callable[[GameGrid], GameGrid]] = None,
) -> List[LineClearStage]:
    """Resolve a full cascade: clear, settle, repeat while new lines complete.

    `after_settle` is applied to each stage's settled grid before the next
    detection pass (special-cell promotion hooks in here). Returns the ordered
    stages; an empty list means nothing cleared.
    """
    stages: List[LineClearStage] = []
    current = grid
    while True:
        lines = detect_lines(current, field)
        if not lines:
            return stages
        result = clear_lines(current, lines, field)
        frames = get_gravity_frames(result.grid_after_bombs, field)
        after_gravity = frames[-1] if frames else result.grid_after_bombs
        if after_settle is not None:
            after_gravity = after_settle(after_gravity)
        stages.append(
            LineClearStage(
                lines=tuple(lines),
                grid_after_line_clear=result.grid_after_line_clear,
                bomb_explosion_cells=tuple(result.bomb_explosion_cells),
                grid_after_clear=result.grid_after_bombs,
                gravity_frames=tuple(frames),
                grid_after_gravity=after_gravity,
                has_multiplier=result.has_multiplier,
            )
        )
        current = after_gravity


def create_blink_grid(grid: GameGrid, lines: Iterable[Line]) -> GameGrid:
    """Tag the cells of `lines` with the clearing hint for the blink animation."""
    lines = list(lines)
    line_count = len(lines)
    updates = {}
    for line in lines:
        for coord in line.cells:
            state = grid.cell(coord)
            if state.filled:
                updates[coord] = state.with_clearing(line_count)
    return grid.with_cells(updates)


def create_bomb_blink_grid(grid: GameGrid, cells: Iterable[AxialCoord]) -> GameGrid:
    updates = {c: grid.cell(c).with_clearing(1) for c in cells if grid.cell(c).filled}
    return grid.with_cells(updates)

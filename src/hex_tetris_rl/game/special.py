"""Special cells: bombs, multipliers and frozen cells.

Spawn chance for a type at a level is `base + (level - 1) * per_level`,
capped, except frozen cells which use a fixed chance. Each type also has a
maximum number of cells allowed on the field at once.

- bomb: destroys every filled neighbour when it is cleared
- multiplier: doubles the score of the clear it takes part in
- frozen: absorbs one clear and becomes a normal cell
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, NamedTuple, Optional, Set

from .field import Field
from .grid import EMPTY_CELL, GameGrid, SpecialCellType
from .hexmath import AxialCoord, hex_neighbors


# Whole pieces can only be tagged with these
SPECIAL_PIECE_TYPES = (SpecialCellType.BOMB, SpecialCellType.MULTIPLIER)


@dataclass(frozen=True)
class SpecialSpawnRates:
    bomb_base_chance: float = 0.05
    bomb_increase_per_level: float = 0.005
    bomb_max_chance: float = 0.15

    multiplier_base_chance: float = 0.03
    multiplier_increase_per_level: float = 0.004
    multiplier_max_chance: float = 0.12

    frozen_fixed_chance: float = 0.025

    multiplier_score_bonus: int = 2

    bomb_max_count: int = 3
    multiplier_max_count: int = 3
    frozen_max_count: int = 1

    bomb_piece_base_chance: float = 0.02
    bomb_piece_increase_per_level: float = 0.003
    bomb_piece_max_chance: float = 0.08

    multiplier_piece_base_chance: float = 0.015
    multiplier_piece_increase_per_level: float = 0.002
    multiplier_piece_max_chance: float = 0.06

    def max_count(self, special: SpecialCellType) -> int:
        if special is SpecialCellType.BOMB:
            return self.bomb_max_count
        if special is SpecialCellType.MULTIPLIER:
            return self.multiplier_max_count
        return self.frozen_max_count


DEFAULT_SPAWN_RATES = SpecialSpawnRates()


def spawn_chance(special: SpecialCellType, level: int, rates: SpecialSpawnRates = DEFAULT_SPAWN_RATES) -> float:
    if special is SpecialCellType.BOMB:
        chance = rates.bomb_base_chance + (level - 1) * rates.bomb_increase_per_level
        return min(chance, rates.bomb_max_chance)
    if special is SpecialCellType.MULTIPLIER:
        chance = rates.multiplier_base_chance + (level - 1) * rates.multiplier_increase_per_level
        return min(chance, rates.multiplier_max_chance)
    return rates.frozen_fixed_chance


def special_piece_spawn_chance(
    special: SpecialCellType, level: int, rates: SpecialSpawnRates = DEFAULT_SPAWN_RATES
) -> float:
    if special is SpecialCellType.BOMB:
        chance = rates.bomb_piece_base_chance + (level - 1) * rates.bomb_piece_increase_per_level
        return min(chance, rates.bomb_piece_max_chance)
    if special is SpecialCellType.MULTIPLIER:
        chance = rates.multiplier_piece_base_chance + (level - 1) * rates.multiplier_piece_increase_per_level
        return min(chance, rates.multiplier_piece_max_chance)
    # Pieces are never frozen
    return 0.0


def roll_special_piece_type(
    level: int, rng: random.Random, rates: SpecialSpawnRates = DEFAULT_SPAWN_RATES
) -> Optional[SpecialCellType]:
    bomb = special_piece_spawn_chance(SpecialCellType.BOMB, level, rates)
    multiplier = special_piece_spawn_chance(SpecialCellType.MULTIPLIER, level, rates)
    total = bomb + multiplier
    if rng.random() >= total:
        return None
    if rng.random() * total < bomb:
        return SpecialCellType.BOMB
    return SpecialCellType.MULTIPLIER


def count_special_cells(grid: GameGrid, field: Field) -> Dict[SpecialCellType, int]:
    counts = {special: 0 for special in SpecialCellType}
    for coord in field.cells:
        state = grid.cell(coord)
        if state.filled and state.special is not None:
            counts[state.special] += 1
    return counts


def _eligible_cells(grid: GameGrid, field: Field) -> List[AxialCoord]:
    # Sorted so a seeded rng picks the same cell every run
    return [coord for coord in field.coords() if grid.cell(coord).filled and grid.cell(coord).special is None]


def maybe_spawn_special_cell(
    grid: GameGrid,
    field: Field,
    level: int,
    rng: random.Random,
    rates: SpecialSpawnRates = DEFAULT_SPAWN_RATES,
) -> GameGrid:
    """Promote at most one filled, non-special cell to a special type.

    Types already at their cap are left out of the draw. Returns `grid`
    itself when nothing spawns.
    """
    eligible = _eligible_cells(grid, field)
    if not eligible:
        return grid

    counts = count_special_cells(grid, field)
    chances = {
        special: 0.0 if counts[special] >= rates.max_count(special) else spawn_chance(special, level, rates)
        for special in SpecialCellType
    }
    total = sum(chances.values())
    if total <= 0:
        return grid
    if rng.random() >= total:
        return grid

    bomb = chances[SpecialCellType.BOMB]
    multiplier = chances[SpecialCellType.MULTIPLIER]
    type_roll = rng.random() * total
    if type_roll < bomb:
        selected = SpecialCellType.BOMB
    elif type_roll < bomb + multiplier:
        selected = SpecialCellType.MULTIPLIER
    else:
        selected = SpecialCellType.FROZEN

    coord = rng.choice(eligible)
    # A thawed cell promoted to frozen absorbs its next clear again
    return grid.with_cells({coord: replace(grid[coord], special=selected, frozen_cleared=False)})


def filled_neighbors(coord: AxialCoord, grid: GameGrid, field: Field) -> List[AxialCoord]:
    return [n for n in hex_neighbors(coord) if n in field and grid.is_filled(n)]


def bomb_explosion_cells(grid: GameGrid, bombs: Iterable[AxialCoord], field: Field) -> List[AxialCoord]:
    """Union of filled neighbours of every bomb, in first-seen order."""
    destroyed: List[AxialCoord] = []
    seen: Set[AxialCoord] = set()
    for bomb in bombs:
        for neighbor in filled_neighbors(bomb, grid, field):
            if neighbor not in seen:
                seen.add(neighbor)
                destroyed.append(neighbor)
    return destroyed


def apply_bomb_explosions(grid: GameGrid, bombs: Iterable[AxialCoord], field: Field) -> GameGrid:
    destroyed = bomb_explosion_cells(grid, bombs, field)
    if not destroyed:
        return grid
    return grid.cleared(destroyed)


class FrozenResult(NamedTuple):
    cells_to_remove: List[AxialCoord]
    grid: GameGrid


def process_frozen_cells(grid: GameGrid, cells: Iterable[AxialCoord]) -> FrozenResult:
    """Split cleared cells into removals and frozen cells that absorb this clear.

    A frozen cell seen for the first time is rewritten as a normal cell with
    `frozen_cleared=True`; everything else, including already thawed cells,
    is removed.
    """
    updates = {}
    to_remove: List[AxialCoord] = []
    for coord in cells:
        state = grid.cell(coord)
        if not state.filled or coord in updates:
            continue
        if state.special is SpecialCellType.FROZEN and not state.frozen_cleared:
            updates[coord] = replace(state, special=None, frozen_cleared=True)
        elif coord not in to_remove:
            to_remove.append(coord)
    return FrozenResult(to_remove, grid.with_cells(updates) if updates else grid)


def has_multiplier_cell(grid: GameGrid, cells: Iterable[AxialCoord]) -> bool:
    return any(grid.cell(c).filled and grid.cell(c).special is SpecialCellType.MULTIPLIER for c in cells)


def bomb_cells(grid: GameGrid, cells: Iterable[AxialCoord]) -> List[AxialCoord]:
    return [c for c in cells if grid.cell(c).filled and grid.cell(c).special is SpecialCellType.BOMB]


class BombPieceResult(NamedTuple):
    destroyed: List[AxialCoord]
    grid: GameGrid


def explode_bomb_piece(grid: GameGrid, piece_cells: Iterable[AxialCoord], field: Field) -> BombPieceResult:
    """Resolve a freshly locked bomb piece.

    Every filled neighbour of the piece's cells is destroyed, then the piece's
    own cells are removed. Gravity is left to the caller.
    """
    own = list(piece_cells)
    own_set = set(own)
    destroyed = [c for c in bomb_explosion_cells(grid, own, field) if c not in own_set]
    new_grid = grid.cleared(destroyed).with_cells({c: EMPTY_CELL for c in own})
    return BombPieceResult(destroyed, new_grid)

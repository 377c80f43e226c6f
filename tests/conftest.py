from __future__ import annotations

import random

import pytest

from hex_tetris_rl.game import Field, GameGrid, create_field


@pytest.fixture
def small_field() -> Field:
    """5 columns x 6 rows; spawn at (2, -1)."""
    return create_field(5, 6)


@pytest.fixture
def empty_grid(small_field: Field) -> GameGrid:
    return GameGrid.empty(small_field)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)

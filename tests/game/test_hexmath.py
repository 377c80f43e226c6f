"""Tests for hex coordinate math, the field layout and grid snapshots."""

import numpy as np
import pytest

from hex_tetris_rl.game import (
    AXIAL_DIRECTIONS,
    AxialCoord,
    CubeCoord,
    GameGrid,
    HexTetrisError,
    InvalidCoordinateKeyError,
    SpecialCellType,
    axial_to_cube,
    axial_to_key,
    create_field,
    cube_to_axial,
    filled_cell,
    hex_neighbors,
    key_to_axial,
    rotate_cw,
)


class TestCoordinates:
    def test_axial_cube_round_trip(self):
        for coord in [AxialCoord(0, 0), AxialCoord(3, -2), AxialCoord(-4, 7)]:
            cube = axial_to_cube(coord)
            assert cube.x + cube.y + cube.z == 0
            assert cube_to_axial(cube) == coord

    def test_cube_off_plane_rejected(self):
        with pytest.raises(ValueError):
            cube_to_axial(CubeCoord(1, 1, 1))

    def test_addition_is_vector_addition(self):
        assert AxialCoord(2, 3) + AxialCoord(-1, 1) == AxialCoord(1, 4)

    def test_neighbors_follow_direction_order(self):
        origin = AxialCoord(2, 2)
        assert hex_neighbors(origin) == [AxialCoord(2 + d.q, 2 + d.r) for d in AXIAL_DIRECTIONS]
        assert len(set(hex_neighbors(origin))) == 6


class TestRotation:
    def test_single_step_cycles_directions(self):
        # (x, y, z) -> (-z, -x, -y) walks the direction table backwards
        for i, direction in enumerate(AXIAL_DIRECTIONS):
            assert rotate_cw(direction) == AXIAL_DIRECTIONS[(i - 1) % 6]

    def test_six_steps_is_identity(self):
        for coord in [AxialCoord(0, 2), AxialCoord(-1, 3), AxialCoord(2, -1)]:
            assert rotate_cw(coord, 6) == coord
            assert rotate_cw(coord, 0) == coord

    def test_three_steps_negates(self):
        assert rotate_cw(AxialCoord(2, -1), 3) == AxialCoord(-2, 1)

    def test_rotation_preserves_distance_from_origin(self):
        coord = AxialCoord(2, 1)
        cube = axial_to_cube(coord)
        distance = max(abs(cube.x), abs(cube.y), abs(cube.z))
        for steps in range(6):
            rotated = axial_to_cube(rotate_cw(coord, steps))
            assert max(abs(rotated.x), abs(rotated.y), abs(rotated.z)) == distance


class TestKeys:
    def test_round_trip(self):
        assert axial_to_key(AxialCoord(3, -2)) == "3,-2"
        assert key_to_axial("3,-2") == AxialCoord(3, -2)

    @pytest.mark.parametrize("key", ["abc", "1,2,3", "1;2", "", "x,1"])
    def test_malformed_key_raises(self, key):
        with pytest.raises(InvalidCoordinateKeyError) as exc_info:
            key_to_axial(key)
        assert exc_info.value.key == key
        assert isinstance(exc_info.value, ValueError)
        assert isinstance(exc_info.value, HexTetrisError)


class TestField:
    def test_default_dimensions(self):
        field = create_field()
        assert len(field) == 11 * 20
        assert field.spawn_position == AxialCoord(5, -2)
        assert field.to_offset(field.spawn_position) == (5, 0)

    def test_offset_round_trip(self, small_field):
        for coord in small_field:
            col, row = small_field.to_offset(coord)
            assert 0 <= col < small_field.columns
            assert 0 <= row < small_field.rows
            assert small_field.from_offset(col, row) == coord

    def test_bottom_r_is_last_cell_of_column(self, small_field):
        for q in range(small_field.columns):
            bottom = AxialCoord(q, small_field.bottom_r(q))
            assert bottom in small_field
            assert AxialCoord(q, bottom.r + 1) not in small_field

    def test_contains(self, small_field):
        assert AxialCoord(0, 0) in small_field
        assert AxialCoord(-1, 0) not in small_field
        assert AxialCoord(4, -3) not in small_field


class TestGameGrid:
    def test_key_set_equals_field(self, small_field, empty_grid):
        assert set(empty_grid) == set(small_field.cells)
        assert not empty_grid.filled_coords()

    def test_updates_return_new_grid(self, empty_grid):
        coord = AxialCoord(1, 2)
        filled = empty_grid.with_cells({coord: filled_cell("#123456", kind=3)})
        assert filled.is_filled(coord)
        assert not empty_grid.is_filled(coord)
        assert filled != empty_grid

    def test_off_field_updates_ignored(self, small_field, empty_grid):
        outside = AxialCoord(-5, -5)
        grid = empty_grid.with_cells({outside: filled_cell("#fff")})
        assert set(grid) == set(small_field.cells)
        assert not grid.is_filled(outside)
        assert grid == empty_grid

    def test_array_views(self, small_field, empty_grid):
        grid = empty_grid.with_cells({
            AxialCoord(2, 0): filled_cell("#fff", kind=4),
            AxialCoord(0, 5): filled_cell("#fff", special=SpecialCellType.FROZEN),
        })
        arr = grid.to_array(small_field)
        assert arr.shape == (6, 5)
        assert arr.dtype == np.int8
        assert arr[1, 2] == 4
        assert arr[5, 0] == 1
        special = grid.special_array(small_field)
        assert special[5, 0] == 3
        assert special.sum() == 3

    def test_heights_and_holes(self, small_field):
        # column 0: rows 2 and 5 filled, rows 3 and 4 empty
        grid = GameGrid.from_filled(small_field, [AxialCoord(0, 2), AxialCoord(0, 5)])
        assert grid.column_heights(small_field)[0] == 4
        assert grid.max_height(small_field) == 4
        assert grid.count_holes(small_field) == 2

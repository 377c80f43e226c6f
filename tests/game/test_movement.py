"""Tests for collision checks, piece movement, wall kicks and lock delay."""

import pytest

from hex_tetris_rl.game import (
    DEFAULT_FIELD,
    AxialCoord,
    CollisionReason,
    GameGrid,
    LockDelay,
    LockState,
    PieceType,
    create_piece,
    hard_drop,
    is_valid_position,
    move_down,
    move_down_left,
    move_down_right,
    move_left,
    move_right,
    rotate_with_wall_kick,
)


def _rows(piece, field):
    return sorted(field.to_offset(c)[1] for c in piece.cells())


def _columns(piece, field):
    return sorted(field.to_offset(c)[0] for c in piece.cells())


class TestCollision:
    def test_valid_position(self, small_field, empty_grid):
        result = is_valid_position(create_piece(PieceType.I, AxialCoord(2, 1)), empty_grid, small_field)
        assert result.valid
        assert result.reason is CollisionReason.NONE
        assert result

    def test_out_of_bounds(self, small_field, empty_grid):
        result = is_valid_position(create_piece(PieceType.I, AxialCoord(0, 0)), empty_grid, small_field)
        assert not result
        assert result.reason is CollisionReason.OUT_OF_BOUNDS

    def test_overlap(self, small_field):
        grid = GameGrid.from_filled(small_field, [AxialCoord(2, 2)])
        result = is_valid_position(create_piece(PieceType.I, AxialCoord(2, 1)), grid, small_field)
        assert result.reason is CollisionReason.OVERLAP

    def test_first_failing_cell_decides(self, small_field):
        # The origin overlaps before the top cell leaves the field
        grid = GameGrid.from_filled(small_field, [AxialCoord(0, 0)])
        result = is_valid_position(create_piece(PieceType.I, AxialCoord(0, 0)), grid, small_field)
        assert result.reason is CollisionReason.OVERLAP


class TestSideMoves:
    @pytest.mark.parametrize("kind", list(PieceType))
    def test_left_and_right_keep_visual_rows(self, kind):
        grid = GameGrid.empty(DEFAULT_FIELD)
        for q in (4, 5):
            piece = create_piece(kind, DEFAULT_FIELD.from_offset(q, 10))
            left = move_left(piece, grid, DEFAULT_FIELD)
            right = move_right(piece, grid, DEFAULT_FIELD)
            assert left is not None and right is not None
            assert _rows(left, DEFAULT_FIELD) == _rows(piece, DEFAULT_FIELD)
            assert _rows(right, DEFAULT_FIELD) == _rows(piece, DEFAULT_FIELD)
            assert _columns(left, DEFAULT_FIELD) == [c - 1 for c in _columns(piece, DEFAULT_FIELD)]
            assert _columns(right, DEFAULT_FIELD) == [c + 1 for c in _columns(piece, DEFAULT_FIELD)]

    def test_parity_adjustment(self, small_field, empty_grid):
        piece = create_piece(PieceType.I, AxialCoord(2, 1))
        assert move_left(piece, empty_grid, small_field).position == AxialCoord(1, 2)
        assert move_right(piece, empty_grid, small_field).position == AxialCoord(3, 1)
        odd = create_piece(PieceType.I, AxialCoord(3, 1))
        assert move_right(odd, empty_grid, small_field).position == AxialCoord(4, 0)
        assert move_left(odd, empty_grid, small_field).position == AxialCoord(2, 1)

    def test_wall_rejects_move(self, small_field, empty_grid):
        piece = create_piece(PieceType.I, AxialCoord(0, 1))
        assert move_left(piece, empty_grid, small_field) is None

    def test_blocked_move_returns_none(self, small_field):
        grid = GameGrid.from_filled(small_field, [AxialCoord(3, 1)])
        piece = create_piece(PieceType.I, AxialCoord(2, 1))
        assert move_right(piece, grid, small_field) is None

    def test_diagonal_moves(self, small_field, empty_grid):
        piece = create_piece(PieceType.I, AxialCoord(2, 0))
        assert move_down_left(piece, empty_grid, small_field).position == AxialCoord(1, 1)
        assert move_down_right(piece, empty_grid, small_field).position == AxialCoord(3, 0)


class TestDrops:
    def test_move_down(self, small_field, empty_grid):
        piece = create_piece(PieceType.I, AxialCoord(2, 1))
        assert move_down(piece, empty_grid, small_field).position == AxialCoord(2, 2)

    def test_hard_drop_to_floor(self, small_field, empty_grid):
        dropped = hard_drop(create_piece(PieceType.I, AxialCoord(2, 1)), empty_grid, small_field)
        assert dropped.position == AxialCoord(2, 2)
        assert _rows(dropped, small_field) == [2, 3, 4, 5]
        assert move_down(dropped, empty_grid, small_field) is None

    def test_hard_drop_onto_stack(self, small_field):
        grid = GameGrid.from_filled(small_field, [AxialCoord(2, 4)])
        dropped = hard_drop(create_piece(PieceType.I, AxialCoord(2, 0)), grid, small_field)
        assert dropped.position == AxialCoord(2, 1)

    def test_hard_drop_keeps_rotation_and_special(self, small_field, empty_grid):
        piece = create_piece(PieceType.L, AxialCoord(2, 2), rotation=2)
        dropped = hard_drop(piece, empty_grid, small_field)
        assert dropped.rotation == 2
        assert dropped.type is PieceType.L


class TestWallKick:
    def test_rotates_in_place_when_free(self, small_field, empty_grid):
        piece = create_piece(PieceType.I, AxialCoord(2, 2))
        rotated = rotate_with_wall_kick(piece, empty_grid, small_field)
        assert rotated.position == AxialCoord(2, 2)
        assert rotated.rotation == 1

    def test_kicks_off_left_wall(self, small_field, empty_grid):
        # In place leaves the field; TOP still does; TOP_RIGHT fits
        piece = create_piece(PieceType.I, AxialCoord(0, 1))
        rotated = rotate_with_wall_kick(piece, empty_grid, small_field)
        assert rotated.position == AxialCoord(1, 0)
        assert rotated.rotation == 1

    def test_fully_blocked_rotation_rejected(self, small_field):
        piece = create_piece(PieceType.I, AxialCoord(0, 1))
        occupied = set(piece.cells())
        grid = GameGrid.from_filled(small_field, [c for c in small_field if c not in occupied])
        assert rotate_with_wall_kick(piece, grid, small_field) is None


class TestLockDelay:
    def test_resting_piece_starts_locking(self, small_field, empty_grid):
        resting = hard_drop(create_piece(PieceType.I, AxialCoord(2, 1)), empty_grid, small_field)
        lock = LockDelay().update(resting, empty_grid, small_field, now=100)
        assert lock.state is LockState.LOCKING
        assert lock.started_at == 100
        assert not lock.expired(599)
        assert lock.expired(600)

    def test_timer_restarts_while_resting(self, small_field, empty_grid):
        resting = hard_drop(create_piece(PieceType.I, AxialCoord(2, 1)), empty_grid, small_field)
        lock = LockDelay().update(resting, empty_grid, small_field, now=100)
        lock = lock.update(resting, empty_grid, small_field, now=400)
        assert lock.started_at == 400
        assert not lock.expired(800)

    def test_falling_piece_is_free(self, small_field, empty_grid):
        resting = hard_drop(create_piece(PieceType.I, AxialCoord(2, 1)), empty_grid, small_field)
        lock = LockDelay().update(resting, empty_grid, small_field, now=100)
        falling = create_piece(PieceType.I, AxialCoord(2, 1))
        lock = lock.update(falling, empty_grid, small_field, now=200)
        assert lock.state is LockState.FREE
        assert not lock.expired(10_000)

    def test_cancel(self, small_field, empty_grid):
        resting = hard_drop(create_piece(PieceType.I, AxialCoord(2, 1)), empty_grid, small_field)
        lock = LockDelay(delay_ms=50).update(resting, empty_grid, small_field, now=0)
        assert lock.cancel().state is LockState.FREE
        assert lock.cancel().delay_ms == 50

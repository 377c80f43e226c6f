"""Tests for turning a lock outcome into timed frames."""

from hex_tetris_rl.game import (
    AxialCoord,
    GameGrid,
    LockOutcome,
    PieceType,
    create_field,
    create_piece,
    detect_lines_for_animation,
)
from hex_tetris_rl.game.special import explode_bomb_piece
from hex_tetris_rl.visualization.playback import (
    BLINK_DURATION,
    CLEAR_DELAY,
    GRAVITY_FRAME,
    STAGE_DELAY,
    lock_frames,
)

LINE_R2 = [AxialCoord(q, 2) for q in range(5)]


def _outcome(grid, field, **kwargs):
    piece = create_piece(PieceType.I, AxialCoord(2, 2))
    return LockOutcome(piece=piece, grid_after_lock=grid, lock_points=10, grid_before_clear=grid, **kwargs)


class TestLockFrames:
    def test_plain_lock_has_no_frames(self):
        field = create_field(5, 6)
        assert lock_frames(_outcome(GameGrid.empty(field), field)) == []

    def test_two_stage_cascade(self):
        field = create_field(5, 6)
        grid = GameGrid.from_filled(field, LINE_R2 + [AxialCoord(0, 1), AxialCoord(1, 5)])
        stages = detect_lines_for_animation(grid, field)
        frames = lock_frames(_outcome(grid, field, stages=stages))

        # blink, clear, 4 gravity frames, pause; then blink, clear, pause
        assert [hold for _, hold in frames] == (
            [BLINK_DURATION, CLEAR_DELAY] + [GRAVITY_FRAME] * 4 + [STAGE_DELAY]
            + [BLINK_DURATION, CLEAR_DELAY, STAGE_DELAY]
        )
        blink = frames[0][0]
        assert all(blink[c].clearing == 1 for c in LINE_R2)
        assert frames[-1][0].filled_coords() == []
        # The second blink starts from the first stage's settled grid
        assert frames[7][0][AxialCoord(0, 5)].clearing == 1

    def test_bomb_piece_frames_come_first(self):
        field = create_field(5, 6)
        piece_cells = [AxialCoord(2, 3), AxialCoord(2, 4)]
        grid = GameGrid.from_filled(field, piece_cells + [AxialCoord(3, 2)])
        bomb = explode_bomb_piece(grid, piece_cells, field)
        outcome = _outcome(grid, field, bomb=bomb, bomb_gravity_frames=())
        frames = lock_frames(outcome)
        assert [hold for _, hold in frames] == [BLINK_DURATION, CLEAR_DELAY]
        assert frames[1][0] == bomb.grid

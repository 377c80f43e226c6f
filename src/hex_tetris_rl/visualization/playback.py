from __future__ import annotations

from typing import List, Tuple

from hex_tetris_rl.game import GameGrid, LockOutcome
from hex_tetris_rl.game.lines import create_blink_grid, create_bomb_blink_grid


# Milliseconds each kind of frame stays on screen
BLINK_DURATION = 200
CLEAR_DELAY = 150
GRAVITY_FRAME = 100
STAGE_DELAY = 100


Frame = Tuple[GameGrid, int]


def lock_frames(outcome: LockOutcome) -> List[Frame]:
    """Flatten a lock into (grid, hold_ms) frames for playback.

    Order: bomb piece blink, explosion and fall, then for each cascade stage
    the line blink, removal, bomb blink and removal, gravity frames and a
    short pause. A lock that cleared nothing yields no frames.
    """
    frames: List[Frame] = []
    if outcome.bomb is not None:
        affected = list(outcome.piece.cells()) + list(outcome.bomb.destroyed)
        frames.append((create_bomb_blink_grid(outcome.grid_after_lock, affected), BLINK_DURATION))
        frames.append((outcome.bomb.grid, CLEAR_DELAY))
        frames.extend((frame, GRAVITY_FRAME) for frame in outcome.bomb_gravity_frames)

    base = outcome.grid_before_clear if outcome.grid_before_clear is not None else outcome.grid_after_lock
    for stage in outcome.stages:
        frames.append((create_blink_grid(base, stage.lines), BLINK_DURATION))
        frames.append((stage.grid_after_line_clear, CLEAR_DELAY))
        if stage.bomb_explosion_cells:
            frames.append((create_bomb_blink_grid(stage.grid_after_line_clear, stage.bomb_explosion_cells), BLINK_DURATION))
            frames.append((stage.grid_after_clear, CLEAR_DELAY))
        frames.extend((frame, GRAVITY_FRAME) for frame in stage.gravity_frames)
        frames.append((stage.grid_after_gravity, STAGE_DELAY))
        base = stage.grid_after_gravity
    return frames

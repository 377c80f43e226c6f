from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field as dataclass_field
from enum import Enum, IntEnum
from typing import Deque, List, Optional, Tuple

import numpy as np

from .collision import is_valid_position
from .field import Field, create_field
from .grid import GameGrid, filled_cell
from .highscore import HighScoreStore
from .lines import LineClearStage, detect_lines_for_animation, get_gravity_frames
from .movement import (
    LockDelay,
    hard_drop,
    move_down,
    move_down_left,
    move_down_right,
    move_left,
    move_right,
    rotate_with_wall_kick,
)
from .pieces import Piece, PieceType, spawn_piece
from .rules import ScoringRules
from .special import (
    DEFAULT_SPAWN_RATES,
    BombPieceResult,
    SpecialCellType,
    SpecialSpawnRates,
    explode_bomb_piece,
    maybe_spawn_special_cell,
)

logger = logging.getLogger(__name__)


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    NONE = 5


class GameStatus(str, Enum):
    PLAYING = "playing"
    GAME_OVER = "gameOver"


@dataclass
class GameConfig:
    columns: int = 11
    rows: int = 20
    random_seed: Optional[int] = None
    lock_delay_ms: float = 500
    # Recently seen piece types kept out of the next spawn
    history_size: int = 3
    special_cells: bool = True


@dataclass
class LockOutcome:
    """Everything a lock produced, in playback order, for the caller to animate."""

    piece: Piece
    grid_after_lock: GameGrid
    lock_points: int
    bomb: Optional[BombPieceResult] = None
    bomb_gravity_frames: Tuple[GameGrid, ...] = ()
    # Grid the cascade starts from (after any bomb piece and special promotion)
    grid_before_clear: Optional[GameGrid] = None
    stages: List[LineClearStage] = dataclass_field(default_factory=list)
    stage_points: List[int] = dataclass_field(default_factory=list)
    lines_cleared: int = 0
    game_over: bool = False

    @property
    def points(self) -> int:
        return self.lock_points + sum(self.stage_points)


@dataclass
class StepResult:
    moved: bool
    lock: Optional[LockOutcome] = None


class HexTetrisGame:
    """Single-player game state driven by actions and a caller-supplied clock.

    Engine calls are synchronous: a lock resolves the whole cascade at once and
    returns it as a `LockOutcome`; timing of the playback is up to the caller.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        rates: SpecialSpawnRates = DEFAULT_SPAWN_RATES,
        high_scores: Optional[HighScoreStore] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rates = rates
        self.high_scores = high_scores
        self.field: Field = create_field(self.config.columns, self.config.rows)
        self.rng = random.Random(self.config.random_seed)
        self.grid = GameGrid.empty(self.field)
        self.current_piece: Optional[Piece] = None
        self.next_piece: Optional[Piece] = None
        self.history: Deque[PieceType] = deque(maxlen=self.config.history_size)
        self.lock = LockDelay(delay_ms=self.config.lock_delay_ms)
        self.score = 0
        self.level = 1
        self.lines_cleared_total = 0
        self.speed = self.rules.drop_speed(1)
        self.status = GameStatus.PLAYING
        self.now = 0.0
        self.last_drop = 0.0
        self.reset()

    # ----- lifecycle -----

    def reset(self, seed: Optional[int] = None, now: float = 0.0) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self.grid = GameGrid.empty(self.field)
        self.score = 0
        self.level = 1
        self.lines_cleared_total = 0
        self.speed = self.rules.drop_speed(1)
        self.history.clear()
        self.lock = LockDelay(delay_ms=self.config.lock_delay_ms)
        self.now = now
        self.last_drop = now
        self.status = GameStatus.PLAYING
        self.current_piece = None
        self.next_piece = self._random_piece()
        self._spawn_next()
        logger.info("Game started (seed=%s)", seed if seed is not None else self.config.random_seed)

    @property
    def game_over(self) -> bool:
        return self.status is GameStatus.GAME_OVER

    def _random_piece(self) -> Piece:
        rates = self.rates if self.config.special_cells else None
        return spawn_piece(self.field.spawn_position, self.rng, tuple(self.history), self.level, rates)

    def _spawn_next(self) -> bool:
        candidate = self.next_piece if self.next_piece is not None else self._random_piece()
        if not is_valid_position(candidate, self.grid, self.field).valid:
            self.current_piece = None
            self._end_game()
            return False
        self.current_piece = candidate
        self.history.appendleft(candidate.type)
        self.next_piece = self._random_piece()
        return True

    def _end_game(self) -> None:
        self.status = GameStatus.GAME_OVER
        logger.info("Game over: score=%d lines=%d level=%d", self.score, self.lines_cleared_total, self.level)
        if self.high_scores is not None:
            self.high_scores.record(self.score)

    # ----- player input -----

    def step(self, action: Action, now: Optional[float] = None) -> StepResult:
        if now is not None:
            self.now = now
        if self.game_over or self.current_piece is None:
            return StepResult(moved=False)

        piece = self.current_piece
        moved: Optional[Piece] = None
        if action == Action.LEFT:
            moved = (move_down_left if self.lock.is_locking else move_left)(piece, self.grid, self.field)
        elif action == Action.RIGHT:
            moved = (move_down_right if self.lock.is_locking else move_right)(piece, self.grid, self.field)
        elif action == Action.ROTATE:
            moved = rotate_with_wall_kick(piece, self.grid, self.field)
        elif action == Action.SOFT_DROP:
            moved = move_down(piece, self.grid, self.field)
        elif action == Action.HARD_DROP:
            self.current_piece = hard_drop(piece, self.grid, self.field)
            return StepResult(moved=True, lock=self.lock_current_piece())
        elif action == Action.NONE:
            pass

        if moved is None:
            return StepResult(moved=False)
        self.current_piece = moved
        self.lock = self.lock.update(moved, self.grid, self.field, self.now)
        return StepResult(moved=True)

    def tick(self, now: float) -> Optional[LockOutcome]:
        """Advance the clock: expire the lock delay or apply a gravity drop."""
        self.now = now
        if self.game_over or self.current_piece is None:
            return None

        if self.lock.is_locking:
            if not self.lock.expired(now):
                return None
            # The player may have moved the piece off its support
            fallen = move_down(self.current_piece, self.grid, self.field)
            if fallen is not None:
                self.current_piece = fallen
                self.lock = self.lock.cancel()
                return None
            outcome = self.lock_current_piece()
            self.last_drop = now
            return outcome

        if now - self.last_drop >= self.speed:
            self.last_drop = now
            fallen = move_down(self.current_piece, self.grid, self.field)
            if fallen is not None:
                self.current_piece = fallen
                self.lock = self.lock.cancel()
            else:
                self.lock = self.lock.update(self.current_piece, self.grid, self.field, now)
        return None

    # ----- locking -----

    def _promote_special(self, grid: GameGrid) -> GameGrid:
        if not self.config.special_cells:
            return grid
        return maybe_spawn_special_cell(grid, self.field, self.level, self.rng, self.rates)

    def lock_current_piece(self) -> LockOutcome:
        """Write the current piece into the grid and resolve everything it triggers."""
        if self.current_piece is None:
            raise RuntimeError("No piece to lock")
        piece = self.current_piece
        cells = piece.cells()
        self.lock = self.lock.cancel()

        grid = self.grid.place_cells(cells, filled_cell(piece.color, int(piece.type), piece.special))
        outcome = LockOutcome(piece=piece, grid_after_lock=grid, lock_points=self.rules.lock_score(self.level))
        self.score += outcome.lock_points

        if piece.special is SpecialCellType.BOMB:
            outcome.bomb = explode_bomb_piece(grid, cells, self.field)
            outcome.bomb_gravity_frames = tuple(get_gravity_frames(outcome.bomb.grid, self.field))
            grid = outcome.bomb_gravity_frames[-1] if outcome.bomb_gravity_frames else outcome.bomb.grid
            logger.debug("Bomb piece destroyed %d cells", len(outcome.bomb.destroyed))

        grid = self._promote_special(grid)
        outcome.grid_before_clear = grid
        outcome.stages = detect_lines_for_animation(grid, self.field, after_settle=self._promote_special)

        # Stages score at the level the piece locked at
        for index, stage in enumerate(outcome.stages, start=1):
            points = self.rules.cascade_score(len(stage.lines), self.level, index, stage.has_multiplier)
            outcome.stage_points.append(points)
            outcome.lines_cleared += len(stage.lines)
            grid = stage.grid_after_gravity
        if outcome.stages:
            logger.debug(
                "Cleared %d lines over %d stages for %d points",
                outcome.lines_cleared,
                len(outcome.stages),
                sum(outcome.stage_points),
            )

        self.grid = grid
        self.score += sum(outcome.stage_points)
        self.lines_cleared_total += outcome.lines_cleared
        self.level = self.rules.level_for_lines(self.lines_cleared_total)
        self.speed = self.rules.drop_speed(self.level)
        self.current_piece = None

        if self.high_scores is not None and self.score > self.high_scores.high_score:
            self.high_scores.record(self.score)

        outcome.game_over = not self._spawn_next()
        return outcome

    # ----- views -----

    def ghost_piece(self) -> Optional[Piece]:
        if self.current_piece is None:
            return None
        return hard_drop(self.current_piece, self.grid, self.field)

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.grid.to_array(self.field)
        if self.current_piece is not None and not self.game_over:
            for coord in self.current_piece.cells():
                if coord in self.field:
                    col, row = self.field.to_offset(coord)
                    # Use negative to indicate falling piece overlay
                    state[row, col] = -int(self.current_piece.type)
        return state

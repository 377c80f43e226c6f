"""Game module for Hex Tetris RL.

Exports the core engine and supporting classes:
- AxialCoord / CubeCoord: hex coordinates and rotation math
- Field: fixed set of playable cells (11 columns x 20 rows by default)
- GameGrid / CellState: immutable grid snapshots
- Piece / PieceType: the ten tetrahexes with rotation and spawning
- Line clears, gravity and cascades (detect_lines_for_animation)
- Special cells: bombs, multipliers and frozen cells
- ScoringRules: points, levels and drop speed
- HexTetrisGame: orchestrating game state with lock delay
"""

from .collision import CollisionReason, CollisionResult, is_valid_position
from .core import Action, GameConfig, GameStatus, HexTetrisGame, LockOutcome, StepResult
from .errors import HexTetrisError, InvalidCoordinateKeyError
from .field import DEFAULT_FIELD, SPAWN_POSITION, Field, create_field
from .grid import EMPTY_CELL, CellState, GameGrid, SpecialCellType, filled_cell
from .hexmath import (
    AXIAL_DIRECTIONS,
    AxialCoord,
    CubeCoord,
    axial_to_cube,
    axial_to_key,
    cube_to_axial,
    hex_neighbors,
    key_to_axial,
    rotate_cw,
)
from .highscore import HighScoreStore
from .lines import (
    Line,
    LineClearStage,
    LineDirection,
    apply_gravity_step,
    clear_lines,
    detect_lines,
    detect_lines_for_animation,
    get_gravity_frames,
)
from .movement import (
    LOCK_DELAY_MS,
    LockDelay,
    LockState,
    hard_drop,
    move_down,
    move_down_left,
    move_down_right,
    move_left,
    move_right,
    rotate_with_wall_kick,
)
from .pieces import PIECE_METADATA, Piece, PieceMetadata, PieceType, create_piece, get_piece_cells, spawn_piece
from .rules import ScoringRules
from .special import SpecialSpawnRates, maybe_spawn_special_cell

__all__ = [
    "AXIAL_DIRECTIONS",
    "Action",
    "AxialCoord",
    "CellState",
    "CollisionReason",
    "CollisionResult",
    "CubeCoord",
    "DEFAULT_FIELD",
    "EMPTY_CELL",
    "Field",
    "GameConfig",
    "GameGrid",
    "GameStatus",
    "HexTetrisError",
    "HexTetrisGame",
    "HighScoreStore",
    "InvalidCoordinateKeyError",
    "LOCK_DELAY_MS",
    "Line",
    "LineClearStage",
    "LineDirection",
    "LockDelay",
    "LockOutcome",
    "LockState",
    "PIECE_METADATA",
    "Piece",
    "PieceMetadata",
    "PieceType",
    "SPAWN_POSITION",
    "ScoringRules",
    "SpecialCellType",
    "SpecialSpawnRates",
    "StepResult",
    "apply_gravity_step",
    "axial_to_cube",
    "axial_to_key",
    "clear_lines",
    "create_field",
    "create_piece",
    "cube_to_axial",
    "detect_lines",
    "detect_lines_for_animation",
    "filled_cell",
    "get_gravity_frames",
    "get_piece_cells",
    "hard_drop",
    "hex_neighbors",
    "is_valid_position",
    "key_to_axial",
    "maybe_spawn_special_cell",
    "move_down",
    "move_down_left",
    "move_down_right",
    "move_left",
    "move_right",
    "rotate_cw",
    "rotate_with_wall_kick",
    "spawn_piece",
]

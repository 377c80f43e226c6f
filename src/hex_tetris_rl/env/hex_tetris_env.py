from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from hex_tetris_rl.game import Action, GameConfig, HexTetrisGame, PieceType
from hex_tetris_rl.game.hexmath import axial_to_pixel


def _hex_rgb(color: str) -> Tuple[int, int, int]:
    color = color.lstrip("#")
    return int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16)


class HexTetrisEnv(gym.Env):
    """Falling-piece hex Tetris with a six-action discrete interface.

    Each env step applies one action and then advances the game clock by
    `ms_per_step`, so gravity and the lock delay run on a synthetic clock.
    """

    # Interactive play draws through hex_tetris_rl.visualization instead
    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 ms_per_step: float = 250.0,
                 max_episode_steps: int = 10000,
                 step_penalty: float = 0.0,
                 terminal_penalty: float = -10.0) -> None:
        super().__init__()
        self.game = HexTetrisGame(config)
        assert render_mode is None or render_mode in self.metadata["render_modes"]
        self.render_mode = render_mode
        self.ms_per_step = float(ms_per_step)
        self.max_episode_steps = int(max_episode_steps)

        # Reward shaping parameters
        self.step_penalty = float(step_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.reward_weights: Dict[str, float] = {
            # Positive components
            "score": 0.01,           # reward per engine point
            "lines": 10.0,           # reward per line cleared
            # Negative components (penalize increases)
            "holes": 0.1,
            "height": 0.02,
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        rows = self.game.field.rows
        cols = self.game.field.columns
        n_types = len(PieceType)

        self.observation_space = spaces.Dict(
            {
                # Locked cells by piece kind, falling piece as negative kind
                "grid": spaces.Box(low=-n_types, high=n_types, shape=(rows, cols), dtype=np.int8),
                "special": spaces.Box(low=0, high=3, shape=(rows, cols), dtype=np.int8),
                # 0 when there is no piece
                "piece": spaces.Discrete(n_types + 1),
                "next_piece": spaces.Discrete(n_types + 1),
                "level": spaces.Discrete(self.game.rules.max_level + 1),
            }
        )
        self.action_space = spaces.Discrete(len(Action))

        self._last_obs: Optional[Dict[str, Any]] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        game = self.game
        piece = game.current_piece
        next_piece = game.next_piece
        return {
            "grid": game.get_state().astype(np.int8),
            "special": game.grid.special_array(game.field),
            "piece": int(piece.type) if piece is not None else 0,
            "next_piece": int(next_piece.type) if next_piece is not None else 0,
            "level": int(game.level),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "lines_cleared_total": self.game.lines_cleared_total,
            "level": self.game.level,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.reset(seed)
        self._steps = 0
        obs = self._get_obs()
        self._last_obs = obs
        return obs, self._get_info()

    def step(self, action: int):
        game = self.game
        field = game.field
        holes_before = game.grid.count_holes(field)
        height_before = game.grid.max_height(field)
        score_before = game.score
        lines_before = game.lines_cleared_total

        self._steps += 1
        now = self._steps * self.ms_per_step
        result = game.step(Action(int(action)), now=now)
        locked = result.lock
        if not game.game_over:
            tick_lock = game.tick(now)
            locked = locked or tick_lock

        lines = game.lines_cleared_total - lines_before
        reward_components: Dict[str, float] = {
            "score": self.reward_weights["score"] * float(game.score - score_before),
            "lines": self.reward_weights["lines"] * float(lines),
            "step": self.step_penalty,
        }
        if locked is not None:
            reward_components["holes"] = -self.reward_weights["holes"] * float(
                max(0, game.grid.count_holes(field) - holes_before))
            reward_components["height"] = -self.reward_weights["height"] * float(
                max(0, game.grid.max_height(field) - height_before))

        terminated = bool(game.game_over)
        truncated = self._steps >= self.max_episode_steps
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))
        obs = self._get_obs()
        info = self._get_info()
        info["reward_components"] = reward_components
        info["locked"] = locked is not None
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        game = self.game
        size = 6
        width = int(size * 1.5 * game.field.columns + size * 2)
        height = int(size * np.sqrt(3) * (game.field.rows + 1) + size * 2)
        img = np.zeros((height, width, 3), dtype=np.uint8)
        img[:, :] = (20, 20, 26)
        piece_cells = set(game.current_piece.cells()) if game.current_piece is not None else set()
        for coord in game.field.coords():
            state = game.grid.cell(coord)
            if coord in piece_cells:
                color = _hex_rgb(game.current_piece.color)
            elif state.filled:
                color = _hex_rgb(state.color or "#c8c8c8")
            else:
                color = (40, 40, 48)
            x, y = axial_to_pixel(coord, size)
            cx, cy = int(x + size), int(y + size)
            # Square stamp per hex center keeps the rgb view cheap
            img[max(cy - 3, 0):cy + 3, max(cx - 3, 0):cx + 3, :] = color
        return img

    def close(self) -> None:
        pass

"""Gymnasium environments for Hex Tetris RL."""

from __future__ import annotations

from gymnasium.envs.registration import register

from .hex_tetris_env import HexTetrisEnv

# Register default hex field (11 columns x 20 rows)
register(
    id="HexTetris-v0",
    entry_point="hex_tetris_rl.env.hex_tetris_env:HexTetrisEnv",
)

__all__ = ["HexTetrisEnv"]

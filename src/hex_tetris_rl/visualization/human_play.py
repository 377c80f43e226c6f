from __future__ import annotations

import argparse
import logging
from typing import Dict, Optional

import pygame

from hex_tetris_rl.game import Action, GameConfig, HexTetrisGame, HighScoreStore, LockOutcome
from .playback import lock_frames
from .renderer import HexRenderer


KEY_TO_ACTION: Dict[int, Action] = {
    pygame.K_LEFT: Action.LEFT,
    pygame.K_RIGHT: Action.RIGHT,
    pygame.K_UP: Action.ROTATE,
    pygame.K_DOWN: Action.SOFT_DROP,
    pygame.K_SPACE: Action.HARD_DROP,
}


def _panel_lines(game: HexTetrisGame, high_scores: HighScoreStore) -> list[str]:
    return [
        f"Score {game.score}",
        f"Best  {max(high_scores.high_score, game.score)}",
        f"Level {game.level}",
        f"Lines {game.lines_cleared_total}",
    ]


def _play_outcome(screen: pygame.Surface, renderer: HexRenderer, game: HexTetrisGame,
                  outcome: LockOutcome, font: pygame.font.Font, high_scores: HighScoreStore) -> bool:
    """Play a lock's frames to completion; input is ignored meanwhile. False if the window closed."""
    for grid, hold_ms in lock_frames(outcome):
        renderer.draw(screen, grid, next_piece=game.next_piece,
                      lines=_panel_lines(game, high_scores), font=font)
        pygame.time.wait(hold_ms)
        if pygame.event.peek(pygame.QUIT):
            return False
    # Drop keys pressed during the animation
    pygame.event.clear(pygame.KEYDOWN)
    return True


def run(seed: Optional[int] = None, highscore_path: Optional[str] = None) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        high_scores = HighScoreStore(highscore_path)
        game = HexTetrisGame(GameConfig(random_seed=seed), high_scores=high_scores)
        renderer = HexRenderer(game.field)
        game.reset(now=pygame.time.get_ticks())

        screen = pygame.display.set_mode(renderer.window_size())
        pygame.display.set_caption("Hex Tetris - Human Play")
        font = pygame.font.SysFont(None, 28)

        running = True
        while running:
            outcome: Optional[LockOutcome] = None
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_r and game.game_over:
                        game.reset(now=pygame.time.get_ticks())
                    else:
                        action = KEY_TO_ACTION.get(event.key)
                        if action is not None and outcome is None:
                            outcome = game.step(action, now=pygame.time.get_ticks()).lock

            if outcome is None:
                outcome = game.tick(pygame.time.get_ticks())
            if outcome is not None:
                if not _play_outcome(screen, renderer, game, outcome, font, high_scores):
                    running = False
                # Give the new piece a full drop interval after playback
                game.last_drop = pygame.time.get_ticks()

            lines = _panel_lines(game, high_scores)
            if game.game_over:
                lines += ["", "Game Over", "R to restart", "ESC to quit"]
            renderer.draw(screen, game.grid, piece=game.current_piece, ghost=game.ghost_piece(),
                          next_piece=game.next_piece, lines=lines, font=font)
            clock.tick(60)
    finally:
        pygame.quit()


def main() -> None:
    p = argparse.ArgumentParser(description="Play Hex Tetris with the keyboard")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--highscore", type=str, default=None, help="Path of the high score JSON file")
    p.add_argument("--log-level", type=str, default="INFO")
    args = p.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run(seed=args.seed, highscore_path=args.highscore)


if __name__ == "__main__":  # pragma: no cover
    main()

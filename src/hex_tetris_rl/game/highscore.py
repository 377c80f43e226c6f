from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

STORAGE_KEY = "hextris-highscores"
DEFAULT_PATH = Path.home() / ".hex_tetris_rl" / "highscore.json"


class HighScoreStore:
    """Best score persisted as JSON under a fixed key.

    Missing, unreadable or negative data loads as 0.
    """

    def __init__(self, path: Optional[Union[str, os.PathLike]] = None) -> None:
        self.path = Path(path) if path is not None else DEFAULT_PATH
        self.high_score = self._load()

    def _load(self) -> int:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return 0
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable high score file %s: %s", self.path, e)
            return 0
        entry = data.get(STORAGE_KEY) if isinstance(data, dict) else None
        value = entry.get("highScore") if isinstance(entry, dict) else None
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            return 0
        return value

    def record(self, score: int) -> bool:
        """Store `score` if it beats the current best; return whether it did."""
        if score <= self.high_score:
            return False
        self.high_score = int(score)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({STORAGE_KEY: {"highScore": self.high_score}}), encoding="utf-8")
        logger.info("New high score %d saved to %s", self.high_score, self.path)
        return True

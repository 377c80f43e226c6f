from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class ScoringRules:
    base_points_per_line: int = 100
    points_per_piece_lock: int = 10
    # Index = lines cleared at once (capped at 4)
    combo_multipliers: tuple[int, int, int, int] = (1, 3, 5, 8)
    # Index = cascade stage (1 = initial clear, capped at 5)
    cascade_multipliers: tuple[float, float, float, float, float] = (1.0, 1.5, 2.0, 2.5, 3.0)
    multiplier_cell_bonus: int = 2
    lines_per_level: int = 10
    max_level: int = 20
    base_drop_speed: int = 1000
    speed_decrease_per_level: int = 50
    min_drop_speed: int = 100

    def lock_score(self, level: int) -> int:
        return self.points_per_piece_lock * level

    def combo_multiplier(self, lines: int) -> int:
        return self.combo_multipliers[min(lines, len(self.combo_multipliers)) - 1]

    def cascade_multiplier(self, stage: int) -> float:
        stage = max(1, stage)
        return self.cascade_multipliers[min(stage, len(self.cascade_multipliers)) - 1]

    def line_score(self, lines: int, level: int) -> int:
        if lines <= 0:
            return 0
        return self.base_points_per_line * lines * self.combo_multiplier(lines) * level

    def cascade_score(self, lines: int, level: int, stage: int, has_multiplier: bool = False) -> int:
        """Score one stage of a cascade; stage 1 is the clear caused by the lock."""
        score = math.floor(self.line_score(lines, level) * self.cascade_multiplier(stage))
        if has_multiplier:
            score *= self.multiplier_cell_bonus
        return int(score)

    def level_for_lines(self, total_lines: int) -> int:
        return min(total_lines // self.lines_per_level + 1, self.max_level)

    def drop_speed(self, level: int) -> int:
        """Milliseconds between automatic drops."""
        return max(self.min_drop_speed, self.base_drop_speed - (level - 1) * self.speed_decrease_per_level)


DEFAULT_RULES = ScoringRules()


def calculate_lock_score(level: int) -> int:
    return DEFAULT_RULES.lock_score(level)


def calculate_score(lines: int, level: int) -> int:
    return DEFAULT_RULES.line_score(lines, level)


def calculate_cascade_score(lines: int, level: int, stage: int, has_multiplier: bool = False) -> int:
    return DEFAULT_RULES.cascade_score(lines, level, stage, has_multiplier)


def calculate_level(total_lines: int) -> int:
    return DEFAULT_RULES.level_for_lines(total_lines)


def calculate_speed(level: int) -> int:
    return DEFAULT_RULES.drop_speed(level)

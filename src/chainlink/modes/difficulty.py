from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MIN_LEVEL = 1
MAX_LEVEL = 5

DIFFICULTY_LABELS: dict[int, str] = {
    1: "easy",
    2: "easy",
    3: "normal",
    4: "normal",
    5: "hard",
}


def difficulty_label(level: int) -> str:
    return DIFFICULTY_LABELS.get(int(level), "normal")


@dataclass
class DifficultyRamp:
    level: int = MIN_LEVEL
    correct_count: int = 0
    total_count: int = 0

    def accuracy(self) -> float | None:
        if self.total_count <= 0:
            return None
        return float(self.correct_count) / float(self.total_count)


class DifficultyAdapter:
    """
    Feedback loop over rolling accuracy.

    After every recorded attempt: accuracy >= raise_at bumps the level, accuracy < lower_below
    drops it, otherwise nothing changes. One step per evaluation, clamped to [1, 5].
    """

    def __init__(self, ramp: DifficultyRamp | None = None, *, raise_at: float = 0.8, lower_below: float = 0.5) -> None:
        self.ramp = ramp if ramp is not None else DifficultyRamp()
        self.raise_at = float(raise_at)
        self.lower_below = float(lower_below)

    @property
    def level(self) -> int:
        return int(self.ramp.level)

    def label(self) -> str:
        return difficulty_label(self.ramp.level)

    def record(self, *, correct: bool) -> int:
        if correct:
            self.ramp.correct_count += 1
        self.ramp.total_count += 1
        return self.evaluate()

    def evaluate(self) -> int:
        """Returns the level delta (-1, 0 or +1)."""

        accuracy = self.ramp.accuracy()
        if accuracy is None:
            return 0
        if accuracy >= self.raise_at and self.ramp.level < MAX_LEVEL:
            self.ramp.level += 1
            logger.debug("Difficulty increased to %s (accuracy %.2f)", self.label(), accuracy)
            return 1
        if accuracy < self.lower_below and self.ramp.level > MIN_LEVEL:
            self.ramp.level -= 1
            logger.debug("Difficulty decreased to %s (accuracy %.2f)", self.label(), accuracy)
            return -1
        return 0

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class WordPattern(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"

    @staticmethod
    def from_value(value: Any) -> WordPattern:
        raw = str(value or "").strip().lower()
        if raw == WordPattern.UNCOMMON.value:
            return WordPattern.UNCOMMON
        return WordPattern.COMMON


@dataclass(frozen=True)
class PuzzleOutcome:
    """
    Result of a single puzzle attempt, produced by the puzzle/word-validation subsystem.

    `base_score=None` means the caller did not supply one; each mode applies its own default.
    """

    base_score: float | None = None
    solve_time_seconds: float = 0.0
    hints_used: int = 0
    word_length: int = 0
    word_pattern: WordPattern = WordPattern.COMMON
    topic: str = ""
    failed: bool = False
    word: str | None = None

    def base_or(self, default: float) -> float:
        if self.base_score is None:
            return float(default)
        return float(self.base_score)

    @staticmethod
    def from_payload(payload: dict[str, Any] | None) -> PuzzleOutcome:
        if not isinstance(payload, dict):
            return PuzzleOutcome()

        def _num(key: str, default: float = 0.0) -> float:
            val = payload.get(key)
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                return float(default)
            return float(val)

        base = payload.get("base_score")
        word = payload.get("word")
        return PuzzleOutcome(
            base_score=float(base) if isinstance(base, (int, float)) and not isinstance(base, bool) else None,
            solve_time_seconds=max(0.0, _num("solve_time_seconds")),
            hints_used=max(0, int(_num("hints_used"))),
            word_length=max(0, int(_num("word_length"))),
            word_pattern=WordPattern.from_value(payload.get("word_pattern")),
            topic=str(payload.get("topic") or ""),
            failed=bool(payload.get("failed")),
            word=str(word) if isinstance(word, str) and word else None,
        )

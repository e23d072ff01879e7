from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, cast

from chainlink.modes.base import BaseModeController, GameState, config_int
from chainlink.modes.scoring import blitz_multiplier, blitz_points
from chainlink.outcome import PuzzleOutcome
from chainlink.results import FinalResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlitzConfig:
    duration_seconds: int = 60
    hints: int = 1


@dataclass
class BlitzState(GameState):
    duration_seconds: int = 60
    time_remaining: int = 60
    multiplier: float = 2.0
    puzzles_completed: int = 0
    best_streak: int = 0
    hints_used: int = 0
    hints_remaining: int = 1


class BlitzMode(BaseModeController):
    """Fixed-length rapid fire. Points scale with a time-remaining multiplier."""

    id = "blitz"

    def __init__(self) -> None:
        self._config = BlitzConfig()
        super().__init__()

    @property
    def state(self) -> BlitzState:
        return cast(BlitzState, self._state)

    def _parse_config(self, raw: dict[str, Any]) -> None:
        self._config = BlitzConfig(
            duration_seconds=config_int(raw, "duration_seconds", 60),
            hints=config_int(raw, "hints", 1, minimum=0),
        )

    def _new_state(self) -> BlitzState:
        duration = int(self._config.duration_seconds)
        return BlitzState(
            mode_id=self.id,
            duration_seconds=duration,
            time_remaining=duration,
            multiplier=blitz_multiplier(duration),
            hints_remaining=int(self._config.hints),
        )

    def _solved(self, outcome: PuzzleOutcome) -> None:
        st = self.state
        st.puzzles_completed += 1
        st.streak += 1
        st.best_streak = max(st.best_streak, st.streak)
        points = blitz_points(st, outcome)
        st.score += points
        logger.debug("Blitz solve: +%d points (streak %d, x%.1f)", points, st.streak, st.multiplier)

    def _failed(self, outcome: PuzzleOutcome | None) -> None:
        self.state.streak = 0

    def _tick(self, now_ms: float) -> None:
        st = self.state
        elapsed = int(math.floor(self._elapsed_seconds(st.started_at_ms, now_ms=now_ms)))
        # Never count back up if a host delivers an out-of-order timestamp.
        remaining = min(st.time_remaining, max(0, st.duration_seconds - elapsed))
        st.time_remaining = remaining
        st.multiplier = blitz_multiplier(remaining)
        if remaining <= 0:
            self.end()

    def _grant_hint(self) -> bool:
        st = self.state
        if st.hints_remaining <= 0:
            return False
        st.hints_remaining -= 1
        st.hints_used += 1
        return True

    def _build_result(self, *, aborted: bool, now_ms: float) -> FinalResult:
        st = self.state
        time_played = st.duration_seconds - st.time_remaining
        average = int(round(st.score / st.puzzles_completed)) if st.puzzles_completed > 0 else 0
        return FinalResult.create(
            mode_id=self.id,
            final_score=st.score,
            puzzles_completed=st.puzzles_completed,
            time_played_seconds=time_played,
            hints_used=st.hints_used,
            best_streak=st.best_streak,
            aborted=aborted,
            details={
                "time_played": time_played,
                "average_score": average,
                "max_streak": st.best_streak,
            },
        )

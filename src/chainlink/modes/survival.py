from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, cast

from chainlink.modes.base import BaseModeController, GameState, config_int
from chainlink.modes.scoring import (
    SURVIVAL_FIRST_REQUIRED_SCORE,
    SURVIVAL_START_TIME_LIMIT,
    survival_level_time_limit,
    survival_points,
    survival_required_score,
)
from chainlink.outcome import PuzzleOutcome
from chainlink.results import FinalResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SurvivalConfig:
    lives: int = 3


@dataclass
class SurvivalState(GameState):
    level: int = 1
    lives: int = 3
    max_lives: int = 3
    best_streak: int = 0
    puzzles_completed: int = 0
    lives_lost: int = 0
    level_started_at_ms: float | None = None
    level_time_limit: float = SURVIVAL_START_TIME_LIMIT
    required_score: int = SURVIVAL_FIRST_REQUIRED_SCORE


class SurvivalMode(BaseModeController):
    """
    Endless run with a per-level timer and a fixed pool of lives.

    A failed puzzle or an expired level timer costs one life; the last life ends the run.
    Reaching the level's required score advances the level and shortens its timer.
    """

    id = "survival"

    def __init__(self) -> None:
        self._config = SurvivalConfig()
        super().__init__()

    @property
    def state(self) -> SurvivalState:
        return cast(SurvivalState, self._state)

    def _parse_config(self, raw: dict[str, Any]) -> None:
        self._config = SurvivalConfig(lives=config_int(raw, "lives", 3))

    def _new_state(self) -> SurvivalState:
        lives = int(self._config.lives)
        return SurvivalState(mode_id=self.id, lives=lives, max_lives=lives)

    def _on_start(self, now_ms: float) -> None:
        self.state.level_started_at_ms = now_ms

    def _solved(self, outcome: PuzzleOutcome) -> None:
        st = self.state
        now = self._now()
        st.puzzles_completed += 1
        st.streak += 1
        st.best_streak = max(st.best_streak, st.streak)
        points = survival_points(
            st,
            outcome,
            level_elapsed_seconds=self._elapsed_seconds(st.level_started_at_ms, now_ms=now),
            total_elapsed_seconds=self._elapsed_seconds(st.started_at_ms, now_ms=now),
        )
        st.score += points
        logger.debug("Survival solve: +%d points (level %d, lives %d)", points, st.level, st.lives)
        if st.score >= st.required_score:
            self._complete_level(now)

    def _complete_level(self, now_ms: float) -> None:
        st = self.state
        st.level += 1
        st.level_time_limit = survival_level_time_limit(st.level)
        st.required_score = survival_required_score(st.level)
        st.level_started_at_ms = now_ms
        logger.info("Survival advanced to level %d (%.0fs limit)", st.level, st.level_time_limit)

    def _failed(self, outcome: PuzzleOutcome | None) -> None:
        self._lose_life(self._now(), reason="failed puzzle")

    def _tick(self, now_ms: float) -> None:
        st = self.state
        if self._elapsed_seconds(st.level_started_at_ms, now_ms=now_ms) >= st.level_time_limit:
            self._lose_life(now_ms, reason="level timeout")

    def _lose_life(self, now_ms: float, *, reason: str) -> None:
        st = self.state
        st.lives -= 1
        st.lives_lost += 1
        st.streak = 0
        logger.debug("Survival lost a life (%s); %d remaining", reason, st.lives)
        if st.lives <= 0:
            self.end()
            return
        st.level_started_at_ms = now_ms

    def _grant_hint(self) -> bool:
        return False

    def time_remaining(self, *, now_ms: float | None = None) -> float:
        st = self.state
        return max(0.0, st.level_time_limit - self._elapsed_seconds(st.level_started_at_ms, now_ms=now_ms))

    def survival_stats(self, *, now_ms: float | None = None) -> dict[str, Any]:
        st = self.state
        return {
            "level": st.level,
            "score": st.score,
            "lives": st.lives,
            "max_lives": st.max_lives,
            "streak": st.streak,
            "best_streak": st.best_streak,
            "survival_time": int(round(self._elapsed_seconds(st.started_at_ms, now_ms=now_ms))),
            "level_progress": min(st.score / st.required_score, 1.0) if st.required_score > 0 else 1.0,
            "time_remaining": self.time_remaining(now_ms=now_ms),
            "difficulty": st.level,
        }

    def _build_result(self, *, aborted: bool, now_ms: float) -> FinalResult:
        st = self.state
        survival_time = int(round(self._elapsed_seconds(st.started_at_ms, now_ms=now_ms)))
        return FinalResult.create(
            mode_id=self.id,
            final_score=st.score,
            puzzles_completed=st.puzzles_completed,
            time_played_seconds=survival_time,
            best_streak=st.best_streak,
            lives_lost=st.lives_lost,
            aborted=aborted,
            details={
                "final_level": st.level,
                "survival_time": survival_time,
                "best_streak": st.best_streak,
                "lives_lost": st.lives_lost,
                "final_difficulty": st.level,
            },
        )

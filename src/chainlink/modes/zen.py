from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, cast

from chainlink.modes.base import BaseModeController, GameState
from chainlink.modes.difficulty import DifficultyAdapter, DifficultyRamp, difficulty_label
from chainlink.modes.scoring import zen_points
from chainlink.outcome import PuzzleOutcome
from chainlink.results import FinalResult

logger = logging.getLogger(__name__)


@dataclass
class ZenState(GameState):
    puzzles_completed: int = 0
    hints_used: int = 0
    learning_progress: int = 0
    best_streak: int = 0
    current_difficulty: str = "easy"
    adaptive: DifficultyRamp = field(default_factory=DifficultyRamp)


class ZenMode(BaseModeController):
    """Untimed session. Difficulty follows rolling accuracy; ends only when the host says so."""

    id = "zen"

    def __init__(self) -> None:
        super().__init__()
        self._adapter = DifficultyAdapter(self.state.adaptive)

    @property
    def state(self) -> ZenState:
        return cast(ZenState, self._state)

    def _new_state(self) -> ZenState:
        return ZenState(mode_id=self.id)

    def _on_start(self, now_ms: float) -> None:
        self._adapter = DifficultyAdapter(self.state.adaptive)

    def _solved(self, outcome: PuzzleOutcome) -> None:
        st = self.state
        st.puzzles_completed += 1
        st.streak += 1
        st.best_streak = max(st.best_streak, st.streak)
        points = zen_points(st, outcome)
        st.score += points
        st.learning_progress += points
        self._adapt(correct=True)
        logger.debug("Zen solve: +%d points (learning progress %d)", points, st.learning_progress)

    def _failed(self, outcome: PuzzleOutcome | None) -> None:
        self.state.streak = 0
        self._adapt(correct=False)

    def _adapt(self, *, correct: bool) -> None:
        if self._adapter.record(correct=correct) != 0:
            self.state.current_difficulty = difficulty_label(self._adapter.level)

    def _grant_hint(self) -> bool:
        self.state.hints_used += 1
        return True

    def learning_insights(self) -> dict[str, Any]:
        st = self.state
        accuracy = st.adaptive.accuracy()
        average = int(round(st.score / st.puzzles_completed)) if st.puzzles_completed > 0 else 0
        return {
            "accuracy": int(round(accuracy * 100)) if accuracy is not None else 0,
            "average_score": average,
            "learning_progress": st.learning_progress,
            "current_difficulty": st.current_difficulty,
            "difficulty_level": st.adaptive.level,
            "hints_used": st.hints_used,
            "puzzles_completed": st.puzzles_completed,
        }

    def _build_result(self, *, aborted: bool, now_ms: float) -> FinalResult:
        st = self.state
        insights = self.learning_insights()
        return FinalResult.create(
            mode_id=self.id,
            final_score=st.score,
            puzzles_completed=st.puzzles_completed,
            time_played_seconds=int(round(self._elapsed_seconds(st.started_at_ms, now_ms=now_ms))),
            hints_used=st.hints_used,
            best_streak=st.best_streak,
            aborted=aborted,
            details={
                "learning_progress": st.learning_progress,
                "accuracy": insights["accuracy"],
                "average_score": insights["average_score"],
                "final_difficulty": st.current_difficulty,
                "final_level": st.adaptive.level,
            },
        )

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, cast

from chainlink.modes.base import BaseModeController, GameState, ModeConfigError, config_str
from chainlink.modes.scoring import practice_points
from chainlink.outcome import PuzzleOutcome
from chainlink.results import FinalResult

logger = logging.getLogger(__name__)

DEFAULT_TOPICS: tuple[str, ...] = ("general", "animals", "food", "colors", "nature")

MAX_LEARNING_LEVEL = 5
# A topic levels up once its running average clears this bar over enough attempts.
LEVEL_UP_AVERAGE = 80.0
LEVEL_UP_MIN_PUZZLES = 5
FAILED_TALLY_PENALTY = 0.5

_TOPIC_SUGGESTIONS: dict[str, str] = {
    "animals": "Think about animal characteristics",
    "food": "Consider cooking methods or ingredients",
}


@dataclass(frozen=True)
class PracticeConfig:
    topic: str = "general"
    topics: tuple[str, ...] = DEFAULT_TOPICS


@dataclass
class TopicProgress:
    puzzles_completed: int = 0
    average_score: float = 0.0
    hints_used: int = 0
    mistakes: int = 0
    learning_level: int = 1

    def record(self, *, score: float, hints_used: int, failed: bool) -> bool:
        """Fold one attempt into the running mean. Returns True when the learning level rose."""

        self.puzzles_completed += 1
        n = self.puzzles_completed
        self.average_score = (self.average_score * (n - 1) + float(score)) / n
        self.hints_used += max(0, int(hints_used))
        if failed:
            self.mistakes += 1
        if self.average_score > LEVEL_UP_AVERAGE and n >= LEVEL_UP_MIN_PUZZLES and self.learning_level < MAX_LEARNING_LEVEL:
            self.learning_level += 1
            return True
        return False


@dataclass
class PracticeFeedback:
    last_puzzle: dict[str, Any] | None = None
    suggestions: list[str] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)


@dataclass
class PracticeState(GameState):
    current_topic: str = "general"
    topics: list[str] = field(default_factory=lambda: list(DEFAULT_TOPICS))
    current_topic_index: int = 0
    topic_progress: dict[str, TopicProgress] = field(default_factory=dict)
    topic_scores: dict[str, float] = field(default_factory=dict)
    puzzles_completed: int = 0
    hints_used: int = 0
    mistakes: int = 0
    learning_progress: int = 0
    best_streak: int = 0
    feedback: PracticeFeedback = field(default_factory=PracticeFeedback)


def generate_feedback(outcome: PuzzleOutcome | None, *, success: bool, current_topic: str) -> PracticeFeedback:
    topic = (outcome.topic if outcome is not None else "") or current_topic
    hints = int(outcome.hints_used) if outcome is not None else 0
    fb = PracticeFeedback(
        last_puzzle={
            "topic": topic,
            "word": outcome.word if outcome is not None else None,
            "score": (outcome.base_score or 0) if outcome is not None else 0,
            "hints_used": hints,
            "is_success": bool(success),
        }
    )
    if success:
        if hints == 0:
            fb.strengths.append("Great job solving without hints!")
        if outcome is not None and outcome.word_length >= 6:
            fb.strengths.append("Excellent work with longer words!")
    else:
        fb.suggestions.append("Try breaking the word into smaller parts")
        fb.suggestions.append("Use hints to learn new patterns")
        fb.weaknesses.append("Word pattern recognition")

    extra = _TOPIC_SUGGESTIONS.get(topic)
    if extra:
        fb.suggestions.append(extra)
    return fb


def _parse_topics(raw: dict[str, Any]) -> tuple[str, ...]:
    val = raw.get("topics")
    if val is None:
        return DEFAULT_TOPICS
    if not isinstance(val, (list, tuple)) or not val:
        raise ModeConfigError(f"topics must be a non-empty list of strings, got {val!r}")
    out: list[str] = []
    for item in val:
        if not isinstance(item, str) or not item.strip():
            raise ModeConfigError(f"topics must contain non-empty strings, got {item!r}")
        if item.strip() not in out:
            out.append(item.strip())
    return tuple(out)


class PracticeMode(BaseModeController):
    """Topic-focused learning session: no lives, no timer, hints encouraged."""

    id = "practice"

    def __init__(self) -> None:
        self._config = PracticeConfig()
        super().__init__()

    @property
    def state(self) -> PracticeState:
        return cast(PracticeState, self._state)

    def _parse_config(self, raw: dict[str, Any]) -> None:
        topics = _parse_topics(raw)
        topic = config_str(raw, "topic", topics[0])
        if topic not in topics:
            # A starting topic outside the rotation joins it at the end.
            topics = topics + (topic,)
        self._config = PracticeConfig(topic=topic, topics=topics)

    def _new_state(self) -> PracticeState:
        topics = list(self._config.topics)
        topic = self._config.topic
        return PracticeState(
            mode_id=self.id,
            current_topic=topic,
            topics=topics,
            current_topic_index=topics.index(topic) if topic in topics else 0,
            topic_progress={topic: TopicProgress()},
        )

    def _progress(self) -> TopicProgress:
        st = self.state
        return st.topic_progress.setdefault(st.current_topic, TopicProgress())

    def _solved(self, outcome: PuzzleOutcome) -> None:
        st = self.state
        progress = self._progress()
        st.puzzles_completed += 1
        st.streak += 1
        st.best_streak = max(st.best_streak, st.streak)
        st.topic_scores[st.current_topic] = st.topic_scores.get(st.current_topic, 0.0) + 1.0

        points = practice_points(current_topic=st.current_topic, learning_level=progress.learning_level, outcome=outcome)
        st.score += points
        st.learning_progress += points
        if progress.record(score=points, hints_used=outcome.hints_used, failed=False):
            logger.info("Practice topic %s reached learning level %d", st.current_topic, progress.learning_level)
        st.feedback = generate_feedback(outcome, success=True, current_topic=st.current_topic)

    def _failed(self, outcome: PuzzleOutcome | None) -> None:
        st = self.state
        st.streak = 0
        st.mistakes += 1
        st.topic_scores[st.current_topic] = st.topic_scores.get(st.current_topic, 0.0) - FAILED_TALLY_PENALTY
        hints = outcome.hints_used if outcome is not None else 0
        self._progress().record(score=0.0, hints_used=hints, failed=True)
        st.feedback = generate_feedback(outcome, success=False, current_topic=st.current_topic)

    def _grant_hint(self) -> bool:
        self.state.hints_used += 1
        return True

    def switch_to_next_topic(self) -> str | None:
        if not self._guard("switch_to_next_topic"):
            return None
        st = self.state
        st.current_topic_index = (st.current_topic_index + 1) % len(st.topics)
        st.current_topic = st.topics[st.current_topic_index]
        st.topic_progress.setdefault(st.current_topic, TopicProgress())
        logger.debug("Practice switched to topic %s", st.current_topic)
        return st.current_topic

    def learning_insights(self) -> dict[str, Any]:
        st = self.state
        return {
            "overall_progress": st.learning_progress,
            "puzzles_completed": st.puzzles_completed,
            "hints_used": st.hints_used,
            "mistakes": st.mistakes,
            "current_topic": st.current_topic,
            "topic_progress": {name: asdict(p) for name, p in st.topic_progress.items()},
            "strengths": list(st.feedback.strengths),
            "weaknesses": list(st.feedback.weaknesses),
            "suggestions": list(st.feedback.suggestions),
        }

    def topic_recommendations(self) -> list[dict[str, str]]:
        out: list[dict[str, str]] = []
        for topic, progress in self.state.topic_progress.items():
            if progress.learning_level < 3:
                out.append({"topic": topic, "reason": "Needs more practice", "priority": "high"})
            elif progress.learning_level >= 4:
                out.append({"topic": topic, "reason": "Ready for advanced challenges", "priority": "low"})
        return out

    def _build_result(self, *, aborted: bool, now_ms: float) -> FinalResult:
        st = self.state
        session_time = int(round(self._elapsed_seconds(st.started_at_ms, now_ms=now_ms)))
        return FinalResult.create(
            mode_id=self.id,
            final_score=st.score,
            puzzles_completed=st.puzzles_completed,
            time_played_seconds=session_time,
            hints_used=st.hints_used,
            best_streak=st.best_streak,
            aborted=aborted,
            details={
                "session_time": session_time,
                "learning_progress": st.learning_progress,
                "mistakes": st.mistakes,
                "topic_progress": {name: asdict(p) for name, p in st.topic_progress.items()},
                "topic_scores": dict(st.topic_scores),
                "recommendations": self.topic_recommendations(),
            },
        )

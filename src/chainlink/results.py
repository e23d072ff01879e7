from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping, Protocol


@dataclass(frozen=True)
class FinalResult:
    """Terminal summary of one game session. Created once by `end()`/`abort()`."""

    mode_id: str
    final_score: int
    puzzles_completed: int = 0
    time_played_seconds: int = 0
    hints_used: int = 0
    best_streak: int = 0
    lives_lost: int = 0
    aborted: bool = False
    details: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}), hash=False)

    @staticmethod
    def create(*, details: Mapping[str, Any] | None = None, **kwargs: Any) -> FinalResult:
        frozen = MappingProxyType(copy.deepcopy(dict(details or {})))
        return FinalResult(details=frozen, **kwargs)

    def to_payload(self) -> dict[str, Any]:
        return {
            "mode_id": str(self.mode_id),
            "final_score": int(self.final_score),
            "puzzles_completed": int(self.puzzles_completed),
            "time_played_seconds": int(self.time_played_seconds),
            "hints_used": int(self.hints_used),
            "best_streak": int(self.best_streak),
            "lives_lost": int(self.lives_lost),
            "aborted": bool(self.aborted),
            "details": copy.deepcopy(dict(self.details)),
        }


class ResultsSink(Protocol):
    def save_results(self, result: FinalResult) -> None: ...

    def update_mode_stats(self, mode_id: str, result: FinalResult) -> None: ...


@dataclass(frozen=True)
class ModeStats:
    games_played: int = 0
    total_score: int = 0
    best_score: int = 0
    total_time: int = 0
    average_score: int = 0
    best_streak: int = 0
    hints_used: int = 0
    lives_lost: int = 0

    def with_result(self, result: FinalResult) -> ModeStats:
        games = self.games_played + 1
        total = self.total_score + int(result.final_score)
        return replace(
            self,
            games_played=games,
            total_score=total,
            best_score=max(self.best_score, int(result.final_score)),
            total_time=self.total_time + int(result.time_played_seconds),
            average_score=int(round(total / games)),
            best_streak=max(self.best_streak, int(result.best_streak)),
            hints_used=self.hints_used + int(result.hints_used),
            lives_lost=self.lives_lost + int(result.lives_lost),
        )

    def to_payload(self) -> dict[str, int]:
        return {k: int(v) for k, v in asdict(self).items()}

    @staticmethod
    def from_payload(payload: dict[str, Any] | None) -> ModeStats:
        if not isinstance(payload, dict):
            return ModeStats()
        kwargs: dict[str, int] = {}
        for name in ModeStats.__dataclass_fields__:
            val = payload.get(name)
            if isinstance(val, (int, float)) and not isinstance(val, bool):
                kwargs[name] = max(0, int(val))
        return ModeStats(**kwargs)


# Rolling history size kept by the reference sinks.
MAX_STORED_RESULTS = 100


class MemoryResultsSink:
    """In-process sink. Handy for tests and for hosts that persist on their own schedule."""

    def __init__(self, *, max_results: int = MAX_STORED_RESULTS) -> None:
        self._max_results = max(1, int(max_results))
        self.results: list[FinalResult] = []
        self.stats: dict[str, ModeStats] = {}

    def save_results(self, result: FinalResult) -> None:
        self.results.append(result)
        if len(self.results) > self._max_results:
            self.results = self.results[-self._max_results :]

    def update_mode_stats(self, mode_id: str, result: FinalResult) -> None:
        cur = self.stats.get(str(mode_id), ModeStats())
        self.stats[str(mode_id)] = cur.with_result(result)

    def mode_stats(self, mode_id: str) -> ModeStats:
        return self.stats.get(str(mode_id), ModeStats())

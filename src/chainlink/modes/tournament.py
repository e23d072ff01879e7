from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, cast

from chainlink.games.tournament_runtime import TournamentEvent, TournamentRuntime, is_power_of_two
from chainlink.modes.base import BaseModeController, GameState, ModeConfigError, config_int, config_str
from chainlink.modes.scoring import TOURNAMENT_ROUND_TIME_LIMIT, tournament_points
from chainlink.outcome import PuzzleOutcome
from chainlink.results import FinalResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TournamentConfig:
    participants: int = 8
    total_rounds: int = 4
    player_name: str = "You"
    tournament_id: str | None = None


@dataclass
class TournamentState(GameState):
    puzzles_completed: int = 0
    best_streak: int = 0
    time_remaining: float = TOURNAMENT_ROUND_TIME_LIMIT
    tournament: TournamentRuntime = field(default_factory=TournamentRuntime)


class TournamentMode(BaseModeController):
    """
    Bracket play against simulated opponents.

    Rounds end only when the host calls `complete_round()`; the round timer feeds the
    time bonus but never fails a round by itself. The first loss eliminates the player.
    """

    id = "tournament"

    def __init__(self) -> None:
        self._config = TournamentConfig()
        super().__init__()

    @property
    def state(self) -> TournamentState:
        return cast(TournamentState, self._state)

    @property
    def runtime(self) -> TournamentRuntime:
        return self.state.tournament

    def _parse_config(self, raw: dict[str, Any]) -> None:
        size = config_int(raw, "participants", 8, minimum=2)
        if not is_power_of_two(size):
            raise ModeConfigError(f"participants must be a power of two, got {size}")
        tid = raw.get("tournament_id")
        if tid is not None and (not isinstance(tid, str) or not tid.strip()):
            raise ModeConfigError(f"tournament_id must be a non-empty string, got {tid!r}")
        self._config = TournamentConfig(
            participants=size,
            total_rounds=config_int(raw, "total_rounds", 4),
            player_name=config_str(raw, "player_name", "You"),
            tournament_id=tid.strip() if isinstance(tid, str) else None,
        )

    def _new_state(self) -> TournamentState:
        rt = TournamentRuntime(player_name=self._config.player_name, total_rounds=self._config.total_rounds)
        return TournamentState(mode_id=self.id, tournament=rt)

    def _on_start(self, now_ms: float) -> None:
        self.runtime.generate(
            size=self._config.participants,
            rng=self._ctx.rng,
            now_ms=now_ms,
            tournament_id=self._config.tournament_id,
        )
        self._sync(now_ms)

    def _sync(self, now_ms: float) -> None:
        st = self.state
        st.score = int(self.runtime.score)
        st.time_remaining = self.runtime.time_remaining(now_ms=now_ms)

    def _solved(self, outcome: PuzzleOutcome) -> None:
        st = self.state
        rt = self.runtime
        now = self._now()
        points = tournament_points(
            outcome=outcome,
            round_no=rt.round,
            wins=rt.wins,
            round_elapsed_seconds=rt.round_elapsed_seconds(now_ms=now),
        )
        rt.add_points(points)
        st.puzzles_completed += 1
        st.streak += 1
        st.best_streak = max(st.best_streak, st.streak)
        self._sync(now)
        logger.debug("Tournament solve: +%d points (round %d)", points, rt.round)

    def _failed(self, outcome: PuzzleOutcome | None) -> None:
        self.state.streak = 0
        self.runtime.apply_penalty()
        self._sync(self._now())

    def _tick(self, now_ms: float) -> None:
        self._sync(now_ms)

    def _grant_hint(self) -> bool:
        return False

    def complete_round(self) -> list[TournamentEvent]:
        if not self._guard("complete_round"):
            return []
        now = self._now()
        events = self.runtime.complete_round(now_ms=now, rng=self._ctx.rng)
        self._sync(now)
        if self.runtime.is_complete():
            self.end()
        return events

    def tournament_status(self, *, now_ms: float | None = None) -> dict[str, Any]:
        rt = self.runtime
        now = self._now() if now_ms is None else float(now_ms)
        match = rt.current_match()
        return {
            "round": rt.round,
            "total_rounds": rt.total_rounds,
            "score": rt.score,
            "opponent": rt.opponent(),
            "opponent_score": rt.opponent_score,
            "time_remaining": rt.time_remaining(now_ms=now),
            "wins": rt.wins,
            "losses": rt.losses,
            "current_match": match.to_payload() if match is not None else None,
            "is_champion": rt.is_champion(),
        }

    def _build_result(self, *, aborted: bool, now_ms: float) -> FinalResult:
        st = self.state
        rt = self.runtime
        payload = rt.export_state_payload()
        return FinalResult.create(
            mode_id=self.id,
            final_score=rt.total_score,
            puzzles_completed=st.puzzles_completed,
            time_played_seconds=int(round(self._elapsed_seconds(st.started_at_ms, now_ms=now_ms))),
            best_streak=st.best_streak,
            aborted=aborted,
            details={
                "tournament_id": rt.tournament_id,
                "final_round": rt.round,
                "wins": rt.wins,
                "losses": rt.losses,
                "is_champion": rt.is_champion(),
                "round_results": payload["round_results"],
                "bracket": payload["bracket"],
            },
        )

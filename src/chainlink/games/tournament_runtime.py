from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Any

from chainlink.modes.scoring import (
    TOURNAMENT_ROUND_TIME_LIMIT,
    opponent_score,
    round_half_up,
    tournament_penalized,
)

logger = logging.getLogger(__name__)

AI_NAMES: tuple[str, ...] = (
    "WordMaster",
    "PuzzlePro",
    "ChainChamp",
    "LinkLegend",
    "BrainBox",
    "WordWizard",
    "PuzzleKing",
    "ChainHero",
)

# Label used for rounds played past the end of the bracket.
EXHIBITION_OPPONENT = "AI Opponent"

STATUSES = ("init", "round_active", "round_resolved", "complete")


@dataclass
class Match:
    player1: str | None = None
    player2: str | None = None
    winner: str | None = None
    score1: int = 0
    score2: int = 0

    def is_resolved(self) -> bool:
        return self.winner is not None

    def to_payload(self) -> dict[str, Any]:
        return {
            "player1": self.player1,
            "player2": self.player2,
            "winner": self.winner,
            "score1": int(self.score1),
            "score2": int(self.score2),
        }


@dataclass(frozen=True)
class RoundResult:
    round: int
    player_score: int
    opponent_score: int
    opponent: str
    is_winner: bool
    time_elapsed: float


@dataclass(frozen=True)
class TournamentEvent:
    kind: str
    round: int = 0
    player_score: int = 0
    opponent_score: int = 0
    opponent: str | None = None


def is_power_of_two(n: int) -> bool:
    return n >= 2 and (n & (n - 1)) == 0


def bracket_depth(participant_count: int) -> int:
    return int(math.ceil(math.log2(max(2, int(participant_count)))))


def generate_participants(*, player_name: str, size: int, rng: random.Random) -> list[str]:
    """Player stays in slot 0; AI opponents are shuffled behind them."""

    ai = list(AI_NAMES[: max(0, size - 1)])
    while len(ai) < size - 1:
        ai.append(f"ChainBot{len(ai) + 1}")
    rng.shuffle(ai)
    return [str(player_name)] + ai


def build_bracket(participants: list[str]) -> list[list[Match]]:
    """
    Round 1 pairs adjacent slots. Later rounds start empty and are filled from the winners
    of the previous round as it resolves.
    """

    rounds: list[list[Match]] = []
    first = [Match(player1=participants[i], player2=participants[i + 1]) for i in range(0, len(participants), 2)]
    rounds.append(first)
    size = len(first)
    for _ in range(1, bracket_depth(len(participants))):
        size //= 2
        rounds.append([Match() for _ in range(size)])
    return rounds


def simulate_match(match: Match, *, round_no: int, rng: random.Random) -> None:
    scale = 1 + int(round_no) * 0.1
    match.score1 = round_half_up(rng.uniform(80.0, 160.0) * scale)
    match.score2 = round_half_up(rng.uniform(80.0, 160.0) * scale)
    if match.score1 == match.score2:
        match.winner = match.player1 if rng.random() < 0.5 else match.player2
    else:
        match.winner = match.player1 if match.score1 > match.score2 else match.player2


@dataclass
class TournamentRuntime:
    """
    Single-elimination bracket against simulated opponents.

    status: init -> round_active -> round_resolved -> (round_active | complete)
    """

    player_name: str = "You"
    total_rounds: int = 4
    round_time_limit: float = TOURNAMENT_ROUND_TIME_LIMIT
    status: str = "init"
    tournament_id: str | None = None
    participants: list[str] = field(default_factory=list)
    bracket: list[list[Match]] = field(default_factory=list)
    round: int = 1
    score: int = 0
    opponent_score: int = 0
    total_score: int = 0
    wins: int = 0
    losses: int = 0
    round_started_at_ms: float = 0.0
    round_results: list[RoundResult] = field(default_factory=list)

    def generate(
        self,
        *,
        size: int,
        rng: random.Random,
        now_ms: float,
        tournament_id: str | None = None,
    ) -> list[TournamentEvent]:
        if not is_power_of_two(int(size)):
            raise ValueError(f"Tournament size must be a power of two, got {size!r}")
        self.tournament_id = tournament_id or f"tournament_{int(now_ms)}"
        self.participants = generate_participants(player_name=self.player_name, size=int(size), rng=rng)
        self.bracket = build_bracket(self.participants)
        self.round = 1
        self.score = 0
        self.opponent_score = 0
        self.total_score = 0
        self.wins = 0
        self.losses = 0
        self.round_results = []
        self.round_started_at_ms = float(now_ms)
        self.status = "round_active"
        logger.info("Tournament %s generated with %d participants", self.tournament_id, len(self.participants))
        return [
            TournamentEvent(kind="tournament_generated"),
            TournamentEvent(kind="round_started", round=self.round, opponent=self.opponent()),
        ]

    def current_match(self) -> Match | None:
        if 1 <= self.round <= len(self.bracket):
            return self.bracket[self.round - 1][0]
        return None

    def opponent(self) -> str | None:
        match = self.current_match()
        if match is None:
            return EXHIBITION_OPPONENT if self.status != "init" else None
        return match.player2

    def is_complete(self) -> bool:
        return self.status == "complete"

    def is_champion(self) -> bool:
        return self.is_complete() and self.losses == 0

    def round_elapsed_seconds(self, *, now_ms: float) -> float:
        return max(0.0, (float(now_ms) - float(self.round_started_at_ms)) / 1000.0)

    def time_remaining(self, *, now_ms: float) -> float:
        return max(0.0, float(self.round_time_limit) - self.round_elapsed_seconds(now_ms=now_ms))

    def add_points(self, points: int) -> None:
        if self.status != "round_active":
            return
        self.score += int(points)

    def apply_penalty(self) -> None:
        if self.status != "round_active":
            return
        self.score = tournament_penalized(self.score)

    def resolve_round(self, *, now_ms: float, rng: random.Random) -> RoundResult | None:
        if self.status != "round_active":
            return None
        opp = opponent_score(self.score, round_no=self.round, random_factor=rng.uniform(0.8, 1.2))
        self.opponent_score = opp
        is_winner = self.score > opp
        if is_winner:
            self.wins += 1
        else:
            self.losses += 1
        opponent = self.opponent() or EXHIBITION_OPPONENT
        result = RoundResult(
            round=self.round,
            player_score=self.score,
            opponent_score=opp,
            opponent=opponent,
            is_winner=is_winner,
            time_elapsed=self.round_elapsed_seconds(now_ms=now_ms),
        )
        self.round_results.append(result)
        self.total_score += self.score
        self._record_bracket_round(result, rng=rng)
        self.status = "round_resolved"
        logger.info("Tournament round %d %s (%d vs %d)", self.round, "won" if is_winner else "lost", self.score, opp)
        return result

    def advance(self, *, now_ms: float, rng: random.Random) -> list[TournamentEvent]:
        if self.status != "round_resolved":
            return []
        if self.round >= self.total_rounds or self.losses > 0:
            self.status = "complete"
            # The player is out (or done); let the rest of the bracket play itself out.
            self._finish_bracket(rng=rng)
            return [TournamentEvent(kind="tournament_complete", round=self.round)]

        self.round += 1
        self.score = 0
        self.opponent_score = 0
        self.round_started_at_ms = float(now_ms)
        self.status = "round_active"
        return [TournamentEvent(kind="round_started", round=self.round, opponent=self.opponent())]

    def complete_round(self, *, now_ms: float, rng: random.Random) -> list[TournamentEvent]:
        result = self.resolve_round(now_ms=now_ms, rng=rng)
        if result is None:
            return []
        events = [
            TournamentEvent(
                kind="round_won" if result.is_winner else "round_lost",
                round=result.round,
                player_score=result.player_score,
                opponent_score=result.opponent_score,
                opponent=result.opponent,
            )
        ]
        events.extend(self.advance(now_ms=now_ms, rng=rng))
        return events

    def _record_bracket_round(self, result: RoundResult, *, rng: random.Random) -> None:
        if result.round > len(self.bracket):
            return
        matches = self.bracket[result.round - 1]
        mine = matches[0]
        mine.score1 = int(result.player_score)
        mine.score2 = int(result.opponent_score)
        mine.winner = mine.player1 if result.is_winner else mine.player2
        for match in matches[1:]:
            if not match.is_resolved():
                simulate_match(match, round_no=result.round, rng=rng)
        self._fill_next_round(result.round)

    def _simulate_round(self, round_no: int, *, rng: random.Random) -> None:
        for match in self.bracket[round_no - 1]:
            if not match.is_resolved() and match.player1 is not None and match.player2 is not None:
                simulate_match(match, round_no=round_no, rng=rng)

    def _fill_next_round(self, round_no: int) -> None:
        if round_no >= len(self.bracket):
            return
        winners = [m.winner for m in self.bracket[round_no - 1]]
        if any(w is None for w in winners):
            return
        for i, match in enumerate(self.bracket[round_no]):
            match.player1 = winners[2 * i]
            match.player2 = winners[2 * i + 1]

    def _finish_bracket(self, *, rng: random.Random) -> None:
        for idx in range(1, len(self.bracket) + 1):
            self._simulate_round(idx, rng=rng)
            self._fill_next_round(idx)

    def export_state_payload(self) -> dict[str, Any]:
        return {
            "tournament_id": self.tournament_id,
            "status": str(self.status),
            "round": int(self.round),
            "total_rounds": int(self.total_rounds),
            "score": int(self.score),
            "opponent_score": int(self.opponent_score),
            "wins": int(self.wins),
            "losses": int(self.losses),
            "participants": list(self.participants),
            "bracket": [[m.to_payload() for m in rnd] for rnd in self.bracket],
            "round_results": [
                {
                    "round": int(r.round),
                    "player_score": int(r.player_score),
                    "opponent_score": int(r.opponent_score),
                    "opponent": str(r.opponent),
                    "is_winner": bool(r.is_winner),
                    "time_elapsed": float(r.time_elapsed),
                }
                for r in self.round_results
            ],
        }

"""
Per-mode scoring formulas.

Everything here is a pure function of (state, outcome) plus explicit timing inputs, so the
numbers can be checked without a running clock. Controllers own *when* a formula applies.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from chainlink.outcome import PuzzleOutcome, WordPattern

if TYPE_CHECKING:
    from chainlink.modes.blitz import BlitzState
    from chainlink.modes.survival import SurvivalState
    from chainlink.modes.zen import ZenState


def round_half_up(value: float) -> int:
    return int(math.floor(float(value) + 0.5))


# ── Blitz ────────────────────────────────────────────────────

BLITZ_DEFAULT_BASE = 100


def blitz_multiplier(time_remaining: float) -> float:
    if time_remaining > 45:
        return 2.0
    if time_remaining > 30:
        return 1.8
    if time_remaining > 15:
        return 1.5
    return 1.2


def blitz_time_bonus(solve_time_seconds: float) -> int:
    if solve_time_seconds <= 5:
        return 50
    if solve_time_seconds <= 10:
        return 30
    if solve_time_seconds <= 15:
        return 20
    return 10


def blitz_streak_bonus(streak: int) -> int:
    if streak >= 10:
        return 100
    if streak >= 5:
        return 50
    if streak >= 3:
        return 25
    return 0


def blitz_points(state: BlitzState, outcome: PuzzleOutcome) -> int:
    """`state.streak` must already include this solve."""

    base = outcome.base_or(BLITZ_DEFAULT_BASE)
    raw = base + blitz_time_bonus(outcome.solve_time_seconds) + blitz_streak_bonus(state.streak)
    return round_half_up(raw * state.multiplier)


# ── Zen (and Practice learning bonus) ────────────────────────

ZEN_DEFAULT_BASE = 50


def learning_bonus(outcome: PuzzleOutcome) -> int:
    bonus = 0
    if outcome.word_pattern != WordPattern.COMMON:
        bonus += 25
    if outcome.word_length >= 6:
        bonus += 15
    if outcome.hints_used > 0:
        bonus += int(outcome.hints_used) * 10
    return bonus


def zen_progress_bonus(learning_progress: float) -> int:
    return int(math.floor(float(learning_progress) / 1000.0)) * 10


def zen_points(state: ZenState, outcome: PuzzleOutcome) -> int:
    base = outcome.base_or(ZEN_DEFAULT_BASE)
    return round_half_up(base + learning_bonus(outcome) + zen_progress_bonus(state.learning_progress))


# ── Survival ─────────────────────────────────────────────────

SURVIVAL_DEFAULT_BASE = 50
SURVIVAL_START_TIME_LIMIT = 30.0
SURVIVAL_MIN_TIME_LIMIT = 15.0
SURVIVAL_FIRST_REQUIRED_SCORE = 100


def survival_streak_bonus(streak: int) -> int:
    if streak <= 1:
        return 0
    return min(int(streak) * 5, 100)


def survival_time_bonus(level_time_limit: float, level_elapsed_seconds: float) -> int:
    return round_half_up(max(0.0, float(level_time_limit) - float(level_elapsed_seconds)) * 2)


def survival_difficulty_bonus(level: int) -> int:
    return int(level) * 10


def survival_bonus(total_elapsed_seconds: float) -> int:
    # 5 points per full 30 seconds survived.
    return int(math.floor(float(total_elapsed_seconds) / 30.0)) * 5


def survival_points(
    state: SurvivalState,
    outcome: PuzzleOutcome,
    *,
    level_elapsed_seconds: float,
    total_elapsed_seconds: float,
) -> int:
    """`state.streak` must already include this solve."""

    base = outcome.base_or(SURVIVAL_DEFAULT_BASE)
    return round_half_up(
        base
        + survival_streak_bonus(state.streak)
        + survival_time_bonus(state.level_time_limit, level_elapsed_seconds)
        + survival_difficulty_bonus(state.level)
        + survival_bonus(total_elapsed_seconds)
    )


def survival_required_score(level: int) -> int:
    if int(level) <= 1:
        return SURVIVAL_FIRST_REQUIRED_SCORE
    return 100 + int(level) * 50


def survival_level_time_limit(level: int) -> float:
    return max(SURVIVAL_MIN_TIME_LIMIT, SURVIVAL_START_TIME_LIMIT - int(level) * 2)


# ── Practice ─────────────────────────────────────────────────

PRACTICE_DEFAULT_BASE = 50


def practice_topic_bonus(current_topic: str, outcome: PuzzleOutcome) -> int:
    return 25 if outcome.topic == current_topic else 0


def practice_progress_bonus(learning_level: int) -> int:
    return min(int(learning_level) * 10, 50)


def practice_points(*, current_topic: str, learning_level: int, outcome: PuzzleOutcome) -> int:
    base = outcome.base_or(PRACTICE_DEFAULT_BASE)
    return round_half_up(
        base
        + practice_topic_bonus(current_topic, outcome)
        + learning_bonus(outcome)
        + practice_progress_bonus(learning_level)
    )


# ── Tournament ───────────────────────────────────────────────

TOURNAMENT_DEFAULT_BASE = 50
TOURNAMENT_ROUND_TIME_LIMIT = 60.0
TOURNAMENT_FAIL_PENALTY = 25


def tournament_time_bonus(round_elapsed_seconds: float, *, limit: float = TOURNAMENT_ROUND_TIME_LIMIT) -> int:
    return round_half_up(max(0.0, float(limit) - float(round_elapsed_seconds)) * 1.5)


def tournament_points(*, outcome: PuzzleOutcome, round_no: int, wins: int, round_elapsed_seconds: float) -> int:
    base = outcome.base_or(TOURNAMENT_DEFAULT_BASE)
    return round_half_up(base + int(round_no) * 20 + tournament_time_bonus(round_elapsed_seconds) + int(wins) * 15)


def tournament_penalized(score: int) -> int:
    return max(0, int(score) - TOURNAMENT_FAIL_PENALTY)


def opponent_score(player_score: int, *, round_no: int, random_factor: float) -> int:
    """`random_factor` is drawn from [0.8, 1.2] by the caller."""

    return round_half_up(float(player_score) * 0.8 * float(random_factor) * (1 + int(round_no) * 0.1))

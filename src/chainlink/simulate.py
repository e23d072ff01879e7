"""
Headless session runner: feeds a seeded stream of puzzle outcomes and ticks into a mode.

Used by `python -m chainlink` for smoke checks; it plays the part of the hosting game loop.
"""

from __future__ import annotations

import logging
import random

from chainlink.app_config import RunConfig
from chainlink.common.error_log import ErrorLog
from chainlink.modes.base import ModeContext
from chainlink.modes.loader import load_mode
from chainlink.modes.practice import DEFAULT_TOPICS, PracticeMode
from chainlink.modes.tournament import TournamentMode
from chainlink.outcome import PuzzleOutcome, WordPattern
from chainlink.results import FinalResult, MemoryResultsSink, ResultsSink
from chainlink.state import JsonResultsSink

logger = logging.getLogger(__name__)

TICK_MS = 100.0


class SimClock:
    def __init__(self, start_ms: float = 0.0) -> None:
        self.now_ms = float(start_ms)

    def __call__(self) -> float:
        return self.now_ms


def random_outcome(rng: random.Random, *, fail_rate: float, solve_seconds: float) -> PuzzleOutcome:
    length = rng.randint(3, 9)
    return PuzzleOutcome(
        base_score=float(rng.choice((50, 75, 100))),
        solve_time_seconds=max(0.5, rng.gauss(float(solve_seconds), 2.0)),
        hints_used=rng.choice((0, 0, 0, 1)),
        word_length=length,
        word_pattern=WordPattern.UNCOMMON if rng.random() < 0.3 else WordPattern.COMMON,
        topic=rng.choice(DEFAULT_TOPICS),
        failed=rng.random() < float(fail_rate),
    )


def run(cfg: RunConfig, *, results: ResultsSink | None = None) -> FinalResult | None:
    rng = random.Random(cfg.seed)
    clock = SimClock()
    sink = results if results is not None else (JsonResultsSink() if cfg.persist else MemoryResultsSink())
    ctx = ModeContext(results=sink, clock=clock, rng=random.Random(cfg.seed), error_log=ErrorLog())

    mode = load_mode(mode=cfg.mode)
    if not mode.initialize(cfg.mode_config, ctx=ctx):
        for item in ctx.error_log.items():
            logger.error("%s", item.summary_line())
        return None

    for i in range(max(0, int(cfg.puzzles))):
        if not mode.is_active():
            break
        outcome = random_outcome(rng, fail_rate=cfg.fail_rate, solve_seconds=cfg.solve_seconds)
        target = clock.now_ms + outcome.solve_time_seconds * 1000.0
        while clock.now_ms + TICK_MS <= target and mode.is_active():
            clock.now_ms += TICK_MS
            mode.on_tick(clock.now_ms)
        clock.now_ms = target
        if not mode.is_active():
            break

        if outcome.hints_used:
            mode.use_hint()
        if outcome.failed:
            mode.on_puzzle_failed(outcome)
        else:
            mode.on_puzzle_solved(outcome)

        n = i + 1
        if isinstance(mode, TournamentMode) and n % max(1, int(cfg.round_puzzles)) == 0:
            mode.complete_round()
        if isinstance(mode, PracticeMode) and n % max(1, int(cfg.topic_puzzles)) == 0:
            mode.switch_to_next_topic()

    return mode.end()

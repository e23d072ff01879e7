from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RunConfig:
    # Mode id or alias understood by `chainlink.modes.loader.load_mode`.
    mode: str = "blitz"
    # Seed for both the simulated puzzle stream and the tournament opponents.
    seed: int | None = None
    # Number of simulated puzzle attempts (the run can end earlier on a terminal condition).
    puzzles: int = 20
    # Probability that a simulated attempt fails.
    fail_rate: float = 0.2
    # Average simulated solve time in seconds.
    solve_seconds: float = 6.0
    # Tournament only: attempts per round before `complete_round()` is called.
    round_puzzles: int = 4
    # Practice only: attempts before rotating to the next topic.
    topic_puzzles: int = 5
    # Write results to the JSON state dir (CHAINLINK_STATE_DIR) instead of memory.
    persist: bool = False
    # Print the final result as JSON instead of a one-line summary.
    json_output: bool = False
    # Mode options passed to `initialize()`.
    mode_config: dict | None = None

"""
Shared lifecycle for every game mode.

A controller owns its `GameState` exclusively. Hosts feed it puzzle outcomes and ticks,
poll `get_state()` for rendering, and finally call `end()` (or `abort()`) exactly once.
Late calls after the session ended, or calls before `initialize()`, are logged no-ops:
UI timers routinely race with teardown.
"""

from __future__ import annotations

import copy
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from chainlink.common.error_log import ErrorLog
from chainlink.outcome import PuzzleOutcome
from chainlink.results import FinalResult, ResultsSink

logger = logging.getLogger(__name__)


class ModeConfigError(ValueError):
    """Raised while parsing a malformed mode config. `initialize()` turns it into `False`."""


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass(frozen=True)
class ModeContext:
    """
    Collaborators handed to a controller at `initialize()`.

    - results: where the terminal `FinalResult` goes (None: keep it local)
    - clock: monotonic milliseconds, used for solve-time based bonuses
    - rng: random source for simulated opponents; seed it for reproducible runs
    - error_log: bounded feed of misuse/sink problems
    """

    results: ResultsSink | None = None
    clock: Callable[[], float] = monotonic_ms
    rng: random.Random = field(default_factory=random.Random)
    error_log: ErrorLog = field(default_factory=ErrorLog)


@dataclass
class GameState:
    mode_id: str = ""
    score: int = 0
    streak: int = 0
    is_active: bool = False
    started_at_ms: float | None = None


class ModeController(Protocol):
    id: str

    def initialize(self, config: dict | None = None, *, ctx: ModeContext | None = None) -> bool: ...

    def on_puzzle_solved(self, outcome: PuzzleOutcome) -> None: ...

    def on_puzzle_failed(self, outcome: PuzzleOutcome | None = None) -> None: ...

    def on_tick(self, now_ms: float) -> None: ...

    def use_hint(self) -> bool: ...

    def get_state(self) -> GameState: ...

    def end(self) -> FinalResult | None: ...

    def abort(self) -> FinalResult | None: ...

    def is_active(self) -> bool: ...

    def now_ms(self) -> float: ...


def config_int(raw: dict[str, Any], key: str, default: int, *, minimum: int = 1) -> int:
    if key not in raw or raw[key] is None:
        return int(default)
    val = raw[key]
    if isinstance(val, bool) or not isinstance(val, (int, float)) or int(val) != val:
        raise ModeConfigError(f"{key} must be an integer, got {val!r}")
    if int(val) < minimum:
        raise ModeConfigError(f"{key} must be >= {minimum}, got {val!r}")
    return int(val)


def config_str(raw: dict[str, Any], key: str, default: str) -> str:
    if key not in raw or raw[key] is None:
        return str(default)
    val = raw[key]
    if not isinstance(val, str) or not val.strip():
        raise ModeConfigError(f"{key} must be a non-empty string, got {val!r}")
    return val.strip()


class BaseModeController:
    """
    Lifecycle plumbing shared by the concrete modes.

    Subclasses provide `_parse_config`, `_new_state`, `_build_result` and the puzzle hooks;
    this class guards every public call and guarantees the sink sees exactly one result.
    """

    id = ""

    def __init__(self) -> None:
        self._ctx = ModeContext()
        self._state: GameState = self._new_state()
        self._result: FinalResult | None = None

    # ── subclass hooks ───────────────────────────────────────

    def _parse_config(self, raw: dict[str, Any]) -> None:
        _ = raw

    def _new_state(self) -> GameState:
        return GameState(mode_id=self.id)

    def _on_start(self, now_ms: float) -> None:
        _ = now_ms

    def _solved(self, outcome: PuzzleOutcome) -> None:
        raise NotImplementedError

    def _failed(self, outcome: PuzzleOutcome | None) -> None:
        self._state.streak = 0

    def _tick(self, now_ms: float) -> None:
        _ = now_ms

    def _grant_hint(self) -> bool:
        return False

    def _build_result(self, *, aborted: bool, now_ms: float) -> FinalResult:
        raise NotImplementedError

    # ── protocol ─────────────────────────────────────────────

    def initialize(self, config: dict | None = None, *, ctx: ModeContext | None = None) -> bool:
        if self._state.is_active or self._result is not None:
            self._misuse("initialize")
            return False
        if ctx is not None:
            self._ctx = ctx
        raw = dict(config) if isinstance(config, dict) else {}
        try:
            self._parse_config(raw)
        except ModeConfigError as exc:
            self._ctx.error_log.log_message(context=f"{self.id}.initialize", message=str(exc))
            return False
        now = self._now()
        self._state = self._new_state()
        self._state.is_active = True
        self._state.started_at_ms = now
        self._on_start(now)
        logger.info("%s mode initialized", self.id)
        return True

    def on_puzzle_solved(self, outcome: PuzzleOutcome) -> None:
        if not self._guard("on_puzzle_solved"):
            return
        if outcome.failed:
            # A failed attempt never scores, whichever entry point the host used.
            self._failed(outcome)
            return
        self._solved(outcome)

    def on_puzzle_failed(self, outcome: PuzzleOutcome | None = None) -> None:
        if not self._guard("on_puzzle_failed"):
            return
        self._failed(outcome)

    def on_tick(self, now_ms: float) -> None:
        if not self._guard("on_tick"):
            return
        self._tick(float(now_ms))

    def use_hint(self) -> bool:
        if not self._guard("use_hint"):
            return False
        return bool(self._grant_hint())

    def get_state(self) -> GameState:
        return copy.deepcopy(self._state)

    def is_active(self) -> bool:
        return bool(self._state.is_active)

    def now_ms(self) -> float:
        """The context clock every timer of this controller is measured against."""

        return self._now()

    def end(self) -> FinalResult | None:
        return self._finish(aborted=False)

    def abort(self) -> FinalResult | None:
        return self._finish(aborted=True)

    @property
    def result(self) -> FinalResult | None:
        return self._result

    # ── helpers ──────────────────────────────────────────────

    def _now(self) -> float:
        return float(self._ctx.clock())

    def _elapsed_seconds(self, since_ms: float | None, *, now_ms: float | None = None) -> float:
        if since_ms is None:
            return 0.0
        now = self._now() if now_ms is None else float(now_ms)
        return max(0.0, (now - float(since_ms)) / 1000.0)

    def _guard(self, op: str) -> bool:
        if self._state.is_active:
            return True
        self._misuse(op)
        return False

    def _misuse(self, op: str) -> None:
        if self._result is not None:
            msg = f"{op} ignored: session already ended"
        elif self._state.is_active:
            msg = f"{op} ignored: session already active"
        else:
            msg = f"{op} ignored: mode not initialized"
        self._ctx.error_log.log_message(context=f"{self.id}.lifecycle", message=msg)

    def _finish(self, *, aborted: bool) -> FinalResult | None:
        if self._result is not None:
            return self._result
        if not self._state.is_active:
            self._misuse("abort" if aborted else "end")
            return None
        now = self._now()
        self._state.is_active = False
        result = self._build_result(aborted=aborted, now_ms=now)
        self._result = result
        self._deliver(result)
        logger.info("%s mode %s: score=%d", self.id, "aborted" if aborted else "completed", result.final_score)
        return result

    def _deliver(self, result: FinalResult) -> None:
        sink = self._ctx.results
        if sink is None:
            return
        try:
            sink.save_results(result)
        except Exception as exc:
            self._ctx.error_log.log_exception(context=f"{self.id}.save_results", exc=exc)
        try:
            sink.update_mode_stats(self.id, result)
        except Exception as exc:
            self._ctx.error_log.log_exception(context=f"{self.id}.update_mode_stats", exc=exc)

from __future__ import annotations

import pytest

from chainlink.common.error_log import ErrorLog
from chainlink.modes.base import ModeConfigError, ModeContext, config_int, config_str
from chainlink.modes.loader import builtin_mode_ids, load_mode
from chainlink.outcome import PuzzleOutcome
from chainlink.results import FinalResult, MemoryResultsSink


class _Clock:
    def __init__(self) -> None:
        self.now_ms = 0.0

    def __call__(self) -> float:
        return self.now_ms


class _BrokenSink:
    def __init__(self) -> None:
        self.stats_calls = 0

    def save_results(self, result: FinalResult) -> None:
        raise OSError("disk full")

    def update_mode_stats(self, mode_id: str, result: FinalResult) -> None:
        self.stats_calls += 1


@pytest.mark.parametrize("mode_id", builtin_mode_ids())
def test_calls_before_initialize_are_logged_no_ops(mode_id: str) -> None:
    ctx = ModeContext(error_log=ErrorLog())
    mode = load_mode(mode=mode_id)
    mode._ctx = ctx

    mode.on_puzzle_solved(PuzzleOutcome(base_score=100))
    mode.on_puzzle_failed()
    mode.on_tick(1_000.0)
    assert mode.use_hint() is False
    assert mode.end() is None
    assert mode.get_state().score == 0
    assert mode.is_active() is False
    assert any("not initialized" in item.message for item in ctx.error_log.items())


@pytest.mark.parametrize("mode_id", builtin_mode_ids())
def test_end_is_idempotent_and_delivers_exactly_once(mode_id: str) -> None:
    sink = MemoryResultsSink()
    mode = load_mode(mode=mode_id)
    assert mode.initialize(None, ctx=ModeContext(results=sink, clock=_Clock(), error_log=ErrorLog())) is True
    assert mode.is_active() is True
    assert mode.get_state().mode_id == mode_id

    first = mode.end()
    second = mode.end()
    third = mode.abort()
    assert first is not None
    assert first is second is third
    assert first.mode_id == mode_id
    assert first.aborted is False
    assert len(sink.results) == 1
    assert sink.mode_stats(mode_id).games_played == 1


@pytest.mark.parametrize("mode_id", builtin_mode_ids())
def test_no_state_changes_after_end(mode_id: str) -> None:
    mode = load_mode(mode=mode_id)
    assert mode.initialize(None, ctx=ModeContext(clock=_Clock(), error_log=ErrorLog())) is True
    mode.end()
    before = mode.get_state()
    mode.on_puzzle_solved(PuzzleOutcome(base_score=100))
    mode.on_puzzle_failed()
    mode.on_tick(999_999.0)
    assert mode.get_state() == before


@pytest.mark.parametrize("mode_id", builtin_mode_ids())
def test_initialize_twice_is_rejected(mode_id: str) -> None:
    ctx = ModeContext(clock=_Clock(), error_log=ErrorLog())
    mode = load_mode(mode=mode_id)
    assert mode.initialize(None, ctx=ctx) is True
    assert mode.initialize(None, ctx=ctx) is False
    assert mode.is_active() is True
    mode.end()
    assert mode.initialize(None, ctx=ctx) is False


def test_get_state_returns_a_snapshot() -> None:
    mode = load_mode(mode="zen")
    assert mode.initialize(None, ctx=ModeContext(clock=_Clock())) is True
    snap = mode.get_state()
    snap.score = 10_000
    snap.adaptive.level = 5
    st = mode.get_state()
    assert st.score == 0
    assert st.adaptive.level == 1


def test_sink_failure_is_logged_and_result_still_returned() -> None:
    sink = _BrokenSink()
    ctx = ModeContext(results=sink, clock=_Clock(), error_log=ErrorLog())
    mode = load_mode(mode="zen")
    assert mode.initialize(None, ctx=ctx) is True
    mode.on_puzzle_solved(PuzzleOutcome(base_score=50))

    result = mode.end()
    assert result is not None
    assert result.final_score == 50
    assert sink.stats_calls == 1
    items = ctx.error_log.items()
    assert [i.context for i in items] == ["zen.save_results"]
    assert "OSError: disk full" in items[0].message
    assert items[0].tb is not None

    mode.end()
    assert sink.stats_calls == 1


def test_final_result_details_are_frozen() -> None:
    mode = load_mode(mode="blitz")
    assert mode.initialize(None, ctx=ModeContext(clock=_Clock())) is True
    result = mode.end()
    assert result is not None
    with pytest.raises(TypeError):
        result.details["max_streak"] = 99  # type: ignore[index]


def test_config_helpers_validate_values() -> None:
    assert config_int({}, "lives", 3) == 3
    assert config_int({"lives": None}, "lives", 3) == 3
    assert config_int({"lives": 5.0}, "lives", 3) == 5
    assert config_str({"topic": " food "}, "topic", "general") == "food"
    with pytest.raises(ModeConfigError):
        config_int({"lives": True}, "lives", 3)
    with pytest.raises(ModeConfigError):
        config_int({"lives": 2.5}, "lives", 3)
    with pytest.raises(ModeConfigError):
        config_int({"hints": -1}, "hints", 1, minimum=0)
    with pytest.raises(ModeConfigError):
        config_str({"topic": ""}, "topic", "general")


@pytest.mark.parametrize("mode_id", builtin_mode_ids())
def test_failed_outcome_passed_as_solve_never_scores(mode_id: str) -> None:
    mode = load_mode(mode=mode_id)
    assert mode.initialize(None, ctx=ModeContext(clock=_Clock(), error_log=ErrorLog())) is True
    mode.on_puzzle_solved(PuzzleOutcome(base_score=100))
    before = mode.get_state()
    assert before.streak == 1

    mode.on_puzzle_solved(PuzzleOutcome(base_score=100, failed=True))
    st = mode.get_state()
    assert st.score <= before.score
    assert st.streak == 0
    assert st.puzzles_completed == before.puzzles_completed


def test_failed_outcome_passed_as_solve_costs_a_survival_life() -> None:
    mode = load_mode(mode="survival")
    assert mode.initialize(None, ctx=ModeContext(clock=_Clock())) is True
    mode.on_puzzle_solved(PuzzleOutcome(base_score=10, failed=True))
    st = mode.get_state()
    assert st.lives == 2
    assert st.score == 0

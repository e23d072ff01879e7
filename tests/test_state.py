from __future__ import annotations

import os
from pathlib import Path

from chainlink.results import FinalResult, ModeStats
from chainlink.state import (
    JsonResultsSink,
    load_mode_stats,
    load_results,
    results_path,
    state_dir,
    stats_path,
)


def _with_state_dir(tmp_path: Path):
    prev = os.environ.get("CHAINLINK_STATE_DIR")
    os.environ["CHAINLINK_STATE_DIR"] = str(tmp_path / "state")

    def restore() -> None:
        if prev is None:
            os.environ.pop("CHAINLINK_STATE_DIR", None)
        else:
            os.environ["CHAINLINK_STATE_DIR"] = prev

    return restore


def test_state_dir_override(tmp_path: Path) -> None:
    restore = _with_state_dir(tmp_path)
    try:
        assert state_dir() == tmp_path / "state"
        assert results_path().name == "results.json"
        assert stats_path().parent == tmp_path / "state"
        assert load_results() == []
        assert load_mode_stats("blitz") == ModeStats()
    finally:
        restore()


def test_json_sink_persists_results_and_stats(tmp_path: Path) -> None:
    restore = _with_state_dir(tmp_path)
    try:
        sink = JsonResultsSink(max_results=2)
        for score in (10, 20, 30):
            result = FinalResult.create(mode_id="survival", final_score=score, lives_lost=3, details={"final_level": 2})
            sink.save_results(result)
            sink.update_mode_stats("survival", result)

        rows = load_results()
        assert [r["final_score"] for r in rows] == [20, 30]
        assert rows[-1]["details"] == {"final_level": 2}

        stats = load_mode_stats("survival")
        assert stats.games_played == 3
        assert stats.best_score == 30
        assert stats.average_score == 20
        assert stats.lives_lost == 9
        assert load_mode_stats("zen") == ModeStats()
        assert not list((tmp_path / "state").glob("*.tmp"))
    finally:
        restore()


def test_unreadable_state_files_are_ignored(tmp_path: Path) -> None:
    restore = _with_state_dir(tmp_path)
    try:
        results_path().parent.mkdir(parents=True)
        results_path().write_text("{not json", encoding="utf-8")
        stats_path().write_text("[1, 2]", encoding="utf-8")
        assert load_results() == []
        assert load_mode_stats("blitz") == ModeStats()

        sink = JsonResultsSink()
        result = FinalResult.create(mode_id="blitz", final_score=5)
        sink.save_results(result)
        sink.update_mode_stats("blitz", result)
        assert [r["final_score"] for r in load_results()] == [5]
        assert load_mode_stats("blitz").games_played == 1
    finally:
        restore()

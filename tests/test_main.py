from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from chainlink.__main__ import main
from chainlink.app_config import RunConfig
from chainlink.results import MemoryResultsSink
from chainlink.simulate import run


@pytest.mark.parametrize("mode", ["blitz", "zen", "survival", "tournament", "practice"])
def test_simulated_session_delivers_one_result(mode: str) -> None:
    sink = MemoryResultsSink()
    result = run(RunConfig(mode=mode, seed=17, puzzles=12), results=sink)
    assert result is not None
    assert result.mode_id == mode
    assert sink.results == [result]
    assert sink.mode_stats(mode).games_played == 1


def test_simulated_blitz_stops_at_time_limit() -> None:
    result = run(RunConfig(mode="blitz", seed=3, puzzles=100, solve_seconds=5.0))
    assert result is not None
    assert result.time_played_seconds == 60
    assert result.aborted is False


def test_simulation_is_reproducible() -> None:
    a = run(RunConfig(mode="tournament", seed=5, puzzles=16))
    b = run(RunConfig(mode="tournament", seed=5, puzzles=16))
    assert a is not None and b is not None
    assert a.to_payload() == b.to_payload()


def test_simulation_reports_bad_mode_config() -> None:
    assert run(RunConfig(mode="survival", mode_config={"lives": 0})) is None


def test_main_prints_json_result(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--mode", "relax", "--seed", "3", "--puzzles", "4", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["mode_id"] == "zen"
    assert payload["aborted"] is False


def test_main_passes_mode_options(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--mode", "practice", "--seed", "1", "--puzzles", "3", "--option", 'topic="food"', "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["details"]["topic_progress"]["food"]["puzzles_completed"] >= 0
    assert main(["--mode", "survival", "--option", "lives=0"]) == 1


def test_main_persists_to_state_dir(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    prev = os.environ.get("CHAINLINK_STATE_DIR")
    os.environ["CHAINLINK_STATE_DIR"] = str(tmp_path / "state")
    try:
        assert main(["--mode", "blitz", "--seed", "8", "--puzzles", "3", "--persist"]) == 0
        assert capsys.readouterr().out.startswith("blitz: score=")
        rows = json.loads((tmp_path / "state" / "results.json").read_text(encoding="utf-8"))
        assert len(rows) == 1
        stats = json.loads((tmp_path / "state" / "mode_stats.json").read_text(encoding="utf-8"))
        assert stats["blitz"]["games_played"] == 1
    finally:
        if prev is None:
            os.environ.pop("CHAINLINK_STATE_DIR", None)
        else:
            os.environ["CHAINLINK_STATE_DIR"] = prev


def test_main_lists_modes_with_unlock_state(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--list-modes", "--player-level", "5"]) == 0
    rows = dict(line.split("\t") for line in capsys.readouterr().out.splitlines())
    assert rows["survival"] == "Survival Mode"
    assert rows["tournament"] == "Tournament Mode (unlocks at level 10)"


def test_main_refuses_locked_mode() -> None:
    assert main(["--mode", "bracket", "--player-level", "3", "--puzzles", "2"]) == 1
    assert main(["--mode", "bracket", "--player-level", "10", "--seed", "2", "--puzzles", "2"]) == 0

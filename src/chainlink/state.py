from __future__ import annotations

import json
import logging
import os
import secrets
from pathlib import Path
from typing import Any

from chainlink.results import MAX_STORED_RESULTS, FinalResult, ModeStats

logger = logging.getLogger(__name__)


def state_dir() -> Path:
    """
    Directory for small persistent player state (results history, per-mode stats).

    Override for tests/dev via `CHAINLINK_STATE_DIR`.
    """

    override = os.environ.get("CHAINLINK_STATE_DIR")
    if override:
        return Path(override)
    return Path.home() / ".chainlink"


def results_path() -> Path:
    return state_dir() / "results.json"


def stats_path() -> Path:
    return state_dir() / "mode_stats.json"


def _read_json(p: Path) -> Any:
    if not p.exists():
        return None
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Ignoring unreadable state file %s", p)
        return None


def _write_json(p: Path, payload: Any) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    # Use a unique tmp name to avoid cross-process races (e.g. two sessions ending together).
    tmp = p.with_name(f"{p.name}.{os.getpid()}.{secrets.token_hex(6)}.tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    tmp.replace(p)


def load_results() -> list[dict[str, Any]]:
    payload = _read_json(results_path())
    if not isinstance(payload, list):
        return []
    return [row for row in payload if isinstance(row, dict)]


def load_mode_stats(mode_id: str) -> ModeStats:
    payload = _read_json(stats_path())
    if not isinstance(payload, dict):
        return ModeStats()
    return ModeStats.from_payload(payload.get(str(mode_id)))


class JsonResultsSink:
    """
    ResultsSink backed by two JSON files under `state_dir()`.

    Keeps the most recent `MAX_STORED_RESULTS` results and one aggregate row per mode.
    """

    def __init__(self, *, max_results: int = MAX_STORED_RESULTS) -> None:
        self._max_results = max(1, int(max_results))

    def save_results(self, result: FinalResult) -> None:
        rows = load_results()
        rows.append(result.to_payload())
        if len(rows) > self._max_results:
            rows = rows[-self._max_results :]
        _write_json(results_path(), rows)

    def update_mode_stats(self, mode_id: str, result: FinalResult) -> None:
        payload = _read_json(stats_path())
        all_stats = dict(payload) if isinstance(payload, dict) else {}
        cur = ModeStats.from_payload(all_stats.get(str(mode_id)))
        all_stats[str(mode_id)] = cur.with_result(result).to_payload()
        _write_json(stats_path(), all_stats)

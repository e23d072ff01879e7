from __future__ import annotations

import json
from pathlib import Path

from chainlink.common.error_log import ErrorLog


def test_repeated_messages_are_collapsed() -> None:
    log = ErrorLog()
    for _ in range(3):
        log.log_message(context="blitz.lifecycle", message="on_tick ignored: session already ended")
    log.log_message(context="blitz.lifecycle", message="use_hint ignored: session already ended")

    items = log.items()
    assert len(items) == 2
    assert items[0].count == 3
    assert items[0].level == "warning"
    assert items[0].summary_line() == "blitz.lifecycle: on_tick ignored: session already ended (x3)"
    assert items[1].summary_line() == "blitz.lifecycle: use_hint ignored: session already ended"
    assert log.counts_by_context() == {"blitz.lifecycle": 4}


def test_items_are_bounded() -> None:
    log = ErrorLog(max_items=3)
    for i in range(5):
        log.log_message(context="zen", message=f"problem {i}")
    assert [i.message for i in log.items()] == ["problem 2", "problem 3", "problem 4"]
    log.clear()
    assert log.items() == []


def test_entries_can_be_filtered_by_mode() -> None:
    log = ErrorLog()
    log.log_message(context="zen.lifecycle", message="a")
    log.log_message(context="survival.initialize", message="b")
    log.log_message(context="zen.save_results", message="c")
    assert [i.message for i in log.for_mode("zen")] == ["a", "c"]
    assert log.for_mode("tournament") == []


def test_exceptions_keep_traceback_and_persist(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "errors.jsonl"
    log = ErrorLog(persist_path=path)
    try:
        raise RuntimeError("sink offline")
    except RuntimeError as exc:
        log.log_exception(context="zen.save_results", exc=exc)
    log.log_message(context="zen.lifecycle", message="end ignored: mode not initialized")

    item = log.items()[0]
    assert item.message == "RuntimeError: sink offline"
    assert item.level == "error"
    assert item.tb is not None and "Traceback" in item.tb

    rows = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [(r["context"], r["level"]) for r in rows] == [("zen.save_results", "error"), ("zen.lifecycle", "warning")]
    assert rows[1]["tb"] is None


def test_disabled_log_records_nothing() -> None:
    log = ErrorLog()
    log.enabled = False
    log.log_message(context="x", message="y")
    log.log_exception(context="x", exc=ValueError("z"))
    assert log.items() == []


def test_blank_fields_get_placeholders() -> None:
    log = ErrorLog()
    log.log_message(context="", message="  ")
    assert log.items()[0].summary_line() == "unknown: Unknown error"

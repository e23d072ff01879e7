from __future__ import annotations

from chainlink.modes.difficulty import MAX_LEVEL, MIN_LEVEL, DifficultyAdapter, DifficultyRamp, difficulty_label


def test_high_accuracy_raises_level_on_next_evaluation() -> None:
    adapter = DifficultyAdapter(DifficultyRamp(level=2, correct_count=9, total_count=10))
    assert adapter.evaluate() == 1
    assert adapter.level == 3
    assert adapter.label() == "normal"


def test_low_accuracy_lowers_level() -> None:
    adapter = DifficultyAdapter(DifficultyRamp(level=4, correct_count=4, total_count=10))
    assert adapter.evaluate() == -1
    assert adapter.level == 3


def test_mid_accuracy_holds_level() -> None:
    adapter = DifficultyAdapter(DifficultyRamp(level=3, correct_count=5, total_count=10))
    assert adapter.evaluate() == 0
    adapter.ramp.correct_count = 7
    assert adapter.evaluate() == 0
    assert adapter.level == 3


def test_level_is_clamped() -> None:
    top = DifficultyAdapter(DifficultyRamp(level=MAX_LEVEL, correct_count=10, total_count=10))
    assert top.evaluate() == 0
    assert top.level == MAX_LEVEL

    bottom = DifficultyAdapter(DifficultyRamp(level=MIN_LEVEL, correct_count=0, total_count=10))
    assert bottom.evaluate() == 0
    assert bottom.level == MIN_LEVEL


def test_no_attempts_means_no_change() -> None:
    adapter = DifficultyAdapter()
    assert adapter.ramp.accuracy() is None
    assert adapter.evaluate() == 0
    assert adapter.level == MIN_LEVEL


def test_record_counts_attempts_and_evaluates() -> None:
    ramp = DifficultyRamp()
    adapter = DifficultyAdapter(ramp)
    assert adapter.record(correct=True) == 1
    assert adapter.record(correct=False) == 0
    assert adapter.record(correct=False) == -1
    assert (ramp.correct_count, ramp.total_count, ramp.level) == (1, 3, 1)


def test_custom_thresholds() -> None:
    adapter = DifficultyAdapter(DifficultyRamp(level=2, correct_count=6, total_count=10), raise_at=0.6)
    assert adapter.evaluate() == 1


def test_labels() -> None:
    assert [difficulty_label(lvl) for lvl in range(1, 6)] == ["easy", "easy", "normal", "normal", "hard"]
    assert difficulty_label(42) == "normal"

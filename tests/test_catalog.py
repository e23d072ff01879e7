from __future__ import annotations

from chainlink.catalog import all_modes, get_mode_info, picker_items, unlocked_modes
from chainlink.modes.loader import builtin_mode_ids


def test_catalog_lists_every_builtin_mode() -> None:
    assert [m.id for m in all_modes()] == builtin_mode_ids()


def test_unlocks_follow_player_level() -> None:
    assert [m.id for m in unlocked_modes(player_level=1)] == ["blitz", "zen", "practice"]
    assert [m.id for m in unlocked_modes(player_level=5)] == ["blitz", "zen", "survival", "practice"]
    assert [m.id for m in unlocked_modes(player_level=10)] == ["blitz", "zen", "survival", "tournament", "practice"]
    assert [m.id for m in unlocked_modes(player_level=0)] == ["blitz", "zen", "practice"]


def test_mode_info_lookup() -> None:
    blitz = get_mode_info(" BLITZ ")
    assert blitz is not None
    assert blitz.total_time_seconds == 60
    assert blitz.hints == 1
    assert get_mode_info("survival").lives == 3  # type: ignore[union-attr]
    assert get_mode_info("speedrun") is None


def test_picker_labels_locked_modes() -> None:
    items = {i.id: i.label for i in picker_items(player_level=6)}
    assert items["survival"] == "Survival Mode"
    assert items["tournament"] == "Tournament Mode (unlocks at level 10)"

"""Static metadata for the selectable game modes and the player-level unlock rules."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ModeInfo:
    id: str
    name: str
    description: str
    # None: available from the start.
    unlock_level: int | None = None
    # None: unlimited.
    hints: int | None = None
    lives: int | None = None
    total_time_seconds: int | None = None
    leaderboard_enabled: bool = False

    def is_unlocked(self, *, player_level: int) -> bool:
        if self.unlock_level is None:
            return True
        return int(player_level) >= int(self.unlock_level)


@dataclass(frozen=True)
class ModeItem:
    id: str
    label: str


MODES: tuple[ModeInfo, ...] = (
    ModeInfo(
        id="blitz",
        name="Blitz Mode",
        description="60-second rapid fire word puzzles",
        hints=1,
        lives=1,
        total_time_seconds=60,
        leaderboard_enabled=True,
    ),
    ModeInfo(
        id="zen",
        name="Zen Mode",
        description="Relaxed, untimed gameplay for learning",
    ),
    ModeInfo(
        id="survival",
        name="Survival Mode",
        description="Endless challenge with increasing difficulty",
        unlock_level=5,
        hints=0,
        lives=3,
        leaderboard_enabled=True,
    ),
    ModeInfo(
        id="tournament",
        name="Tournament Mode",
        description="Bracket-style competition against simulated opponents",
        unlock_level=10,
        hints=0,
        lives=1,
        leaderboard_enabled=True,
    ),
    ModeInfo(
        id="practice",
        name="Practice Mode",
        description="Tutorial and skill building exercises",
    ),
)


def all_modes() -> list[ModeInfo]:
    return list(MODES)


def get_mode_info(mode_id: str) -> ModeInfo | None:
    key = str(mode_id or "").strip().lower()
    return next((m for m in MODES if m.id == key), None)


def unlocked_modes(*, player_level: int) -> list[ModeInfo]:
    level = max(1, int(player_level))
    return [m for m in MODES if m.is_unlocked(player_level=level)]


def picker_items(*, player_level: int) -> list[ModeItem]:
    """Rows for a mode picker; locked modes stay listed with their requirement."""

    out: list[ModeItem] = []
    for m in MODES:
        if m.is_unlocked(player_level=player_level):
            out.append(ModeItem(id=m.id, label=m.name))
        else:
            out.append(ModeItem(id=m.id, label=f"{m.name} (unlocks at level {m.unlock_level})"))
    return out

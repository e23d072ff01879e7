from __future__ import annotations

import importlib
from typing import Any

from chainlink.modes.blitz import BlitzMode
from chainlink.modes.practice import PracticeMode
from chainlink.modes.survival import SurvivalMode
from chainlink.modes.tournament import TournamentMode
from chainlink.modes.zen import ZenMode


class UnknownModeError(LookupError):
    pass


_BUILTIN: dict[str, type] = {
    BlitzMode.id: BlitzMode,
    ZenMode.id: ZenMode,
    SurvivalMode.id: SurvivalMode,
    TournamentMode.id: TournamentMode,
    PracticeMode.id: PracticeMode,
}

_ALIASES: dict[str, str] = {
    "rapid": "blitz",
    "relax": "zen",
    "endless": "survival",
    "bracket": "tournament",
    "tutorial": "practice",
}


def builtin_mode_ids() -> list[str]:
    return list(_BUILTIN.keys())


def load_mode(*, mode: str) -> Any:
    """
    Build an (uninitialized) mode controller.

    Supported values:
    - Built-in ids: "blitz", "zen", "survival", "tournament", "practice" (case-insensitive)
    - Aliases: "rapid", "relax", "endless", "bracket", "tutorial"
    - Python class path: "some.module:ClassName" (instantiated without arguments)
    """

    raw = str(mode or "").strip()
    if not raw:
        raise UnknownModeError("Mode id is empty")

    if ":" in raw:
        mod_name, cls_name = raw.split(":", 1)
        mod = importlib.import_module(mod_name)
        cls = getattr(mod, cls_name, None)
        if cls is None:
            raise UnknownModeError(f"Mode class not found: {raw}")
        return cls()

    key = raw.lower()
    key = _ALIASES.get(key, key)
    cls = _BUILTIN.get(key)
    if cls is None:
        raise UnknownModeError(f"Unknown mode: {raw}")
    return cls()

from __future__ import annotations

import json
import logging
import time
import traceback
from collections import Counter
from dataclasses import asdict, dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class ErrorItem:
    ts: float
    # "<mode_id>.<operation>", e.g. "blitz.lifecycle" or "zen.save_results".
    context: str
    message: str
    tb: str | None
    level: str = "warning"
    count: int = 1

    @property
    def mode_id(self) -> str:
        return self.context.split(".", 1)[0]

    def summary_line(self) -> str:
        line = f"{self.context}: {self.message}".strip()
        return line if self.count <= 1 else f"{line} (x{self.count})"


class ErrorLog:
    """
    Bounded feed of engine problems: lifecycle misuse (warnings) and sink failures (errors).

    A game mode never raises because of this log. Back-to-back identical entries fold into
    one item with a repeat count, since a host keeps ticking at 100 ms after `end()`.
    With `persist_path` set, each new entry is appended to that file as one JSON line.
    """

    def __init__(self, *, max_items: int = 30, persist_path: Path | None = None) -> None:
        self.enabled: bool = True
        self._max_items = max(1, int(max_items))
        self._items: list[ErrorItem] = []
        self._persist_path = Path(persist_path) if persist_path is not None else None

    def items(self) -> list[ErrorItem]:
        return list(self._items)

    def for_mode(self, mode_id: str) -> list[ErrorItem]:
        return [item for item in self._items if item.mode_id == str(mode_id)]

    def counts_by_context(self) -> dict[str, int]:
        totals: Counter[str] = Counter()
        for item in self._items:
            totals[item.context] += item.count
        return dict(totals)

    def clear(self) -> None:
        self._items = []

    def log_message(self, *, context: str, message: str) -> None:
        self._record(context=context, message=message, tb=None, level="warning")

    def log_exception(self, *, context: str, exc: BaseException) -> None:
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        self._record(context=context, message=f"{type(exc).__name__}: {exc}", tb=tb, level="error")

    def _record(self, *, context: str, message: str, tb: str | None, level: str) -> None:
        if not self.enabled:
            return
        item = ErrorItem(
            ts=time.time(),
            context=str(context or "unknown"),
            message=str(message or "").strip() or "Unknown error",
            tb=tb,
            level=level,
        )
        last = self._items[-1] if self._items else None
        if last is not None and (last.level, last.context, last.message) == (item.level, item.context, item.message):
            last.count += 1
            last.ts = item.ts
            return

        self._items.append(item)
        del self._items[: -self._max_items]
        if level == "error":
            logger.error("%s: %s", item.context, item.message)
            if tb:
                logger.debug("%s", tb.rstrip())
        else:
            logger.warning("%s: %s", item.context, item.message)
        self._append_line(item)

    def _append_line(self, item: ErrorItem) -> None:
        p = self._persist_path
        if p is None:
            return
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            with p.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(asdict(item), sort_keys=True) + "\n")
        except OSError:
            logger.debug("Could not persist error log entry to %s", p, exc_info=True)

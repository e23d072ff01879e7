"""
Panda3D integration: one task per active mode delivers `on_tick`.

Mode controllers never own timers. Hosts that run inside a ShowBase loop create a
`ModeTicker` when a mode starts and call `stop()` when the player navigates away.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Callable

from direct.showbase.ShowBaseGlobal import globalClock
from direct.task import Task

from chainlink.common.error_log import ErrorLog
from chainlink.modes.base import ModeContext, ModeController
from chainlink.results import FinalResult, ResultsSink

logger = logging.getLogger(__name__)

# Mode timers only need 100 ms resolution.
TICK_INTERVAL_S = 0.1


def panda_clock_ms() -> float:
    return float(globalClock.getFrameTime()) * 1000.0


def panda_context(
    *,
    results: ResultsSink | None = None,
    rng: random.Random | None = None,
    error_log: ErrorLog | None = None,
) -> ModeContext:
    return ModeContext(
        results=results,
        clock=panda_clock_ms,
        rng=rng if rng is not None else random.Random(),
        error_log=error_log if error_log is not None else ErrorLog(),
    )


class ModeTicker:
    """
    The single tick source for one controller.

    The task stops by itself once the controller reaches a terminal state; `stop()` removes it
    early and finalizes the session. Calling `stop()` again is harmless: `end()` is idempotent.
    """

    def __init__(
        self,
        *,
        controller: ModeController,
        task_mgr: Any,
        clock: Callable[[], float] | None = None,
        interval: float = TICK_INTERVAL_S,
        name: str = "chainlink-mode-tick",
    ) -> None:
        self._controller = controller
        self._task_mgr = task_mgr
        # Default to the controller's own context clock so tick times and start times agree.
        self._clock = clock if clock is not None else controller.now_ms
        self._interval = max(0.01, float(interval))
        self._name = str(name)
        self._running = False

    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        if not self._controller.is_active():
            logger.warning("ModeTicker.start ignored: %s is not active", getattr(self._controller, "id", "?"))
            return
        self._task_mgr.doMethodLater(self._interval, self._update, self._name)
        self._running = True

    def _update(self, task: Any) -> int:
        _ = task
        if self._controller.is_active():
            self._controller.on_tick(float(self._clock()))
        if not self._controller.is_active():
            self._running = False
            return Task.done
        return Task.again

    def stop(self, *, abort: bool = False) -> FinalResult | None:
        if self._running:
            self._task_mgr.remove(self._name)
            self._running = False
        if abort:
            return self._controller.abort()
        return self._controller.end()

"""Cancellable repeating tick used by the goal timer.

At most one task per ticker: `start` always cancels the previous one first.
Callbacks receive the elapsed seconds since the previous tick, measured on a
monotonic clock.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[float], None]


class Ticker(Protocol):
    @property
    def running(self) -> bool: ...

    def start(self, callback: TickCallback) -> None: ...

    def cancel(self) -> None: ...


class AsyncioTicker:
    """Repeating task on the running event loop (the same loop as commands)."""

    def __init__(self, interval: float = 1.0) -> None:
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, callback: TickCallback) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(callback))

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self, callback: TickCallback) -> None:
        last = time.monotonic()
        while True:
            await asyncio.sleep(self.interval)
            now = time.monotonic()
            try:
                callback(now - last)
            except Exception:
                logger.exception("Timer tick failed; next tick continues")
            last = now


class ManualTicker:
    """Ticker driven by explicit `tick()` calls. Used by tests and scripts."""

    def __init__(self) -> None:
        self._callback: TickCallback | None = None
        self.starts = 0

    @property
    def running(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        self.cancel()
        self._callback = callback
        self.starts += 1

    def cancel(self) -> None:
        self._callback = None

    def tick(self, elapsed: float = 1.0) -> None:
        if self._callback is not None:
            self._callback(elapsed)

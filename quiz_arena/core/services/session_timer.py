"""Cancellable one-second tick timers owned by quiz sessions."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from typing import Protocol

from quiz_arena.constants.quiz_constants import TICK_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


class TickTimer(Protocol):
    """Recurring timer calling its callback once per interval until stopped."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    @property
    def running(self) -> bool: ...


TimerFactory = Callable[[Callable[[], None]], TickTimer]


class AsyncioTickTimer:
    """Reschedules itself on the running event loop with ``call_later``.

    Must be started from inside a coroutine or callback running on the loop
    that should own the ticks.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        interval_seconds: float = TICK_INTERVAL_SECONDS,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._callback = callback
        self._interval = interval_seconds
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        if self._handle is not None:
            return
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._schedule()

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        self._handle = self._loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        # Reschedule before the callback so a stop() issued by it wins.
        self._schedule()
        self._callback()


class ManualTickTimer:
    """Timer driven by its host: each ``fire()`` is one tick while running."""

    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._running = False
        self.fired_count = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        self._running = False

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            if not self._running:
                logger.debug("Ignoring tick on stopped timer")
                return
            self.fired_count += 1
            self._callback()

"""Periodic status polling."""

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable

_LOGGER = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0


class PollingScheduler:
    """Calls *tick* at a fixed rate while started.

    The interval is read again before every sleep so changes take effect
    from the next tick. The first tick fires one interval after `start`.

    Args:
        tick: Called on every tick, on the event loop.
        interval: Seconds between ticks.
    """

    def __init__(self, tick: Callable[[], None], interval: float = DEFAULT_POLL_INTERVAL) -> None:
        self._tick = tick
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        if value <= 0:
            raise ValueError(f"Poll interval must be positive, got {value}")
        self._interval = value

    @property
    def started(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _process(self) -> None:
        deadline = time.monotonic() + self._interval
        while True:
            delay = deadline - time.monotonic()
            if delay > 0:
                await asyncio.sleep(delay)
            _LOGGER.debug("Polling")
            self._tick()
            # Fixed rate, but never try to catch up on missed ticks
            deadline = max(deadline + self._interval, time.monotonic())

    async def start(self) -> None:
        if self.started:
            return
        self._task = asyncio.create_task(self._process())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None

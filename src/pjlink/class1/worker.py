"""Serial command queue.

Commands from the projector's public methods and from the poller share a
single FIFO. One worker task drains it, awaiting each command to the end
before taking the next, so at most one command is ever in flight.
"""

import asyncio
import contextlib
import logging
import threading
from collections import deque
from collections.abc import Awaitable, Callable

_LOGGER = logging.getLogger(__name__)

Sender = Callable[[str], Awaitable[None]]


class CommandQueue:
    """FIFO of protocol lines drained by a single worker task.

    `push` may be called from any thread. Calls made outside the event
    loop running the worker are handed to it with `call_soon_threadsafe`.

    Args:
        sender: Coroutine function executing one command.
    """

    def __init__(self, sender: Sender) -> None:
        self._sender = sender
        self._lock = threading.Lock()
        self._commands: deque[str] = deque()
        self._wakeup = asyncio.Event()
        self._idle = asyncio.Event()
        self._idle.set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._commands)

    def pending(self) -> list[str]:
        """Snapshot of queued commands, head first."""
        with self._lock:
            return list(self._commands)

    @property
    def started(self) -> bool:
        return self._task is not None and not self._task.done()

    def push(self, command: str) -> None:
        with self._lock:
            self._commands.append(command)
        _LOGGER.debug("Queued %s", command)

        loop = self._loop
        if loop is None or loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._signal()
        else:
            loop.call_soon_threadsafe(self._signal)

    def _signal(self) -> None:
        self._idle.clear()
        self._wakeup.set()

    def _pop(self) -> str | None:
        with self._lock:
            if not self._commands:
                return None
            return self._commands.popleft()

    async def _process(self) -> None:
        try:
            while True:
                command = self._pop()
                if command is None:
                    self._idle.set()
                    self._wakeup.clear()
                    await self._wakeup.wait()
                    continue

                _LOGGER.debug("Executing %s", command)
                try:
                    await self._sender(command)
                except Exception:
                    _LOGGER.exception("Unexpected error executing %s", command)
        finally:
            self._idle.set()

    async def start(self) -> None:
        """Start the worker task on the running loop."""
        if self.started:
            return
        self._loop = asyncio.get_running_loop()
        self._signal()
        self._task = asyncio.create_task(self._process())

    async def stop(self) -> None:
        """Stop the worker, abandoning the command in flight if any."""
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        self._loop = None

    async def join(self) -> None:
        """Wait until the queue is drained and the last command has finished."""
        if self.started:
            await self._idle.wait()

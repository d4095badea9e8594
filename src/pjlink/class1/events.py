"""Events raised by the projector and the listener registry delivering them."""

import logging
import threading
from collections.abc import Callable
from contextlib import contextmanager

import attr

from .enums import ErrorFlags, EventType

_LOGGER = logging.getLogger(__name__)

Listener = Callable[["Event"], None]


@attr.s(frozen=True)
class Event:
    """A change reported by the projector.

    The meaning of ``data`` depends on ``type``: an `ErrorFlags` word for
    ERROR, a `PowerState` for POWER, an input code for INPUT, a `MuteState`
    for AV_MUTE and the lamp hours for LAMP.
    """

    type: EventType = attr.ib()
    data: int = attr.ib()

    @staticmethod
    def error(flags: ErrorFlags) -> "Event":
        return Event(EventType.ERROR, flags)


class EventNotifier:
    """Ordered listener registry with synchronous dispatch.

    Listeners are called in registration order on the thread that calls
    `notify`. Adding and removing listeners is safe from any thread.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listen: tuple[Listener, ...] = ()

    def add_listener(self, listener: Listener) -> None:
        with self._lock:
            if any(item is listener for item in self._listen):
                return
            self._listen = (*self._listen, listener)

    def remove_listener(self, listener: Listener) -> None:
        with self._lock:
            self._listen = tuple(item for item in self._listen if item is not listener)

    @contextmanager
    def listen(self, listener: Listener):
        self.add_listener(listener)
        try:
            yield self
        finally:
            self.remove_listener(listener)

    @property
    def listeners(self) -> tuple[Listener, ...]:
        return self._listen

    def notify(self, event: Event) -> None:
        _LOGGER.debug("Event: %s %s", event.type.name, event.data)
        for listener in self._listen:
            listener(event)

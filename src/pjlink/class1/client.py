"""Command execution against a PJLink projector.

`Client` runs one command at a time through a fresh `ConnectionSession`,
enforces the per-command deadline, feeds the response to the
`ResponseParser` and turns transport failures into ERROR events.
"""

import asyncio
import logging

from .enums import DEFAULT_PORT, ErrorFlags
from .events import Event, EventNotifier
from .exceptions import AuthenticationFailed, ConnectionFailed, InvalidPacket
from .parser import ResponseParser
from .session import ConnectionSession
from .state import DeviceState

_LOGGER = logging.getLogger(__name__)
_SESSION_TIMEOUT = 4.0


class Client:
    """Executes single commands, each on its own connection.

    Args:
        state: Device state updated from responses.
        notifier: Receives events raised by responses and failures.
        host: Hostname or IP address of the projector. Empty disables I/O.
        port: TCP port (default 4352).
        password: Password for authenticated sessions.
    """

    def __init__(
        self,
        state: DeviceState,
        notifier: EventNotifier,
        host: str = "",
        port: int = DEFAULT_PORT,
        password: str = "",
    ) -> None:
        self.host = host
        self.port = port
        self.password = password
        self._state = state
        self._notifier = notifier
        self._parser = ResponseParser(state, notifier)
        self._lock = asyncio.Lock()
        self._session: ConnectionSession | None = None

    @property
    def connection_error(self) -> bool:
        return self._state.confirmed.connection_error

    @property
    def session(self) -> ConnectionSession | None:
        """The session currently in progress, if any."""
        return self._session

    async def send_command(self, command: str) -> None:
        """Execute *command* and process its response.

        Never raises for transport or protocol errors, those are reported
        as events. Only one command is in flight at any time.
        """
        async with self._lock:
            try:
                await self._send_command(command)
            finally:
                self._state.finish(command)

    async def _send_command(self, command: str) -> None:
        if not self.host:
            _LOGGER.debug("No host configured, skipping %s", command)
            return

        session = ConnectionSession(self.host, self.port, self.password)
        self._session = session
        try:
            try:
                async with asyncio.timeout(_SESSION_TIMEOUT):
                    await session.open()
                    await session.handshake()
                    line = await session.exchange(command)
            except TimeoutError:
                session.abort()
                self._transport_failed(f"Timed out executing {command}")
                return
            except (ConnectionFailed, InvalidPacket) as exception:
                session.abort()
                self._transport_failed(f"Failed executing {command}: {exception!r}")
                return

            try:
                self._parser.parse(line)
            except AuthenticationFailed:
                session.abort()
                return

            if self._state.set_connection_error(False):
                _LOGGER.info("Connection to %s:%d restored", self.host, self.port)
                self._notifier.notify(Event.error(ErrorFlags.CONNECTION))
        finally:
            await session.close()
            self._session = None

    def _transport_failed(self, message: str) -> None:
        if self._state.set_connection_error(True):
            _LOGGER.debug("%s:%d %s", self.host, self.port, message)
        else:
            _LOGGER.warning("Connection to %s:%d lost. %s", self.host, self.port, message)
        self._notifier.notify(Event.error(ErrorFlags.CONNECTION))

"""A single PJLink command exchange over its own TCP connection.

PJLink devices greet every new connection and expect at most one command
per authenticated exchange, so no connection outlives its command:

    Projector: "PJLINK 0" or "PJLINK 1 <seed>"
    Client:    [md5(md5("<seed> <password>"))]"%1POWR 1"
    Projector: "%1POWR=OK"
    <connection closed>
"""

import asyncio
import logging
from asyncio.streams import StreamReader, StreamWriter

from .enums import DEFAULT_PORT, SessionState
from .exceptions import ConnectionFailed, PJLinkException
from .packets import Greeting, auth_digest, read_line, write_line

_LOGGER = logging.getLogger(__name__)


class ConnectionSession:
    """Lifecycle of one connection carrying exactly one command.

    IDLE -> CONNECTING -> AWAITING_GREETING -> (AUTHENTICATING) -> READY
    -> AWAITING_RESPONSE -> CLOSED, with ERRORED reachable from any
    non-terminal state through `abort`.

    Args:
        host: Hostname or IP address of the projector.
        port: TCP port (default 4352).
        password: Password answering an authentication challenge.
    """

    def __init__(self, host: str, port: int = DEFAULT_PORT, password: str = "") -> None:
        self._host = host
        self._port = port
        self._password = password
        self._reader: StreamReader | None = None
        self._writer: StreamWriter | None = None
        self._greeting: Greeting | None = None
        self.state = SessionState.IDLE

    def __repr__(self) -> str:
        return f"ConnectionSession({self._host}:{self._port}, {self.state.name})"

    @property
    def greeting(self) -> Greeting | None:
        return self._greeting

    def _transition(self, state: SessionState) -> None:
        if self.state.terminal:
            raise PJLinkException(f"Session already {self.state.name}")
        _LOGGER.debug("Session %s -> %s", self.state.name, state.name)
        self.state = state

    async def open(self) -> None:
        """Open the TCP connection."""
        self._transition(SessionState.CONNECTING)
        _LOGGER.debug("Connecting to %s:%d", self._host, self._port)
        try:
            self._reader, self._writer = await asyncio.open_connection(self._host, self._port)
        except ConnectionError as exception:
            raise ConnectionFailed() from exception
        except OSError as exception:
            raise ConnectionFailed() from exception

    async def _read(self) -> str:
        if self._reader is None:
            raise PJLinkException("Session not open")
        line = await read_line(self._reader)
        if line is None:
            raise ConnectionFailed("Connection closed by projector")
        _LOGGER.debug("Received: %s", line)
        return line

    async def handshake(self) -> Greeting:
        """Wait for the greeting that tells whether authentication is required."""
        self._transition(SessionState.AWAITING_GREETING)
        self._greeting = Greeting.from_line(await self._read())
        if self._greeting.requires_auth:
            self._transition(SessionState.AUTHENTICATING)
        self._transition(SessionState.READY)
        return self._greeting

    async def exchange(self, command: str) -> str:
        """Send *command* and return the single response line."""
        if self._writer is None or self._greeting is None:
            raise PJLinkException("Session not ready")
        if self._greeting.seed is not None:
            line = auth_digest(self._greeting.seed, self._password) + command
        else:
            line = command

        _LOGGER.debug("Sending: %s", command)
        await write_line(self._writer, line)
        self._transition(SessionState.AWAITING_RESPONSE)

        while True:
            response = await self._read()
            # Some devices repeat the greeting, it is never a response
            if Greeting.is_greeting(response):
                continue
            return response

    def _close_writer(self) -> None:
        if self._writer is None:
            return
        try:
            self._writer.close()
        except (ConnectionError, OSError):
            pass
        finally:
            self._writer = None
            self._reader = None

    def abort(self) -> None:
        """Force the connection closed and mark the session ERRORED."""
        if not self.state.terminal:
            self.state = SessionState.ERRORED
        self._close_writer()

    async def close(self) -> None:
        """Close the connection and mark the session CLOSED."""
        writer = self._writer
        self._close_writer()
        if not self.state.terminal:
            self.state = SessionState.CLOSED
        if writer is not None:
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass

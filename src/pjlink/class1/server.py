"""Fake PJLink device server for development and testing."""

import asyncio
import logging
import secrets
from collections.abc import Callable

from .enums import DEFAULT_PORT, CommandCodes
from .exceptions import (
    ConnectionFailed,
    InvalidPacket,
    PJLinkException,
    ResponseException,
    UndefinedCommand,
)
from .packets import (
    AUTH_ERROR,
    PROTOCOL_HEADER,
    CommandPacket,
    Greeting,
    ResponsePacket,
    auth_digest,
    read_command,
    write_line,
)

_LOGGER = logging.getLogger(__name__)

Handler = Callable[..., str]


class Server:
    """TCP server speaking the device side of PJLink Class 1.

    Every connection receives a greeting, then exactly one command is
    read, answered and the connection is closed. Handlers are registered
    per command code, either for an exact parameter or for any parameter.

    Args:
        host: Bind address.
        port: Port number, 0 picks a free one.
        password: When set, the greeting carries a seed and the command
            must be prefixed with the matching digest.
    """

    def __init__(self, host: str, port: int = DEFAULT_PORT, password: str | None = None) -> None:
        self._server: asyncio.Server | None = None
        self._host = host
        self._port = port
        self._password = password
        self._handlers: dict[tuple[CommandCodes] | tuple[CommandCodes, str], Handler] = {}
        self._tasks: set[asyncio.Task] = set()
        self.process_runner = self.process

    @property
    def password(self) -> str | None:
        return self._password

    def make_greeting(self) -> Greeting:
        if self._password is None:
            return Greeting()
        return Greeting(secrets.token_hex(4))

    async def process(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        _LOGGER.debug("Client connected")
        greeting = self.make_greeting()
        await write_line(writer, greeting.to_str())

        request = await read_command(reader)
        if request is None:
            _LOGGER.debug("Client disconnected without command")
            return

        digest, line = request
        if greeting.seed is not None and self._password is not None:
            if digest != auth_digest(greeting.seed, self._password):
                _LOGGER.info("Rejecting command %s with bad digest", line)
                await write_line(writer, AUTH_ERROR)
                return

        response = await self.process_request(line)
        if response is not None:
            await write_line(writer, response)

    async def process_request(self, line: str) -> str | None:
        """Answer one command line, or None if it cannot be answered."""
        _LOGGER.debug("Request: %s", line)
        try:
            packet = CommandPacket.from_str(line)
        except InvalidPacket:
            if line.startswith(PROTOCOL_HEADER) and len(line) >= 6:
                return f"{line[:6]}={UndefinedCommand.code}"
            _LOGGER.debug("Ignoring malformed request %r", line)
            return None

        handler = self._handlers.get((packet.cmd, packet.param))
        if handler is None:
            handler = self._handlers.get((packet.cmd,))

        if handler is None:
            data = UndefinedCommand.code
        else:
            try:
                data = handler(cmd=packet.cmd, param=packet.param)
            except ResponseException as e:
                data = e.code

        response = ResponsePacket(packet.cmd, data).to_str()
        _LOGGER.debug("Response: %s", response)
        return response

    def register_handler(self, cmd: CommandCodes, param: str | None, handler: Handler) -> None:
        if param is not None:
            self._handlers[(cmd, param)] = handler
        else:
            self._handlers[(cmd,)] = handler

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        task = asyncio.current_task()
        if task is None:
            raise PJLinkException("Connection handler must run in a task")
        self._tasks.add(task)
        try:
            await self.process_runner(reader, writer)
        except ConnectionFailed:
            _LOGGER.debug("Client connection failed")
        finally:
            self._tasks.discard(task)
            writer.close()

    async def start(self) -> None:
        if self._server:
            raise RuntimeError("Server already started")

        self._server = await asyncio.start_server(self._handle, self._host, self._port)
        _LOGGER.debug("Listening on %s", self.port)

    @property
    def port(self) -> int:
        """Bound port once started, the configured port before."""
        if self._server and self._server.sockets:
            return self._server.sockets[0].getsockname()[1]
        return self._port

    async def stop(self) -> None:
        if not self._server:
            return

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

        self._server.close()
        await self._server.wait_closed()
        self._server = None


class ServerContext:
    """Async context manager that starts and stops a Server."""

    def __init__(self, server: Server):
        self._server = server

    async def __aenter__(self) -> Server:
        await self._server.start()
        return self._server

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self._server.stop()

"""Packet classes and line I/O for the PJLink protocol."""

import asyncio
import hashlib
import logging

import attr

from .enums import CommandCodes, InputCode, MuteState
from .exceptions import ConnectionFailed, InvalidPacket

PROTOCOL_HEADER = "%1"
PROTOCOL_ETR = "\r"
PROTOCOL_TERMINATORS = (b"\r", b"\n")
PROTOCOL_EOF = b""

GREETING_PREFIX = "PJLINK "
GREETING_NO_AUTH = "PJLINK 0"
GREETING_AUTH = "PJLINK 1 "
AUTH_ERROR = "PJLINK ERRA"

QUERY = "?"
DIGEST_LENGTH = 32

_LOGGER = logging.getLogger(__name__)
_WRITE_TIMEOUT = 3


def auth_digest(seed: str, password: str) -> str:
    """Challenge response prefixed to a command on an authenticated session.

    The seed and password are joined by a single space and hashed twice
    with MD5, each step as lowercase hex.
    """
    inner = hashlib.md5(f"{seed} {password}".encode("ascii")).hexdigest()
    return hashlib.md5(inner.encode("ascii")).hexdigest()


@attr.s(frozen=True)
class CommandPacket:
    """Represent a command sent to device."""

    cmd: CommandCodes = attr.ib(converter=CommandCodes.from_str)
    param: str = attr.ib()

    @property
    def is_query(self) -> bool:
        return self.param == QUERY

    def to_str(self) -> str:
        return f"{PROTOCOL_HEADER}{self.cmd.value} {self.param}"

    @staticmethod
    def from_str(line: str) -> "CommandPacket":
        if not line.startswith(PROTOCOL_HEADER) or len(line) < 8 or line[6] != " ":
            raise InvalidPacket(f"Malformed command {line!r}")
        try:
            return CommandPacket(line[2:6], line[7:])
        except ValueError as exception:
            raise InvalidPacket(f"Unknown command {line!r}") from exception

    @staticmethod
    def query(cmd: CommandCodes) -> "CommandPacket":
        return CommandPacket(cmd, QUERY)

    @staticmethod
    def power(on: bool) -> "CommandPacket":
        return CommandPacket(CommandCodes.POWER, "1" if on else "0")

    @staticmethod
    def select_input(code: InputCode | int) -> "CommandPacket":
        return CommandPacket(CommandCodes.INPUT, f"{int(code):02d}")

    @staticmethod
    def av_mute(state: MuteState) -> "CommandPacket":
        return CommandPacket(CommandCodes.AV_MUTE, f"{int(state):02d}")


@attr.s(frozen=True)
class ResponsePacket:
    """Represent a response from device."""

    cmd: CommandCodes = attr.ib(converter=CommandCodes.from_str)
    data: str = attr.ib()

    def to_str(self) -> str:
        return f"{PROTOCOL_HEADER}{self.cmd.value}={self.data}"


@attr.s(frozen=True)
class Greeting:
    """First line a device sends on every new connection."""

    seed: str | None = attr.ib(default=None)

    @property
    def requires_auth(self) -> bool:
        return self.seed is not None

    def to_str(self) -> str:
        if self.seed is None:
            return GREETING_NO_AUTH
        return f"{GREETING_AUTH}{self.seed}"

    @staticmethod
    def is_greeting(line: str) -> bool:
        return line.startswith(GREETING_NO_AUTH) or line.startswith(GREETING_AUTH)

    @staticmethod
    def from_line(line: str) -> "Greeting":
        if line.startswith(GREETING_NO_AUTH):
            return Greeting()
        if line.startswith(GREETING_AUTH):
            seed = line[len(GREETING_AUTH):].strip()
            if not seed:
                raise InvalidPacket(f"Greeting without seed {line!r}")
            return Greeting(seed)
        raise InvalidPacket(f"Unexpected greeting {line!r}")


# --- Protocol I/O functions ---


async def read_line(reader: asyncio.StreamReader) -> str | None:
    """Read one line terminated by CR or LF; None once the peer closes."""
    buffer = bytearray()
    try:
        while True:
            char = await reader.read(1)
            if char == PROTOCOL_EOF:
                if buffer:
                    _LOGGER.debug("Dropping partial line %r", bytes(buffer))
                return None

            if char in PROTOCOL_TERMINATORS:
                if buffer:
                    break
                continue

            buffer += char

    except ConnectionError as exception:
        raise ConnectionFailed() from exception
    except OSError as exception:
        raise ConnectionFailed() from exception

    return buffer.decode("ascii", errors="replace")


async def read_command(reader: asyncio.StreamReader) -> tuple[str, str] | None:
    """Read a client line, splitting off an authentication digest if present."""
    line = await read_line(reader)
    if line is None:
        return None

    if not line.startswith(PROTOCOL_HEADER) and len(line) > DIGEST_LENGTH:
        return line[:DIGEST_LENGTH], line[DIGEST_LENGTH:]
    return "", line


async def write_line(writer: asyncio.StreamWriter, line: str) -> None:
    try:
        writer.write((line + PROTOCOL_ETR).encode("ascii"))
        async with asyncio.timeout(_WRITE_TIMEOUT):
            await writer.drain()
    except TimeoutError as exception:
        raise ConnectionFailed() from exception
    except ConnectionError as exception:
        raise ConnectionFailed() from exception
    except OSError as exception:
        raise ConnectionFailed() from exception

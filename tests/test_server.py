"""Unit tests for server.py: Server, ServerContext."""

import asyncio

import pytest

from pjlink.class1.enums import CommandCodes
from pjlink.class1.exceptions import OutOfParameter
from pjlink.class1.packets import Greeting, auth_digest, read_line, write_line
from pjlink.class1.server import Server, ServerContext


@pytest.fixture
def server():
    """Create a Server instance for testing."""
    return Server("localhost", 0)


async def exchange(port: int, command: str, password: str | None = None) -> list[str]:
    """Run one raw session against a server, returning every line received."""
    reader, writer = await asyncio.open_connection("localhost", port)
    lines = [await read_line(reader)]
    greeting = Greeting.from_line(lines[0])
    if greeting.requires_auth and password is not None:
        command = auth_digest(greeting.seed, password) + command
    await write_line(writer, command)
    while (line := await read_line(reader)) is not None:
        lines.append(line)
    writer.close()
    await writer.wait_closed()
    return lines


# --- process_request tests ---


async def test_process_request_handler(server):
    """process_request wraps the handler result in a response line."""
    server.register_handler(CommandCodes.POWER, "?", lambda **kwargs: "1")
    assert await server.process_request("%1POWR ?") == "%1POWR=1"


async def test_process_request_no_handler(server):
    """process_request answers ERR1 when no handler is found."""
    assert await server.process_request("%1POWR ?") == "%1POWR=ERR1"


async def test_process_request_unknown_command(server):
    assert await server.process_request("%1CLSS ?") == "%1CLSS=ERR1"


async def test_process_request_malformed(server):
    assert await server.process_request("hello") is None


async def test_process_request_wildcard_handler(server):
    """Wildcard handler (param=None) matches any parameter for that command."""

    def handler(param, **kwargs):
        return "OK" if param == "31" else "ERR2"

    server.register_handler(CommandCodes.INPUT, None, handler)
    assert await server.process_request("%1INPT 31") == "%1INPT=OK"
    assert await server.process_request("%1INPT 32") == "%1INPT=ERR2"


async def test_process_request_exact_match_over_wildcard(server):
    server.register_handler(CommandCodes.POWER, None, lambda **kwargs: "OK")
    server.register_handler(CommandCodes.POWER, "?", lambda **kwargs: "0")
    assert await server.process_request("%1POWR ?") == "%1POWR=0"
    assert await server.process_request("%1POWR 1") == "%1POWR=OK"


async def test_process_request_handler_raises_response_exception(server):
    def failing_handler(**kwargs):
        raise OutOfParameter()

    server.register_handler(CommandCodes.AV_MUTE, None, failing_handler)
    assert await server.process_request("%1AVMT 99") == "%1AVMT=ERR2"


# --- register_handler tests ---


def test_register_handler_with_param(server):
    server.register_handler(CommandCodes.POWER, "?", lambda **kwargs: "1")
    assert (CommandCodes.POWER, "?") in server._handlers


def test_register_handler_without_param(server):
    server.register_handler(CommandCodes.POWER, None, lambda **kwargs: "OK")
    assert (CommandCodes.POWER,) in server._handlers


# --- Sessions over TCP ---


async def test_session_without_password(server):
    server.register_handler(CommandCodes.POWER, "?", lambda **kwargs: "1")
    async with ServerContext(server):
        assert await exchange(server.port, "%1POWR ?") == ["PJLINK 0", "%1POWR=1"]


async def test_session_with_password():
    s = Server("localhost", 0, password="secret")
    s.register_handler(CommandCodes.POWER, "?", lambda **kwargs: "1")
    async with ServerContext(s):
        lines = await exchange(s.port, "%1POWR ?", "secret")
    assert lines[0].startswith("PJLINK 1 ")
    assert len(Greeting.from_line(lines[0]).seed) == 8
    assert lines[1:] == ["%1POWR=1"]


async def test_session_bad_digest():
    s = Server("localhost", 0, password="secret")
    s.register_handler(CommandCodes.POWER, "?", lambda **kwargs: "1")
    async with ServerContext(s):
        assert (await exchange(s.port, "%1POWR ?", "wrong"))[1:] == ["PJLINK ERRA"]
        assert (await exchange(s.port, "%1POWR ?"))[1:] == ["PJLINK ERRA"]


def test_greeting_seed_changes():
    s = Server("localhost", 0, password="secret")
    assert s.make_greeting().seed != s.make_greeting().seed
    assert Server("localhost", 0).make_greeting() == Greeting()


# --- Server start/stop lifecycle ---


async def test_server_start_stop():
    """Server.start() and stop() manage the server lifecycle."""
    s = Server("localhost", 0)
    await s.start()
    assert s._server is not None
    assert s.port != 0
    await s.stop()
    assert s._server is None


async def test_server_start_twice():
    s = Server("localhost", 0)
    async with ServerContext(s):
        with pytest.raises(RuntimeError):
            await s.start()


async def test_server_stop_cancels_client_tasks():
    """Server.stop() cancels active client tasks before closing."""
    s = Server("localhost", 0)
    await s.start()

    # Connect without sending a command so the task stays alive
    reader, writer = await asyncio.open_connection("localhost", s.port)
    await asyncio.sleep(0.1)

    assert len(s._tasks) == 1
    await s.stop()
    assert len(s._tasks) == 0

    writer.close()
    try:
        await writer.wait_closed()
    except ConnectionError:
        pass


async def test_process_runner_client_disconnect():
    """process_runner handles client disconnect gracefully."""
    s = Server("localhost", 0)
    await s.start()

    reader, writer = await asyncio.open_connection("localhost", s.port)
    writer.close()
    await writer.wait_closed()

    await asyncio.sleep(0.2)
    assert len(s._tasks) == 0
    await s.stop()


async def test_server_stop_noop_when_not_started():
    s = Server("localhost", 0)
    await s.stop()


# --- ServerContext tests ---


async def test_server_context():
    """ServerContext manages start/stop lifecycle."""
    s = Server("localhost", 0)
    async with ServerContext(s):
        assert s._server is not None
    assert s._server is None

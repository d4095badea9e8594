"""Shared test fixtures."""

import asyncio

import pytest

from pjlink.class1.events import EventNotifier
from pjlink.class1.server import Server
from pjlink.class1.state import DeviceState


@pytest.fixture
def state():
    return DeviceState()


@pytest.fixture
def notifier():
    return EventNotifier()


@pytest.fixture
def events(notifier):
    """Events delivered to a listener registered on the notifier fixture."""
    received = []
    notifier.add_listener(received.append)
    return received


@pytest.fixture
def make_reader():
    """Factory fixture to create a StreamReader fed with bytes."""

    def _make_reader(data: bytes) -> asyncio.StreamReader:
        reader = asyncio.StreamReader()
        reader.feed_data(data)
        reader.feed_eof()
        return reader

    return _make_reader


@pytest.fixture
async def closed_port():
    """A local port that was just released, so connecting is refused."""
    s = Server("localhost", 0)
    await s.start()
    port = s.port
    await s.stop()
    return port

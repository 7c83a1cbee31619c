"""Shared fixtures for cruxconnect tests."""

import asyncio

import pytest

from cruxconnect import BasicKeyManager, CruxId, InMemoryDirectory, PubSubClientFactory
from cruxconnect.transports.inmemory import InMemoryTransport

FOO = CruxId.from_string("foo123@cruxdev.crux")
BAR = CruxId.from_string("bar123@cruxdev.crux")
BAZ = CruxId.from_string("baz123@cruxdev.crux")

DELIVERY_TIMEOUT = 2.0


@pytest.fixture
def foo_keys():
    return BasicKeyManager.generate()


@pytest.fixture
def bar_keys():
    return BasicKeyManager.generate()


@pytest.fixture
def directory(foo_keys, bar_keys):
    """Directory knowing foo and bar, but not baz."""
    return InMemoryDirectory(
        {str(FOO): foo_keys.public_key_hex, str(BAR): bar_keys.public_key_hex}
    )


@pytest.fixture
def transport():
    return InMemoryTransport()


@pytest.fixture
def client_factory(transport):
    return PubSubClientFactory(transport)


class Inbox:
    """Collects listener callbacks into futures a test can await."""

    def __init__(self) -> None:
        loop = asyncio.get_running_loop()
        self.message = loop.create_future()
        self.error = loop.create_future()

    def on_message(self, *args):
        if not self.message.done():
            self.message.set_result(args)

    def on_error(self, error):
        if not self.error.done():
            self.error.set_result(error)

    async def next_message(self):
        return await asyncio.wait_for(self.message, DELIVERY_TIMEOUT)

    async def next_error(self):
        return await asyncio.wait_for(self.error, DELIVERY_TIMEOUT)

"""Transport tests."""

import asyncio

import pytest

from cruxconnect import CruxId, PubSubClientFactory
from cruxconnect.contracts import Certificate, Envelope
from cruxconnect.transports import inbox_topic
from cruxconnect.transports.inmemory import InMemoryTransport


@pytest.mark.asyncio
async def test_inmemory_transport_basic():
    """Test basic InMemoryTransport publish/subscribe."""
    transport = InMemoryTransport()

    await transport.publish("test_topic", '{"test": "data"}')

    message_received = False
    async for raw_msg, data in transport.subscribe("test_topic"):
        assert data == '{"test": "data"}'

        await transport.ack(raw_msg)
        message_received = True
        break

    assert message_received


@pytest.mark.asyncio
async def test_inmemory_transport_preserves_order_per_topic():
    transport = InMemoryTransport()
    for i in range(5):
        await transport.publish("ordered", str(i))
    await transport.publish("other", "x")

    received = []
    async for _, data in transport.subscribe("ordered", lifespan=0.2):
        received.append(data)

    assert received == ["0", "1", "2", "3", "4"]


@pytest.mark.asyncio
async def test_inmemory_subscribe_ends_after_lifespan():
    transport = InMemoryTransport()
    received = []

    async def consume():
        async for _, data in transport.subscribe("quiet", lifespan=0.1):
            received.append(data)

    await asyncio.wait_for(consume(), timeout=2)
    assert received == []


@pytest.mark.asyncio
async def test_client_factory_routes_to_inbox():
    transport = InMemoryTransport()
    factory = PubSubClientFactory(transport)
    bar = CruxId.from_string("bar123@cruxdev.crux")

    client = factory.get_client("bar123@cruxdev.crux")
    assert factory.get_client(bar) is client
    assert client.topic == inbox_topic(bar) == "inbox.bar123@cruxdev.crux"

    envelope = Envelope(
        certificate=Certificate(claim="foo123@cruxdev.crux", proof="p"),
        correlation_id="corr-1",
        payload="HelloWorld",
    )
    await client.publish(envelope)

    async for raw_msg, data in client.subscribe():
        assert Envelope.from_json(data) == envelope
        await client.ack(raw_msg)
        break


def test_envelope_wire_format_uses_camel_case():
    envelope = Envelope(
        certificate=Certificate(claim="foo123@cruxdev.crux", proof="p"),
        correlation_id="corr-1",
        payload={"a": 1},
    )
    assert '"correlationId":"corr-1"' in envelope.to_json()


@pytest.mark.asyncio
async def test_redis_transport_import():
    """Test Redis transport can be imported and instantiated without a server."""
    from cruxconnect.transports.redis import RedisTransport

    transport = RedisTransport()
    assert transport.host == "localhost"
    assert transport.port == 6379
    assert transport.queue_name("inbox.bar@wallet.ns") == "cruxconnect:inbox.bar@wallet.ns"

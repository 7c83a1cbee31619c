"""Example: authenticated payment request between two identities."""

import asyncio

from cruxconnect import (
    BasicKeyManager,
    CruxConnectProtocolMessenger,
    CruxId,
    InMemoryDirectory,
    ProtocolMessage,
    PubSubClientFactory,
    SecureCruxIdMessenger,
    crux_payment_protocol,
    get_transport,
)


async def main():
    """Send one payment request from foo to bar over the configured transport."""
    foo = CruxId.from_string("foo@wallet.crux")
    bar = CruxId.from_string("bar@wallet.crux")
    foo_keys = BasicKeyManager.generate()
    bar_keys = BasicKeyManager.generate()

    # Directory stand-in: in production this is backed by the naming system
    directory = InMemoryDirectory()
    directory.register(foo, await foo_keys.get_public_key())
    directory.register(bar, await bar_keys.get_public_key())

    transport = get_transport()
    await transport.connect()
    clients = PubSubClientFactory(transport)

    foo_payments = CruxConnectProtocolMessenger(
        SecureCruxIdMessenger(directory, clients, foo, foo_keys), crux_payment_protocol
    )
    bar_payments = CruxConnectProtocolMessenger(
        SecureCruxIdMessenger(directory, clients, bar, bar_keys), crux_payment_protocol
    )

    received = asyncio.get_running_loop().create_future()
    bar_payments.listen(
        lambda message, sender: received.set_result((message, sender)),
        lambda error: print(f"Rejected: {error}"),
    )

    await foo_payments.send(
        ProtocolMessage(
            type="PAYMENT_REQUEST",
            content={
                "amount": "1",
                "assetId": "7c3baa3c-f5e8-490a-88a1-e0a052b7caa4",
                "toAddress": "randomAddress",
            },
        ),
        bar,
    )

    message, sender = await asyncio.wait_for(received, 5)
    print(f"✅ {bar} received {message.type} from {sender}: {message.content}")

    await bar_payments.close()
    await transport.disconnect()


if __name__ == "__main__":
    asyncio.run(main())

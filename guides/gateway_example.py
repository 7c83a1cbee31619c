"""Example: opening protocol gateways on a shared provider."""

import asyncio

from cruxconnect import (
    BasicKeyManager,
    CruxGatewayRepository,
    GatewayIdentityClaim,
    InMemoryDirectory,
    UnsupportedProtocol,
)


async def main():
    foo_keys = BasicKeyManager.generate()
    bar_keys = BasicKeyManager.generate()
    directory = InMemoryDirectory(
        {
            "foo@wallet.crux": await foo_keys.get_public_key(),
            "bar@wallet.crux": await bar_keys.get_public_key(),
        }
    )
    repository = CruxGatewayRepository(directory=directory)
    print(f"Supported protocols: {repository.registry.names}")

    try:
        repository.open_gateway("SMOKE_SIGNALS")
    except UnsupportedProtocol as exc:
        print(f"❌ {exc}")

    foo_gateway = repository.open_gateway(
        "BASIC", GatewayIdentityClaim(crux_id="foo@wallet.crux", key_manager=foo_keys)
    )
    bar_gateway = repository.open_gateway(
        "BASIC", GatewayIdentityClaim(crux_id="bar@wallet.crux", key_manager=bar_keys)
    )

    done = asyncio.Event()

    def on_message(message, sender):
        print(f"✅ bar got {message!r} from {sender}")
        done.set()

    bar_gateway.listen(on_message, lambda error: print(f"Rejected: {error}"))
    await foo_gateway.send({"ping": 1}, "bar@wallet.crux")
    await asyncio.wait_for(done.wait(), 5)
    await bar_gateway.close()


if __name__ == "__main__":
    asyncio.run(main())

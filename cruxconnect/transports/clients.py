"""Per-recipient transport clients built over a shared transport."""

from __future__ import annotations

from typing import Any, AsyncIterator, Optional, Tuple

from ..contracts import Envelope
from ..identity import CruxId
from .base import BaseTransport


def inbox_topic(identity: CruxId | str) -> str:
    """Topic on which ``identity`` receives point-to-point envelopes."""
    return f"inbox.{CruxId.coerce(identity)}"


class PubSubClient:
    """Transport client scoped to a single identity's inbox channel."""

    def __init__(self, transport: BaseTransport, identity: CruxId) -> None:
        self._transport = transport
        self.identity = identity
        self.topic = inbox_topic(identity)

    async def publish(self, envelope: Envelope) -> None:
        """Publish ``envelope`` to the inbox of this client's identity."""
        await self._transport.publish(self.topic, envelope.to_json())

    async def subscribe(
        self, lifespan: Optional[float] = None
    ) -> AsyncIterator[Tuple[Any, str]]:
        """Yield raw message and serialized envelope pairs from the inbox."""
        async for raw_message, data in self._transport.subscribe(
            self.topic, lifespan=lifespan
        ):
            yield raw_message, data

    async def ack(self, raw_message: Any) -> None:
        await self._transport.ack(raw_message)


class PubSubClientFactory:
    """Hands out one cached :class:`PubSubClient` per identity."""

    def __init__(self, transport: BaseTransport) -> None:
        self.transport = transport
        self._clients: dict[CruxId, PubSubClient] = {}

    def get_client(self, identity: CruxId | str) -> PubSubClient:
        identity = CruxId.coerce(identity)
        client = self._clients.get(identity)
        if client is None:
            client = PubSubClient(self.transport, identity)
            self._clients[identity] = client
        return client

"""Multi-protocol gateways over a shared publish/subscribe provider."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from pydantic import BaseModel, ValidationError

from ..contracts import GatewayPacket, PacketMetadata, new_correlation_id
from ..directory import DirectoryLookup
from ..errors import CertificateInvalid, MalformedProtocolMessage
from ..identity import CruxId
from ..security import CertificateAuthority, KeyManager
from ..subscription import Callback, Subscription
from ..transports import BaseTransport, InMemoryTransport
from .handlers import ProtocolHandler, default_handlers
from .registry import HandlerRegistry

logger = logging.getLogger(__name__)


def gateway_topic(protocol: str, identity: Optional[CruxId | str] = None) -> str:
    """Topic for ``protocol`` addressed to ``identity``, or its broadcast topic."""
    if identity is None:
        return f"gateway.{protocol}"
    return f"gateway.{protocol}.{CruxId.coerce(identity)}"


@dataclass(frozen=True)
class GatewayIdentityClaim:
    """Identity a gateway speaks for, with the key that proves it."""

    crux_id: CruxId
    key_manager: KeyManager

    def __post_init__(self) -> None:
        object.__setattr__(self, "crux_id", CruxId.coerce(self.crux_id))


class CruxGateway:
    """Sends and receives messages of one protocol over a shared provider.

    With a ``self_claim`` the gateway signs each packet with a certificate
    bound to the packet's correlation id and listens on its own addressed
    topic; without one it listens on the protocol's broadcast topic. When a
    ``directory`` is given, inbound packets must carry a certificate that
    verifies against it, and ``on_message`` receives the authenticated
    sender; otherwise the sender is reported as ``None``.
    """

    def __init__(
        self,
        transport: BaseTransport,
        handler: ProtocolHandler,
        self_claim: Optional[GatewayIdentityClaim] = None,
        directory: Optional[DirectoryLookup] = None,
        certificate_authority: Optional[CertificateAuthority] = None,
    ) -> None:
        self._transport = transport
        self._handler = handler
        self.self_claim = self_claim
        self._directory = directory
        self._authority = certificate_authority or CertificateAuthority()
        self.listen_topic = gateway_topic(
            handler.name, self_claim.crux_id if self_claim else None
        )
        self._subscription = Subscription(
            label=f"gateway[{self.listen_topic}]",
            source=lambda lifespan: transport.subscribe(self.listen_topic, lifespan=lifespan),
            ack=transport.ack,
            handle=self._open_packet,
        )

    @property
    def protocol(self) -> str:
        return self._handler.name

    async def send(self, message: Any, recipient: Optional[CruxId | str] = None) -> str:
        """Publish ``message`` to ``recipient``, or broadcast when omitted.

        Raises:
            MalformedProtocolMessage: The protocol handler rejects ``message``;
                nothing is published.
        """
        if isinstance(message, BaseModel):
            message = message.model_dump(mode="json", by_alias=True)
        if not self._handler.validate(message):
            raise MalformedProtocolMessage(
                f"Message rejected by protocol handler {self.protocol}"
            )

        receiver = CruxId.coerce(recipient) if recipient is not None else None
        correlation_id = new_correlation_id()
        sender = None
        certificate = None
        if self.self_claim is not None:
            sender = str(self.self_claim.crux_id)
            certificate = await self._authority.make(
                self.self_claim.crux_id, self.self_claim.key_manager, correlation_id
            )
        packet = GatewayPacket(
            metadata=PacketMetadata(
                correlation_id=correlation_id,
                protocol=self.protocol,
                sender=sender,
                receiver=str(receiver) if receiver else None,
                certificate=certificate,
            ),
            message=message,
        )
        topic = gateway_topic(self.protocol, receiver)
        await self._transport.publish(topic, packet.to_json())
        logger.debug(f"Published packet {correlation_id} on {topic}")
        return correlation_id

    def listen(
        self, on_message: Callback, on_error: Callback, lifespan: Optional[float] = None
    ) -> None:
        """Deliver accepted messages as ``on_message(message, sender)``."""
        self._subscription.replace(on_message, on_error, lifespan)

    async def wait(self) -> None:
        await self._subscription.wait()

    async def close(self) -> None:
        await self._subscription.close()

    async def _open_packet(self, data: str) -> Tuple[Any, Optional[CruxId]]:
        try:
            packet = GatewayPacket.from_json(data)
        except ValidationError as exc:
            raise MalformedProtocolMessage(f"Undecodable gateway packet: {exc}") from exc

        metadata = packet.metadata
        if metadata.protocol != self.protocol:
            raise MalformedProtocolMessage(
                f"Packet for protocol {metadata.protocol} received by {self.protocol} gateway"
            )
        sender = await self._authenticate(metadata)
        if not self._handler.validate(packet.message):
            raise MalformedProtocolMessage(
                f"Message rejected by protocol handler {self.protocol}"
            )
        return packet.message, sender

    async def _authenticate(self, metadata: PacketMetadata) -> Optional[CruxId]:
        if self._directory is None:
            return None
        if metadata.certificate is None:
            raise CertificateInvalid(f"Packet {metadata.correlation_id} is not signed")
        sender = await self._authority.verify(
            metadata.certificate, metadata.correlation_id, self._directory
        )
        if metadata.sender is not None and metadata.sender != str(sender):
            raise CertificateInvalid(
                f"Packet claims sender {metadata.sender} but is certified for {sender}"
            )
        return sender


class CruxGatewayRepository:
    """Opens gateways for registered protocols on one shared provider."""

    def __init__(
        self,
        transport: Optional[BaseTransport] = None,
        handlers: Optional[Iterable[ProtocolHandler]] = None,
        directory: Optional[DirectoryLookup] = None,
    ) -> None:
        self.transport = transport or InMemoryTransport()
        self.registry = HandlerRegistry(
            handlers if handlers is not None else default_handlers()
        )
        self._directory = directory

    def open_gateway(
        self, protocol: str, self_claim: Optional[GatewayIdentityClaim] = None
    ) -> CruxGateway:
        """Return a gateway for ``protocol``.

        Raises:
            UnsupportedProtocol: No handler is registered under ``protocol``.
        """
        handler = self.registry.get(protocol)
        gateway = CruxGateway(
            self.transport, handler, self_claim=self_claim, directory=self._directory
        )
        logger.info(f"Opened {protocol} gateway listening on {gateway.listen_topic}")
        return gateway

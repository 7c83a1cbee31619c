"""Point-to-point messenger authenticating senders by identity certificates."""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from pydantic import ValidationError

from .contracts import Envelope, encode_payload, new_correlation_id
from .directory import DirectoryLookup
from .errors import CertificateInvalid, UnknownIdentity
from .identity import CruxId
from .security import CertificateAuthority, KeyManager
from .subscription import Callback, Subscription
from .transports import PubSubClientFactory

logger = logging.getLogger(__name__)


class SecureCruxIdMessenger:
    """Sends and receives payloads whose sender identity is proven.

    Every outbound envelope carries a certificate signed by ``key_manager``
    for ``self_id`` and bound to a fresh correlation id. Inbound envelopes
    reach ``on_message`` only after the certificate verifies against the key
    the directory currently holds for the claimed sender.
    """

    def __init__(
        self,
        directory: DirectoryLookup,
        client_factory: PubSubClientFactory,
        self_id: CruxId | str,
        key_manager: KeyManager,
        certificate_authority: Optional[CertificateAuthority] = None,
    ) -> None:
        self._directory = directory
        self._client_factory = client_factory
        self.self_id = CruxId.coerce(self_id)
        self._key_manager = key_manager
        self._authority = certificate_authority or CertificateAuthority()
        inbox = client_factory.get_client(self.self_id)
        self._subscription = Subscription(
            label=f"messenger[{self.self_id}]",
            source=lambda lifespan: inbox.subscribe(lifespan=lifespan),
            ack=inbox.ack,
            handle=self._open_envelope,
        )

    async def send(self, payload: Any, recipient: CruxId | str) -> str:
        """Publish ``payload`` to ``recipient``'s inbox.

        Returns the correlation id once the transport accepted the publish.

        ``bytes`` payloads are delivered as ``bytes``; other payloads must be
        JSON serializable.

        Raises:
            UnknownIdentity: ``recipient`` is not registered in the directory.
            TypeError: ``payload`` is neither bytes nor JSON serializable.
        """
        wire_payload, encoding = encode_payload(payload)
        recipient = CruxId.coerce(recipient)
        if await self._directory.resolve(recipient) is None:
            raise UnknownIdentity(recipient)

        correlation_id = new_correlation_id()
        client = self._client_factory.get_client(recipient)
        certificate = await self._authority.make(
            self.self_id, self._key_manager, correlation_id
        )
        envelope = Envelope(
            certificate=certificate,
            correlation_id=correlation_id,
            payload=wire_payload,
            payload_encoding=encoding,
        )
        await client.publish(envelope)
        logger.debug(
            f"Published envelope {correlation_id} from {self.self_id} to {recipient}"
        )
        return correlation_id

    def listen(
        self, on_message: Callback, on_error: Callback, lifespan: Optional[float] = None
    ) -> None:
        """Deliver authenticated payloads as ``on_message(payload, sender)``.

        Verification failures go to ``on_error(error)``. A later call replaces
        the callback pair. Must be called from within a running event loop.
        """
        self._subscription.replace(on_message, on_error, lifespan)

    async def wait(self) -> None:
        await self._subscription.wait()

    async def close(self) -> None:
        await self._subscription.close()

    async def _open_envelope(self, data: str) -> Tuple[Any, CruxId]:
        try:
            envelope = Envelope.from_json(data)
        except ValidationError as exc:
            raise CertificateInvalid(f"Undecodable envelope: {exc}") from exc

        sender = await self._authority.verify(
            envelope.certificate, envelope.correlation_id, self._directory
        )
        try:
            payload = envelope.open_payload()
        except ValueError as exc:
            raise CertificateInvalid(
                f"Undecodable payload in envelope {envelope.correlation_id}: {exc}"
            ) from exc
        logger.debug(f"Delivering envelope {envelope.correlation_id} from {sender}")
        return payload, sender

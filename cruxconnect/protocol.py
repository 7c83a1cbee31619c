"""Typed protocol messages validated on top of the secure messenger."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .contracts import ProtocolMessage
from .errors import MalformedProtocolMessage
from .identity import CruxId
from .messenger import SecureCruxIdMessenger
from .subscription import Callback, invoke

logger = logging.getLogger(__name__)

Validator = Callable[[Dict[str, Any]], bool]


def schema_validator(model: Type[BaseModel]) -> Validator:
    """Build a content validator from a pydantic model."""

    def _validate(content: Dict[str, Any]) -> bool:
        try:
            model.model_validate(content)
        except ValidationError:
            return False
        return True

    _validate.__name__ = f"validate_{model.__name__}"
    return _validate


class ProtocolDefinition:
    """Fixed mapping from message type to content validator."""

    def __init__(self, name: str, validators: Mapping[str, Validator]) -> None:
        self.name = name
        self._validators = MappingProxyType(dict(validators))

    @classmethod
    def from_models(
        cls, name: str, models: Mapping[str, Type[BaseModel]]
    ) -> "ProtocolDefinition":
        return cls(name, {t: schema_validator(m) for t, m in models.items()})

    def validate(self, message: ProtocolMessage) -> None:
        """Raise :class:`MalformedProtocolMessage` unless ``message`` is well-formed."""
        validator = self._validators.get(message.type)
        if validator is None:
            raise MalformedProtocolMessage(
                f"Unknown message type '{message.type}' for protocol {self.name}"
            )
        if not validator(message.content):
            raise MalformedProtocolMessage(
                f"Content does not match schema of '{message.type}' in protocol {self.name}"
            )

    def is_valid(self, message: Any) -> bool:
        try:
            self.validate(coerce_message(message))
        except MalformedProtocolMessage:
            return False
        return True


def coerce_message(message: Any) -> ProtocolMessage:
    """Return ``message`` as a :class:`ProtocolMessage`."""
    if isinstance(message, ProtocolMessage):
        return message
    try:
        if isinstance(message, (str, bytes)):
            return ProtocolMessage.from_json(message)
        return ProtocolMessage.model_validate(message)
    except ValidationError as exc:
        raise MalformedProtocolMessage(f"Not a protocol message: {exc}") from exc


class PaymentRequest(BaseModel):
    """Content of a ``PAYMENT_REQUEST`` message."""

    model_config = ConfigDict(extra="forbid")

    amount: str = Field(..., min_length=1)
    asset_id: str = Field(..., alias="assetId", min_length=1)
    to_address: str = Field(..., alias="toAddress", min_length=1)
    tag: Optional[str] = None


crux_payment_protocol = ProtocolDefinition.from_models(
    "CRUX.PAYMENT", {"PAYMENT_REQUEST": PaymentRequest}
)


class CruxConnectProtocolMessenger:
    """Wraps a :class:`SecureCruxIdMessenger` with a protocol definition.

    Outbound messages are checked before any transport I/O. Inbound
    payloads are authenticated by the wrapped messenger, then decoded and
    checked against the same definition before reaching ``on_message``.
    """

    def __init__(
        self, messenger: SecureCruxIdMessenger, protocol: ProtocolDefinition
    ) -> None:
        self._messenger = messenger
        self.protocol = protocol

    async def send(self, message: ProtocolMessage | dict, recipient: CruxId | str) -> str:
        message = coerce_message(message)
        self.protocol.validate(message)
        return await self._messenger.send(message.to_json(), recipient)

    def listen(
        self, on_message: Callback, on_error: Callback, lifespan: Optional[float] = None
    ) -> None:
        """Deliver validated messages as ``on_message(message, sender)``."""

        async def _on_payload(payload: Any, sender: CruxId) -> None:
            message = coerce_message(payload)
            self.protocol.validate(message)
            await invoke(on_message, message, sender)

        self._messenger.listen(_on_payload, on_error, lifespan)

    async def wait(self) -> None:
        await self._messenger.wait()

    async def close(self) -> None:
        await self._messenger.close()

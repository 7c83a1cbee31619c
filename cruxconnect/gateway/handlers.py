"""Protocol handlers validating gateway messages."""

from __future__ import annotations

from typing import Any, Protocol

from ..protocol import ProtocolDefinition, crux_payment_protocol


class ProtocolHandler(Protocol):
    """Named, stateless validator for one gateway protocol."""

    name: str

    def validate(self, message: Any) -> bool:
        """Return ``True`` when ``message`` is acceptable for this protocol."""


class BasicProtocolHandler:
    """Accepts any message."""

    name = "BASIC"

    def validate(self, message: Any) -> bool:
        return True


class DefinitionProtocolHandler:
    """Validates messages as typed protocol messages of a definition."""

    def __init__(self, definition: ProtocolDefinition) -> None:
        self.definition = definition
        self.name = definition.name

    def validate(self, message: Any) -> bool:
        return self.definition.is_valid(message)


class PaymentsProtocolHandler(DefinitionProtocolHandler):
    """Payment requests as defined by :data:`crux_payment_protocol`."""

    def __init__(self) -> None:
        super().__init__(crux_payment_protocol)


def default_handlers() -> list[ProtocolHandler]:
    """Handlers every gateway repository supports out of the box."""
    return [BasicProtocolHandler(), PaymentsProtocolHandler()]

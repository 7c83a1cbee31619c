"""Gateway repository, handler registry and protocol handlers."""

from .gateway import (
    CruxGateway,
    CruxGatewayRepository,
    GatewayIdentityClaim,
    gateway_topic,
)
from .handlers import (
    BasicProtocolHandler,
    DefinitionProtocolHandler,
    PaymentsProtocolHandler,
    ProtocolHandler,
    default_handlers,
)
from .registry import HandlerRegistry

__all__ = [
    "BasicProtocolHandler",
    "CruxGateway",
    "CruxGatewayRepository",
    "DefinitionProtocolHandler",
    "GatewayIdentityClaim",
    "HandlerRegistry",
    "PaymentsProtocolHandler",
    "ProtocolHandler",
    "default_handlers",
    "gateway_topic",
]

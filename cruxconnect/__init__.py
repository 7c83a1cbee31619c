"""cruxconnect: identity-authenticated messaging over publish/subscribe transports."""

from .contracts import Certificate, Envelope, GatewayPacket, ProtocolMessage
from .directory import DirectoryLookup, HttpDirectory, InMemoryDirectory, get_directory
from .errors import (
    CertificateInvalid,
    CruxConnectError,
    DuplicateProtocol,
    InvalidIdentity,
    MalformedProtocolMessage,
    UnknownIdentity,
    UnsupportedProtocol,
)
from .gateway import CruxGateway, CruxGatewayRepository, GatewayIdentityClaim, HandlerRegistry
from .identity import CruxId
from .messenger import SecureCruxIdMessenger
from .protocol import CruxConnectProtocolMessenger, ProtocolDefinition, crux_payment_protocol
from .security import BasicKeyManager, CertificateAuthority, KeyManager
from .transports import PubSubClientFactory, get_transport

__version__ = "0.1.0"
__all__ = [
    "BasicKeyManager",
    "Certificate",
    "CertificateAuthority",
    "CertificateInvalid",
    "CruxConnectError",
    "CruxConnectProtocolMessenger",
    "CruxGateway",
    "CruxGatewayRepository",
    "CruxId",
    "DirectoryLookup",
    "DuplicateProtocol",
    "Envelope",
    "GatewayIdentityClaim",
    "GatewayPacket",
    "HandlerRegistry",
    "HttpDirectory",
    "InMemoryDirectory",
    "InvalidIdentity",
    "KeyManager",
    "MalformedProtocolMessage",
    "ProtocolDefinition",
    "ProtocolMessage",
    "PubSubClientFactory",
    "SecureCruxIdMessenger",
    "UnknownIdentity",
    "UnsupportedProtocol",
    "crux_payment_protocol",
    "get_directory",
    "get_transport",
]

"""Exception hierarchy for identity-authenticated messaging."""

from __future__ import annotations


class CruxConnectError(Exception):
    """Base exception for all cruxconnect failures."""


class InvalidIdentity(CruxConnectError, ValueError):
    """Identity string does not parse as ``subdomain@domain``."""


class UnknownIdentity(CruxConnectError):
    """The directory has no public key for the identity."""

    def __init__(self, identity: object) -> None:
        super().__init__(f"Identity not found in directory: {identity}")
        self.identity = identity


class CertificateInvalid(CruxConnectError):
    """Certificate proof or correlation binding failed verification."""


class MalformedProtocolMessage(CruxConnectError):
    """Message content does not satisfy the validator for its type."""


class UnsupportedProtocol(CruxConnectError):
    """No handler is registered under the requested protocol name."""

    def __init__(self, protocol: str) -> None:
        super().__init__(f"Unsupported protocol: {protocol}")
        self.protocol = protocol


class DuplicateProtocol(CruxConnectError, ValueError):
    """Two handlers were seeded under the same protocol name."""


__all__ = [
    "CruxConnectError",
    "InvalidIdentity",
    "UnknownIdentity",
    "CertificateInvalid",
    "MalformedProtocolMessage",
    "UnsupportedProtocol",
    "DuplicateProtocol",
]

"""Key management utilities for signing and verification."""

from __future__ import annotations

from typing import Any, Dict, Protocol, Union

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

SIGNING_ALGORITHM = "ES256K"
CURVE = ec.SECP256K1()

PublicKeyLike = Union[str, bytes, ec.EllipticCurvePublicKey]


class KeyManager(Protocol):
    """Signing capability supplied by the caller.

    Implementations may be backed by hardware or a remote signer, so both
    methods are coroutines. They may be called concurrently by several
    in-flight sends.
    """

    async def sign(self, claims: Dict[str, Any]) -> str:
        """Return a compact JWS over ``claims``."""

    async def get_public_key(self) -> str:
        """Return the hex encoded public key matching the signing key."""


def load_private_key(value: Union[str, bytes]) -> ec.EllipticCurvePrivateKey:
    """Load a secp256k1 private key from a hex scalar or PEM."""
    if isinstance(value, bytes):
        value = value.decode()
    value = value.strip()
    if value.startswith("-----BEGIN"):
        key = serialization.load_pem_private_key(value.encode(), password=None)
        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise ValueError("PEM does not contain an EC private key")
        return key
    try:
        scalar = int(value, 16)
    except ValueError as exc:
        raise ValueError("Private key should be hex encoded or PEM") from exc
    return ec.derive_private_key(scalar, CURVE)


def load_public_key(value: PublicKeyLike) -> ec.EllipticCurvePublicKey:
    """Load a public key from SEC1 hex (compressed or not), PEM or a key object."""
    if isinstance(value, ec.EllipticCurvePublicKey):
        return value
    if isinstance(value, bytes):
        value = value.decode()
    value = value.strip()
    if value.startswith("-----BEGIN"):
        key = serialization.load_pem_public_key(value.encode())
        if not isinstance(key, ec.EllipticCurvePublicKey):
            raise ValueError("PEM does not contain an EC public key")
        return key
    return ec.EllipticCurvePublicKey.from_encoded_point(CURVE, bytes.fromhex(value))


def public_key_to_hex(key: ec.EllipticCurvePublicKey) -> str:
    return key.public_bytes(
        serialization.Encoding.X962, serialization.PublicFormat.CompressedPoint
    ).hex()


class BasicKeyManager:
    """In-process key manager holding a secp256k1 private key."""

    def __init__(self, private_key: Union[str, bytes, ec.EllipticCurvePrivateKey]) -> None:
        if isinstance(private_key, ec.EllipticCurvePrivateKey):
            self._private_key = private_key
        else:
            self._private_key = load_private_key(private_key)

    @classmethod
    def generate(cls) -> "BasicKeyManager":
        """Create a key manager around a freshly generated key."""
        return cls(ec.generate_private_key(CURVE))

    @property
    def private_key_hex(self) -> str:
        return format(self._private_key.private_numbers().private_value, "064x")

    async def sign(self, claims: Dict[str, Any]) -> str:
        return jwt.encode(claims, self._private_key, algorithm=SIGNING_ALGORITHM)

    @property
    def public_key_hex(self) -> str:
        return public_key_to_hex(self._private_key.public_key())

    async def get_public_key(self) -> str:
        return self.public_key_hex

"""Certificate issuance and key handling."""

from .certificates import CertificateAuthority, certificate_claims
from .keys import BasicKeyManager, KeyManager, load_public_key

__all__ = [
    "BasicKeyManager",
    "CertificateAuthority",
    "KeyManager",
    "certificate_claims",
    "load_public_key",
]

"""Issue and verify identity certificates bound to a correlation id."""

from __future__ import annotations

import logging

import jwt

from ..contracts import Certificate
from ..directory import DirectoryLookup
from ..errors import CertificateInvalid, UnknownIdentity
from ..identity import CruxId
from .keys import SIGNING_ALGORITHM, KeyManager, load_public_key

logger = logging.getLogger(__name__)


def certificate_claims(claim: str, correlation_id: str) -> dict:
    """Canonical payload signed into a certificate proof."""
    return {"claim": claim, "messageId": correlation_id}


class CertificateAuthority:
    """Signs and verifies identity claims for individual messages.

    A certificate proves that the holder of the key registered for ``claim``
    produced it for one specific correlation id. The proof is a compact
    ES256K JWS over :func:`certificate_claims`, so a captured certificate
    fails verification if it is presented with any other correlation id.

    Both operations are stateless; verification never mutates anything and
    may be repeated safely.
    """

    @staticmethod
    async def make(
        self_id: CruxId | str, key_manager: KeyManager, correlation_id: str
    ) -> Certificate:
        """Sign a certificate for ``self_id`` bound to ``correlation_id``."""
        claim = str(CruxId.coerce(self_id))
        proof = await key_manager.sign(certificate_claims(claim, correlation_id))
        return Certificate(claim=claim, proof=proof)

    @staticmethod
    async def verify(
        certificate: Certificate,
        expected_correlation_id: str,
        directory: DirectoryLookup,
    ) -> CruxId:
        """Verify ``certificate`` and return the authenticated identity.

        Raises:
            UnknownIdentity: The directory has no key for the claimed identity.
            CertificateInvalid: The proof does not verify against the
                registered key, or is bound to another claim or correlation id.
        """
        try:
            claimed = CruxId.from_string(certificate.claim)
        except ValueError as exc:
            raise CertificateInvalid(f"Malformed claim: {certificate.claim!r}") from exc

        public_key = await directory.resolve(claimed)
        if public_key is None:
            raise UnknownIdentity(claimed)

        try:
            decoded = jwt.decode(
                certificate.proof,
                load_public_key(public_key),
                algorithms=[SIGNING_ALGORITHM],
            )
        except (jwt.InvalidTokenError, ValueError) as exc:
            raise CertificateInvalid(f"Proof verification failed for {claimed}: {exc}") from exc

        expected = certificate_claims(str(claimed), expected_correlation_id)
        if decoded.get("claim") != expected["claim"]:
            raise CertificateInvalid(f"Proof was issued for another identity than {claimed}")
        if decoded.get("messageId") != expected["messageId"]:
            raise CertificateInvalid(
                f"Proof is bound to another correlation id than {expected_correlation_id}"
            )
        logger.debug(f"Verified certificate of {claimed} for {expected_correlation_id}")
        return claimed


__all__ = ["CertificateAuthority", "certificate_claims"]

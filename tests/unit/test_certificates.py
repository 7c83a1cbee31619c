"""Tests for certificate issuance and verification."""

import jwt
import pytest

from conftest import BAR, BAZ, FOO
from cruxconnect import (
    BasicKeyManager,
    Certificate,
    CertificateAuthority,
    CertificateInvalid,
    UnknownIdentity,
)
from cruxconnect.security.keys import load_public_key

# Well-formed ES256K token over a messageId, not signed by any registered key.
FAKE_PROOF = (
    "eyJ0eXAiOiJKV1QiLCJhbGciOiJFUzI1NksifQ."
    "eyJtZXNzYWdlSWQiOiIxMjNlNDU2Ny1lODliLTEyZDMtYTQ1Ni00MjY2MTQxNzQwMDAifQ."
    "iaa0Y9mPDBv8V_fVMRrJuqRyYcVvHYqbZcTGWFrDSwezJt6R7NQbHoA36fq0av51Q2LKJsQJHAwMfc-ph806fA"
)


@pytest.mark.asyncio
async def test_make_signs_claim_and_correlation_id(foo_keys):
    certificate = await CertificateAuthority.make(FOO, foo_keys, "corr-1")

    assert certificate.claim == "foo123@cruxdev.crux"
    claims = jwt.decode(
        certificate.proof, load_public_key(foo_keys.public_key_hex), algorithms=["ES256K"]
    )
    assert claims == {"claim": "foo123@cruxdev.crux", "messageId": "corr-1"}


@pytest.mark.asyncio
async def test_verify_returns_claimed_identity(foo_keys, directory):
    certificate = await CertificateAuthority.make(FOO, foo_keys, "corr-1")

    sender = await CertificateAuthority.verify(certificate, "corr-1", directory)
    assert sender == FOO


@pytest.mark.asyncio
async def test_verify_is_repeatable(foo_keys, directory):
    certificate = await CertificateAuthority.make(FOO, foo_keys, "corr-1")
    before = certificate.model_dump()

    for _ in range(3):
        assert await CertificateAuthority.verify(certificate, "corr-1", directory) == FOO
    assert certificate.model_dump() == before


@pytest.mark.asyncio
async def test_substituted_correlation_id_is_rejected(foo_keys, directory):
    certificate = await CertificateAuthority.make(FOO, foo_keys, "corr-1")

    with pytest.raises(CertificateInvalid):
        await CertificateAuthority.verify(certificate, "corr-2", directory)


@pytest.mark.asyncio
async def test_key_not_matching_directory_is_rejected(bar_keys, directory):
    # foo claims its identity but signs with bar's key
    certificate = await CertificateAuthority.make(FOO, bar_keys, "corr-1")

    with pytest.raises(CertificateInvalid):
        await CertificateAuthority.verify(certificate, "corr-1", directory)


@pytest.mark.asyncio
async def test_claim_swapped_onto_other_certificate_is_rejected(bar_keys, directory):
    certificate = await CertificateAuthority.make(BAR, bar_keys, "corr-1")
    forged = Certificate(claim=str(FOO), proof=certificate.proof)

    with pytest.raises(CertificateInvalid):
        await CertificateAuthority.verify(forged, "corr-1", directory)


@pytest.mark.asyncio
async def test_tampered_proof_is_rejected(foo_keys, directory):
    certificate = await CertificateAuthority.make(FOO, foo_keys, "corr-1")
    header, payload, signature = certificate.proof.split(".")
    flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
    tampered = Certificate(claim=certificate.claim, proof=f"{header}.{payload}.{flipped}")

    with pytest.raises(CertificateInvalid):
        await CertificateAuthority.verify(tampered, "corr-1", directory)


@pytest.mark.asyncio
async def test_fake_certificate_is_rejected(directory):
    fake = Certificate(claim=str(BAR), proof=FAKE_PROOF)

    with pytest.raises(CertificateInvalid):
        await CertificateAuthority.verify(
            fake, "123e4567-e89b-12d3-a456-426614174000", directory
        )


@pytest.mark.asyncio
async def test_garbage_proof_is_rejected(directory):
    with pytest.raises(CertificateInvalid):
        await CertificateAuthority.verify(
            Certificate(claim=str(FOO), proof="not-a-token"), "corr-1", directory
        )


@pytest.mark.asyncio
async def test_unknown_identity(directory):
    stranger = BasicKeyManager.generate()
    certificate = await CertificateAuthority.make(BAZ, stranger, "corr-1")

    with pytest.raises(UnknownIdentity) as excinfo:
        await CertificateAuthority.verify(certificate, "corr-1", directory)
    assert excinfo.value.identity == BAZ


@pytest.mark.asyncio
async def test_key_manager_roundtrips_private_key():
    generated = BasicKeyManager.generate()
    restored = BasicKeyManager(generated.private_key_hex)

    assert await restored.get_public_key() == await generated.get_public_key()
    assert len(generated.public_key_hex) == 66


def test_invalid_private_key():
    with pytest.raises(ValueError):
        BasicKeyManager("definitely not a key")

"""Tests for detached PKCS#7 signing."""

from __future__ import annotations

import pytest
from asn1crypto import cms
from cryptography.hazmat.primitives.serialization import pkcs7

from pkpass.crypto.identity import SigningIdentity
from pkpass.crypto.signing import sign_detached
from pkpass.crypto.trust import verify_detached
from tests.factories import PkiBundle

CONTENT = b'{"pass.json":"da39a3ee5e6b4b0d3255bfef95601890afd80709"}'


def test_signature_is_detached_der_signed_data(signing_identity: SigningIdentity) -> None:
    """Output is DER SignedData without the signed content."""
    signature = sign_detached(signing_identity, CONTENT)

    info = cms.ContentInfo.load(signature)
    assert info["content_type"].native == "signed_data"
    assert info["content"]["encap_content_info"]["content"].native is None
    assert CONTENT not in signature


def test_signature_embeds_signer_and_chain(signing_identity: SigningIdentity, pki: PkiBundle) -> None:
    certificates = pkcs7.load_der_pkcs7_certificates(sign_detached(signing_identity, CONTENT))

    assert pki.leaf_cert in certificates
    assert pki.intermediate_cert in certificates


def test_digest_algorithm_is_sha256(signing_identity: SigningIdentity) -> None:
    info = cms.ContentInfo.load(sign_detached(signing_identity, CONTENT))
    signer_info = info["content"]["signer_infos"][0]

    assert signer_info["digest_algorithm"]["algorithm"].native == "sha256"


def test_signature_verifies_against_exact_bytes(
    signing_identity: SigningIdentity, pki: PkiBundle
) -> None:
    signature = sign_detached(signing_identity, CONTENT)

    verify_detached(signature, [pki.root_cert], CONTENT)


def test_rsa_signer(rsa_pki: PkiBundle) -> None:
    identity = SigningIdentity.from_parts(
        rsa_pki.leaf_key, rsa_pki.leaf_cert, [rsa_pki.intermediate_cert]
    )

    signature = sign_detached(identity, CONTENT)

    verify_detached(signature, [rsa_pki.root_cert], CONTENT)


def test_cannot_sign_without_key() -> None:
    with pytest.raises(ValueError, match="private key"):
        sign_detached(SigningIdentity.no_signature(), CONTENT)

"""Shared pytest fixtures for pkpass tests.

This module provides the test PKI (generated once per session), signing
identities and trust stores built on it, and isolation of the
process-wide trust anchor configuration.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from pkpass.crypto.identity import SigningIdentity
from pkpass.crypto.trust import (
    ENV_TRUST_ANCHORS,
    Pkcs7Verifier,
    TrustStore,
    reset_default_trust_store,
)
from pkpass.models.entities import Pass
from tests.factories import PkiBundle, create_rsa_key, create_sample_pass, create_test_pki


@pytest.fixture(autouse=True)
def _isolate_trust_anchors(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test without configured anchors and an empty anchor cache."""
    monkeypatch.delenv(ENV_TRUST_ANCHORS, raising=False)
    reset_default_trust_store()
    yield
    reset_default_trust_store()


@pytest.fixture(scope="session")
def pki() -> PkiBundle:
    """EC root -> intermediate -> leaf carrying both pass identifiers."""
    return create_test_pki()


@pytest.fixture(scope="session")
def rsa_pki() -> PkiBundle:
    """Same shape as ``pki`` with an RSA leaf key."""
    return create_test_pki(leaf_key=create_rsa_key())


@pytest.fixture
def signing_identity(pki: PkiBundle) -> SigningIdentity:
    return SigningIdentity.from_parts(pki.leaf_key, pki.leaf_cert, [pki.intermediate_cert])


@pytest.fixture
def trust_store(pki: PkiBundle) -> TrustStore:
    return TrustStore.from_certificates([pki.root_cert])


@pytest.fixture
def verifier(trust_store: TrustStore) -> Pkcs7Verifier:
    return Pkcs7Verifier(trust_store)


@pytest.fixture
def sample_pass() -> Pass:
    """Pass with metadata {Acme, d, 1} and no assets."""
    return create_sample_pass()

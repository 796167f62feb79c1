"""pkpass Cryptographic Layer.

This module provides the key material and signature handling for pass archives:
- Key and certificate loading (PEM, DER, PKCS#12) and CSR/bundle tooling
- Signing identities and the identifiers they stamp into ``pass.json``
- Detached PKCS#7 signing of ``manifest.json``
- Trust stores and pluggable signature verifiers

Public exports:
    keys: Key generation and management submodule
    signing: sign_detached
    trust: TrustStore, Verifier implementations, default anchor configuration
"""

from pkpass.crypto import keys
from pkpass.crypto import signing
from pkpass.crypto import trust
from pkpass.crypto.identity import IdentityStamps, SigningIdentity
from pkpass.crypto.signing import sign_detached
from pkpass.crypto.trust import (
    NoopVerifier,
    Pkcs7Verifier,
    TrustStore,
    Verifier,
    get_default_trust_store,
    reset_default_trust_store,
    verify_detached,
)

__all__ = [
    "keys",
    "signing",
    "trust",
    "IdentityStamps",
    "NoopVerifier",
    "Pkcs7Verifier",
    "SigningIdentity",
    "TrustStore",
    "Verifier",
    "get_default_trust_store",
    "reset_default_trust_store",
    "sign_detached",
    "verify_detached",
]

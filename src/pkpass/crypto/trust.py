"""Trust anchors and detached signature verification.

The process-wide anchor set comes from ``PKPASS_TRUST_ANCHORS`` (an
``os.pathsep``-separated list of PEM or DER certificate files), is loaded
on first use and then served read-only from a cache. Callers that need a
different set construct their own ``TrustStore`` and pass a
``Pkcs7Verifier`` explicitly.

Verification of a detached SignedData:

1. Decode the DER ``ContentInfo`` and its embedded certificates.
2. For each signer, locate its certificate by issuer/serial or subject
   key identifier.
3. Check the ``messageDigest`` signed attribute against the supplied
   content, then the signature over the re-tagged attribute set (or over
   the content itself when there are no signed attributes).
4. Walk from the signer certificate through embedded certificates to an
   anchor, checking each certificate's validity window. Every issuer on
   the way must be a CA (basic constraints, path length and, when
   present, the keyCertSign key usage).
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Protocol, runtime_checkable

from asn1crypto import cms, core
from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa

from pkpass.crypto.keys import load_certificates
from pkpass.errors import SignatureVerificationFailedError, TrustStoreNotConfiguredError
from pkpass.observability import get_logger

logger = get_logger(__name__)

ENV_TRUST_ANCHORS = "PKPASS_TRUST_ANCHORS"
MAX_CHAIN_DEPTH = 8

_DIGESTS: dict[str, type[hashes.HashAlgorithm]] = {
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}


@dataclass(frozen=True)
class TrustStore:
    """Immutable set of root/intermediate certificates accepted as issuers."""

    anchors: tuple[x509.Certificate, ...]

    @classmethod
    def from_certificates(cls, certificates: Iterable[x509.Certificate]) -> TrustStore:
        return cls(tuple(certificates))

    @classmethod
    def from_pem_bundle(cls, data: bytes) -> TrustStore:
        return cls(tuple(load_certificates(data)))

    @classmethod
    def from_paths(cls, paths: Iterable[str | Path]) -> TrustStore:
        anchors: list[x509.Certificate] = []
        for path in paths:
            anchors.extend(load_certificates(Path(path).read_bytes()))
        return cls(tuple(anchors))

    def __len__(self) -> int:
        return len(self.anchors)

    def __contains__(self, certificate: object) -> bool:
        return certificate in self.anchors


def _anchor_paths_from_env() -> list[str]:
    raw = os.environ.get(ENV_TRUST_ANCHORS, "")
    return [part for part in raw.split(os.pathsep) if part.strip()]


def is_default_trust_store_configured() -> bool:
    return bool(_anchor_paths_from_env())


@lru_cache(maxsize=1)
def get_default_trust_store() -> TrustStore:
    """Process-wide anchors from ``PKPASS_TRUST_ANCHORS``, loaded once.

    Raises:
        TrustStoreNotConfiguredError: If the variable is unset or empty
    """
    paths = _anchor_paths_from_env()
    if not paths:
        raise TrustStoreNotConfiguredError(ENV_TRUST_ANCHORS)
    store = TrustStore.from_paths(paths)
    logger.info("pkpass.trust.anchors_loaded", count=len(store), files=len(paths))
    return store


def reset_default_trust_store() -> None:
    """Drop the cached default store (tests, or after changing the environment)."""
    get_default_trust_store.cache_clear()


@runtime_checkable
class Verifier(Protocol):
    """Checks a detached signature over ``content``; raises on failure."""

    def verify(self, signature: bytes, content: bytes) -> None: ...


class NoopVerifier:
    """Accepts every signature without looking at it."""

    def verify(self, signature: bytes, content: bytes) -> None:
        return None


class Pkcs7Verifier:
    """Verifies DER PKCS#7 detached signatures against a trust store."""

    def __init__(self, trust_store: TrustStore, *, at: datetime | None = None) -> None:
        self.trust_store = trust_store
        self.at = at

    def verify(self, signature: bytes, content: bytes) -> None:
        verify_detached(signature, self.trust_store.anchors, content, at=self.at)


def _fail(reason: str, **details: object) -> SignatureVerificationFailedError:
    return SignatureVerificationFailedError(reason, details=dict(details))


def _signed_data(signature: bytes) -> cms.SignedData:
    if not signature:
        raise _fail("signature entry is empty")
    info = cms.ContentInfo.load(signature)
    if info["content_type"].native != "signed_data":
        raise _fail("not a SignedData structure", content_type=info["content_type"].native)
    return info["content"]


def _embedded_certificates(
    signed_data: cms.SignedData,
) -> list[tuple[asn1_x509.Certificate, x509.Certificate]]:
    choices = signed_data["certificates"]
    if isinstance(choices, core.Void):
        return []
    embedded = []
    for choice in choices:
        if choice.name != "certificate":
            continue
        embedded.append((choice.chosen, x509.load_der_x509_certificate(choice.chosen.dump())))
    return embedded


def _find_signer(
    signer_info: cms.SignerInfo, embedded: Sequence[tuple[asn1_x509.Certificate, x509.Certificate]]
) -> x509.Certificate:
    sid = signer_info["sid"]
    for parsed, certificate in embedded:
        if sid.name == "issuer_and_serial_number":
            if (
                parsed.issuer == sid.chosen["issuer"]
                and parsed.serial_number == sid.chosen["serial_number"].native
            ):
                return certificate
        elif parsed.key_identifier == sid.native:
            return certificate
    raise _fail("signer certificate not embedded in signature")


def _check_content_digest(
    signer_info: cms.SignerInfo, content: bytes, algorithm: hashes.HashAlgorithm
) -> bytes:
    """Bytes covered by the signer's signature."""
    signed_attrs = signer_info["signed_attrs"]
    if isinstance(signed_attrs, core.Void):
        return content

    expected = None
    for attribute in signed_attrs:
        if attribute["type"].native == "message_digest":
            expected = attribute["values"][0].native
            break
    if expected is None:
        raise _fail("signed attributes lack a message digest")
    digest = hashes.Hash(algorithm)
    digest.update(content)
    if digest.finalize() != expected:
        raise _fail("message digest does not match content")
    # Signed attributes are signed as an explicit SET OF, not the [0] IMPLICIT form.
    return b"\x31" + signed_attrs.dump()[1:]


def _check_signer_signature(
    signer_info: cms.SignerInfo,
    certificate: x509.Certificate,
    signed_bytes: bytes,
    algorithm: hashes.HashAlgorithm,
) -> None:
    scheme = signer_info["signature_algorithm"].signature_algo
    raw = signer_info["signature"].native
    public_key = certificate.public_key()
    if scheme == "rsassa_pkcs1v15" and isinstance(public_key, rsa.RSAPublicKey):
        public_key.verify(raw, signed_bytes, padding.PKCS1v15(), algorithm)
    elif scheme == "ecdsa" and isinstance(public_key, ec.EllipticCurvePublicKey):
        public_key.verify(raw, signed_bytes, ec.ECDSA(algorithm))
    else:
        raise _fail("unsupported signature algorithm", algorithm=scheme)


def _check_validity(certificate: x509.Certificate, at: datetime) -> None:
    if not certificate.not_valid_before_utc <= at <= certificate.not_valid_after_utc:
        raise _fail(
            "certificate outside its validity period",
            subject=certificate.subject.rfc4514_string(),
        )


def _issued_by(certificate: x509.Certificate, issuer: x509.Certificate) -> bool:
    if certificate.issuer != issuer.subject:
        return False
    try:
        certificate.verify_directly_issued_by(issuer)
    except (ValueError, TypeError, InvalidSignature):
        return False
    return True


def _check_issuer(issuer: x509.Certificate, ca_below: int) -> None:
    """Require ``issuer`` to be a CA allowed to sit above ``ca_below`` CA certificates."""
    subject = issuer.subject.rfc4514_string()
    try:
        constraints = issuer.extensions.get_extension_for_class(x509.BasicConstraints).value
    except x509.ExtensionNotFound:
        raise _fail("issuer certificate is not a CA", subject=subject) from None
    if not constraints.ca:
        raise _fail("issuer certificate is not a CA", subject=subject)
    if constraints.path_length is not None and ca_below > constraints.path_length:
        raise _fail(
            "issuer path length constraint exceeded",
            subject=subject,
            path_length=constraints.path_length,
        )
    try:
        key_usage = issuer.extensions.get_extension_for_class(x509.KeyUsage).value
    except x509.ExtensionNotFound:
        return
    if not key_usage.key_cert_sign:
        raise _fail("issuer key usage does not allow certificate signing", subject=subject)


def _check_chain(
    signer: x509.Certificate,
    intermediates: Sequence[x509.Certificate],
    anchors: Sequence[x509.Certificate],
    at: datetime,
) -> None:
    current = signer
    for ca_below in range(MAX_CHAIN_DEPTH):
        _check_validity(current, at)
        if current in anchors:
            return
        for anchor in anchors:
            if _issued_by(current, anchor):
                _check_issuer(anchor, ca_below)
                _check_validity(anchor, at)
                return
        issuer = next(
            (c for c in intermediates if c != current and _issued_by(current, c)),
            None,
        )
        if issuer is None:
            break
        _check_issuer(issuer, ca_below)
        current = issuer
    raise _fail(
        "signer certificate does not chain to a trusted anchor",
        subject=signer.subject.rfc4514_string(),
    )


def verify_detached(
    signature: bytes,
    anchors: Sequence[x509.Certificate],
    content: bytes,
    *,
    at: datetime | None = None,
) -> None:
    """Verify a DER detached SignedData over ``content`` against ``anchors``.

    ``content`` must be byte-identical to what was signed.

    Raises:
        SignatureVerificationFailedError: On any decoding, digest,
            signature or chain failure
    """
    when = at or datetime.now(timezone.utc)
    try:
        signed_data = _signed_data(signature)
        embedded = _embedded_certificates(signed_data)
        signer_infos = signed_data["signer_infos"]
        if len(signer_infos) == 0:
            raise _fail("signature has no signers")
        certificates = [certificate for _, certificate in embedded]
        for signer_info in signer_infos:
            digest_name = signer_info["digest_algorithm"]["algorithm"].native
            digest_cls = _DIGESTS.get(digest_name)
            if digest_cls is None:
                raise _fail("unsupported digest algorithm", algorithm=digest_name)
            algorithm = digest_cls()
            signer = _find_signer(signer_info, embedded)
            signed_bytes = _check_content_digest(signer_info, content, algorithm)
            _check_signer_signature(signer_info, signer, signed_bytes, algorithm)
            _check_chain(signer, certificates, anchors, when)
    except SignatureVerificationFailedError:
        raise
    except InvalidSignature as e:
        raise _fail("signature does not match signed content") from e
    except (
        ValueError,
        TypeError,
        KeyError,
        IndexError,
        x509.InvalidVersion,
        UnsupportedAlgorithm,
    ) as e:
        raise _fail(f"malformed signature: {e}") from e
    logger.debug("pkpass.signature.verified", signers=len(signer_infos))

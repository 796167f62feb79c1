"""Key and certificate loading, generation and bundling for pass signing."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import load_pem_private_key, pkcs12
from cryptography.x509.oid import NameOID

from pkpass.observability import get_logger

logger = get_logger(__name__)

# Pass signing certificates are issued for RSA 2048 keys.
RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537
# Recommended mode for private key files (owner read/write only).
KEY_FILE_RECOMMENDED_MODE = 0o600

SigningKey = rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey

_PEM_CERT_MARKER = b"-----BEGIN CERTIFICATE-----"


def generate_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=RSA_PUBLIC_EXPONENT, key_size=RSA_KEY_SIZE)


def serialize_private_key(key: SigningKey) -> bytes:
    """PEM (PKCS#8, unencrypted)."""
    pem: bytes = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return pem


def load_private_key_from_pem(pem: bytes, password: bytes | None = None) -> SigningKey:
    """From PEM. Raises ValueError if invalid or not an RSA/EC key."""
    key = load_pem_private_key(pem, password=password)
    if not isinstance(key, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)):
        raise ValueError("Signing key must be an RSA or EC private key")
    return key


def load_certificate(data: bytes) -> x509.Certificate:
    """Single certificate, PEM or DER."""
    if _PEM_CERT_MARKER in data:
        return x509.load_pem_x509_certificate(data)
    return x509.load_der_x509_certificate(data)


def load_certificates(data: bytes) -> list[x509.Certificate]:
    """Every certificate in a PEM bundle, or the single certificate of a DER file."""
    if _PEM_CERT_MARKER in data:
        return x509.load_pem_x509_certificates(data)
    return [x509.load_der_x509_certificate(data)]


def warn_if_key_file_permissions_loose(path: Path) -> None:
    """Warn when key file is group/other readable (recommend chmod 0600)."""
    try:
        mode = path.stat().st_mode
    except OSError:
        return
    if (mode & 0o77) != 0:
        logger.warning(
            "key_file_permissions_loose",
            path=str(path),
            mode=oct(mode),
            recommended=oct(KEY_FILE_RECOMMENDED_MODE),
            message="Private key file is readable by group or others; consider chmod 0600.",
        )


def load_private_key_from_file_sync(path: str | Path, password: bytes | None = None) -> SigningKey:
    """Load a PEM private key from disk (blocking I/O).

    Logs a security warning if the file is readable by group or others.
    """
    path = Path(path)
    warn_if_key_file_permissions_loose(path)
    return load_private_key_from_pem(path.read_bytes(), password=password)


def write_private_key_file(path: Path, key: SigningKey) -> None:
    """Write ``key`` as PEM and restrict the file to its owner."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, KEY_FILE_RECOMMENDED_MODE)
    with os.fdopen(fd, "wb") as handle:
        handle.write(serialize_private_key(key))
    path.chmod(KEY_FILE_RECOMMENDED_MODE)


def build_signing_request(
    key: SigningKey, common_name: str | None = None
) -> x509.CertificateSigningRequest:
    """CSR to submit to the pass type certificate issuer."""
    attributes = [x509.NameAttribute(NameOID.COMMON_NAME, common_name)] if common_name else []
    return (
        x509.CertificateSigningRequestBuilder()
        .subject_name(x509.Name(attributes))
        .sign(key, hashes.SHA256())
    )


def build_pkcs12_bundle(
    key: SigningKey,
    certificate: x509.Certificate,
    chain: Sequence[x509.Certificate],
    password: bytes | None = None,
    name: bytes | None = None,
) -> bytes:
    """DER PKCS#12 holding key, certificate and chain; unencrypted without a password."""
    encryption: serialization.KeySerializationEncryption
    if password:
        encryption = serialization.BestAvailableEncryption(password)
    else:
        encryption = serialization.NoEncryption()
    return pkcs12.serialize_key_and_certificates(
        name=name,
        key=key,
        cert=certificate,
        cas=list(chain) or None,
        encryption_algorithm=encryption,
    )

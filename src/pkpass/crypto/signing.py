"""Detached PKCS#7 signing of the manifest payload."""

from __future__ import annotations

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.serialization import Encoding, pkcs7

from pkpass.crypto.identity import SigningIdentity

SIGNATURE_OPTIONS = (pkcs7.PKCS7Options.DetachedSignature, pkcs7.PKCS7Options.Binary)


def sign_detached(identity: SigningIdentity, content: bytes) -> bytes:
    """DER SignedData over ``content``, content omitted, chain embedded.

    ``content`` must be the exact bytes that will be stored in the archive;
    the signature is useless against any re-encoding of them.

    Raises:
        ValueError: If ``identity`` carries no key or certificate
    """
    if identity.private_key is None or identity.certificate is None:
        raise ValueError("Cannot sign without a private key and certificate")
    builder = (
        pkcs7.PKCS7SignatureBuilder()
        .set_data(content)
        .add_signer(identity.certificate, identity.private_key, hashes.SHA256())
    )
    for certificate in identity.chain:
        builder = builder.add_certificate(certificate)
    return builder.sign(Encoding.DER, list(SIGNATURE_OPTIONS))

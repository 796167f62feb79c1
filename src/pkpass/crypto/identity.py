"""Signing identity: signer key, leaf certificate and chain, or no signature.

The identity is built once per write, handed to the archive writer and
then dropped; it is never stored inside a Pass. The leaf certificate's
subject supplies the two identifiers stamped into ``pass.json``:

- user id (0.9.2342.19200300.100.1.1) -> pass type identifier
- organizational unit (2.5.4.11)      -> team identifier

Stamp extraction is plain data extraction; certificate validity and expiry
are not checked here.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import NamedTuple

from cryptography import x509
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from pkpass.crypto.keys import (
    SigningKey,
    load_certificate,
    load_certificates,
    load_private_key_from_pem,
)
from pkpass.errors import IdentityFieldMissingError, IdentityIncompleteError


class IdentityStamps(NamedTuple):
    pass_type_identifier: str
    team_identifier: str


def _subject_value(certificate: x509.Certificate, oid: x509.ObjectIdentifier, field_name: str) -> str:
    attributes = certificate.subject.get_attributes_for_oid(oid)
    if not attributes:
        raise IdentityFieldMissingError(field_name)
    value = attributes[0].value
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    return value


@dataclass(frozen=True)
class SigningIdentity:
    """Key material for one write.

    Use the constructors rather than instantiating directly.
    """

    private_key: SigningKey | None = field(default=None, repr=False)
    certificate: x509.Certificate | None = None
    chain: tuple[x509.Certificate, ...] = ()
    # Only used when there is no certificate to derive stamps from.
    unsigned_stamps: IdentityStamps = IdentityStamps("", "")

    @classmethod
    def from_parts(
        cls,
        private_key: SigningKey,
        certificate: x509.Certificate,
        chain: Sequence[x509.Certificate] = (),
    ) -> SigningIdentity:
        return cls(private_key=private_key, certificate=certificate, chain=tuple(chain))

    @classmethod
    def from_pkcs12(cls, bundle: bytes, password: bytes | str | None = None) -> SigningIdentity:
        """Load a PKCS#12 bundle holding key, certificate and CA chain.

        Raises:
            IdentityIncompleteError: If any of the three is absent
            ValueError: If the bundle cannot be decoded with ``password``
        """
        if isinstance(password, str):
            password = password.encode("utf-8")
        key, certificate, chain = pkcs12.load_key_and_certificates(bundle, password or None)
        if key is None:
            raise IdentityIncompleteError("private key")
        if certificate is None:
            raise IdentityIncompleteError("certificate")
        if not chain:
            raise IdentityIncompleteError("chain of trust")
        if not isinstance(key, SigningKey):
            raise ValueError("Signing key must be an RSA or EC private key")
        return cls.from_parts(key, certificate, chain)

    @classmethod
    def from_pem(
        cls,
        certificate_pem: bytes,
        key_pem: bytes,
        chain_pem: bytes | None = None,
        password: bytes | None = None,
    ) -> SigningIdentity:
        """Build from discrete PEM (or DER, for certificates) inputs."""
        chain = load_certificates(chain_pem) if chain_pem else []
        return cls.from_parts(
            load_private_key_from_pem(key_pem, password=password),
            load_certificate(certificate_pem),
            chain,
        )

    @classmethod
    def no_signature(
        cls, pass_type_identifier: str = "", team_identifier: str = ""
    ) -> SigningIdentity:
        """Identity that writes an unsigned archive."""
        return cls(unsigned_stamps=IdentityStamps(pass_type_identifier, team_identifier))

    @property
    def has_key(self) -> bool:
        return self.private_key is not None

    def stamps(self) -> IdentityStamps:
        """Identifiers to stamp into metadata.

        Raises:
            IdentityFieldMissingError: Leaf certificate lacks user id or
                organizational unit
        """
        if self.certificate is None:
            return self.unsigned_stamps
        return IdentityStamps(
            _subject_value(self.certificate, NameOID.USER_ID, "user id"),
            _subject_value(self.certificate, NameOID.ORGANIZATIONAL_UNIT_NAME, "organization unit name"),
        )

"""pkpass: signed pass archive codec.

Build a pass, write it as a (optionally signed) container, and read it
back with manifest and signature checks.

Example:
    >>> from pkpass import Pass, SigningIdentity, VerifyMode
    >>> pass_ = Pass.new(organization_name="Acme", description="d", serial_number="1")
    >>> pass_.assets.icon.standard = b"ABC"
    >>> data = pass_.write(SigningIdentity.no_signature())
    >>> Pass.read(data, VerifyMode.SKIP).assets.icon.standard
    b'ABC'
"""

__version__ = "0.1.0"

from pkpass.archive import Manifest, read_pass, read_pass_from_path, write_pass, write_pass_to_path
from pkpass.crypto import (
    NoopVerifier,
    Pkcs7Verifier,
    SigningIdentity,
    TrustStore,
    Verifier,
    get_default_trust_store,
)
from pkpass.errors import PkPassError
from pkpass.models import (
    AssetTable,
    Density,
    ImageKind,
    ImageSlot,
    Metadata,
    Pass,
    StringsSlot,
    VerifyMode,
)

__all__ = [
    "__version__",
    "AssetTable",
    "Density",
    "ImageKind",
    "ImageSlot",
    "Manifest",
    "Metadata",
    "NoopVerifier",
    "Pass",
    "PkPassError",
    "Pkcs7Verifier",
    "SigningIdentity",
    "StringsSlot",
    "TrustStore",
    "Verifier",
    "VerifyMode",
    "get_default_trust_store",
    "read_pass",
    "read_pass_from_path",
    "write_pass",
    "write_pass_to_path",
]

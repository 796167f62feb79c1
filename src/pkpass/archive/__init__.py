"""pkpass Archive Codec.

Container layout, manifest and the read/write orchestration:
- Asset path grammar (``resolve`` / ``canonicalize``)
- SHA-1 manifest of every member
- Writer emitting pass.json, assets, manifest.json and signature in order
- Reader checking members and, on request, the signature
"""

from pkpass.archive.manifest import Manifest, sha1_hex
from pkpass.archive.paths import (
    MANIFEST_ENTRY,
    PASS_ENTRY,
    RESERVED_ENTRIES,
    SIGNATURE_ENTRY,
    canonicalize,
    is_reserved,
    resolve,
)
from pkpass.archive.reader import can_transition, read_pass, read_pass_from_path
from pkpass.archive.writer import write_pass, write_pass_to_path

__all__ = [
    "MANIFEST_ENTRY",
    "PASS_ENTRY",
    "RESERVED_ENTRIES",
    "SIGNATURE_ENTRY",
    "Manifest",
    "can_transition",
    "canonicalize",
    "is_reserved",
    "read_pass",
    "read_pass_from_path",
    "resolve",
    "sha1_hex",
    "write_pass",
    "write_pass_to_path",
]

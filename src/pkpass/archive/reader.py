"""Archive reader: container bytes -> Pass.

The read walks a fixed sequence of stages (see ``ReadStage``); any error
is terminal and nothing partially populated is returned. Member hashes
are always checked against the manifest. The verification policy only
decides whether the signature over ``manifest.json`` is checked.

Example:
    >>> pass_ = read_pass(data, VerifyMode.SKIP)
    >>> pass_.assets.icon.standard
    b'ABC'
"""

from __future__ import annotations

import struct
import zipfile
import zlib
from io import BytesIO
from pathlib import Path

from pkpass.archive.manifest import Manifest
from pkpass.archive.paths import (
    MANIFEST_ENTRY,
    PASS_ENTRY,
    SIGNATURE_ENTRY,
    is_reserved,
    resolve,
)
from pkpass.crypto.trust import Pkcs7Verifier, Verifier, get_default_trust_store
from pkpass.errors import (
    AssetPathError,
    ManifestSignatureMismatchError,
    MissingRequiredEntryError,
    PkPassError,
    SignatureVerificationFailedError,
    UnrecognizedAssetPathError,
    ZipFormatError,
)
from pkpass.models.assets import AssetTable
from pkpass.models.entities import Pass
from pkpass.models.enums import ReadStage, VerifyMode
from pkpass.models.wire import load_metadata, metadata_to_wire
from pkpass.observability import get_logger, sanitize_for_logging

__all__ = ["ReadStage", "VALID_TRANSITIONS", "can_transition", "read_pass", "read_pass_from_path"]

logger = get_logger(__name__)

VALID_TRANSITIONS: dict[ReadStage, set[ReadStage]] = {
    ReadStage.OPENED: {ReadStage.ENTRIES_LOCATED},
    ReadStage.ENTRIES_LOCATED: {ReadStage.SIGNATURE_CHECKED, ReadStage.MANIFEST_PARSED},
    ReadStage.SIGNATURE_CHECKED: {ReadStage.MANIFEST_PARSED},
    ReadStage.MANIFEST_PARSED: {ReadStage.METADATA_PARSED},
    ReadStage.METADATA_PARSED: {ReadStage.ASSETS_VERIFIED},
    ReadStage.ASSETS_VERIFIED: {ReadStage.DONE},
    ReadStage.DONE: set(),  # Terminal state
}

# Local file header layout, as in zipfile.structFileHeader.
_LOCAL_HEADER = struct.Struct("<4s2B4HL2L2H")
_LOCAL_HEADER_SIGNATURE = b"PK\x03\x04"
_NAME_LENGTH = 10
_EXTRA_LENGTH = 11

_CODEC_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError)


def can_transition(from_stage: ReadStage, to_stage: ReadStage) -> bool:
    """Check if the reader may move from one stage to another.

    Example:
        >>> can_transition(ReadStage.ENTRIES_LOCATED, ReadStage.MANIFEST_PARSED)
        True
        >>> can_transition(ReadStage.OPENED, ReadStage.DONE)
        False
    """
    return to_stage in VALID_TRANSITIONS.get(from_stage, set())


class _ReadProgress:
    def __init__(self) -> None:
        self.stage = ReadStage.OPENED
        logger.debug("pkpass.read.stage", stage=self.stage.value)

    def advance(self, to_stage: ReadStage) -> None:
        if not can_transition(self.stage, to_stage):
            raise RuntimeError(f"invalid read transition {self.stage.value} -> {to_stage.value}")
        logger.debug("pkpass.read.stage", stage=to_stage.value, previous=self.stage.value)
        self.stage = to_stage


def _open(data: bytes) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(BytesIO(data))
    except (zipfile.BadZipFile, EOFError, ValueError) as e:
        raise ZipFormatError(str(e) or "not a zip archive") from e


def _locate(archive: zipfile.ZipFile) -> dict[str, zipfile.ZipInfo]:
    members: dict[str, zipfile.ZipInfo] = {}
    for info in archive.infolist():
        if info.is_dir():
            continue
        if info.filename in members:
            raise ZipFormatError("duplicate member name", details={"path": info.filename})
        members[info.filename] = info
    for required in (MANIFEST_ENTRY, PASS_ENTRY):
        if required not in members:
            raise MissingRequiredEntryError(required)
    return members


def _member_bytes(archive: zipfile.ZipFile, data: bytes, info: zipfile.ZipInfo) -> bytes:
    """Full bytes of one member.

    Stored members are sliced straight out of the container so corrupted
    content reaches the manifest check instead of failing the zip CRC.
    """
    if info.flag_bits & 0x1:
        raise ZipFormatError("encrypted member", details={"path": info.filename})
    if info.compress_type != zipfile.ZIP_STORED:
        try:
            return archive.read(info)
        except _CODEC_ERRORS as e:
            raise ZipFormatError(str(e), details={"path": info.filename}) from e

    offset = info.header_offset
    header = data[offset : offset + _LOCAL_HEADER.size]
    if len(header) != _LOCAL_HEADER.size or header[:4] != _LOCAL_HEADER_SIGNATURE:
        raise ZipFormatError("bad local file header", details={"path": info.filename})
    fields = _LOCAL_HEADER.unpack(header)
    start = offset + _LOCAL_HEADER.size + fields[_NAME_LENGTH] + fields[_EXTRA_LENGTH]
    end = start + info.compress_size
    if end > len(data):
        raise ZipFormatError("truncated member", details={"path": info.filename})
    return bytes(data[start:end])


def _resolve_verifier(policy: VerifyMode, verifier: Verifier | None) -> Verifier | None:
    if policy is VerifyMode.SKIP:
        return None
    if verifier is not None:
        return verifier
    return Pkcs7Verifier(get_default_trust_store())


def _read(
    data: bytes,
    verifier: Verifier | None,
    require_signature: bool,
    progress: _ReadProgress,
) -> Pass:
    archive = _open(data)
    with archive:
        members = _locate(archive)
        progress.advance(ReadStage.ENTRIES_LOCATED)

        manifest_json = _member_bytes(archive, data, members[MANIFEST_ENTRY])
        if verifier is not None:
            signature_info = members.get(SIGNATURE_ENTRY)
            if signature_info is not None:
                verifier.verify(_member_bytes(archive, data, signature_info), manifest_json)
                progress.advance(ReadStage.SIGNATURE_CHECKED)
            elif require_signature:
                raise SignatureVerificationFailedError("archive carries no signature")

        manifest = Manifest.from_json_bytes(manifest_json)
        progress.advance(ReadStage.MANIFEST_PARSED)

        pass_json = _member_bytes(archive, data, members[PASS_ENTRY])
        if not manifest.verify_file(PASS_ENTRY, pass_json):
            raise ManifestSignatureMismatchError(PASS_ENTRY)
        metadata = load_metadata(pass_json)
        progress.advance(ReadStage.METADATA_PARSED)

        assets = AssetTable()
        for path, info in members.items():
            if is_reserved(path):
                continue
            try:
                slot = resolve(path)
            except AssetPathError as e:
                raise UnrecognizedAssetPathError(path, e.reason, details={"cause": e.code}) from e
            if slot in assets:
                raise UnrecognizedAssetPathError(path, "duplicate slot")
            content = _member_bytes(archive, data, info)
            if not manifest.verify_file(path, content):
                raise ManifestSignatureMismatchError(path)
            assets[slot] = content
        progress.advance(ReadStage.ASSETS_VERIFIED)

    return Pass(metadata=metadata, assets=assets)


def read_pass(
    data: bytes,
    policy: VerifyMode | str = VerifyMode.VERIFY,
    *,
    verifier: Verifier | None = None,
    require_signature: bool = False,
) -> Pass:
    """Parse and check a container.

    Args:
        data: Container bytes
        policy: ``VERIFY`` checks the signature when one is present;
            ``SKIP`` does not. Member hashes are checked either way.
        verifier: Signature checker for ``VERIFY``; defaults to a
            ``Pkcs7Verifier`` over the configured trust anchors
        require_signature: Under ``VERIFY``, fail when the archive has no
            signature entry

    Raises:
        TrustStoreNotConfiguredError: ``VERIFY`` without a verifier and
            without configured anchors (raised before reading)
        ZipFormatError, MissingRequiredEntryError, UnrecognizedAssetPathError,
        ManifestSignatureMismatchError, SignatureVerificationFailedError
    """
    policy = VerifyMode(policy)
    active_verifier = _resolve_verifier(policy, verifier)
    progress = _ReadProgress()
    try:
        pass_ = _read(data, active_verifier, require_signature, progress)
    except PkPassError as e:
        logger.warning("pkpass.read.failed", code=e.code, stage=progress.stage.value, error=e.message)
        raise
    progress.advance(ReadStage.DONE)
    logger.info(
        "pkpass.read.completed",
        serial_number=pass_.metadata.serial_number,
        assets=len(pass_.assets),
        policy=policy.value,
    )
    logger.debug(
        "pkpass.read.metadata",
        metadata=sanitize_for_logging(metadata_to_wire(pass_.metadata)),
    )
    return pass_


def read_pass_from_path(
    path: str | Path,
    policy: VerifyMode | str = VerifyMode.VERIFY,
    *,
    verifier: Verifier | None = None,
    require_signature: bool = False,
) -> Pass:
    """Read a container from disk; see ``read_pass``."""
    return read_pass(
        Path(path).read_bytes(), policy, verifier=verifier, require_signature=require_signature
    )

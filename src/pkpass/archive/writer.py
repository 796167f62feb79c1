"""Archive writer: Pass + SigningIdentity -> container bytes.

Emission order is part of the format:

1. stamp identifiers from the identity onto a staged copy of the metadata
2. ``pass.json``
3. every populated asset slot, in ``AssetTable.items()`` order
4. ``manifest.json``, once every digest above is recorded
5. ``signature`` over the exact ``manifest.json`` bytes, when the identity
   carries a key

Every member is Stored with a fixed timestamp so that equal inputs give
equal bytes. The container is assembled in memory; nothing reaches the
caller (or the filesystem) unless every step succeeded.
"""

from __future__ import annotations

import os
import tempfile
import zipfile
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING

from pkpass.archive.manifest import Manifest
from pkpass.archive.paths import MANIFEST_ENTRY, PASS_ENTRY, SIGNATURE_ENTRY, canonicalize
from pkpass.crypto.signing import sign_detached
from pkpass.models.wire import dump_metadata
from pkpass.observability import get_logger

if TYPE_CHECKING:
    from pkpass.crypto.identity import SigningIdentity
    from pkpass.models.entities import Pass

logger = get_logger(__name__)

# Earliest timestamp a zip header can express.
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
MEMBER_MODE = 0o644


def _member(name: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=ZIP_EPOCH)
    info.compress_type = zipfile.ZIP_STORED
    info.external_attr = MEMBER_MODE << 16
    return info


def write_pass(pass_: Pass, identity: SigningIdentity) -> bytes:
    """Serialize ``pass_`` into a container, signed when ``identity`` has a key.

    On success the pass metadata carries the identity's identifiers; on
    failure it is left untouched.

    Raises:
        IdentityFieldMissingError: Signer certificate lacks a stamped field
    """
    logger.debug(
        "pkpass.write.started",
        serial_number=pass_.metadata.serial_number,
        assets=len(pass_.assets),
        signed=identity.has_key,
    )
    stamps = identity.stamps()
    staged = pass_.metadata.model_copy(deep=True)
    staged._stamp_identity(stamps.pass_type_identifier, stamps.team_identifier)

    manifest = Manifest()
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_STORED) as archive:
        pass_json = dump_metadata(staged)
        archive.writestr(_member(PASS_ENTRY), pass_json)
        manifest.add_file(PASS_ENTRY, pass_json)

        for slot, data in pass_.assets.items():
            path = canonicalize(slot)
            archive.writestr(_member(path), data)
            manifest.add_file(path, data)

        manifest_json = manifest.to_json_bytes()
        archive.writestr(_member(MANIFEST_ENTRY), manifest_json)

        if identity.has_key:
            archive.writestr(_member(SIGNATURE_ENTRY), sign_detached(identity, manifest_json))

    pass_.metadata._stamp_identity(stamps.pass_type_identifier, stamps.team_identifier)
    data = buffer.getvalue()
    logger.info(
        "pkpass.write.completed",
        serial_number=staged.serial_number,
        entries=len(manifest) + 1 + int(identity.has_key),
        signed=identity.has_key,
        size=len(data),
    )
    return data


def write_pass_to_path(pass_: Pass, identity: SigningIdentity, path: str | Path) -> Path:
    """Write the container to ``path`` atomically.

    The bytes go to a temporary file in the destination directory, which
    replaces ``path`` only once fully written.
    """
    destination = Path(path)
    data = write_pass(pass_, identity)
    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, destination)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return destination

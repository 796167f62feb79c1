"""Tests for the archive writer."""

import json
import zipfile
from io import BytesIO
from pathlib import Path
from unittest.mock import patch

import pytest

from pkpass.archive.manifest import sha1_hex
from pkpass.archive.writer import write_pass, write_pass_to_path
from pkpass.crypto.identity import SigningIdentity
from pkpass.errors import IdentityFieldMissingError
from pkpass.models.assets import ImageSlot, StringsSlot
from pkpass.models.entities import Pass
from pkpass.models.enums import Density, ImageKind
from pkpass.models.wire import dump_metadata
from tests.factories import PASS_TYPE_IDENTIFIER, TEAM_IDENTIFIER, create_test_pki


def _members(data: bytes) -> list[zipfile.ZipInfo]:
    with zipfile.ZipFile(BytesIO(data)) as archive:
        return archive.infolist()


def _read_member(data: bytes, name: str) -> bytes:
    with zipfile.ZipFile(BytesIO(data)) as archive:
        return archive.read(name)


class TestUnsignedWrite:
    """Writing with a no-signature identity."""

    def test_concrete_scenario(self, sample_pass: Pass) -> None:
        """One icon asset gives exactly pass.json, icon.png and manifest.json."""
        sample_pass.assets.icon.standard = b"ABC"

        data = write_pass(sample_pass, SigningIdentity.no_signature())

        names = [info.filename for info in _members(data)]
        assert names == ["pass.json", "icon.png", "manifest.json"]
        manifest = json.loads(_read_member(data, "manifest.json"))
        assert manifest == {
            "pass.json": sha1_hex(dump_metadata(sample_pass.metadata)),
            "icon.png": "3c01bdbb26f358bab27f267924aa2c9a03fcfdb8",
        }

    def test_members_are_stored(self, sample_pass: Pass) -> None:
        sample_pass.assets.logo.x2 = b"logo"

        for info in _members(write_pass(sample_pass, SigningIdentity.no_signature())):
            assert info.compress_type == zipfile.ZIP_STORED

    def test_output_is_deterministic(self, sample_pass: Pass) -> None:
        sample_pass.assets.icon.standard = b"ABC"
        identity = SigningIdentity.no_signature()

        assert write_pass(sample_pass, identity) == write_pass(sample_pass, identity)

    def test_asset_order_follows_table(self, sample_pass: Pass) -> None:
        assets = sample_pass.assets
        assets[StringsSlot("fr")] = b'"a" = "b";'
        assets[ImageSlot(ImageKind.LOGO, Density.X2, "fr")] = b"fr-logo"
        assets[ImageSlot(ImageKind.LOGO)] = b"logo"
        assets[ImageSlot(ImageKind.ICON, Density.X3)] = b"icon3"
        assets[ImageSlot(ImageKind.ICON)] = b"icon"

        names = [info.filename for info in _members(write_pass(sample_pass, SigningIdentity.no_signature()))]

        assert names == [
            "pass.json",
            "icon.png",
            "icon@3x.png",
            "logo.png",
            "fr.lproj/logo@2x.png",
            "fr.lproj/pass.strings",
            "manifest.json",
        ]

    def test_no_signature_stamps_given_identifiers(self, sample_pass: Pass) -> None:
        identity = SigningIdentity.no_signature("pass.example.unsigned", "TEAM")

        data = write_pass(sample_pass, identity)

        doc = json.loads(_read_member(data, "pass.json"))
        assert doc["passTypeIdentifier"] == "pass.example.unsigned"
        assert doc["teamIdentifier"] == "TEAM"
        assert sample_pass.metadata.pass_type_identifier == "pass.example.unsigned"

    def test_default_no_signature_keeps_identifiers_empty(self, sample_pass: Pass) -> None:
        write_pass(sample_pass, SigningIdentity.no_signature())

        assert sample_pass.metadata.pass_type_identifier == ""
        assert sample_pass.metadata.team_identifier == ""


class TestSignedWrite:
    """Writing with a keyed identity."""

    def test_signature_is_last_member(self, sample_pass: Pass, signing_identity: SigningIdentity) -> None:
        data = write_pass(sample_pass, signing_identity)

        names = [info.filename for info in _members(data)]
        assert names == ["pass.json", "manifest.json", "signature"]
        manifest = json.loads(_read_member(data, "manifest.json"))
        assert set(manifest) == {"pass.json"}

    def test_stamps_identifiers_from_certificate(
        self, sample_pass: Pass, signing_identity: SigningIdentity
    ) -> None:
        data = write_pass(sample_pass, signing_identity)

        doc = json.loads(_read_member(data, "pass.json"))
        assert doc["passTypeIdentifier"] == PASS_TYPE_IDENTIFIER
        assert doc["teamIdentifier"] == TEAM_IDENTIFIER
        assert sample_pass.metadata.pass_type_identifier == PASS_TYPE_IDENTIFIER
        assert sample_pass.metadata.team_identifier == TEAM_IDENTIFIER

    def test_missing_certificate_field_aborts_without_stamping(self, sample_pass: Pass) -> None:
        pki = create_test_pki(team_identifier=None)
        identity = SigningIdentity.from_parts(pki.leaf_key, pki.leaf_cert, [pki.intermediate_cert])

        with pytest.raises(IdentityFieldMissingError) as exc_info:
            write_pass(sample_pass, identity)

        assert exc_info.value.field == "organization unit name"
        assert sample_pass.metadata.pass_type_identifier == ""

    def test_signing_failure_leaves_metadata_untouched(
        self, sample_pass: Pass, signing_identity: SigningIdentity
    ) -> None:
        with patch("pkpass.archive.writer.sign_detached", side_effect=ValueError("boom")):
            with pytest.raises(ValueError, match="boom"):
                write_pass(sample_pass, signing_identity)

        assert sample_pass.metadata.pass_type_identifier == ""


class TestWriteToPath:
    """Atomic file output."""

    def test_writes_file(self, tmp_path: Path, sample_pass: Pass) -> None:
        target = tmp_path / "out" / "ticket.pkpass"

        written = write_pass_to_path(sample_pass, SigningIdentity.no_signature(), target)

        assert written == target
        assert target.read_bytes() == write_pass(sample_pass, SigningIdentity.no_signature())
        assert [p.name for p in target.parent.iterdir()] == ["ticket.pkpass"]

    def test_failure_keeps_previous_file(self, tmp_path: Path, sample_pass: Pass) -> None:
        target = tmp_path / "ticket.pkpass"
        target.write_bytes(b"previous")

        with patch("pkpass.archive.writer.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                write_pass_to_path(sample_pass, SigningIdentity.no_signature(), target)

        assert target.read_bytes() == b"previous"
        assert [p.name for p in tmp_path.iterdir()] == ["ticket.pkpass"]

"""Tests for the Pass aggregate."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from pkpass.crypto.identity import SigningIdentity
from pkpass.crypto.trust import Pkcs7Verifier
from pkpass.models.assets import AssetTable
from pkpass.models.entities import Pass
from pkpass.models.enums import VerifyMode


def test_new_builds_metadata() -> None:
    pass_ = Pass.new(organization_name="Acme", description="d", serial_number="1")

    assert pass_.metadata.organization_name == "Acme"
    assert pass_.assets == AssetTable()


def test_new_validates() -> None:
    with pytest.raises(ValidationError):
        Pass.new(organization_name="Acme")


def test_write_then_read(
    sample_pass: Pass, signing_identity: SigningIdentity, verifier: Pkcs7Verifier
) -> None:
    sample_pass.assets.icon.standard = b"ABC"

    loaded = Pass.read(sample_pass.write(signing_identity), verifier=verifier, require_signature=True)

    assert loaded.assets.icon.standard == b"ABC"
    assert loaded.metadata == sample_pass.metadata


def test_write_to_then_read_from(sample_pass: Pass, tmp_path: Path) -> None:
    sample_pass.assets.logo.x2 = b"logo"

    path = sample_pass.write_to(SigningIdentity.no_signature(), tmp_path / "unsigned.pkpass")

    loaded = Pass.read_from(path, "skip")
    assert loaded.assets.logo.x2 == b"logo"
    assert Pass.read_from(str(path), VerifyMode.SKIP) == loaded

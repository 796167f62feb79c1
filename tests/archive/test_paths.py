"""Tests for the asset path resolver."""

import pytest

from pkpass.archive.paths import (
    MANIFEST_ENTRY,
    PASS_ENTRY,
    SIGNATURE_ENTRY,
    canonicalize,
    is_reserved,
    resolve,
)
from pkpass.errors import (
    AssetPathError,
    InvalidLocaleTagError,
    MalformedLocalizedPathError,
    UnrecognizedKindError,
    UnrecognizedVariantError,
)
from pkpass.models.assets import ImageSlot, StringsSlot
from pkpass.models.enums import Density, ImageKind


class TestResolve:
    """resolve maps member names onto typed slots."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("icon.png", ImageSlot(ImageKind.ICON)),
            ("logo@2x.png", ImageSlot(ImageKind.LOGO, Density.X2)),
            ("thumbnail@3x.png", ImageSlot(ImageKind.THUMBNAIL, Density.X3)),
            ("fr.lproj/strip.png", ImageSlot(ImageKind.STRIP, locale="fr")),
            ("en_US.lproj/footer@2x.png", ImageSlot(ImageKind.FOOTER, Density.X2, "en-US")),
            ("zh-Hant.lproj/background@3x.png", ImageSlot(ImageKind.BACKGROUND, Density.X3, "zh-Hant")),
            ("de.lproj/pass.strings", StringsSlot("de")),
        ],
    )
    def test_valid_paths(self, path: str, expected: object) -> None:
        assert resolve(path) == expected

    @pytest.mark.parametrize("path", ["banner.png", "icon.jpg", "icon", "pass.strings", "fr.lproj/hero.png"])
    def test_unrecognized_kind(self, path: str) -> None:
        with pytest.raises(UnrecognizedKindError) as exc_info:
            resolve(path)
        assert exc_info.value.path == path
        assert exc_info.value.code == "pkpass:asset/unrecognized_kind"

    @pytest.mark.parametrize(("path", "variant"), [("icon@4x.png", "4x"), ("logo@.png", ""), ("strip@2X.png", "2X")])
    def test_unrecognized_variant(self, path: str, variant: str) -> None:
        with pytest.raises(UnrecognizedVariantError) as exc_info:
            resolve(path)
        assert exc_info.value.variant == variant

    @pytest.mark.parametrize(
        "path",
        ["images/icon.png", "fr/icon.png", "fr.lproj/sub/icon.png", "fr.lproj/", "a/b/c.png"],
    )
    def test_malformed_localized_path(self, path: str) -> None:
        with pytest.raises(MalformedLocalizedPathError):
            resolve(path)

    @pytest.mark.parametrize("tag", ["", "x", "english-language-tag", "en-US-US", "1234"])
    def test_invalid_locale_tag(self, tag: str) -> None:
        with pytest.raises(InvalidLocaleTagError) as exc_info:
            resolve(f"{tag}.lproj/icon.png")
        assert exc_info.value.tag == tag

    def test_errors_share_a_base_class(self) -> None:
        with pytest.raises(AssetPathError):
            resolve("nope.png")


class TestCanonicalize:
    """canonicalize renders slots as member names."""

    def test_standard_image(self) -> None:
        assert canonicalize(ImageSlot(ImageKind.ICON)) == "icon.png"

    def test_density_suffix(self) -> None:
        assert canonicalize(ImageSlot(ImageKind.LOGO, Density.X3)) == "logo@3x.png"

    def test_localized_image_uses_canonical_tag(self) -> None:
        assert canonicalize(ImageSlot(ImageKind.STRIP, Density.X2, "pt_br")) == "pt-BR.lproj/strip@2x.png"

    def test_strings(self) -> None:
        assert canonicalize(StringsSlot("en_US")) == "en-US.lproj/pass.strings"

    def test_inverse_of_resolve(self) -> None:
        slot = ImageSlot(ImageKind.FOOTER, Density.X2, "ja")
        assert resolve(canonicalize(slot)) == slot


def test_reserved_entries() -> None:
    """The three reserved names are never assets."""
    for name in (PASS_ENTRY, MANIFEST_ENTRY, SIGNATURE_ENTRY):
        assert is_reserved(name)
    assert not is_reserved("icon.png")
    assert not is_reserved("fr.lproj/pass.json")

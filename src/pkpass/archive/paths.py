"""Asset path resolver: archive member name <-> typed asset slot.

Grammar::

    [<locale>.lproj/]<kind>[@<density>].png
    <locale>.lproj/pass.strings

``resolve`` and ``canonicalize`` are mutual inverses for every slot:
``resolve(canonicalize(slot)) == slot``. Reserved entries (``pass.json``,
``manifest.json``, ``signature``) and directory entries are never handed
to the resolver.

Example:
    >>> resolve("fr.lproj/logo@2x.png")
    ImageSlot(kind=<ImageKind.LOGO: 'logo'>, density=<Density.X2: '@2x'>, locale='fr')
    >>> canonicalize(StringsSlot("en_US"))
    'en-US.lproj/pass.strings'
"""

from __future__ import annotations

from pkpass.errors import (
    InvalidLocaleTagError,
    MalformedLocalizedPathError,
    UnrecognizedKindError,
    UnrecognizedVariantError,
)
from pkpass.models.assets import AssetSlot, ImageSlot, StringsSlot
from pkpass.models.enums import Density, ImageKind
from pkpass.models.locale import canonical_locale

PASS_ENTRY = "pass.json"
MANIFEST_ENTRY = "manifest.json"
SIGNATURE_ENTRY = "signature"
RESERVED_ENTRIES = frozenset({PASS_ENTRY, MANIFEST_ENTRY, SIGNATURE_ENTRY})

STRINGS_NAME = "pass.strings"
IMAGE_SUFFIX = ".png"
LOCALE_SUFFIX = ".lproj"

_KINDS = {kind.value: kind for kind in ImageKind}


def _resolve_image(path: str, name: str, locale: str | None) -> ImageSlot:
    if not name.endswith(IMAGE_SUFFIX):
        raise UnrecognizedKindError(path)
    stem = name[: -len(IMAGE_SUFFIX)]
    stem, sep, variant = stem.partition("@")
    kind = _KINDS.get(stem)
    if kind is None:
        raise UnrecognizedKindError(path)
    density = Density.STANDARD
    if sep:
        try:
            density = Density.from_suffix(variant)
        except ValueError:
            raise UnrecognizedVariantError(path, variant) from None
    return ImageSlot(kind, density, locale)


def resolve(path: str) -> AssetSlot:
    """Map a raw archive member name to its slot.

    Raises:
        UnrecognizedKindError: Filename is not one of the image kinds
        UnrecognizedVariantError: Density suffix is not 2x or 3x
        MalformedLocalizedPathError: Directory is not a single ``<locale>.lproj``
        InvalidLocaleTagError: ``.lproj`` prefix is not a language tag
    """
    directory, sep, name = path.partition("/")
    if not sep:
        return _resolve_image(path, path, None)

    if not directory.endswith(LOCALE_SUFFIX) or not name or "/" in name:
        raise MalformedLocalizedPathError(path)
    tag = directory[: -len(LOCALE_SUFFIX)]
    try:
        locale = canonical_locale(tag)
    except ValueError:
        raise InvalidLocaleTagError(path, tag) from None

    if name == STRINGS_NAME:
        return StringsSlot(locale)
    return _resolve_image(path, name, locale)


def canonicalize(slot: AssetSlot) -> str:
    """Archive member name for ``slot``."""
    if isinstance(slot, StringsSlot):
        return f"{slot.locale}{LOCALE_SUFFIX}/{STRINGS_NAME}"
    name = f"{slot.kind.value}{slot.density.value}{IMAGE_SUFFIX}"
    if slot.locale is None:
        return name
    return f"{slot.locale}{LOCALE_SUFFIX}/{name}"


def is_reserved(path: str) -> bool:
    return path in RESERVED_ENTRIES

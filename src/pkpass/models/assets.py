"""Asset slots and the asset table of a pass.

A slot is the typed address of one binary asset: an image (kind x
resolution variant) or a localized strings blob, optionally under a
locale. The table is a tree that owns the bytes for every populated slot:

    table.icon.standard                     -> icon.png
    table.logo.x2                           -> logo@2x.png
    table.locales["fr"].images.strip.x3     -> fr.lproj/strip@3x.png
    table.locales["fr"].strings             -> fr.lproj/pass.strings

Example:
    >>> table = AssetTable()
    >>> table[ImageSlot(ImageKind.ICON)] = b"ABC"
    >>> table.icon.standard
    b'ABC'
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Union

from pkpass.models.enums import Density, ImageKind
from pkpass.models.locale import canonical_locale


@dataclass(frozen=True)
class ImageSlot:
    """Image asset address; ``locale`` is stored in canonical form."""

    kind: ImageKind
    density: Density = Density.STANDARD
    locale: str | None = None

    def __post_init__(self) -> None:
        if self.locale is not None:
            object.__setattr__(self, "locale", canonical_locale(self.locale))


@dataclass(frozen=True)
class StringsSlot:
    """Localized ``pass.strings`` address."""

    locale: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "locale", canonical_locale(self.locale))


AssetSlot = Union[ImageSlot, StringsSlot]


@dataclass
class ImageVariants:
    """Bytes of one image kind at each resolution variant."""

    standard: bytes | None = None
    x2: bytes | None = None
    x3: bytes | None = None

    def get(self, density: Density) -> bytes | None:
        return getattr(self, density.attr)

    def set(self, density: Density, data: bytes | None) -> None:
        setattr(self, density.attr, data)


@dataclass
class ImageSet:
    """One ImageVariants per image kind."""

    icon: ImageVariants = field(default_factory=ImageVariants)
    logo: ImageVariants = field(default_factory=ImageVariants)
    background: ImageVariants = field(default_factory=ImageVariants)
    strip: ImageVariants = field(default_factory=ImageVariants)
    footer: ImageVariants = field(default_factory=ImageVariants)
    thumbnail: ImageVariants = field(default_factory=ImageVariants)

    def variants(self, kind: ImageKind) -> ImageVariants:
        return getattr(self, kind.value)

    def populated(self) -> Iterator[tuple[ImageKind, Density, bytes]]:
        """Populated images, ordered by kind then density."""
        for kind in ImageKind:
            variants = self.variants(kind)
            for density in Density:
                data = variants.get(density)
                if data is not None:
                    yield kind, density, data


@dataclass
class LocalizedAssets:
    """Images and strings of one locale."""

    images: ImageSet = field(default_factory=ImageSet)
    strings: bytes | None = None

    def is_empty(self) -> bool:
        return self.strings is None and next(self.images.populated(), None) is None


@dataclass
class AssetTable(ImageSet):
    """All binary assets of one pass, addressable by slot."""

    locales: dict[str, LocalizedAssets] = field(default_factory=dict)

    def locale(self, tag: str) -> LocalizedAssets:
        """Localized subtree for ``tag``, created on first use.

        Raises:
            ValueError: If ``tag`` is not a valid language tag
        """
        key = canonical_locale(tag)
        if key not in self.locales:
            self.locales[key] = LocalizedAssets()
        return self.locales[key]

    def _images_for(self, locale: str | None) -> ImageSet | None:
        if locale is None:
            return self
        subtree = self.locales.get(locale)
        return subtree.images if subtree is not None else None

    def get(self, slot: AssetSlot) -> bytes | None:
        if isinstance(slot, StringsSlot):
            subtree = self.locales.get(slot.locale)
            return subtree.strings if subtree is not None else None
        images = self._images_for(slot.locale)
        if images is None:
            return None
        return images.variants(slot.kind).get(slot.density)

    def __getitem__(self, slot: AssetSlot) -> bytes:
        data = self.get(slot)
        if data is None:
            raise KeyError(slot)
        return data

    def __setitem__(self, slot: AssetSlot, data: bytes) -> None:
        if isinstance(slot, StringsSlot):
            self.locale(slot.locale).strings = bytes(data)
            return
        images = self if slot.locale is None else self.locale(slot.locale).images
        images.variants(slot.kind).set(slot.density, bytes(data))

    def __delitem__(self, slot: AssetSlot) -> None:
        if self.get(slot) is None:
            raise KeyError(slot)
        if isinstance(slot, StringsSlot):
            self.locales[slot.locale].strings = None
        else:
            images = self._images_for(slot.locale)
            if images is None:
                raise KeyError(slot)
            images.variants(slot.kind).set(slot.density, None)
        if slot.locale is not None and self.locales[slot.locale].is_empty():
            del self.locales[slot.locale]

    def __contains__(self, slot: object) -> bool:
        if not isinstance(slot, (ImageSlot, StringsSlot)):
            return False
        return self.get(slot) is not None

    def items(self) -> Iterator[tuple[AssetSlot, bytes]]:
        """Populated slots: top-level images, then each locale sorted by tag."""
        for kind, density, data in self.populated():
            yield ImageSlot(kind, density), data
        for tag in sorted(self.locales):
            subtree = self.locales[tag]
            for kind, density, data in subtree.images.populated():
                yield ImageSlot(kind, density, tag), data
            if subtree.strings is not None:
                yield StringsSlot(tag), subtree.strings

    def __len__(self) -> int:
        return sum(1 for _ in self.items())

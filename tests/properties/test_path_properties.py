"""Property-based tests for the asset path resolver.

Invariant: resolve and canonicalize are mutual inverses over every slot.
"""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from pkpass.archive.paths import canonicalize, is_reserved, resolve
from pkpass.models.assets import AssetSlot, ImageSlot, StringsSlot
from pkpass.models.enums import Density, ImageKind

_TAGS = ["en", "fr", "de", "en-US", "en-GB", "zh-Hant", "zh-Hant-TW", "sr-Latn-RS", "es-419", "de-CH-1901"]


@st.composite
def spelled_locales(draw: st.DrawFn) -> str:
    """A known tag in arbitrary case with ``-`` or ``_`` separators."""
    tag = draw(st.sampled_from(_TAGS))
    separator = draw(st.sampled_from(["-", "_"]))
    upper = draw(st.booleans())
    spelled = tag.replace("-", separator)
    return spelled.upper() if upper else spelled.lower()


image_slots = st.builds(
    ImageSlot,
    kind=st.sampled_from(list(ImageKind)),
    density=st.sampled_from(list(Density)),
    locale=st.none() | spelled_locales(),
)
strings_slots = st.builds(StringsSlot, locale=spelled_locales())
slots = image_slots | strings_slots


class TestPathBijection:
    """resolve(canonicalize(slot)) == slot for every slot."""

    @given(slot=slots)
    def test_resolve_inverts_canonicalize(self, slot: AssetSlot) -> None:
        assert resolve(canonicalize(slot)) == slot

    @given(slot=slots)
    def test_canonical_path_is_fixed_point(self, slot: AssetSlot) -> None:
        path = canonicalize(slot)
        assert canonicalize(resolve(path)) == path

    @given(slot=slots)
    def test_canonical_paths_are_never_reserved(self, slot: AssetSlot) -> None:
        assert not is_reserved(canonicalize(slot))

    @given(a=slots, b=slots)
    def test_distinct_slots_have_distinct_paths(self, a: AssetSlot, b: AssetSlot) -> None:
        assert (a == b) == (canonicalize(a) == canonicalize(b))
